"""
Bank directory: the list of banks offered by the verification form.

The list is loaded from the chat model once per directory and then frozen.
Any failure to load (no API key, transport error, unusable output) falls back
to the static list in rules.FALLBACK_BANKS. There is no refresh.
"""
from __future__ import annotations

import asyncio
import random
from functools import lru_cache
from typing import Awaitable, Callable, List, Optional, Tuple

from langchain_core.messages import HumanMessage
from loguru import logger

from .llm import get_llm
from .models import BankData, BankList, BankNetworkStatus, BankStatus
from .rules import FALLBACK_BANKS

BankLoader = Callable[[], Awaitable[List[BankData]]]

_BANKS_PROMPT = (
    "List the top 25 commercial banks in Nigeria with their official sort codes. "
    "Respond with only a JSON object whose 'banks' field is an array of objects, "
    "where each object has a 'name' (string) and 'sortCode' (string) property."
)


async def load_banks_from_llm() -> List[BankData]:
    llm = get_llm()
    structured_llm = llm.with_structured_output(BankList)
    result: BankList = await structured_llm.ainvoke([HumanMessage(content=_BANKS_PROMPT)])
    if not result.banks:
        raise ValueError("AI response for bank data is not in the expected format.")
    return result.banks


def _fallback_banks() -> List[BankData]:
    return [BankData(name=name, sortCode=code) for name, code in FALLBACK_BANKS]


class BankDirectory:
    """
    Owns the bank list.

    Lifecycle: empty until the first get(); populated exactly once (concurrent
    first callers share one load); immutable afterwards.
    """

    def __init__(self, loader: Optional[BankLoader] = None):
        self._loader: BankLoader = loader or load_banks_from_llm
        self._banks: Optional[Tuple[BankData, ...]] = None
        self._lock = asyncio.Lock()

    @property
    def loaded(self) -> bool:
        return self._banks is not None

    async def get(self) -> Tuple[BankData, ...]:
        if self._banks is not None:
            return self._banks

        async with self._lock:
            if self._banks is None:
                try:
                    banks = await self._loader()
                    source = "ai"
                except Exception as e:
                    logger.warning(f"Bank list lookup failed, using fallback list: {e}")
                    banks = _fallback_banks()
                    source = "fallback"
                self._banks = tuple(sorted(banks, key=lambda b: b.name.casefold()))
                logger.info(f"Bank directory populated | banks={len(self._banks)} source={source}")
        return self._banks

    async def names(self) -> List[str]:
        return [b.name for b in await self.get()]


def status_for(roll: float) -> BankNetworkStatus:
    if roll < 0.85:
        return BankNetworkStatus.OPERATIONAL
    if roll < 0.95:
        return BankNetworkStatus.DEGRADED
    return BankNetworkStatus.OFFLINE


async def fetch_bank_statuses(
    directory: BankDirectory,
    rng: Optional[random.Random] = None,
) -> List[BankStatus]:
    """Simulated network status for every bank in the directory."""
    rng = rng or random.Random()
    return [BankStatus(name=name, status=status_for(rng.random())) for name in await directory.names()]


@lru_cache(maxsize=1)
def get_bank_directory() -> BankDirectory:
    """One directory per process; FastAPI dependency."""
    return BankDirectory()
