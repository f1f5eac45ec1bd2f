"""
Account verification pipeline.

verify_account — one record, delegated to the chat model with structured
output (VerificationResult). The decision rules live entirely in the prompt.

verify_batch — records in input order through an explicit concurrency bound
(1 by default: one external call in flight). Results are placed by input
index, so output order never depends on completion order. A failing record
becomes a failed VerificationResult; the batch carries on.
"""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, List, Optional, Sequence

from langchain_core.messages import HumanMessage, SystemMessage
from loguru import logger

from .errors import VerificationServiceError
from .llm import get_llm
from .models import AccountDetails, VerificationResult

Verifier = Callable[[AccountDetails], Awaitable[VerificationResult]]

SERVICE_UNAVAILABLE = "The verification service is currently unavailable. Please try again later."
SUCCESS_MESSAGE = "Account details verified successfully."

_VERIFY_SYSTEM = f"""You are a mock Nigerian bank account verification API. Your task is to validate the provided banking details.

Rules for validation:
1. If the account number has less than 10 digits or the BVN has less than 11 digits, fail the verification with a specific message.
2. If the beneficiary name contains numbers or special characters (except spaces and hyphens), fail the verification.
3. For simulation purposes, if the account number starts with '1' (e.g., 1234567890), treat it as an invalid/non-existent account and fail the verification.
4. For simulation purposes, if the BVN starts with '1' (e.g., 11223344556), treat it as an invalid BVN and fail the verification.
5. In all other cases, assume the verification is successful. The returned beneficiary name should be a slightly more formal version of the input name (e.g., "John Doe" becomes "Doe, John Adewale").
6. The success message should be "{SUCCESS_MESSAGE}"
7. The failure message should clearly state the reason (e.g., "Invalid account number.", "BVN does not match records.", "Beneficiary name seems invalid.").

Respond ONLY with a JSON object in the given format."""

_VERIFY_USER = """User Input:
- Beneficiary Name: {beneficiaryName}
- Bank Name: {bankName}
- Account Number: {accountNumber}
- BVN: {bvn}"""


async def verify_account(details: AccountDetails, llm=None) -> VerificationResult:
    """Raises VerificationServiceError when the model cannot produce a usable answer."""
    try:
        llm = llm or get_llm()
        structured_llm = llm.with_structured_output(VerificationResult)
        messages = [
            SystemMessage(content=_VERIFY_SYSTEM),
            HumanMessage(content=_VERIFY_USER.format(**details.model_dump())),
        ]
        result = await structured_llm.ainvoke(messages)
        if not isinstance(result, VerificationResult):
            raise ValueError("AI response is not in the expected format.")
    except Exception as e:
        logger.error(f"Account verification call failed for {details.accountNumber}: {e}")
        raise VerificationServiceError(SERVICE_UNAVAILABLE) from e
    return result


async def verify_batch(
    records: Sequence[AccountDetails],
    verifier: Verifier = verify_account,
    concurrency: int = 1,
) -> List[VerificationResult]:
    if concurrency < 1:
        raise ValueError("concurrency must be at least 1")

    semaphore = asyncio.Semaphore(concurrency)
    results: List[Optional[VerificationResult]] = [None] * len(records)

    async def run(index: int, record: AccountDetails) -> None:
        async with semaphore:
            try:
                results[index] = await verifier(record)
            except Exception as e:
                message = str(e) or "An unknown error occurred."
                results[index] = VerificationResult(success=False, message=message, data=record)

    logger.info(f"Bulk verification started | records={len(records)} concurrency={concurrency}")
    if concurrency == 1:
        for index, record in enumerate(records):
            await run(index, record)
    else:
        await asyncio.gather(*(run(index, record) for index, record in enumerate(records)))

    done = [r for r in results if r is not None]
    succeeded = sum(1 for r in done if r.success)
    logger.info(f"Bulk verification finished | succeeded={succeeded} failed={len(done) - succeeded}")
    return done
