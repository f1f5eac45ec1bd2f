"""
Chat model used for account verification and the bank directory lookup.

The model name comes from Settings only, never hardcoded here.
"""
from functools import lru_cache

from langchain_groq import ChatGroq

from .config import get_settings


@lru_cache(maxsize=1)
def get_llm() -> ChatGroq:
    """
    Returns the chat model. Singleton, initialised once.
    Raises if no API key is configured; callers turn that into their own failure mode.
    """
    s = get_settings()
    if not s.groq_api_key:
        raise RuntimeError("GROQ_API_KEY is not configured")
    return ChatGroq(
        api_key=s.groq_api_key,
        model=s.groq_model,
        temperature=s.llm_temperature,  # low temperature keeps the JSON shape stable
        timeout=s.llm_timeout,
        max_tokens=1024,
    )
