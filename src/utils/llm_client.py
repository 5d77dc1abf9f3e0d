"""LLM client configuration for Google Gemini.

The client is built explicitly and handed to whoever needs it; nothing
here caches a process-wide instance.
"""

import logging
import os
import re
import time
from functools import wraps
from typing import Optional

from dotenv import load_dotenv
from langchain_google_genai import ChatGoogleGenerativeAI

from src.analytics.exceptions import NarrativeConfigurationError

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"


def _is_rate_limit(error: Exception) -> bool:
    message = str(error).lower()
    return any(
        marker in message
        for marker in ("429", "quota", "rate limit", "resource_exhausted")
    )


def _retry_delay(error: Exception, default: float) -> float:
    """Server-suggested delay ("retry in 12.5s") or the default."""
    match = re.search(r'retry.*?(\d+\.?\d*)\s*s', str(error), re.IGNORECASE)
    if match:
        return float(match.group(1)) + 1
    return default


def retry_with_exponential_backoff(max_retries=5, initial_delay=30, sleep=time.sleep):
    """
    Decorator to retry with exponential backoff for rate limiting.

    Raises:
        ValueError: If max_retries < 1 (the call would never be attempted)
    """
    if max_retries < 1:
        raise ValueError(f"max_retries must be >= 1, got {max_retries}")

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    # Non-rate-limit errors and the last attempt propagate
                    if not _is_rate_limit(e) or attempt == max_retries - 1:
                        if _is_rate_limit(e):
                            logger.error("Max retries (%d) exceeded for rate limiting", max_retries)
                        raise

                    wait_time = _retry_delay(e, initial_delay * (2 ** attempt))
                    logger.warning(
                        "Rate limited, attempt %d/%d failed. Waiting %.1fs...",
                        attempt + 1, max_retries, wait_time
                    )
                    sleep(wait_time)
        return wrapper
    return decorator


def get_llm(
    api_key: Optional[str] = None,
    temperature: float = 0.7,
    model: str = DEFAULT_MODEL,
    max_tokens: int | None = None,
    max_retries: int = 2,
    timeout: int | None = None,
) -> ChatGoogleGenerativeAI:
    """
    Get configured LLM instance using Google Gemini.

    Args:
        api_key: Gemini API key (GEMINI_API_KEY from the environment if omitted)
        temperature: Temperature for generation (0.0 to 1.0)
        model: Model name, e.g. "gemini-2.5-flash" or "gemini-2.5-pro"
        max_tokens: Optional maximum tokens to generate
        max_retries: Number of client-level retries on API failures
        timeout: Optional timeout in seconds for API calls

    Returns:
        Configured ChatGoogleGenerativeAI instance

    Raises:
        NarrativeConfigurationError: If no API key is available

    Example:
        >>> llm = get_llm(temperature=0.3)
        >>> llm.invoke("Summarize revenue trend").content
    """
    api_key = api_key or os.getenv("GEMINI_API_KEY")
    if not api_key:
        raise NarrativeConfigurationError(
            "GEMINI_API_KEY not found in environment variables. "
            "Please set it in your .env file or environment."
        )

    return ChatGoogleGenerativeAI(
        model=model,
        temperature=temperature,
        max_tokens=max_tokens,
        max_retries=max_retries,
        timeout=timeout,
        google_api_key=api_key,
    )
