"""
Core Utilities

Shared helpers used across the package: clock, logging setup and
log-safe redaction of carrier payloads.
"""
import logging
import re
from datetime import datetime, timezone
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Patterns redacted from carrier responses before they reach the logs
_REDACT_PATTERNS = [
    (r'"access_token"\s*:\s*"[^"]*"', '"access_token": "[REDACTED]"'),
    (r'\bBearer\s+[A-Za-z0-9._~+/=-]+', 'Bearer [REDACTED]'),
    (r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b', '[EMAIL]'),
    (r'\b\d{3}[-.\s]?\d{3}[-.\s]?\d{4}\b', '[PHONE]'),
]


def utcnow() -> datetime:
    """
    Return timezone-aware UTC datetime.

    Use this instead of datetime.utcnow() which returns naive datetime.
    """
    return datetime.now(timezone.utc)


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging for entry points."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
    # httpx logs every request at INFO, which duplicates our own call logging
    logging.getLogger("httpx").setLevel(logging.WARNING)


def mask_secret(value: Optional[str], visible: int = 4) -> str:
    """Show only the last few characters of a credential."""
    if not value:
        return ""
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]


def sanitize_for_logging(text: str, max_length: int = 500) -> str:
    """
    Truncate a response body and redact tokens and contact details.

    Args:
        text: Raw text that may contain secrets or PII
        max_length: Maximum length of result

    Returns:
        Sanitized text safe for logging
    """
    if not text:
        return ""

    sanitized = text
    for pattern, replacement in _REDACT_PATTERNS:
        sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)

    return sanitized[:max_length]
