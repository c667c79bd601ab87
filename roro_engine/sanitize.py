"""Input sanitizers for noisy client identifiers. They clean rather than reject."""

import re
from datetime import date, datetime
from typing import Any, Iterable, List, Optional, Union

_KEY_DISALLOWED = re.compile(r"[^a-z0-9_\-]")
_TAGS = re.compile(r"<[^>]*>")
_CONTROL = re.compile(r"[\x00-\x1f\x7f]+")
_WHITESPACE = re.compile(r"\s+")
_SESSION_ID = re.compile(r"^[A-Za-z0-9]{16,40}$")

MAX_KEY_LENGTH = 64
MAX_VARIANTS = 8
MAX_TEXT_LENGTH = 128


def sanitize_key(value: Any, max_length: int = MAX_KEY_LENGTH) -> str:
    """Lowercase, keep [a-z0-9_-], truncate."""
    if value is None:
        return ""
    key = _KEY_DISALLOWED.sub("", str(value).lower())
    return key[:max_length]


def sanitize_variants(
    value: Union[str, Iterable[Any], None],
    max_variants: int = MAX_VARIANTS,
    max_length: int = MAX_KEY_LENGTH,
) -> List[str]:
    """
    Variants from a CSV string or a list: trimmed, sanitized, empty entries
    dropped, repeats collapsed to their first occurrence, then capped at
    max_variants. Order is preserved.
    """
    if value is None:
        return []
    parts = value.split(",") if isinstance(value, str) else list(value)
    out: List[str] = []
    for p in parts:
        k = sanitize_key(str(p).strip() if p is not None else "", max_length)
        if k and k not in out:
            out.append(k)
        if len(out) >= max_variants:
            break
    return out


def sanitize_text(value: Any, max_length: int = MAX_TEXT_LENGTH) -> str:
    """Strip tags and control characters, collapse whitespace, truncate."""
    if value is None:
        return ""
    text = _TAGS.sub("", str(value))
    text = _CONTROL.sub(" ", text)
    text = _WHITESPACE.sub(" ", text).strip()
    return text[:max_length]


def sanitize_date(value: Any) -> Optional[date]:
    """YYYY-MM-DD -> date, anything else -> None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError:
        return None


def is_valid_session_id(value: Optional[str]) -> bool:
    return bool(value) and bool(_SESSION_ID.match(value))
