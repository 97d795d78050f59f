from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

# Shared type for incoming dates which can be a date, datetime, or ISO8601 string
DateInput = Union[date, datetime, str]


def parse_datetime(value: Optional[DateInput]) -> Optional[datetime]:
    """
    Normalize date input into a naive datetime.
    - None and blank strings become None.
    - Strings are parsed via datetime.fromisoformat; date-only strings are set to 00:00.
    - A date (not datetime) is promoted to a datetime at 00:00.
    - Timezone-aware values are converted to UTC and made naive.
    """
    if value is None:
        return None

    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(s)
        except ValueError:
            try:
                value = date.fromisoformat(s)
            except ValueError as e:
                raise ValueError(
                    "Invalid date format. Use ISO8601 date or datetime string "
                    "(e.g., '2025-01-31' or '2025-01-31T13:45:00')."
                ) from e

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, 0, 0, 0)

    raise ValueError("Invalid type for date; expected date, datetime, or ISO8601 string.")


def strip_or_none(value: Any) -> Any:
    """Strip strings; blank strings become None. Non-strings pass through."""
    if isinstance(value, str):
        s = value.strip()
        return s or None
    return value


def split_list(value: Any) -> Any:
    """
    Normalize a comma-separated string or a list of strings into a list of
    stripped, non-empty strings.
    """
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if v is not None and str(v).strip()]
    return value


def normalize_link(value: Any) -> Any:
    """Prefix scheme-less links with https://; blank links become None."""
    s = strip_or_none(value)
    if isinstance(s, str) and not s.startswith(("http://", "https://")):
        return "https://" + s
    return s


def matches_text(needle: str, *haystacks: Union[None, str, Sequence[str]]) -> bool:
    """Case-insensitive substring match of needle against strings or string lists."""
    n = needle.lower()
    for h in haystacks:
        if h is None:
            continue
        values = [h] if isinstance(h, str) else h
        if any(n in v.lower() for v in values):
            return True
    return False


# PUBLIC_INTERFACE
def list_envelope(items: Union[Sequence[Any], Iterable[Any]], **sections: Iterable[Any]) -> Dict[str, Any]:
    """
    Build the standard envelope for list endpoints.

    Args:
        items: The items matching the query, already sorted.
        sections: Optional named sub-lists (e.g. upcoming/completed).

    Returns:
        Dict with keys: items, total, and one key per section.
    """
    materialized: List[Any] = list(items) if not isinstance(items, list) else items
    envelope: Dict[str, Any] = {"items": materialized, "total": len(materialized)}
    for name, section in sections.items():
        envelope[name] = list(section)
    return envelope
