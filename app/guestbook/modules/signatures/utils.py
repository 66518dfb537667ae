from __future__ import annotations

import math
import re
from typing import Any, Mapping

from app.guestbook.errors import InvalidEmail, MissingField
from app.guestbook.storage import NewSignature

# local@domain.tld, nothing fancier. Not RFC 5322.
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$", re.IGNORECASE)

TRUTHY_STRINGS = frozenset({"1", "true", "yes", "on"})


def normalize_text(s: Any) -> str:
    if s is None:
        return ""
    return str(s).strip()


def parse_bool(value: Any) -> bool:
    """JSON booleans pass through; form values like 'on'/'true'/'1' count as set."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_STRINGS
    return bool(value)


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.fullmatch(normalize_text(email)))


def validate_submission(payload: Mapping[str, Any]) -> NewSignature:
    """
    Check a raw submission and return the record to store.

    Raises MissingField when name or email is empty and InvalidEmail when the
    address is not local@domain.tld. No escaping happens here: queries are
    parametrized and HTML escaping belongs to whoever renders the entry.
    """
    name = normalize_text(payload.get("name"))
    email = normalize_text(payload.get("email"))
    if not name or not email:
        raise MissingField()
    if not is_valid_email(email):
        raise InvalidEmail()
    return NewSignature(
        name=name,
        email=email,
        newsletter_signup=parse_bool(payload.get("newsletter_signup")),
        message=normalize_text(payload.get("message")),
    )


def parse_positive_int(raw: Any, default: int) -> int:
    """Query-string ints: anything unparseable or < 1 falls back to the default."""
    try:
        value = int(normalize_text(raw))
    except (TypeError, ValueError):
        return default
    return value if value >= 1 else default


def total_pages(total: int, limit: int) -> int:
    if limit < 1:
        raise ValueError("limit must be >= 1")
    return math.ceil(max(total, 0) / limit)
