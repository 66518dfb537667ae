from __future__ import annotations

from typing import Any, Mapping

from app.guestbook.models import Signature
from app.guestbook.modules.signatures.utils import total_pages, validate_submission
from app.guestbook.storage import SignatureStore

CONFIRMATION_MESSAGE = "Thank you for signing the guestbook!"


def public_entry(sig: Signature) -> dict[str, Any]:
    """Public view of an entry. Email is write-only for the public and never listed."""
    return {
        "id": sig.id,
        "name": sig.name,
        "message": sig.message or "",
        "timestamp": sig.timestamp.isoformat() if sig.timestamp else None,
    }


def submit_signature(store: SignatureStore, payload: Mapping[str, Any]) -> dict[str, Any]:
    record = validate_submission(payload)
    new_id = store.insert(record)
    return {"id": new_id, "message": CONFIRMATION_MESSAGE}


def list_entries(store: SignatureStore, *, page: int = 1, limit: int = 20) -> dict[str, Any]:
    if page < 1 or limit < 1:
        raise ValueError("page and limit must be >= 1")
    rows, total = store.list(limit, (page - 1) * limit)
    return {
        "entries": [public_entry(r) for r in rows],
        "total": total,
        "page": page,
        "totalPages": total_pages(total, limit),
    }


def public_stats(store: SignatureStore) -> dict[str, int]:
    stats = store.aggregate_stats()
    return {
        "total_signatures": stats.total,
        "newsletter_signups": stats.newsletter,
    }
