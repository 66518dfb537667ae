from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any

from app.guestbook.errors import InvalidRange
from app.guestbook.models import Signature
from app.guestbook.modules.reporting.csv_export import render_entries_csv, render_newsletter_csv
from app.guestbook.storage import SignatureStore

WEEK_WINDOW_DAYS = 7

ALL_ENTRIES_FILENAME = "all_guestbook_entries.csv"
NEWSLETTER_FILENAME = "mailchimp_newsletter_subscribers.csv"


@dataclass(frozen=True)
class CsvExport:
    filename: str
    body: str
    row_count: int


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def admin_entry(sig: Signature) -> dict[str, Any]:
    """Full entry, email included. Admin views only."""
    return {
        "id": sig.id,
        "name": sig.name,
        "email": sig.email,
        "newsletter_signup": bool(sig.newsletter_signup),
        "message": sig.message or "",
        "timestamp": sig.timestamp.isoformat() if sig.timestamp else None,
    }


def compute_dashboard(store: SignatureStore, *, today: date | None = None) -> dict[str, Any]:
    """
    Dashboard payload for the admin page.

    Window rules:
    - "today" is the UTC calendar date at call time unless given.
    - "week" covers today and the 6 days before it (7 days inclusive).
    - dailyStats lists only days in that window with at least one entry, oldest first.
    """
    today = today or utc_today()
    week_start = today - timedelta(days=WEEK_WINDOW_DAYS - 1)
    agg = store.dashboard_aggregates(today, week_start)
    return {
        "stats": {
            "total": agg.total,
            "newsletter": agg.newsletter,
            "today": agg.today,
            "week": agg.week,
        },
        "dailyStats": [{"date": d.date.isoformat(), "count": d.count} for d in agg.daily_breakdown],
        "recentEntries": [admin_entry(sig) for sig in agg.recent],
    }


def parse_range(start: str | None, end: str | None) -> tuple[date, date]:
    start = (start or "").strip()
    end = (end or "").strip()
    if not start or not end:
        raise InvalidRange()
    try:
        return date.fromisoformat(start), date.fromisoformat(end)
    except ValueError:
        raise InvalidRange("Dates must be YYYY-MM-DD") from None


def export_all_csv(store: SignatureStore) -> CsvExport:
    rows = store.export_all()
    return CsvExport(filename=ALL_ENTRIES_FILENAME, body=render_entries_csv(rows), row_count=len(rows))


def export_newsletter_csv(store: SignatureStore, *, tag: str) -> CsvExport:
    rows = store.export_newsletter()
    return CsvExport(filename=NEWSLETTER_FILENAME, body=render_newsletter_csv(rows, tag=tag), row_count=len(rows))


def export_range_csv(store: SignatureStore, start: str | None, end: str | None) -> CsvExport:
    """
    Entries whose calendar date is within [start, end]. A reversed range is
    not an error: it simply matches nothing and yields a header-only file.
    """
    start_date, end_date = parse_range(start, end)
    rows = store.export_range(start_date, end_date)
    return CsvExport(
        filename=f"guestbook_{start_date.isoformat()}_to_{end_date.isoformat()}.csv",
        body=render_entries_csv(rows),
        row_count=len(rows),
    )
