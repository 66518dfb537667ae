from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from datetime import datetime
from typing import Any

ENTRIES_HEADER = ["Name", "Email", "Newsletter Signup", "Message", "Timestamp"]
NEWSLETTER_HEADER = ["Email Address", "First Name", "Last Name", "Tags", "Subscribe Date"]

CSV_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def split_name(name: str | None) -> tuple[str, str]:
    """'Bruce Frederick Springsteen' -> ('Bruce', 'Frederick Springsteen'); 'Madonna' -> ('Madonna', '')."""
    parts = (name or "").split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def format_timestamp(ts: datetime | None) -> str:
    return ts.strftime(CSV_TIMESTAMP_FORMAT) if ts else ""


def format_date(ts: datetime | None) -> str:
    return ts.date().isoformat() if ts else ""


def _write(header: list[str], rows: Iterable[list[Any]]) -> str:
    out = io.StringIO()
    # Every field quoted; embedded quotes are doubled rather than left to break the row.
    w = csv.writer(out, quoting=csv.QUOTE_ALL, lineterminator="\n")
    out.write(",".join(header) + "\n")
    for row in rows:
        w.writerow(row)
    return out.getvalue()


def render_entries_csv(signatures: Iterable[Any]) -> str:
    return _write(
        ENTRIES_HEADER,
        (
            [
                sig.name,
                sig.email,
                "Yes" if sig.newsletter_signup else "No",
                sig.message or "",
                format_timestamp(sig.timestamp),
            ]
            for sig in signatures
        ),
    )


def render_newsletter_csv(rows: Iterable[Any], *, tag: str) -> str:
    """Mailchimp import layout. Rows need .email, .name and .timestamp."""

    def _lines():
        for row in rows:
            first_name, last_name = split_name(row.name)
            yield [row.email, first_name, last_name, tag, format_date(row.timestamp)]

    return _write(NEWSLETTER_HEADER, _lines())
