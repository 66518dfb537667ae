"""
Create the guestbook table (idempotent).

There are no migrations: CREATE TABLE IF NOT EXISTS is the whole schema story.

Usage:
  python scripts/init_db.py
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure repo root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dotenv import load_dotenv  # noqa: E402

from app.guestbook.config import load_settings  # noqa: E402
from app.guestbook.db import create_db_engine, create_tables  # noqa: E402


def init_schema(*, database_url: str | None = None) -> str:
    db_url = (database_url or load_settings().database_url).strip()
    engine = create_db_engine(db_url)
    try:
        create_tables(engine)
    finally:
        engine.dispose()
    return engine.url.render_as_string(hide_password=True)


def main() -> None:
    load_dotenv()
    target = init_schema()
    print(f"signatures table ready ({target})", flush=True)


if __name__ == "__main__":
    main()
