from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from collections.abc import Callable, Generator, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any, TypeVar

from sqlalchemy import Date, Engine, Row, case, cast, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.sql.elements import ColumnElement

from app.guestbook.db import make_sessionmaker, session_scope
from app.guestbook.errors import InvalidRange, StorageError
from app.guestbook.models import Signature

logger = logging.getLogger(__name__)

T = TypeVar("T")

RECENT_ENTRIES_LIMIT = 10
# Largest value a signed 64-bit LIMIT/OFFSET parameter can carry.
MAX_SQL_INT = 2**63 - 1


@dataclass(frozen=True)
class NewSignature:
    """A validated submission, ready to insert."""

    name: str
    email: str
    newsletter_signup: bool = False
    message: str = ""


@dataclass(frozen=True)
class SignatureStats:
    total: int
    newsletter: int


@dataclass(frozen=True)
class DailyCount:
    date: date
    count: int


@dataclass(frozen=True)
class DashboardAggregates:
    total: int
    newsletter: int
    today: int
    week: int
    daily_breakdown: list[DailyCount]
    recent: list[Signature]


class SignatureStore:
    """
    Persistence contract for signatures. Services are written against this
    interface only; each operation is a single transaction.
    """

    mode = "abstract"

    def insert(self, record: NewSignature) -> int:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def list(self, limit: int, offset: int) -> tuple[list[Signature], int]:
        raise NotImplementedError

    def aggregate_stats(self) -> SignatureStats:
        raise NotImplementedError

    def dashboard_aggregates(self, today: date, week_start: date) -> DashboardAggregates:
        raise NotImplementedError

    def export_all(self) -> list[Signature]:
        raise NotImplementedError

    def export_newsletter(self) -> Sequence[Row[Any]]:
        raise NotImplementedError

    def export_range(self, start: date | None, end: date | None) -> list[Signature]:
        raise NotImplementedError


def _as_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


@dataclass(frozen=True)
class SqlSignatureStore(SignatureStore):
    """
    Shared SQLAlchemy implementation. Dialect differences (how a timestamp is
    truncated to a calendar date) live in day_of(); booleans are compared with
    IS TRUE and summed through CASE so 0/1 and true/false backends agree.
    """

    engine: Engine
    sessions: sessionmaker[Session]
    workers: int = 6

    def day_of(self, column: Any) -> ColumnElement[date]:
        raise NotImplementedError

    @contextmanager
    def _session(self, operation: str) -> Generator[Session, None, None]:
        try:
            with session_scope(self.sessions) as s:
                yield s
        except SQLAlchemyError as e:
            raise StorageError(f"{self.mode} {operation} failed: {e}") from e

    def _run(self, operation: str, fn: Callable[[Session], T]) -> T:
        with self._session(operation) as s:
            return fn(s)

    @staticmethod
    def _newest_first():
        return (Signature.timestamp.desc(), Signature.id.desc())

    def _newsletter_clause(self):
        return Signature.newsletter_signup.is_(True)

    # ---------- Writes ----------
    def insert(self, record: NewSignature) -> int:
        with self._session("insert") as s:
            sig = Signature(
                name=record.name,
                email=record.email,
                newsletter_signup=bool(record.newsletter_signup),
                message=record.message or "",
            )
            s.add(sig)
            s.flush()
            new_id = sig.id
        logger.info("Stored signature id=%s (newsletter=%s)", new_id, record.newsletter_signup)
        return new_id

    # ---------- Reads ----------
    def _count(self, s: Session) -> int:
        return int(s.scalar(select(func.count(Signature.id))) or 0)

    def _newsletter_count(self, s: Session) -> int:
        return int(s.scalar(select(func.count(Signature.id)).where(self._newsletter_clause())) or 0)

    def count(self) -> int:
        return self._run("count", self._count)

    def list(self, limit: int, offset: int) -> tuple[list[Signature], int]:
        if limit < 0 or offset < 0:
            raise ValueError("limit and offset must be non-negative")
        with self._session("list") as s:
            total = self._count(s)
            if offset > MAX_SQL_INT:
                return [], total
            rows = s.scalars(
                select(Signature).order_by(*self._newest_first()).limit(min(limit, MAX_SQL_INT)).offset(offset)
            ).all()
        return list(rows), total

    def aggregate_stats(self) -> SignatureStats:
        newsletter_as_int = case((self._newsletter_clause(), 1), else_=0)
        with self._session("aggregate_stats") as s:
            total, newsletter = s.execute(
                select(func.count(Signature.id), func.coalesce(func.sum(newsletter_as_int), 0))
            ).one()
        return SignatureStats(total=int(total or 0), newsletter=int(newsletter or 0))

    def dashboard_aggregates(self, today: date, week_start: date) -> DashboardAggregates:
        day = self.day_of(Signature.timestamp)

        def _today(s: Session) -> int:
            return int(s.scalar(select(func.count(Signature.id)).where(day == today)) or 0)

        def _week(s: Session) -> int:
            return int(s.scalar(select(func.count(Signature.id)).where(day >= week_start)) or 0)

        def _daily(s: Session) -> list[DailyCount]:
            rows = s.execute(
                select(day.label("day"), func.count(Signature.id))
                .where(day >= week_start)
                .group_by(day)
                .order_by(day)
            ).all()
            return [DailyCount(date=_as_date(d), count=int(c)) for d, c in rows]

        def _recent(s: Session) -> list[Signature]:
            return list(
                s.scalars(select(Signature).order_by(*self._newest_first()).limit(RECENT_ENTRIES_LIMIT)).all()
            )

        queries: dict[str, Callable[[Session], Any]] = {
            "total": self._count,
            "newsletter": self._newsletter_count,
            "today": _today,
            "week": _week,
            "daily": _daily,
            "recent": _recent,
        }
        # Independent reads: run them side by side, then join before building the payload.
        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="dashboard") as pool:
            futures = {key: pool.submit(self._run, f"dashboard.{key}", fn) for key, fn in queries.items()}
            results = {key: f.result() for key, f in futures.items()}

        return DashboardAggregates(
            total=results["total"],
            newsletter=results["newsletter"],
            today=results["today"],
            week=results["week"],
            daily_breakdown=results["daily"],
            recent=results["recent"],
        )

    def export_all(self) -> list[Signature]:
        with self._session("export_all") as s:
            return list(s.scalars(select(Signature).order_by(*self._newest_first())).all())

    def export_newsletter(self) -> Sequence[Row[Any]]:
        with self._session("export_newsletter") as s:
            return s.execute(
                select(Signature.email, Signature.name, Signature.timestamp)
                .where(self._newsletter_clause())
                .order_by(*self._newest_first())
            ).all()

    def export_range(self, start: date | None, end: date | None) -> list[Signature]:
        if start is None or end is None:
            raise InvalidRange()
        day = self.day_of(Signature.timestamp)
        with self._session("export_range") as s:
            return list(
                s.scalars(
                    select(Signature)
                    .where(day >= start, day <= end)
                    .order_by(*self._newest_first())
                ).all()
            )


@dataclass(frozen=True)
class SQLiteSignatureStore(SqlSignatureStore):
    """Embedded single-file backend for local development."""

    mode = "sqlite"

    def day_of(self, column: Any) -> ColumnElement[date]:
        # date() returns 'YYYY-MM-DD' text; typing it as Date makes SQLAlchemy parse it back.
        return func.date(column, type_=Date)


@dataclass(frozen=True)
class PostgresSignatureStore(SqlSignatureStore):
    """Networked backend for production."""

    mode = "postgres"

    def day_of(self, column: Any) -> ColumnElement[date]:
        return cast(column, Date)


def store_from_config(config: dict, engine: Engine, sessions: sessionmaker[Session] | None = None) -> SignatureStore:
    mode = (config.get("STORAGE_MODE") or "sqlite").strip().lower()
    workers = int(config.get("DASHBOARD_WORKERS") or 6)
    sessions = sessions or make_sessionmaker(engine)
    if mode in ("postgres", "postgresql"):
        return PostgresSignatureStore(engine=engine, sessions=sessions, workers=workers)
    if mode == "sqlite":
        return SQLiteSignatureStore(engine=engine, sessions=sessions, workers=workers)
    raise RuntimeError(f"Unknown STORAGE_MODE {mode!r}; expected 'sqlite' or 'postgres'.")
