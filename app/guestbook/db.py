from __future__ import annotations

import os
from contextlib import contextmanager
from collections.abc import Generator

from flask import Flask
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from app.guestbook.config import normalize_storage_mode
from app.guestbook.models import Base


def create_db_engine(db_url: str, *, is_postgres: bool | None = None) -> Engine:
    if is_postgres is None:
        is_postgres = db_url.startswith("postgres")
    engine_kwargs: dict[str, object] = {
        "future": True,
        "pool_pre_ping": True,
    }
    if is_postgres:
        engine_kwargs.update(
            {
                "pool_recycle": 1800,
                "pool_size": 5,
                "max_overflow": 10,
                "pool_timeout": 30,
            }
        )
    return create_engine(db_url, **engine_kwargs)


def make_sessionmaker(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(
        bind=engine,
        class_=Session,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )


def create_tables(engine: Engine) -> None:
    """CREATE TABLE IF NOT EXISTS for every model. There are no migrations beyond this."""
    Base.metadata.create_all(bind=engine)


def init_db(app: Flask) -> Engine:
    db_url = app.config["DATABASE_URL"]
    mode = normalize_storage_mode(app.config.get("STORAGE_MODE") or "")
    engine = create_db_engine(db_url, is_postgres=(mode == "postgres") if mode else None)
    if app.config.get("ENV") != "production":
        @event.listens_for(engine, "checkout")
        def _receive_checkout(dbapi_connection, connection_record, connection_proxy):  # type: ignore[no-redef]
            app.logger.debug("DB connection checkout from pool")
    app.extensions["sqlalchemy_engine"] = engine
    app.extensions["sqlalchemy_sessionmaker"] = make_sessionmaker(engine)

    if app.config.get("AUTO_CREATE_TABLES", True):
        create_tables(engine)

    if hasattr(os, "register_at_fork"):
        def _after_fork_child():
            # Pooled connections must not be shared between gunicorn workers.
            engine.dispose(close=False)
            app.logger.info("Disposed DB engine after fork (pid=%s)", os.getpid())

        os.register_at_fork(after_in_child=_after_fork_child)

    return engine


@contextmanager
def session_scope(sm: sessionmaker[Session]) -> Generator[Session, None, None]:
    """
    Yields a session and commits/rolls back. One scope is one transaction.
    """
    s: Session = sm()
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()
