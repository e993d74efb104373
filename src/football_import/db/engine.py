from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

T = TypeVar("T")


@dataclass(frozen=True)
class DatabaseConfig:
    database_url: str
    echo: bool = False


def create_db_engine(cfg: DatabaseConfig) -> Engine:
    return create_engine(cfg.database_url, echo=cfg.echo, pool_pre_ping=True)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def run_in_transaction(session: Session, fn: Callable[[Session], T]) -> T:
    """Run `fn` atomically: all of its writes commit together or none do.

    When the session already has a transaction in progress, the work runs in a
    SAVEPOINT and the outer transaction is left for the caller to commit.
    """

    if session.in_transaction():
        with session.begin_nested():
            return fn(session)

    with session.begin():
        return fn(session)
