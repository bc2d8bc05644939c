"""
PayPilot user store — SQLAlchemy-backed trust state and override history.

Uses PAYPILOT_DB_URL / DATABASE_URL when set (e.g. PostgreSQL); otherwise SQLite.
Saves are optimistic: a row is only updated when its stored version still
matches the version the record was loaded at. Read-modify-write spans are
serialized per user with user_lock().
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Iterator

from sqlalchemy import BigInteger, Column, ForeignKey, Integer, String, create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, relationship, sessionmaker

from backend_paypilot.core.exceptions import ConcurrentUpdateError, PersistenceFailure
from backend_paypilot.database.models import DEFAULT_TRUST_SCORE, Override, User
from backend_paypilot.paypilot_logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def to_epoch_ms(instant: datetime) -> int:
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return (instant - _EPOCH) // _ONE_MS


def from_epoch_ms(value: int | None) -> datetime | None:
    if value is None:
        return None
    return _EPOCH + timedelta(milliseconds=value)


# -----------------------------------------------------------------------------
# SQLAlchemy models
# -----------------------------------------------------------------------------


class UserRow(Base):
    """One row per user identity: current trust score and recovery clock."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(128), unique=True, nullable=False, index=True)
    trust_score = Column(Integer, nullable=False, default=DEFAULT_TRUST_SCORE)
    last_override_at_ms = Column(BigInteger, nullable=True)  # Unix milliseconds
    version = Column(Integer, nullable=False, default=1)

    overrides = relationship(
        "OverrideRow",
        order_by="OverrideRow.id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class OverrideRow(Base):
    """
    Override history (append-only). Autoincrement id is the chronological order.
    """

    __tablename__ = "overrides"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_pk = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at_ms = Column(BigInteger, nullable=False)
    risk_score = Column(Integer, nullable=True)
    decision = Column(String(16), nullable=True)


def _row_to_user(row: UserRow) -> User:
    return User(
        user_id=row.user_id,
        trust_score=row.trust_score,
        last_override_at=from_epoch_ms(row.last_override_at_ms),
        overrides=[
            Override(
                date=from_epoch_ms(o.created_at_ms),
                risk_score=o.risk_score,
                decision=o.decision,
            )
            for o in row.overrides
        ],
        version=row.version,
    )


def _override_row(override: Override) -> OverrideRow:
    return OverrideRow(
        created_at_ms=to_epoch_ms(override.date),
        risk_score=override.risk_score,
        decision=override.decision,
    )


# -----------------------------------------------------------------------------
# Repository interface: swap implementation without touching the services.
# -----------------------------------------------------------------------------


class UserRepository(ABC):
    """Persistence contract for user trust state."""

    @abstractmethod
    def init_schema(self) -> None:
        """Create tables if they do not exist."""
        ...

    @abstractmethod
    def get_user(self, user_id: str) -> User | None:
        """Return the stored user with overrides in chronological order, or None."""
        ...

    @abstractmethod
    def save_user(self, user: User) -> User:
        """
        Persist trust score, recovery clock and any overrides not yet stored.
        Raises ConcurrentUpdateError if the stored record moved on since load.
        Returns the user at its new version.
        """
        ...

    @contextmanager
    def user_lock(self, user_id: str) -> Iterator[None]:
        """Hold the per-user lock for a read-modify-write span."""
        yield

    def close(self) -> None:
        """Release connections."""


class _UserLocks:
    """Lazily created per-user locks. Different users never contend."""

    def __init__(self) -> None:
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def get(self, user_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[user_id] = lock
            return lock


class SqlUserRepository(UserRepository):
    """SQLAlchemy implementation; SQLite by default, any SQLAlchemy URL otherwise."""

    def __init__(self, url: str) -> None:
        self._url = url
        connect_args = {}
        if url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self._engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self._engine)
        self._locks = _UserLocks()
        logger.info("user_store_engine", url=url.split("?")[0].split("//")[-1])

    @contextmanager
    def _session_scope(self) -> Iterator[Session]:
        """Single session. Commits on success, rolls back on error."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def user_lock(self, user_id: str) -> Iterator[None]:
        with self._locks.get(user_id):
            yield

    def init_schema(self) -> None:
        try:
            Base.metadata.create_all(bind=self._engine)
            logger.info("user_store_init_schema")
        except SQLAlchemyError as e:
            logger.exception("user_store_init_schema_failed", error=str(e))
            raise PersistenceFailure(f"Failed to create schema: {e}") from e

    def get_user(self, user_id: str) -> User | None:
        try:
            with self._session_scope() as session:
                row = session.query(UserRow).filter(UserRow.user_id == user_id).first()
                return _row_to_user(row) if row else None
        except SQLAlchemyError as e:
            logger.exception("user_store_get_failed", user_id=user_id, error=str(e))
            raise PersistenceFailure(f"Failed to load user {user_id}: {e}") from e

    def save_user(self, user: User) -> User:
        try:
            with self._session_scope() as session:
                if user.version == 0:
                    row = self._insert(session, user)
                else:
                    row = self._update(session, user)
                session.flush()
                saved = _row_to_user(row)
        except ConcurrentUpdateError:
            raise
        except IntegrityError as e:
            logger.warning("user_store_conflict", user_id=user.user_id, error=str(e))
            raise ConcurrentUpdateError(f"User {user.user_id} was created concurrently") from e
        except SQLAlchemyError as e:
            logger.exception("user_store_save_failed", user_id=user.user_id, error=str(e))
            raise PersistenceFailure(f"Failed to save user {user.user_id}: {e}") from e
        logger.debug(
            "user_store_saved",
            user_id=saved.user_id,
            trust_score=saved.trust_score,
            override_count=saved.override_count,
            version=saved.version,
        )
        return saved

    def _insert(self, session: Session, user: User) -> UserRow:
        row = UserRow(
            user_id=user.user_id,
            trust_score=user.trust_score,
            last_override_at_ms=to_epoch_ms(user.last_override_at) if user.last_override_at else None,
            version=1,
        )
        row.overrides = [_override_row(o) for o in user.overrides]
        session.add(row)
        return row

    def _update(self, session: Session, user: User) -> UserRow:
        updated = (
            session.query(UserRow)
            .filter(UserRow.user_id == user.user_id, UserRow.version == user.version)
            .update(
                {
                    "trust_score": user.trust_score,
                    "last_override_at_ms": (
                        to_epoch_ms(user.last_override_at) if user.last_override_at else None
                    ),
                    "version": user.version + 1,
                },
                synchronize_session=False,
            )
        )
        if updated != 1:
            logger.warning("user_store_stale_version", user_id=user.user_id, version=user.version)
            raise ConcurrentUpdateError(f"User {user.user_id} changed since version {user.version}")

        row = session.query(UserRow).filter(UserRow.user_id == user.user_id).one()
        stored = len(row.overrides)
        if stored > len(user.overrides):
            raise ConcurrentUpdateError(f"User {user.user_id} has overrides newer than this record")
        for override in user.overrides[stored:]:
            row.overrides.append(_override_row(override))
        return row

    def close(self) -> None:
        self._engine.dispose()


def get_user_repository(url: str) -> SqlUserRepository:
    """Return a repository for the given SQLAlchemy URL with its schema ensured."""
    repository = SqlUserRepository(url)
    repository.init_schema()
    return repository
