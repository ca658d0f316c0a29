"""
Storage for OAuth ``state`` parameters.

A state is an opaque random token handed to TikTok Shop in the authorize
redirect. The server keeps only its SHA-256 hash together with the seller it
was issued to, so a callback can only ever bind tokens to that seller. States
are single-use and expire after a configurable TTL. Expired and consumed
states are deleted whenever a new state is issued.
"""

import hashlib
import secrets
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

from sqlalchemy import or_
from sqlalchemy.orm import sessionmaker

from shoplabel.database.connection import session_scope
from shoplabel.database.models import OAuthState
from shoplabel.utils.logger import get_logger

logger = get_logger(__name__)

STATE_BYTES = 32


def hash_state(state: str) -> str:
    return hashlib.sha256(state.encode("utf-8")).hexdigest()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OAuthStateStore(ABC):
    """Issues and consumes OAuth states."""

    def __init__(self, ttl_seconds: int = 600, clock: Callable[[], datetime] = _utcnow):
        self.ttl = timedelta(seconds=ttl_seconds)
        self.clock = clock

    def issue(self, seller_id: int) -> str:
        """Create a new state for the seller and return its opaque value."""
        self.prune()
        state = secrets.token_urlsafe(STATE_BYTES)
        self._save(hash_state(state), seller_id, self.clock() + self.ttl)
        logger.debug(f"Issued OAuth state for seller {seller_id}")
        return state

    def consume(self, state: Optional[str]) -> Optional[int]:
        """
        Consume a state.

        Returns:
            The seller id the state was issued to, or None when the state is
            missing, unknown, expired or already consumed.
        """
        if not state:
            return None
        return self._consume(hash_state(state), self.clock())

    def prune(self) -> int:
        """Delete expired and consumed states. Returns the number removed."""
        removed = self._prune(self.clock())
        if removed:
            logger.debug(f"Pruned {removed} OAuth states")
        return removed

    @abstractmethod
    def _save(self, state_hash: str, seller_id: int, expires_at: datetime) -> None:
        ...

    @abstractmethod
    def _consume(self, state_hash: str, now: datetime) -> Optional[int]:
        ...

    @abstractmethod
    def _prune(self, now: datetime) -> int:
        ...


class SqlOAuthStateStore(OAuthStateStore):
    """SQLAlchemy-backed state store."""

    def __init__(self, session_factory: sessionmaker, ttl_seconds: int = 600,
                 clock: Callable[[], datetime] = _utcnow):
        super().__init__(ttl_seconds, clock)
        self.session_factory = session_factory

    def _save(self, state_hash: str, seller_id: int, expires_at: datetime) -> None:
        with session_scope(self.session_factory) as db:
            db.add(OAuthState(
                seller_id=seller_id,
                state_hash=state_hash,
                expires_at=expires_at,
            ))

    def _consume(self, state_hash: str, now: datetime) -> Optional[int]:
        with session_scope(self.session_factory) as db:
            record = (
                db.query(OAuthState)
                .filter(OAuthState.state_hash == state_hash)
                .with_for_update()
                .first()
            )
            if record is None or not record.is_valid(now):
                return None

            record.consumed_at = now
            return record.seller_id

    def _prune(self, now: datetime) -> int:
        with session_scope(self.session_factory) as db:
            return (
                db.query(OAuthState)
                .filter(or_(OAuthState.expires_at <= now, OAuthState.consumed_at.isnot(None)))
                .delete(synchronize_session=False)
            )


@dataclass
class _PendingState:
    seller_id: int
    expires_at: datetime
    consumed: bool = False


class InMemoryOAuthStateStore(OAuthStateStore):
    """Dict-backed state store."""

    def __init__(self, ttl_seconds: int = 600, clock: Callable[[], datetime] = _utcnow):
        super().__init__(ttl_seconds, clock)
        self._states: Dict[str, _PendingState] = {}
        self._lock = threading.Lock()

    def _save(self, state_hash: str, seller_id: int, expires_at: datetime) -> None:
        with self._lock:
            self._states[state_hash] = _PendingState(seller_id, expires_at)

    def _consume(self, state_hash: str, now: datetime) -> Optional[int]:
        with self._lock:
            pending = self._states.get(state_hash)
            if pending is None or pending.consumed or now >= pending.expires_at:
                return None
            pending.consumed = True
            return pending.seller_id

    def _prune(self, now: datetime) -> int:
        with self._lock:
            stale = [
                state_hash for state_hash, pending in self._states.items()
                if pending.consumed or now >= pending.expires_at
            ]
            for state_hash in stale:
                del self._states[state_hash]
            return len(stale)
