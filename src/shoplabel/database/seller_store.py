"""
Credential store for sellers.

``SellerStore`` is the interface the rest of the service depends on.
``SqlSellerStore`` persists through SQLAlchemy; ``InMemorySellerStore``
keeps rows in a dict and is used by tests and local experiments.

Writes are single-row and last-writer-wins. Every write is visible to the
next read; there is no caching layer.
"""

import itertools
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from shoplabel.database.connection import session_scope
from shoplabel.database.models import Seller
from shoplabel.utils.exceptions import DuplicateEmailError
from shoplabel.utils.logger import get_logger

logger = get_logger(__name__)


def _check_fields(fields: Dict[str, Any]) -> None:
    unknown = set(fields) - Seller.MUTABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update seller fields: {sorted(unknown)}")


class SellerStore(ABC):
    """Abstract credential store."""

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[Seller]:
        """Return the seller with this email, or None."""

    @abstractmethod
    def find_by_id(self, seller_id: int) -> Optional[Seller]:
        """Return the seller with this id, or None."""

    @abstractmethod
    def create(self, email: str, password_hash: str) -> Seller:
        """
        Create a new seller.

        Raises:
            DuplicateEmailError: If the email is already registered
        """

    @abstractmethod
    def update(self, seller_id: int, **fields: Any) -> Optional[Seller]:
        """
        Update mutable columns of a seller.

        Returns:
            The updated seller, or None if no seller has this id

        Raises:
            ValueError: If a field is not a mutable seller column
        """


class SqlSellerStore(SellerStore):
    """SQLAlchemy-backed credential store."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def find_by_email(self, email: str) -> Optional[Seller]:
        with session_scope(self.session_factory) as db:
            return db.query(Seller).filter(Seller.email == email).first()

    def find_by_id(self, seller_id: int) -> Optional[Seller]:
        with session_scope(self.session_factory) as db:
            return db.get(Seller, seller_id)

    def create(self, email: str, password_hash: str) -> Seller:
        try:
            with session_scope(self.session_factory) as db:
                if db.query(Seller.id).filter(Seller.email == email).first():
                    raise DuplicateEmailError(email)

                seller = Seller(
                    email=email,
                    password_hash=password_hash,
                    automation_enabled=False,
                )
                db.add(seller)
                db.flush()  # Get seller ID
        except IntegrityError:
            # Lost a race against a concurrent signup with the same email
            raise DuplicateEmailError(email)

        logger.info(f"Seller created: {seller.email} ({seller.id})")
        return seller

    def update(self, seller_id: int, **fields: Any) -> Optional[Seller]:
        _check_fields(fields)

        with session_scope(self.session_factory) as db:
            seller = db.get(Seller, seller_id)
            if seller is None:
                logger.warning(f"Update for unknown seller {seller_id} ignored")
                return None

            for name, value in fields.items():
                setattr(seller, name, value)

        logger.debug(f"Seller {seller_id} updated: {sorted(fields)}")
        return seller


class InMemorySellerStore(SellerStore):
    """Dict-backed credential store with the same semantics as the SQL one."""

    def __init__(self):
        self._sellers: Dict[int, Seller] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def find_by_email(self, email: str) -> Optional[Seller]:
        for seller in self._sellers.values():
            if seller.email == email:
                return seller
        return None

    def find_by_id(self, seller_id: int) -> Optional[Seller]:
        return self._sellers.get(seller_id)

    def create(self, email: str, password_hash: str) -> Seller:
        with self._lock:
            if self.find_by_email(email) is not None:
                raise DuplicateEmailError(email)

            seller = Seller(
                id=next(self._ids),
                email=email,
                password_hash=password_hash,
                automation_enabled=False,
                created_at=datetime.now(timezone.utc),
            )
            self._sellers[seller.id] = seller
        return seller

    def update(self, seller_id: int, **fields: Any) -> Optional[Seller]:
        _check_fields(fields)

        with self._lock:
            seller = self._sellers.get(seller_id)
            if seller is None:
                return None
            for name, value in fields.items():
                setattr(seller, name, value)
        return seller

    def __len__(self) -> int:
        return len(self._sellers)
