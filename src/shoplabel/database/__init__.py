"""
Persistence layer: models, engine helpers and stores.
"""

from .connection import create_db_engine, create_session_factory, init_db, drop_db
from .seller_store import SellerStore, SqlSellerStore, InMemorySellerStore
from .oauth_state_store import OAuthStateStore, SqlOAuthStateStore, InMemoryOAuthStateStore

__all__ = [
    "create_db_engine",
    "create_session_factory",
    "init_db",
    "drop_db",
    "SellerStore",
    "SqlSellerStore",
    "InMemorySellerStore",
    "OAuthStateStore",
    "SqlOAuthStateStore",
    "InMemoryOAuthStateStore",
]
