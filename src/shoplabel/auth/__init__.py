"""
Authentication utilities for ShopLabel.
"""

from .jwt_manager import JWTManager
from .password import hash_password, verify_password
from .session import SessionAuthenticator

__all__ = [
    "JWTManager",
    "hash_password",
    "verify_password",
    "SessionAuthenticator",
]
