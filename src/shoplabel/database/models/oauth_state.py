"""
OAuthState model - pending TikTok Shop authorizations.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index

from .base import Base


class OAuthState(Base):
    """
    Server-side record of an issued OAuth ``state`` parameter.

    Only the SHA-256 hash of the opaque state is stored. A state maps to
    exactly one seller and can be consumed once before it expires.
    """

    __tablename__ = "oauth_states"

    id = Column(Integer, primary_key=True, autoincrement=True)

    seller_id = Column(Integer, ForeignKey("sellers.id", ondelete="CASCADE"), nullable=False, index=True)
    state_hash = Column(String(64), unique=True, nullable=False, index=True)

    expires_at = Column(DateTime(timezone=True), nullable=False)
    consumed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    __table_args__ = (
        Index("ix_oauth_states_expires", "expires_at"),
    )

    def __repr__(self):
        return f"<OAuthState(id={self.id}, seller_id={self.seller_id}, consumed={self.consumed_at is not None})>"

    def is_expired(self, now: datetime) -> bool:
        expires_at = self.expires_at
        # SQLite drops tzinfo on read
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return now >= expires_at

    def is_valid(self, now: datetime) -> bool:
        """Check if state is usable (not expired, not consumed)."""
        return self.consumed_at is None and not self.is_expired(now)
