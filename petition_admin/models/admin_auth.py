"""Admin credential and session models for authentication."""

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, Column, DateTime, Index, String
from sqlalchemy.sql import func
from sqlmodel import Field, SQLModel

ADMIN_USER_ID = "admin"

# Reserved id under which older deployments stored the password hash in the session table.
# A session carrying it is never valid.
PASSWORD_HASH_USER_ID = "__password_hash__"


class AdminCredential(SQLModel, table=True):
    """The single stored admin password digest."""

    __tablename__ = "admin_credentials"  # type: ignore

    id: Optional[int] = Field(default=None, primary_key=True)
    password_hash: str = Field(sa_column=Column(String(64), nullable=False))
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=func.now()),
    )
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now()),
    )


class AdminSession(SQLModel, table=True):
    """An issued admin session, valid until ``expires_at`` (unix seconds)."""

    __tablename__ = "admin_sessions"  # type: ignore

    id: Optional[int] = Field(default=None, primary_key=True)
    session_token: str = Field(sa_column=Column(String(128), unique=True, nullable=False))
    user_id: str = Field(default=ADMIN_USER_ID, sa_column=Column(String(50), nullable=False))
    expires_at: int = Field(sa_column=Column(BigInteger, nullable=False))
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=func.now()),
    )

    __table_args__ = (
        Index("idx_admin_session_token", "session_token"),
        Index("idx_admin_session_expires", "expires_at"),
    )

    def is_expired(self, now: int) -> bool:
        """True once ``now`` is strictly past the expiry second."""
        return now > self.expires_at
