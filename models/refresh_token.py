# models/refresh_token.py
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import relationship

from core.database import Base
from models.user import _utcnow


class RefreshToken(Base):
    __tablename__ = "refresh_tokens"

    # 64 hex chars from secrets.token_hex(32)
    token = Column(String(128), primary_key=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    revoked_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", backref="refresh_tokens")

Index("ix_refresh_tokens_user_active", RefreshToken.user_id, RefreshToken.revoked_at)
