"""SQLAlchemy models for the expense tracker backend."""
from __future__ import annotations

import uuid
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from .database import Base


def utcnow() -> datetime:
    # SQLite stores naive timestamps; keep every column in naive UTC.
    return datetime.now(UTC).replace(tzinfo=None)


def new_identifier() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, index=True)
    username: str = Column(String(128), unique=True, nullable=False, index=True)
    password_hash: str = Column(String(255), nullable=False)
    created_at: datetime = Column(DateTime, nullable=False, default=utcnow)

    tokens = relationship("SessionToken", back_populates="user", cascade="all, delete-orphan")


class SessionToken(Base):
    __tablename__ = "session_tokens"

    token: str = Column(String(64), primary_key=True)
    user_id: int = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at: datetime = Column(DateTime, nullable=False, default=utcnow)
    expires_at: datetime = Column(DateTime, nullable=False)

    user = relationship("User", back_populates="tokens")


class Expense(Base):
    __tablename__ = "expenses"

    id: str = Column(String(36), primary_key=True, default=new_identifier)
    name: str = Column(String(255), nullable=False)
    amount: Decimal = Column(Numeric(12, 2), nullable=False)
    created_at: datetime = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at: datetime = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
