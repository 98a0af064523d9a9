"""CRUD helper functions for the expense tracker backend."""
from __future__ import annotations

import hashlib
import json
import logging
import secrets
from datetime import datetime, timedelta
from typing import List, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from . import models, schemas

LOG = logging.getLogger(__name__)


class EntityNotFoundError(RuntimeError):
    """Raised when an entity cannot be located in the database."""


class EntityConflictError(RuntimeError):
    """Raised when a unique constraint is violated."""


class InvalidCredentialsError(RuntimeError):
    """Raised when a sign-in attempt or a bearer token cannot be verified."""


# ---------------------------------------------------------------------------
# Users and sessions


def create_user(session: Session, credentials: schemas.Credentials) -> models.User:
    username = credentials.username.strip()
    existing = session.scalars(select(models.User).where(models.User.username == username)).first()
    if existing is not None:
        raise EntityConflictError(f"Username {username!r} is already registered")
    user = models.User(
        username=username,
        password_hash=generate_password_hash(credentials.password),
    )
    session.add(user)
    try:
        session.flush()
    except IntegrityError as exc:  # pragma: no cover - simple mapping
        raise EntityConflictError(f"Username {user.username!r} is already registered") from exc
    session.refresh(user)
    LOG.info("Registered user %s", user.username)
    return user


def authenticate(session: Session, username: str, password: str) -> models.User:
    stmt = select(models.User).where(models.User.username == username.strip())
    user = session.scalars(stmt).first()
    if user is None or not check_password_hash(user.password_hash, password):
        raise InvalidCredentialsError("Incorrect username or password")
    return user


def issue_token(session: Session, user: models.User, ttl: timedelta) -> models.SessionToken:
    now = models.utcnow()
    token = models.SessionToken(
        token=secrets.token_urlsafe(32),
        user_id=user.id,
        created_at=now,
        expires_at=now + ttl,
    )
    session.add(token)
    session.flush()
    return token


def resolve_token(session: Session, token_value: str, *, now: datetime | None = None) -> models.User:
    token = session.get(models.SessionToken, token_value)
    current = now or models.utcnow()
    if token is None:
        raise InvalidCredentialsError("Unknown session token")
    if token.expires_at <= current:
        raise InvalidCredentialsError("Session token expired")
    return token.user


def revoke_token(session: Session, token_value: str) -> None:
    token = session.get(models.SessionToken, token_value)
    if token is not None:
        session.delete(token)
        session.flush()


# ---------------------------------------------------------------------------
# Expenses


def list_expenses(session: Session) -> List[models.Expense]:
    stmt = select(models.Expense).order_by(models.Expense.created_at, models.Expense.id)
    return list(session.scalars(stmt))


def get_expense(session: Session, expense_id: str) -> models.Expense:
    expense = session.get(models.Expense, expense_id)
    if expense is None:
        raise EntityNotFoundError(f"Expense {expense_id} not found")
    return expense


def create_expense(session: Session, expense_in: schemas.ExpenseCreate) -> models.Expense:
    expense = models.Expense(**expense_in.model_dump())
    session.add(expense)
    session.flush()
    session.refresh(expense)
    LOG.info("Created expense %s", expense.id)
    return expense


def delete_expense(session: Session, expense_id: str) -> models.Expense:
    expense = get_expense(session, expense_id)
    session.delete(expense)
    session.flush()
    LOG.info("Deleted expense %s", expense_id)
    return expense


def snapshot_etag(expenses: Sequence[schemas.ExpenseRead]) -> str:
    """Return a strong validator for a serialised list of expenses."""

    payload = json.dumps(
        [expense.model_dump(mode="json") for expense in expenses],
        sort_keys=True,
        separators=(",", ":"),
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
