from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest

from backend import crud, models, schemas


def test_create_and_list_expenses(db_session):
    first = crud.create_expense(db_session, schemas.ExpenseCreate(name="Coffee", amount=Decimal("4.50")))
    second = crud.create_expense(db_session, schemas.ExpenseCreate(name="Rent", amount=Decimal("900")))

    assert first.id and second.id and first.id != second.id
    listed = crud.list_expenses(db_session)
    assert sorted(expense.name for expense in listed) == ["Coffee", "Rent"]


def test_delete_expense_removes_record(db_session):
    expense = crud.create_expense(db_session, schemas.ExpenseCreate(name="Taxi", amount=Decimal("18.20")))
    deleted = crud.delete_expense(db_session, expense.id)

    assert deleted.id == expense.id
    with pytest.raises(crud.EntityNotFoundError):
        crud.get_expense(db_session, expense.id)


def test_delete_missing_expense_raises(db_session):
    with pytest.raises(crud.EntityNotFoundError):
        crud.delete_expense(db_session, "does-not-exist")


def test_authenticate_checks_password_hash(db_session):
    user = crud.create_user(db_session, schemas.Credentials(username="bob", password="s3cret-pass"))
    assert user.password_hash != "s3cret-pass"

    assert crud.authenticate(db_session, "bob", "s3cret-pass").id == user.id
    with pytest.raises(crud.InvalidCredentialsError):
        crud.authenticate(db_session, "bob", "wrong-password")
    with pytest.raises(crud.InvalidCredentialsError):
        crud.authenticate(db_session, "nobody", "s3cret-pass")


def test_tokens_expire_and_can_be_revoked(db_session):
    user = crud.create_user(db_session, schemas.Credentials(username="carol", password="s3cret-pass"))
    token = crud.issue_token(db_session, user, timedelta(minutes=5))

    assert crud.resolve_token(db_session, token.token).id == user.id
    later = models.utcnow() + timedelta(minutes=10)
    with pytest.raises(crud.InvalidCredentialsError):
        crud.resolve_token(db_session, token.token, now=later)

    crud.revoke_token(db_session, token.token)
    with pytest.raises(crud.InvalidCredentialsError):
        crud.resolve_token(db_session, token.token)


def test_snapshot_etag_tracks_content(db_session):
    crud.create_expense(db_session, schemas.ExpenseCreate(name="Book", amount=Decimal("15.00")))
    before = [schemas.ExpenseRead.model_validate(row) for row in crud.list_expenses(db_session)]
    assert crud.snapshot_etag(before) == crud.snapshot_etag(list(before))

    crud.create_expense(db_session, schemas.ExpenseCreate(name="Pen", amount=Decimal("2.00")))
    after = [schemas.ExpenseRead.model_validate(row) for row in crud.list_expenses(db_session)]
    assert crud.snapshot_etag(after) != crud.snapshot_etag(before)
