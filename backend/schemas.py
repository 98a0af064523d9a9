"""Pydantic schemas for serialising expense tracker data."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class ExpenseBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    amount: Decimal = Field(..., max_digits=12, decimal_places=2)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("name must not be blank")
        return stripped


class ExpenseCreate(ExpenseBase):
    pass


class ExpenseRead(ExpenseBase, ORMModel):
    id: str
    created_at: datetime
    updated_at: datetime


class Credentials(BaseModel):
    username: str = Field(..., min_length=1, max_length=128)
    password: str = Field(..., min_length=8, max_length=256)


class SignIn(Credentials):
    client_id: str | None = None


class UserRead(ORMModel):
    id: int
    username: str
    created_at: datetime


class TokenRead(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    username: str


class AuthOutputs(BaseModel):
    url: str
    user_pool_id: str
    user_pool_client_id: str


class DataOutputs(BaseModel):
    url: str
    default_authorization_type: str = "USER_POOL"
    authorization_types: List[str] = Field(default_factory=lambda: ["USER_POOL"])
    models: List[str] = Field(default_factory=lambda: ["Expense"])


class OutputsDocument(BaseModel):
    version: str = "1"
    auth: AuthOutputs
    data: DataOutputs
