"""Request and response bodies for the JSON API.

Fields are snake_case in Python and camelCase on the wire.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from expense_manager.models.base import as_utc, to_cents

# finite amounts, rounded to cents
Money = Annotated[Decimal, Field(allow_inf_nan=False), AfterValidator(to_cents)]
UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]


class APIModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ORMModel(APIModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class WorkspaceCreate(APIModel):
    name: str = Field(..., min_length=1)
    amount: Money
    date: Optional[UTCDateTime] = None


class WorkspaceUpdate(APIModel):
    name: Optional[str] = Field(None, min_length=1)
    amount: Optional[Money] = None
    date: Optional[UTCDateTime] = None


class MemberCreate(APIModel):
    name: str = Field(..., min_length=1)
    contact_number: str = Field(..., min_length=1)
    workspace_id: int
    date: Optional[UTCDateTime] = None


class MemberUpdate(APIModel):
    name: Optional[str] = Field(None, min_length=1)
    contact_number: Optional[str] = Field(None, min_length=1)


class MemberRead(ORMModel):
    id: int
    name: str
    contact_number: str
    workspace_id: Optional[int]
    total_expenses: float
    date: datetime


class WorkspaceRead(ORMModel):
    id: int
    name: str
    amount: float
    total_expenses: float
    members: List[MemberRead] = []
    date: datetime


class TotalExpenseUpdate(APIModel):
    total_expense: Money


class ExpenseCreate(APIModel):
    description: str = Field(..., min_length=1)
    amount: Money
    date: Optional[UTCDateTime] = None


class ExpenseUpdate(APIModel):
    description: Optional[str] = Field(None, min_length=1)
    amount: Optional[Money] = None
    date: Optional[UTCDateTime] = None


class ExpenseRead(ORMModel):
    id: int
    description: str
    amount: float
    member_id: int
    date: datetime


class Credentials(APIModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserRead(ORMModel):
    id: int
    username: str


class ForgotPasswordRequest(APIModel):
    username: str


class ForgotPasswordResponse(APIModel):
    message: str
    reset_token: Optional[str] = None
    reset_token_expiry: Optional[datetime] = None


class ResetPasswordRequest(APIModel):
    token: str
    new_password: str = Field(..., min_length=1)


class Message(APIModel):
    message: str
