from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, SQLModel
from expense_manager.models.base import utcnow

class Expense(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    member_id: int = Field(foreign_key="member.id", index=True)
    description: str
    amount: Decimal = Field(max_digits=12, decimal_places=2)
    date: datetime = Field(default_factory=utcnow)
