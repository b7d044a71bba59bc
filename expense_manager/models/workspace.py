from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, SQLModel
from expense_manager.models.base import utcnow

class Workspace(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    amount: Decimal = Field(max_digits=12, decimal_places=2)
    # cached sum of every expense under this workspace's members
    total_expenses: Decimal = Field(default=Decimal("0.00"), max_digits=14, decimal_places=2)
    date: datetime = Field(default_factory=utcnow)
