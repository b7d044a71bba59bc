from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, SQLModel
from expense_manager.models.base import utcnow

class Member(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    contact_number: str
    workspace_id: Optional[int] = Field(default=None, foreign_key="workspace.id", index=True)
    # set by clients, not kept in step with the expenses
    total_expenses: Decimal = Field(default=Decimal("0.00"), max_digits=14, decimal_places=2)
    date: datetime = Field(default_factory=utcnow)
