from datetime import datetime
from typing import Optional
from sqlmodel import Field, SQLModel

class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True, unique=True)
    password_hash: str
    reset_token: Optional[str] = Field(default=None, index=True)
    reset_token_expiry: Optional[datetime] = None
