from pydantic import BaseModel, Field
from typing import Any, List, Optional
from uuid import uuid4
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_expense_id(created_at: datetime) -> str:
    """Sortable id: the creation instant followed by a random suffix."""
    return f"{created_at.strftime('%Y%m%dT%H%M%S%f')}-{uuid4().hex[:8]}"


class ExpensePayload(BaseModel):
    amount: Optional[Any] = None
    category: Optional[Any] = None
    description: Optional[Any] = None


class ExpenseInDB(BaseModel):
    user_id: str
    expense_id: str
    amount: float
    category: str
    description: str
    created_at: str
    updated_at: str

    @classmethod
    def new(cls, user_id: str, amount: float, category: str, description: str,
            created_at: Optional[datetime] = None) -> "ExpenseInDB":
        created_at = created_at or _utcnow()
        stamp = created_at.isoformat()
        return cls(
            user_id=user_id,
            expense_id=new_expense_id(created_at),
            amount=amount,
            category=category.lower(),
            description=description,
            created_at=stamp,
            updated_at=stamp,
        )


class ExpensePublic(BaseModel):
    expense_id: str
    amount: float
    category: str
    description: str
    created_at: str
    updated_at: str


class ExpenseList(BaseModel):
    message: str = "expenses recorded"
    expenses: List[ExpensePublic] = Field(default_factory=list)


class UpdateResult(BaseModel):
    matched_count: int
    modified_count: int
