import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Body, Depends, status

from app.core.deps import get_current_user_id, get_expense_store
from app.core.errors import ValidationError
from app.core.validation import validate_expense
from app.db.dynamo import ExpenseStore
from app.models.expense import ExpenseInDB, ExpenseList, ExpensePayload, ExpensePublic

router = APIRouter()
logger = logging.getLogger(__name__)


def _validated(payload: ExpensePayload) -> ExpensePayload:
    result = validate_expense(payload.model_dump())
    if not result.ok:
        raise ValidationError(result.message)
    return payload


@router.get("/", response_model=ExpenseList)
def list_expenses(user_id: str = Depends(get_current_user_id), expenses: ExpenseStore = Depends(get_expense_store)):
    items = expenses.list_for_user(user_id)
    return ExpenseList(expenses=[ExpensePublic(**item) for item in items])


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_expense(
    payload: Optional[ExpensePayload] = Body(None),
    user_id: str = Depends(get_current_user_id),
    expenses: ExpenseStore = Depends(get_expense_store),
):
    payload = payload or ExpensePayload()
    if payload.amount is None or not payload.category or not payload.description:
        raise ValidationError("Amount, category, and description are required")
    _validated(payload)

    expense_db = ExpenseInDB.new(
        user_id=user_id,
        amount=float(payload.amount),
        category=payload.category,
        description=payload.description,
    )
    expenses.put(expense_db)
    logger.info(f"Expense {expense_db.expense_id} added for user {user_id}")
    return {"message": "expense added", "expense": ExpensePublic(**expense_db.model_dump())}


@router.put("/{expense_id}", status_code=status.HTTP_203_NON_AUTHORITATIVE_INFORMATION)
def update_expense(
    expense_id: str,
    payload: Optional[ExpensePayload] = Body(None),
    user_id: str = Depends(get_current_user_id),
    expenses: ExpenseStore = Depends(get_expense_store),
):
    payload = _validated(payload or ExpensePayload())
    result = expenses.update(
        user_id,
        expense_id,
        amount=float(payload.amount),
        category=payload.category.lower(),
        description=payload.description,
        updated_at=datetime.now(timezone.utc).isoformat(),
    )
    if not result.matched_count:
        logger.info(f"Update of expense {expense_id} by user {user_id} matched nothing")
    return {"message": "expense changed", "expense": result}


@router.delete("/{expense_id}")
def delete_expense(
    expense_id: str,
    user_id: str = Depends(get_current_user_id),
    expenses: ExpenseStore = Depends(get_expense_store),
):
    expenses.delete(user_id, expense_id)
    return {"message": "expense deleted"}
