from typing import Optional

from fastapi import Depends, Header, Request

from app.core.config import settings
from app.core.security import verify_token
from app.db.dynamo import ExpenseStore, UserStore
from app.utils.analyzer import ExpenseAnalyzer
from app.utils.narrator import ExpenseNarrator, TextGenerator


def get_current_user_id(
    token: Optional[str] = Header(None),
    authorization: Optional[str] = Header(None),
) -> str:
    """Resolve the caller from the `token` header, falling back to `Authorization: Bearer`."""
    if not token and authorization and authorization.startswith("Bearer "):
        token = authorization[len("Bearer "):]
    return verify_token(token)


def get_user_store(request: Request) -> UserStore:
    return UserStore(request.app.state.db.users_table)


def get_expense_store(request: Request) -> ExpenseStore:
    return ExpenseStore(request.app.state.db.expenses_table)


def get_analyzer() -> ExpenseAnalyzer:
    return ExpenseAnalyzer(analysis_limit=settings.AI_ANALYSIS_LIMIT)


def get_text_generator(request: Request) -> TextGenerator:
    return request.app.state.text_generator


def get_narrator(generator: TextGenerator = Depends(get_text_generator)) -> ExpenseNarrator:
    return ExpenseNarrator(generator)
