import logging

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.deps import get_analyzer, get_current_user_id, get_expense_store, get_narrator
from app.core.errors import NotFound
from app.db.dynamo import ExpenseStore
from app.utils.analyzer import ExpenseAnalyzer
from app.utils.narrator import ExpenseNarrator

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/statistics")
def expense_statistics(
    user_id: str = Depends(get_current_user_id),
    expenses: ExpenseStore = Depends(get_expense_store),
    analyzer: ExpenseAnalyzer = Depends(get_analyzer),
):
    items = expenses.list_for_user(user_id)
    if not items:
        raise NotFound("No expenses found")
    return analyzer.statistics(items).to_dict()


@router.get("/ai-analysis")
async def ai_analysis(
    user_id: str = Depends(get_current_user_id),
    expenses: ExpenseStore = Depends(get_expense_store),
    analyzer: ExpenseAnalyzer = Depends(get_analyzer),
    narrator: ExpenseNarrator = Depends(get_narrator),
):
    items = await run_in_threadpool(expenses.recent_for_user, user_id, settings.AI_ANALYSIS_LIMIT)
    data = analyzer.ai_analysis(items)
    logger.info(f"Narrating {len(items)} expenses for user {user_id}")
    insights = await narrator.narrate(data)
    return {"insights": insights, "expense_data": data.to_dict()}
