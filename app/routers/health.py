"""
Health Check Router
Service status plus DynamoDB table reachability
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from app.core.config import settings

router = APIRouter()


@router.get("/health")
def health_check(request: Request):
    db = getattr(request.app.state, "db", None)
    tables = db.table_status() if db is not None else {}
    all_accessible = bool(tables) and all(table["status"] == "accessible" for table in tables.values())
    return {
        "status": "healthy" if all_accessible else "degraded",
        "service": settings.PROJECT_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "dynamodb": {"region": settings.DYNAMO_REGION, "tables": tables},
    }
