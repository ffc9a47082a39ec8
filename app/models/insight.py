import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict
from uuid import uuid4

from pydantic import BaseModel, Field


class InsightType(str, Enum):
    STATISTICS = "statistics"
    AI_ANALYSIS = "ai_analysis"


class InsightInDB(BaseModel):
    """A generated insight. `data` is an opaque JSON document whose shape depends on `type`."""

    insight_id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str
    type: InsightType
    data: str
    generated_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @classmethod
    def from_payload(cls, user_id: str, insight_type: InsightType, payload: Dict[str, Any]) -> "InsightInDB":
        return cls(user_id=user_id, type=insight_type, data=json.dumps(payload, default=str))

    def payload(self) -> Dict[str, Any]:
        return json.loads(self.data)
