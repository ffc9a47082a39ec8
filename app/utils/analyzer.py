from __future__ import annotations

import calendar
from collections import defaultdict
from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app.core.errors import NotFound


def parse_timestamp(value: Any) -> datetime:
    """Parse a stored ISO-8601 timestamp; naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _amount(expense: Dict[str, Any]) -> float:
    return float(expense.get("amount") or 0)


@dataclass
class ExpenseStatistics:
    """Spending summary returned by `GET /insights/statistics`."""

    monthly_total_spending: float = 0.0
    category_spending: Dict[str, float] = field(default_factory=dict)
    monthly_spending: Dict[str, float] = field(default_factory=dict)
    highest_expense: Optional[Dict[str, Any]] = None
    lowest_expense: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AnalysisData:
    """Aggregation handed to the narrator for `GET /insights/ai-analysis`."""

    total: float
    category_percentages: Dict[str, float]
    monthly_totals: Dict[str, float]
    timespan_start: datetime
    timespan_end: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "category_percentages": self.category_percentages,
            "monthly_totals": self.monthly_totals,
            "timespan": {
                "start": self.timespan_start.isoformat(),
                "end": self.timespan_end.isoformat(),
            },
        }


class ExpenseAnalyzer:
    """
    Deterministic aggregations over a user's expense records.

    Records are plain dicts as they come out of the expense store, with
    at least `amount`, `category` and `created_at`.
    """

    def __init__(self, analysis_limit: int = 100) -> None:
        self._analysis_limit = analysis_limit

    def current_month_total(self, expenses: List[Dict[str, Any]], now: Optional[datetime] = None) -> float:
        now = now or datetime.now(timezone.utc)
        total = 0.0
        for exp in expenses:
            created = parse_timestamp(exp["created_at"])
            if created.month == now.month and created.year == now.year:
                total += _amount(exp)
        return total

    def category_totals(self, expenses: List[Dict[str, Any]]) -> Dict[str, float]:
        totals: Dict[str, float] = defaultdict(float)
        for exp in expenses:
            totals[exp.get("category") or "uncategorized"] += _amount(exp)
        return dict(totals)

    def month_totals(self, expenses: List[Dict[str, Any]], with_year: bool = False) -> Dict[str, float]:
        """Totals keyed by month name ("January"), or "January 2024" when `with_year` is set."""
        totals: Dict[str, float] = defaultdict(float)
        for exp in expenses:
            created = parse_timestamp(exp["created_at"])
            key = calendar.month_name[created.month]
            if with_year:
                key = f"{key} {created.year}"
            totals[key] += _amount(exp)
        return dict(totals)

    def extremes(self, expenses: List[Dict[str, Any]]):
        """Highest (first on ties) and lowest (last on ties) expense, in input order."""
        highest = lowest = None
        for exp in expenses:
            amount = _amount(exp)
            if highest is None or amount > _amount(highest):
                highest = exp
            if lowest is None or amount <= _amount(lowest):
                lowest = exp
        return highest, lowest

    def statistics(self, expenses: List[Dict[str, Any]], now: Optional[datetime] = None) -> ExpenseStatistics:
        if not expenses:
            return ExpenseStatistics()

        highest, lowest = self.extremes(expenses)
        return ExpenseStatistics(
            monthly_total_spending=self.current_month_total(expenses, now),
            category_spending=self.category_totals(expenses),
            monthly_spending=self.month_totals(expenses),
            highest_expense=highest,
            lowest_expense=lowest,
        )

    def most_recent(self, expenses: List[Dict[str, Any]], limit: Optional[int] = None) -> List[Dict[str, Any]]:
        limit = self._analysis_limit if limit is None else limit
        ordered = sorted(expenses, key=lambda exp: parse_timestamp(exp["created_at"]), reverse=True)
        return ordered[:limit]

    def ai_analysis(self, expenses: List[Dict[str, Any]], limit: Optional[int] = None) -> AnalysisData:
        selected = self.most_recent(expenses, limit)
        if not selected:
            raise NotFound("No expenses found")

        category_totals = self.category_totals(selected)
        total = sum(category_totals.values())
        percentages = {
            category: round(amount / total * 100, 1) if total else 0.0
            for category, amount in category_totals.items()
        }
        return AnalysisData(
            total=total,
            category_percentages=percentages,
            monthly_totals=self.month_totals(selected, with_year=True),
            timespan_start=parse_timestamp(selected[-1]["created_at"]),
            timespan_end=parse_timestamp(selected[0]["created_at"]),
        )
