import asyncio
from datetime import datetime, timezone

import pytest

from conftest import FakeTextGenerator
from app.core.errors import UpstreamError
from app.utils.analyzer import AnalysisData
from app.utils.narrator import ExpenseNarrator, build_analysis_prompt

DATA = AnalysisData(
    total=350.0,
    category_percentages={"food": 42.9, "travel": 57.1},
    monthly_totals={"January 2024": 300.0, "February 2024": 50.5},
    timespan_start=datetime(2024, 1, 10, tzinfo=timezone.utc),
    timespan_end=datetime(2024, 2, 3, tzinfo=timezone.utc),
)


def test_prompt_embeds_aggregation():
    prompt = build_analysis_prompt(DATA)
    assert "Total Spending: ₹350" in prompt
    assert "Time Period: 2024-01-10 to 2024-02-03" in prompt
    assert "- food: 42.9%" in prompt
    assert "- February 2024: ₹50.50" in prompt
    assert "5. Action Items:" in prompt


def test_narrate_returns_generated_text_verbatim():
    generator = FakeTextGenerator(text="  Spend less on travel.\n")
    text = asyncio.run(ExpenseNarrator(generator).narrate(DATA))
    assert text == "  Spend less on travel.\n"
    assert generator.prompts == [build_analysis_prompt(DATA)]


def test_narrate_wraps_generator_failures():
    generator = FakeTextGenerator(error=ConnectionError("unreachable"))
    with pytest.raises(UpstreamError) as exc:
        asyncio.run(ExpenseNarrator(generator).narrate(DATA))
    assert exc.value.detail == "unreachable"
