"""
Narration of expense analyses through a text-generation model.

The narrator only depends on the `TextGenerator` protocol (prompt in,
text out, may raise), so tests and alternative providers can stand in for
Gemini without touching the routers.
"""
import logging
from typing import Optional, Protocol

import google.generativeai as genai
from google.generativeai.types import HarmBlockThreshold, HarmCategory

from app.core.config import Settings
from app.core.errors import UpstreamError
from app.utils.analyzer import AnalysisData

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    async def generate(self, prompt: str) -> str:
        ...


class GeminiTextGenerator:
    """Gemini-backed generator. One instance is shared across requests."""

    def __init__(self, api_key: Optional[str], model_name: str):
        if api_key:
            genai.configure(api_key=api_key)
        self._model = genai.GenerativeModel(
            model_name=model_name,
            safety_settings={
                HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_NONE,
                HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_NONE,
                HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_NONE,
                HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_NONE,
            },
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiTextGenerator":
        return cls(api_key=settings.GEMINI_API_KEY, model_name=settings.GEMINI_MODEL_NAME)

    async def generate(self, prompt: str) -> str:
        chat = self._model.start_chat(history=[])
        response = await chat.send_message_async(prompt)
        return response.text


def _format_amount(amount: float) -> str:
    return f"{amount:.0f}" if float(amount).is_integer() else f"{amount:.2f}"


def build_analysis_prompt(data: AnalysisData) -> str:
    categories = "\n".join(
        f"- {category}: {percentage:.1f}%" for category, percentage in data.category_percentages.items()
    )
    months = "\n".join(
        f"- {month}: ₹{_format_amount(amount)}" for month, amount in data.monthly_totals.items()
    )
    return f"""As a financial advisor, analyze this expense data and provide detailed insights:

Total Spending: ₹{_format_amount(data.total)}
Time Period: {data.timespan_start.date().isoformat()} to {data.timespan_end.date().isoformat()}

Category Breakdown (% of total):
{categories}

Monthly Spending:
{months}

Please provide:
1. Key Observations:
   - Identify the main spending categories
   - Note any unusual patterns or spikes
   - Compare monthly variations

2. Budget Optimization:
   - Suggest specific areas to reduce spending
   - Recommend realistic saving targets
   - Propose category-wise budget allocations

3. Risk Analysis:
   - Highlight potential overspending categories
   - Identify unsustainable patterns
   - Note any concerning trends

4. Positive Habits:
   - Recognize good financial decisions
   - Point out well-managed categories
   - Suggest habits to maintain

5. Action Items:
   - List 3-4 specific, actionable steps
   - Prioritize immediate changes
   - Suggest long-term strategies

Please format the response in clear sections with bullet points where appropriate."""


class ExpenseNarrator:
    def __init__(self, generator: TextGenerator):
        self._generator = generator

    async def narrate(self, data: AnalysisData) -> str:
        prompt = build_analysis_prompt(data)
        try:
            return await self._generator.generate(prompt)
        except Exception as e:
            logger.error(f"AI generation failed: {str(e)}", exc_info=True)
            raise UpstreamError(detail=str(e)) from e
