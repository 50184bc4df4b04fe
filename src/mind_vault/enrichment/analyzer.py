"""
LLM-based content analysis.

Asks an LLM for a title, summary, tags and item type, and provides the
heuristic fallback used when analysis is unavailable.
"""

import json
import logging
from typing import Optional

from casual_llm import LLMProvider, SystemMessage, UserMessage
from pydantic import ValidationError

from mind_vault.config import UNCATEGORIZED, UNTITLED
from mind_vault.enrichment.prompts import CONTENT_ANALYSIS_SYSTEM_PROMPT, CONTENT_PROMPT
from mind_vault.errors import AnalysisFailure
from mind_vault.models import AnalysisResult

logger = logging.getLogger(__name__)

FALLBACK_SUMMARY = "AI analysis failed, please edit this item manually."


def fallback_analysis(content: str) -> AnalysisResult:
    """Heuristic analysis used when the analyzer fails on a new item."""
    return AnalysisResult(
        title=UNTITLED,
        summary=FALLBACK_SUMMARY,
        tags=[UNCATEGORIZED],
        type="link" if content.startswith("http") else "note",
    )


class LLMContentAnalyzer:
    """
    Content analyzer backed by a casual-llm provider.

    Every failure (provider error, invalid JSON, schema mismatch) is raised
    as AnalysisFailure.
    """

    def __init__(
        self,
        llm_provider: LLMProvider,
        model_name: str,
        system_prompt: Optional[str] = None,
        max_content_chars: int = 5000,
    ):
        """
        Initialize the content analyzer.

        Args:
            llm_provider: LLM provider instance
            model_name: Name of the model (for logging)
            system_prompt: Optional custom system prompt
            max_content_chars: Content is truncated to this many characters
        """
        self.llm_provider = llm_provider
        self.model_name = model_name
        self.system_prompt = system_prompt or CONTENT_ANALYSIS_SYSTEM_PROMPT
        self.max_content_chars = max_content_chars
        self.llm_call_count = 0
        self.llm_success_count = 0
        self.llm_failure_count = 0

        logger.info(
            f"LLMContentAnalyzer initialized: model={model_name}, "
            f"custom_prompt={system_prompt is not None}"
        )

    async def _call_llm(self, prompt: str):
        self.llm_call_count += 1
        try:
            messages = [SystemMessage(content=self.system_prompt), UserMessage(content=prompt)]
            response = await self.llm_provider.chat(
                messages,
                response_format="json",
                temperature=0.2,
            )
            self.llm_success_count += 1
            return response
        except Exception:
            self.llm_failure_count += 1
            raise

    async def analyze(self, content: str) -> AnalysisResult:
        """
        Analyse content with the LLM.

        Raises:
            AnalysisFailure: If the call fails or the response is unusable
        """
        prompt = CONTENT_PROMPT.format(content=content[: self.max_content_chars])

        try:
            response = await self._call_llm(prompt)
        except Exception as e:
            logger.warning(f"Content analysis call failed: {e}")
            raise AnalysisFailure(f"Analysis call failed: {e}", content=content) from e

        if not response.content:
            raise AnalysisFailure("Empty response from analysis model", content=content)

        try:
            result = AnalysisResult.model_validate(json.loads(response.content))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Failed to parse content analysis response: {e}")
            raise AnalysisFailure(f"Unusable analysis response: {e}", content=content) from e

        logger.debug(f"Analysed content: title={result.title!r}, tags={result.tags}")
        return result

    def get_metrics(self) -> dict:
        metrics = {
            "content_analyzer_llm_call_count": self.llm_call_count,
            "content_analyzer_llm_success_count": self.llm_success_count,
            "content_analyzer_llm_failure_count": self.llm_failure_count,
        }

        if self.llm_call_count > 0:
            success_rate = (self.llm_success_count / self.llm_call_count) * 100
            metrics["content_analyzer_llm_success_rate_percent"] = round(success_rate, 2)

        return metrics
