"""
Content analysis protocol.
"""

from typing import Protocol

from typing_extensions import runtime_checkable

from mind_vault.models import AnalysisResult


@runtime_checkable
class ContentAnalyzer(Protocol):
    """
    Protocol for content-analysis collaborators.

    Implementations may raise any exception; the pipeline converts failures
    into pass-through or fallback results and never lets them abort a sweep.
    """

    async def analyze(self, content: str) -> AnalysisResult:
        """
        Analyse a URL or a piece of text.

        Args:
            content: Item content to analyse

        Returns:
            Suggested title, summary, tags and type
        """
        ...
