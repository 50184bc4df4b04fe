"""
AI enrichment of vault items.

- ContentAnalyzer: protocol for the analysis collaborator
- LLMContentAnalyzer: casual-llm backed analyzer
- EnrichmentCoordinator: concurrency-windowed sweep over many items
"""

from mind_vault.enrichment.analyzer import LLMContentAnalyzer, fallback_analysis
from mind_vault.enrichment.coordinator import EnrichmentCoordinator, needs_enrichment
from mind_vault.enrichment.protocol import ContentAnalyzer

__all__ = [
    "ContentAnalyzer",
    "LLMContentAnalyzer",
    "EnrichmentCoordinator",
    "fallback_analysis",
    "needs_enrichment",
]
