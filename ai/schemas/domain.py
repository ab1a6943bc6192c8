"""AI-layer domain types — repository context in, analysis result out.

Follows the project convention (TypedDict, not Pydantic) so they compose
cleanly with the existing schemas/domain.py contracts.
"""
from __future__ import annotations

from typing import Any, List, Optional, TypedDict

from schemas.domain import RepoAnalysis


# ── Repository context fed to the analysis prompt ────────────────
class RepoData(TypedDict, total=False):
    repoName: str
    readme: str
    dependencies: List[str]
    techStack: List[str]
    url: str


# ── Analysis pass output ──────────────────────────────────────────
class AnalysisResult(TypedDict):
    """Coerced analysis plus the model's raw UI suggestion.

    ``uiCandidate`` is untrusted: it goes through the UI configuration
    normalizer before anything renders it.  None when the model gave no
    suggestion or the mock analysis was used.
    """
    analysis: RepoAnalysis
    uiCandidate: Optional[Any]
    source: str          # "llm" | "mock"
