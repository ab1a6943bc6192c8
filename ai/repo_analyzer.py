"""Repository analysis pass — prompt the model, coerce the reply, fall back to mock.

The model's answer is never trusted as-is.  Issues and opportunities are
coerced into the canonical shapes with defaults for missing fields, and
the model's ``uiConfiguration`` is handed back untouched as an untrusted
candidate for the UI configuration engine to normalize.

Usage:
    result = analyze_repository(repo_data)                      # env-configured
    result = analyze_repository(repo_data, MockReasoningProvider(default={...}))
"""
from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any

from ai.engine.reasoning_provider import AOAIReasoningProvider, ReasoningProvider
from ai.prompts import PromptPack
from ai.schemas.domain import AnalysisResult, RepoData
from engine.proposal_builder import DEMO_ANALYSIS
from engine.services import DEFAULT_SERVICE_ID, SERVICES
from schemas.domain import Issue, Opportunity, RepoAnalysis
from schemas.taxonomy import ALL_SEVERITIES

log = logging.getLogger(__name__)

DEFAULT_SEVERITY = "medium"


def mock_analysis() -> RepoAnalysis:
    """Static analysis served when no model is configured or the call fails."""
    analysis = copy.deepcopy(DEMO_ANALYSIS)
    analysis["issues"] = [i for i in analysis["issues"] if i["severity"] != "low"]
    return analysis


def default_provider() -> ReasoningProvider | None:
    """Azure OpenAI provider from the environment, or None when unconfigured."""
    try:
        return AOAIReasoningProvider()
    except EnvironmentError as exc:
        log.info("LLM provider unavailable (%s); using mock analysis", exc)
        return None


# ── Coercion ──────────────────────────────────────────────────────

def _text(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return default


def coerce_issue(raw: Mapping, index: int) -> Issue:
    severity = raw.get("severity")
    if severity not in ALL_SEVERITIES:
        severity = DEFAULT_SEVERITY
    return {
        "id": _text(raw.get("id"), f"issue-{index + 1}"),
        "title": _text(raw.get("title"), "Untitled Issue"),
        "severity": severity,
        "description": _text(raw.get("description"), "No description provided"),
        "impact": _text(raw.get("impact"), "Unknown impact"),
        "recommendedService": _text(raw.get("recommendedService"), DEFAULT_SERVICE_ID),
    }


def coerce_opportunity(raw: Mapping) -> Opportunity:
    return {
        "title": _text(raw.get("title"), "Untitled Opportunity"),
        "description": _text(raw.get("description"), "No description provided"),
        "recommendedService": _text(raw.get("recommendedService"), DEFAULT_SERVICE_ID),
    }


def coerce_analysis(raw: Mapping, repo_data: RepoData) -> RepoAnalysis:
    """Canonical RepoAnalysis from a model reply.  Non-object list entries are dropped."""
    tech_stack = raw.get("techStack")
    if not isinstance(tech_stack, list):
        tech_stack = list(repo_data.get("techStack") or [])
    tech_stack = [t for t in tech_stack if isinstance(t, str) and t.strip()]

    raw_issues = raw.get("issues")
    raw_opps = raw.get("opportunities")
    issues_in = raw_issues if isinstance(raw_issues, list) else []
    opps_in = raw_opps if isinstance(raw_opps, list) else []

    dropped = sum(1 for x in issues_in + opps_in if not isinstance(x, Mapping))
    if dropped:
        log.warning("Dropped %d malformed issue/opportunity entries", dropped)

    return {
        "techStack": tech_stack,
        "issues": [coerce_issue(x, i) for i, x in enumerate(issues_in) if isinstance(x, Mapping)],
        "opportunities": [coerce_opportunity(x) for x in opps_in if isinstance(x, Mapping)],
    }


# ── Analysis pass ─────────────────────────────────────────────────

def analyze_repository(
    repo_data: RepoData,
    provider: ReasoningProvider | None = None,
    prompts: PromptPack | None = None,
    *,
    use_env_provider: bool = True,
) -> AnalysisResult:
    """Run the analysis prompt and return coerced analysis + raw UI candidate.

    Any provider failure degrades to the mock analysis with no candidate;
    this function only raises for programming errors in the prompt pack.
    """
    if provider is None and use_env_provider:
        provider = default_provider()
    if provider is None:
        return {"analysis": mock_analysis(), "uiCandidate": None, "source": "mock"}

    prompts = prompts or PromptPack()
    template = (
        prompts.system
        + "\n---SYSTEM---\n"
        + prompts.analysis(repo_data, list(SERVICES))
    )

    try:
        raw = provider.complete(template, dict(repo_data))
    except Exception as exc:
        log.warning("Analysis call failed for %s: %s; falling back to mock analysis",
                    repo_data.get("repoName", "?"), exc)
        return {"analysis": mock_analysis(), "uiCandidate": None, "source": "mock"}

    if not isinstance(raw, Mapping):
        log.warning("Analysis reply is %s, not an object; falling back to mock analysis",
                    type(raw).__name__)
        return {"analysis": mock_analysis(), "uiCandidate": None, "source": "mock"}

    analysis = coerce_analysis(raw, repo_data)
    log.info(
        "Analysis parsed: techStack=%d issues=%d opportunities=%d",
        len(analysis["techStack"]),
        len(analysis["issues"]),
        len(analysis["opportunities"]),
    )
    return {"analysis": analysis, "uiCandidate": raw.get("uiConfiguration"), "source": "llm"}
