"""Core domain types — shared contracts used across the proposal system.

These are the canonical shapes that cross layer boundaries: the LLM
analysis step produces an ``RepoAnalysis``, the UI configuration engine
turns it into a ``UiConfiguration``, and the proposal workflow stores
both inside a ``Proposal`` record.

Keys use the camelCase spelling of the stored JSON documents so that a
record round-trips through the store and the renderer without renaming.
"""
from __future__ import annotations

from typing import Any, Dict, List, TypedDict

from schemas.taxonomy import (
    Severity,
    UiColorScheme,
    UiCtaType,
    UiEmphasize,
    UiLayout,
    UiSectionStyle,
    UiVisualizationType,
)


# ── Analysis — produced upstream of the engine ────────────────────
class Issue(TypedDict):
    """A single finding detected in the repository."""
    id: str
    title: str
    severity: Severity
    description: str
    impact: str
    recommendedService: str


class Opportunity(TypedDict):
    """An improvement the consultant can sell."""
    title: str
    description: str
    recommendedService: str


class RepoAnalysis(TypedDict):
    """Tech stack, issues and opportunities for one project.  Read-only."""
    techStack: List[str]
    issues: List[Issue]
    opportunities: List[Opportunity]


# ── UI configuration — the engine's sole output ───────────────────
class UiVisualization(TypedDict):
    """Typed chart descriptor; ``data`` is scoped to the chart type."""
    type: UiVisualizationType
    data: Dict[str, Any]


class UiSection(TypedDict):
    id: str
    order: float
    style: UiSectionStyle


class CallToAction(TypedDict):
    type: UiCtaType
    message: str


class UiConfiguration(TypedDict):
    """Complete, validated description of how a proposal is laid out."""
    layout: UiLayout
    emphasize: UiEmphasize
    visualizations: List[UiVisualization]
    sections: List[UiSection]
    colorScheme: UiColorScheme
    callToAction: CallToAction


# ── Proposal record ───────────────────────────────────────────────
class ProposalService(TypedDict):
    id: str
    name: str
    description: str
    price: int
    timeline: str
    included: List[str]


class Proposal(TypedDict):
    """Persisted proposal.  ``uiConfiguration`` is fixed at creation."""
    id: str
    clientName: str
    repoUrl: str
    analysis: RepoAnalysis
    uiConfiguration: UiConfiguration
    services: List[ProposalService]
    generatedAt: str
