"""Heuristic UI baseline — deterministic presentation from analysis counts.

No randomness and no external input: the same analysis always yields the
same configuration.  The baseline is also the per-field fallback used by
the normalizer when an externally supplied configuration is invalid.

Layout selection (first match wins)
───────────────────────────────────
  critical ≥ 3 or high ≥ 5          → dashboard
  opportunities ≥ 3 and issues ≤ 4  → timeline
  distinct stack ≥ 6 or issues ≥ 10 → tabbed
  otherwise                         → linear

Visualizations (appended in this order)
───────────────────────────────────────
  risk-matrix       critical or high issues exist (≤ 8 items)
  tech-debt-chart   6+ issues (all four severity buckets)
  roadmap-timeline  migration opportunities exist, or layout = timeline
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from schemas.domain import CallToAction, RepoAnalysis, UiConfiguration, UiSection, UiVisualization
from schemas.taxonomy import (
    ALL_SEVERITIES,
    DEFAULT_SEVERITY_SCORE,
    MIGRATION_SERVICE,
    RISK_MATRIX_MAX_ITEMS,
    ROADMAP_MAX_ITEMS_PER_PHASE,
    SEVERITY_LABELS,
    SEVERITY_SCORE,
)


# ── Analysis profile ──────────────────────────────────────────────

@dataclass(frozen=True)
class AnalysisProfile:
    """Counts every heuristic in the engine is computed from."""
    critical_count: int
    high_count: int
    issues_count: int
    opp_count: int
    tech_stack_complexity: int
    migration_count: int

    @property
    def locked_risky(self) -> bool:
        return self.critical_count >= 4 or self.high_count >= 6

    @property
    def tiny_project(self) -> bool:
        return (
            self.issues_count <= 2
            and self.opp_count <= 2
            and self.tech_stack_complexity <= 4
        )


def issues_of(analysis: RepoAnalysis) -> list[dict]:
    return [i for i in analysis.get("issues") or [] if isinstance(i, dict)]


def opportunities_of(analysis: RepoAnalysis) -> list[dict]:
    return [o for o in analysis.get("opportunities") or [] if isinstance(o, dict)]


def _tech_stack(analysis: RepoAnalysis) -> list[str]:
    return [str(t) for t in analysis.get("techStack") or []]


def _migration_opportunities(analysis: RepoAnalysis) -> list[dict]:
    return [o for o in opportunities_of(analysis) if o.get("recommendedService") == MIGRATION_SERVICE]


def profile_analysis(analysis: RepoAnalysis) -> AnalysisProfile:
    issues = issues_of(analysis)
    return AnalysisProfile(
        critical_count=sum(1 for i in issues if i.get("severity") == "critical"),
        high_count=sum(1 for i in issues if i.get("severity") == "high"),
        issues_count=len(issues),
        opp_count=len(opportunities_of(analysis)),
        tech_stack_complexity=len(set(_tech_stack(analysis))),
        migration_count=len(_migration_opportunities(analysis)),
    )


def severity_score(severity: str | None) -> int:
    return SEVERITY_SCORE.get(severity or "", DEFAULT_SEVERITY_SCORE)


def seed_summary(analysis: RepoAnalysis) -> str:
    """Analysis summary mixed into the variation seed."""
    return (
        f"{','.join(_tech_stack(analysis))}"
        f"|{len(issues_of(analysis))}|{len(opportunities_of(analysis))}"
    )


# ── Layout / tone ─────────────────────────────────────────────────

def select_layout(profile: AnalysisProfile) -> str:
    if profile.critical_count >= 3 or profile.high_count >= 5:
        return "dashboard"
    if profile.opp_count >= 3 and profile.issues_count <= 4:
        return "timeline"
    if profile.tech_stack_complexity >= 6 or profile.issues_count >= 10:
        return "tabbed"
    return "linear"


def select_emphasis(profile: AnalysisProfile) -> str:
    if profile.critical_count > 0:
        return "critical-issues"
    if profile.opp_count > profile.issues_count:
        return "opportunities"
    return "balanced"


def select_color_scheme(profile: AnalysisProfile, emphasize: str) -> str:
    if profile.critical_count > 0:
        return "red-alert"
    if emphasize == "opportunities":
        return "opportunity-green"
    return "balanced"


# ── Call-to-action copy ───────────────────────────────────────────
URGENT_CRITICAL_MESSAGE = (
    "Critical risks detected — address high-severity issues before shipping new features."
)
URGENT_HIGH_MESSAGE = (
    "High-severity issues detected — prioritize remediation to reduce risk and downtime."
)
EDUCATIONAL_MESSAGE = (
    "Unlock growth with targeted improvements — pick the services that match your roadmap."
)
STANDARD_MESSAGE = (
    "Select recommended services below to turn this proposal into an actionable engagement."
)


def urgent_call_to_action(profile: AnalysisProfile) -> CallToAction:
    message = URGENT_CRITICAL_MESSAGE if profile.critical_count > 0 else URGENT_HIGH_MESSAGE
    return {"type": "urgent", "message": message}


def select_call_to_action(profile: AnalysisProfile, color_scheme: str, emphasize: str) -> CallToAction:
    if color_scheme == "red-alert":
        return urgent_call_to_action(profile)
    if emphasize == "opportunities":
        return {"type": "educational", "message": EDUCATIONAL_MESSAGE}
    return {"type": "standard", "message": STANDARD_MESSAGE}


# ── Sections ──────────────────────────────────────────────────────

def _section(section_id: str, order: int, style: str) -> UiSection:
    return {"id": section_id, "order": order, "style": style}


def default_sections() -> list[UiSection]:
    return [
        _section("executive", 1, "prominent"),
        _section("visualizations", 2, "compact"),
        _section("issues", 3, "cards"),
        _section("opportunities", 4, "list"),
    ]


def dashboard_sections() -> list[UiSection]:
    return [
        _section("metrics", 1, "prominent"),
        _section("visualizations", 2, "compact"),
        _section("issues", 3, "grid"),
        _section("opportunities", 4, "compact"),
    ]


# ── Visualization payloads ────────────────────────────────────────

def risk_matrix_data(analysis: RepoAnalysis) -> dict[str, Any]:
    risky = [i for i in issues_of(analysis) if i.get("severity") in ("critical", "high")]
    return {
        "items": [
            {
                "name": i.get("title", ""),
                "severity": severity_score(i.get("severity")),
                "likelihood": 8 if i.get("severity") == "critical" else 6,
            }
            for i in risky[:RISK_MATRIX_MAX_ITEMS]
        ],
    }


def tech_debt_data(analysis: RepoAnalysis) -> dict[str, Any]:
    counts = {sev: 0 for sev in ALL_SEVERITIES}
    for issue in issues_of(analysis):
        sev = issue.get("severity")
        if sev in counts:
            counts[sev] += 1
    return {
        "items": [
            {"label": SEVERITY_LABELS[sev], "value": counts[sev]}
            for sev in ALL_SEVERITIES
        ],
    }


def roadmap_data(analysis: RepoAnalysis) -> dict[str, Any]:
    issues = issues_of(analysis)
    cap = ROADMAP_MAX_ITEMS_PER_PHASE
    phases = [
        {
            "name": "Quick Wins",
            "duration": "2 weeks",
            "items": [i.get("title", "") for i in issues if i.get("severity") in ("low", "medium")][:cap],
        },
        {
            "name": "Core Improvements",
            "duration": "3–6 weeks",
            "items": [i.get("title", "") for i in issues if i.get("severity") in ("high", "critical")][:cap],
        },
        {
            "name": "Modernization",
            "duration": "6–10 weeks",
            "items": [o.get("title", "") for o in _migration_opportunities(analysis)][:cap],
        },
    ]
    return {"phases": [p for p in phases if p["items"]]}


def build_visualizations(analysis: RepoAnalysis, profile: AnalysisProfile, layout: str) -> list[UiVisualization]:
    visualizations: list[UiVisualization] = []
    if profile.critical_count > 0 or profile.high_count > 0:
        visualizations.append({"type": "risk-matrix", "data": risk_matrix_data(analysis)})
    if profile.issues_count >= 6:
        visualizations.append({"type": "tech-debt-chart", "data": tech_debt_data(analysis)})
    if profile.migration_count > 0 or layout == "timeline":
        visualizations.append({"type": "roadmap-timeline", "data": roadmap_data(analysis)})
    return visualizations


# ── Public entry point ────────────────────────────────────────────

def build_baseline_ui(analysis: RepoAnalysis) -> UiConfiguration:
    """Derive a fully populated configuration from counts alone."""
    profile = profile_analysis(analysis)
    layout = select_layout(profile)
    emphasize = select_emphasis(profile)
    color_scheme = select_color_scheme(profile, emphasize)
    return {
        "layout": layout,
        "emphasize": emphasize,
        "visualizations": build_visualizations(analysis, profile, layout),
        "sections": dashboard_sections() if layout == "dashboard" else default_sections(),
        "colorScheme": color_scheme,
        "callToAction": select_call_to_action(profile, color_scheme, emphasize),
    }
