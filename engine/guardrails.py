"""Presentation guardrails — a dangerous project is never rendered as harmless.

Two halves:

  1. ``apply_guardrails`` clamps a configuration so that a high-risk
     analysis keeps an alarming presentation.  It runs after the
     variation layer on every generation, including intensity 0.
  2. ``validate_ui_guardrails`` / ``validate_visualization_bounds``
     report violations as strings.  Empty list = all checks pass.
     The test suite uses these as properties over many seeds.

High risk (``locked_risky``): critical ≥ 4 or high ≥ 6.
  colorScheme  → red-alert
  emphasize    → critical-issues
  layout       → dashboard | tabbed   (linear/timeline minimise risk)
  callToAction → urgent

Any critical issue at all: colorScheme → red-alert.
"""
from __future__ import annotations

from typing import Any

from engine.ui_baseline import AnalysisProfile, profile_analysis, urgent_call_to_action
from schemas.domain import CallToAction, RepoAnalysis, UiConfiguration
from schemas.taxonomy import (
    ALL_LAYOUTS,
    ROADMAP_MAX_ITEMS_PER_PHASE,
    ROADMAP_MAX_PHASES,
    RISK_MATRIX_MAX_ITEMS,
    RISKY_LAYOUTS,
    SEVERITY_LABELS,
    TINY_LAYOUTS,
)


# ── Layout sets ───────────────────────────────────────────────────

def allowed_layouts(profile: AnalysisProfile) -> tuple[str, ...]:
    """Layouts the variation layer may choose for this profile."""
    if profile.locked_risky:
        return RISKY_LAYOUTS
    if profile.tiny_project:
        return TINY_LAYOUTS
    return ALL_LAYOUTS


def clamp_layout(layout: str, allowed: tuple[str, ...]) -> str:
    return layout if layout in allowed else allowed[0]


def risk_call_to_action(current: CallToAction | None, profile: AnalysisProfile) -> CallToAction:
    """Urgent CTA for a high-risk project; keeps an existing urgent message."""
    if current and current.get("type") == "urgent" and str(current.get("message", "")).strip():
        return {"type": "urgent", "message": current["message"]}
    return urgent_call_to_action(profile)


# ── Filter ────────────────────────────────────────────────────────

def apply_guardrails(ui: UiConfiguration, analysis: RepoAnalysis) -> UiConfiguration:
    """Return *ui* clamped to the high-risk presentation when required."""
    profile = profile_analysis(analysis)
    if not profile.locked_risky:
        if profile.critical_count > 0 and ui.get("colorScheme") != "red-alert":
            return {**ui, "colorScheme": "red-alert"}
        return ui
    return {
        **ui,
        "layout": clamp_layout(ui["layout"], RISKY_LAYOUTS),
        "emphasize": "critical-issues",
        "colorScheme": "red-alert",
        "callToAction": risk_call_to_action(ui.get("callToAction"), profile),
    }


# ── Validators ────────────────────────────────────────────────────

def validate_ui_guardrails(ui: UiConfiguration, analysis: RepoAnalysis) -> list[str]:
    """Flag risk-minimising presentation of a risky or critical analysis."""
    violations: list[str] = []
    profile = profile_analysis(analysis)
    if profile.critical_count > 0 and ui.get("colorScheme") != "red-alert":
        violations.append(
            f"colorScheme '{ui.get('colorScheme')}' with critical issues "
            f"(critical={profile.critical_count}, high={profile.high_count}) — must be 'red-alert'."
        )
    if not profile.locked_risky:
        return violations
    if ui.get("layout") not in RISKY_LAYOUTS:
        violations.append(
            f"layout '{ui.get('layout')}' hides risk on a high-risk analysis — "
            f"must be one of {', '.join(RISKY_LAYOUTS)}."
        )
    if ui.get("emphasize") != "critical-issues":
        violations.append(
            f"emphasize '{ui.get('emphasize')}' on a high-risk analysis — must be 'critical-issues'."
        )
    cta = ui.get("callToAction") or {}
    if cta.get("type") != "urgent":
        violations.append(
            f"callToAction.type '{cta.get('type')}' on a high-risk analysis — must be 'urgent'."
        )
    return violations


def _items(data: Any, key: str) -> list:
    if not isinstance(data, dict):
        return []
    value = data.get(key)
    return value if isinstance(value, list) else []


def validate_visualization_bounds(ui: UiConfiguration) -> list[str]:
    """Flag chart payloads that exceed the renderer's size contract."""
    violations: list[str] = []
    for idx, vis in enumerate(ui.get("visualizations", [])):
        label = f"visualizations[{idx}]({vis.get('type')})"
        data = vis.get("data")
        if vis.get("type") == "risk-matrix":
            if len(_items(data, "items")) > RISK_MATRIX_MAX_ITEMS:
                violations.append(f"{label}: more than {RISK_MATRIX_MAX_ITEMS} items.")
        elif vis.get("type") == "roadmap-timeline":
            phases = _items(data, "phases")
            if len(phases) > ROADMAP_MAX_PHASES:
                violations.append(f"{label}: more than {ROADMAP_MAX_PHASES} phases.")
            for p_idx, phase in enumerate(phases):
                if len(_items(phase, "items")) > ROADMAP_MAX_ITEMS_PER_PHASE:
                    violations.append(
                        f"{label}.phases[{p_idx}]: more than {ROADMAP_MAX_ITEMS_PER_PHASE} items."
                    )
        elif vis.get("type") == "tech-debt-chart":
            buckets = _items(data, "items")
            labels = [b.get("label") for b in buckets if isinstance(b, dict)]
            if labels != list(SEVERITY_LABELS.values()):
                violations.append(f"{label}: buckets must be exactly {', '.join(SEVERITY_LABELS.values())}.")
            for b in buckets:
                value = b.get("value") if isinstance(b, dict) else None
                if not isinstance(value, (int, float)) or value < 0:
                    violations.append(f"{label}: bucket value {value!r} is not a non-negative number.")
    return violations
