# schemas/taxonomy.py — Single authoritative vocabulary for proposal presentation.
"""Centralised taxonomy for analyses and UI configurations.

Every value that crosses the engine boundary is drawn from one of the
closed sets below.  The normalizer validates untrusted input against
these tuples and nothing else; no module defines its own allowed-value
list.

Canonical sources defined here:
  - ``Severity``            — critical | high | medium | low
  - ``UiLayout``            — dashboard | linear | tabbed | timeline
  - ``UiEmphasize``         — critical-issues | opportunities | balanced
  - ``UiColorScheme``       — red-alert | balanced | opportunity-green
  - ``UiSectionStyle``      — prominent | compact | grid | list | cards
  - ``UiCtaType``           — urgent | standard | educational
  - ``UiVisualizationType`` — risk-matrix | tech-debt-chart | roadmap-timeline
  - ``SEVERITY_SCORE``      — numeric rank per severity for risk scoring
"""
from __future__ import annotations

from typing import Literal, get_args


# ══════════════════════════════════════════════════════════════════
# Analysis vocabulary
# ══════════════════════════════════════════════════════════════════

Severity = Literal["critical", "high", "medium", "low"]

ALL_SEVERITIES: tuple[str, ...] = get_args(Severity)

# Fixed ordering critical > high > medium > low.
SEVERITY_SCORE: dict[str, int] = {
    "critical": 10,
    "high": 8,
    "medium": 5,
    "low": 2,
}

# Unknown severities score as medium.
DEFAULT_SEVERITY_SCORE = 5

assert set(SEVERITY_SCORE) == set(ALL_SEVERITIES), \
    f"SEVERITY_SCORE missing: {set(ALL_SEVERITIES) - set(SEVERITY_SCORE)}"

# Display label per severity bucket (tech-debt chart order).
SEVERITY_LABELS: dict[str, str] = {
    "critical": "Critical",
    "high": "High",
    "medium": "Medium",
    "low": "Low",
}

# Service id that marks an opportunity as a modernization candidate.
MIGRATION_SERVICE = "tech-stack-migration"


# ══════════════════════════════════════════════════════════════════
# UI configuration vocabulary
# ══════════════════════════════════════════════════════════════════

UiLayout = Literal["dashboard", "linear", "tabbed", "timeline"]

ALL_LAYOUTS: tuple[str, ...] = get_args(UiLayout)

UiEmphasize = Literal["critical-issues", "opportunities", "balanced"]

ALL_EMPHASES: tuple[str, ...] = get_args(UiEmphasize)

UiColorScheme = Literal["red-alert", "balanced", "opportunity-green"]

ALL_COLOR_SCHEMES: tuple[str, ...] = get_args(UiColorScheme)

UiSectionStyle = Literal["prominent", "compact", "grid", "list", "cards"]

ALL_SECTION_STYLES: tuple[str, ...] = get_args(UiSectionStyle)

UiCtaType = Literal["urgent", "standard", "educational"]

ALL_CTA_TYPES: tuple[str, ...] = get_args(UiCtaType)

UiVisualizationType = Literal["risk-matrix", "tech-debt-chart", "roadmap-timeline"]

ALL_VISUALIZATION_TYPES: tuple[str, ...] = get_args(UiVisualizationType)

# Logical blocks the renderer knows how to place.
KNOWN_SECTION_IDS: tuple[str, ...] = (
    "executive",
    "metrics",
    "issues",
    "opportunities",
    "visualizations",
    "services",
)


# ── Guardrail sets ────────────────────────────────────────────────
# High-risk projects may only use layouts that keep risk on screen.
RISKY_LAYOUTS: tuple[str, ...] = ("dashboard", "tabbed")

# Small projects read best with a single column or a roadmap.
TINY_LAYOUTS: tuple[str, ...] = ("linear", "timeline")

assert set(RISKY_LAYOUTS) <= set(ALL_LAYOUTS)
assert set(TINY_LAYOUTS) <= set(ALL_LAYOUTS)


# ── Payload bounds ────────────────────────────────────────────────
RISK_MATRIX_MAX_ITEMS = 8
ROADMAP_MAX_PHASES = 3
ROADMAP_MAX_ITEMS_PER_PHASE = 4
MAX_RETAINED_VISUALIZATIONS = 2
