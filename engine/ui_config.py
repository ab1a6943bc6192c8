"""UI configuration pipeline — baseline → normalize → vary → guardrails.

This is the only entry point the proposal workflow calls.  The whole
pipeline is a pure function of (candidate, analysis, seed): no I/O, no
shared state, safe to run concurrently for different proposals.

  candidate given   → normalized over baseline, varied at 0.28
  candidate absent  → baseline only,            varied at 0.55
"""
from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from engine.guardrails import apply_guardrails
from engine.ui_baseline import build_baseline_ui
from engine.ui_normalizer import normalize_ui_configuration
from engine.ui_variation import apply_ui_variation
from schemas.domain import RepoAnalysis, UiConfiguration
from schemas.taxonomy import ALL_VISUALIZATION_TYPES, KNOWN_SECTION_IDS

# A model-provided config already carries intent; vary it less.
INTENSITY_WITH_CANDIDATE = 0.28
INTENSITY_HEURISTIC_ONLY = 0.55

DEFAULT_SEED = "default"


def candidate_supplied(candidate: Any) -> bool:
    """Containers count even when empty; blank, zero, false and NaN scalars do not."""
    if isinstance(candidate, (Mapping, list, tuple)):
        return True
    if isinstance(candidate, float) and math.isnan(candidate):
        return False
    return bool(candidate)


def finalize_ui_configuration(candidate: Any, analysis: RepoAnalysis, seed: str | None = None) -> UiConfiguration:
    """Build the final, guardrailed configuration for one proposal.

    *seed* should be the proposal id so re-fetches reproduce the page.
    """
    seed = seed or DEFAULT_SEED
    has_candidate = candidate_supplied(candidate)
    base = normalize_ui_configuration(candidate, analysis) if has_candidate else build_baseline_ui(analysis)
    intensity = INTENSITY_WITH_CANDIDATE if has_candidate else INTENSITY_HEURISTIC_ONLY
    varied = apply_ui_variation(base, analysis, seed, intensity)
    return apply_guardrails(varied, analysis)


def build_default_ui_configuration(analysis: RepoAnalysis, seed: str | None = None) -> UiConfiguration:
    return finalize_ui_configuration(None, analysis, seed)


# ── Renderer contract ─────────────────────────────────────────────

_LAYOUT_CHROME = {
    "dashboard": "dashboard-grid",
    "tabbed": "tab-strip",
    "timeline": "timeline-first",
    "linear": "plain-list",
}


def plan_render(ui: UiConfiguration) -> dict[str, Any]:
    """Resolve what a renderer will place, in order.

    Unknown section ids and chart types are skipped, never errors.
    """
    sections = sorted(ui.get("sections", []), key=lambda s: s.get("order", 0))
    return {
        "chrome": _LAYOUT_CHROME.get(ui.get("layout"), "plain-list"),
        "blocks": [
            {"id": s["id"], "style": s.get("style")}
            for s in sections
            if s.get("id") in KNOWN_SECTION_IDS
        ],
        "charts": [
            v["type"] for v in ui.get("visualizations", [])
            if v.get("type") in ALL_VISUALIZATION_TYPES
        ],
        "banner": {
            "colorScheme": ui.get("colorScheme"),
            "callToAction": ui.get("callToAction"),
        },
    }
