"""Untrusted-config normalizer — parse model-generated UI JSON into a typed value.

The LLM is asked for a ``uiConfiguration`` alongside its analysis, but
nothing guarantees the shape it returns.  This module is the single
parse step between that blob and the rest of the system:

  * every field is validated independently against schemas/taxonomy.py
  * an invalid, missing or wrong-typed field falls back to the heuristic
    baseline for the *same* analysis
  * visualization payloads are bounded so that a hallucinated 40-row
    risk matrix cannot reach the renderer

It never raises.  Normalizing its own output returns an equal value.
"""
from __future__ import annotations

import copy
import math
from collections.abc import Mapping
from typing import Any

from engine.ui_baseline import build_baseline_ui, tech_debt_data
from schemas.domain import CallToAction, RepoAnalysis, UiConfiguration, UiSection, UiVisualization
from schemas.taxonomy import (
    ALL_COLOR_SCHEMES,
    ALL_CTA_TYPES,
    ALL_EMPHASES,
    ALL_LAYOUTS,
    ALL_SECTION_STYLES,
    ALL_VISUALIZATION_TYPES,
    RISK_MATRIX_MAX_ITEMS,
    ROADMAP_MAX_ITEMS_PER_PHASE,
    ROADMAP_MAX_PHASES,
    SEVERITY_LABELS,
)


def _choice(value: Any, allowed: tuple[str, ...], fallback: str) -> str:
    return value if isinstance(value, str) and value in allowed else fallback


def _is_finite_number(value: Any) -> bool:
    # bool is an int subclass; a model emitting ``true`` is not an order.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


# ── Visualization payload bounds ──────────────────────────────────

def _bound_risk_matrix(data: dict[str, Any]) -> dict[str, Any]:
    items = data.get("items")
    if isinstance(items, list):
        data["items"] = items[:RISK_MATRIX_MAX_ITEMS]
    return data


def _bound_roadmap(data: dict[str, Any]) -> dict[str, Any]:
    phases = data.get("phases")
    if not isinstance(phases, list):
        return data
    bounded = []
    for phase in phases:
        if not isinstance(phase, Mapping):
            continue
        phase = dict(phase)
        if isinstance(phase.get("items"), list):
            phase["items"] = phase["items"][:ROADMAP_MAX_ITEMS_PER_PHASE]
        bounded.append(phase)
        if len(bounded) == ROADMAP_MAX_PHASES:
            break
    data["phases"] = bounded
    return data


def _is_valid_debt_buckets(items: Any) -> bool:
    if not isinstance(items, list) or len(items) != len(SEVERITY_LABELS):
        return False
    labels = []
    for item in items:
        if not isinstance(item, Mapping):
            return False
        value = item.get("value")
        if not _is_finite_number(value) or value < 0:
            return False
        labels.append(item.get("label"))
    return labels == list(SEVERITY_LABELS.values())


def _bound_tech_debt(data: dict[str, Any], analysis: RepoAnalysis) -> dict[str, Any]:
    if not _is_valid_debt_buckets(data.get("items")):
        data["items"] = tech_debt_data(analysis)["items"]
    return data


def bound_visualization_data(vis_type: str, data: Any, analysis: RepoAnalysis) -> dict[str, Any]:
    """Return a bounded deep copy of *data* for a recognised chart type."""
    payload = copy.deepcopy(dict(data)) if isinstance(data, Mapping) else {}
    if vis_type == "risk-matrix":
        return _bound_risk_matrix(payload)
    if vis_type == "roadmap-timeline":
        return _bound_roadmap(payload)
    if vis_type == "tech-debt-chart":
        return _bound_tech_debt(payload, analysis)
    return payload


# ── Per-field parsers ─────────────────────────────────────────────

def _parse_visualizations(value: Any, analysis: RepoAnalysis) -> list[UiVisualization]:
    if not isinstance(value, list):
        return []
    parsed: list[UiVisualization] = []
    for entry in value:
        if not isinstance(entry, Mapping):
            continue
        vis_type = entry.get("type")
        if vis_type not in ALL_VISUALIZATION_TYPES:
            continue
        parsed.append({
            "type": vis_type,
            "data": bound_visualization_data(vis_type, entry.get("data"), analysis),
        })
    return parsed


def _parse_sections(value: Any) -> list[UiSection]:
    if not isinstance(value, list):
        return []
    parsed: list[UiSection] = []
    for entry in value:
        if not isinstance(entry, Mapping):
            continue
        section_id = entry.get("id")
        order = entry.get("order")
        style = entry.get("style")
        if not isinstance(section_id, str) or not section_id:
            continue
        if not _is_finite_number(order):
            continue
        if not isinstance(style, str) or style not in ALL_SECTION_STYLES:
            continue
        parsed.append({"id": section_id, "order": order, "style": style})
    # sorted() is stable: equal orders keep their input order.
    return sorted(parsed, key=lambda s: s["order"])


def _parse_call_to_action(value: Any, fallback: CallToAction) -> CallToAction:
    if not isinstance(value, Mapping):
        return dict(fallback)
    message = value.get("message")
    return {
        "type": _choice(value.get("type"), ALL_CTA_TYPES, fallback["type"]),
        "message": message if isinstance(message, str) and message.strip() else fallback["message"],
    }


# ── Public entry point ────────────────────────────────────────────

def normalize_ui_configuration(candidate: Any, analysis: RepoAnalysis) -> UiConfiguration:
    """Merge an untrusted *candidate* over the heuristic baseline.

    Returns the baseline unchanged when *candidate* is not a mapping.
    """
    baseline = build_baseline_ui(analysis)
    if not isinstance(candidate, Mapping):
        return baseline

    visualizations = _parse_visualizations(candidate.get("visualizations"), analysis)
    sections = _parse_sections(candidate.get("sections"))

    return {
        "layout": _choice(candidate.get("layout"), ALL_LAYOUTS, baseline["layout"]),
        "emphasize": _choice(candidate.get("emphasize"), ALL_EMPHASES, baseline["emphasize"]),
        "visualizations": visualizations or baseline["visualizations"],
        "sections": sections or baseline["sections"],
        "colorScheme": _choice(candidate.get("colorScheme"), ALL_COLOR_SCHEMES, baseline["colorScheme"]),
        "callToAction": _parse_call_to_action(candidate.get("callToAction"), baseline["callToAction"]),
    }
