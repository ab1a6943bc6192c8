"""Seeded variation layer — stable per proposal, different across proposals.

Two proposals for similar repositories should not look identical, yet
re-fetching one proposal must show the same page.  All variation is
therefore drawn from one ``SeededRandom`` seeded by the proposal id plus
an analysis summary.

Intensity (0..1) scales every probability and the jitter amplitude.
Intensity 0 returns the input unchanged.

Draw order (bracketed draws only happen when their branch applies)
──────────────────────────────────────────────────────────────────
   1. layout jitter × 4      dashboard, tabbed, timeline, linear
   2. layout reroll test     p = 0.55·t   [→ weighted pick]
   3. emphasis test          p = 0.35·t   [→ weighted pick]   not risky
   4. color test             p = 0.45·t   [→ weighted pick]   no critical (else red-alert)
   5. section template test  p = 0.75·t   [→ template index]
   6. shuffle test           p = 0.70·t   [→ Fisher–Yates]    > 1 chart
   7. truncate test          p = 0.40·t                       > 2 charts
   8. CTA test               p = 0.40·t                       not risky
"""
from __future__ import annotations

import copy
import logging

from engine.guardrails import allowed_layouts, clamp_layout, risk_call_to_action
from engine.prng import RandomSource, SeededRandom, clamp01, pick_weighted, shuffle_in_place
from engine.ui_baseline import AnalysisProfile, default_sections, dashboard_sections, profile_analysis, seed_summary
from schemas.domain import CallToAction, RepoAnalysis, UiConfiguration, UiSection
from schemas.taxonomy import MAX_RETAINED_VISUALIZATIONS

log = logging.getLogger(__name__)

# ── Tuning constants ──────────────────────────────────────────────
JITTER_AMPLITUDE = 0.65
P_LAYOUT_REROLL = 0.55
P_EMPHASIS_REROLL = 0.35
P_COLOR_REROLL = 0.45
P_SECTION_TEMPLATE = 0.75
P_SHUFFLE = 0.7
P_TRUNCATE = 0.4
P_CTA_TWEAK = 0.4

EDUCATIONAL_VARIANT_MESSAGE = (
    "A few targeted upgrades can unlock major wins — choose the improvements that fit your roadmap."
)
EXECUTION_VARIANT_MESSAGE = (
    "Pick the recommended services to convert this proposal into an execution plan."
)


# ── Section template catalog ──────────────────────────────────────

def _sections(*rows: tuple[str, int, str]) -> list[UiSection]:
    return [{"id": sid, "order": order, "style": style} for sid, order, style in rows]


def section_templates(layout: str) -> list[list[UiSection]]:
    """Alternative section orderings per layout (fresh lists each call)."""
    catalog = {
        "dashboard": [
            dashboard_sections(),
            _sections(
                ("executive", 1, "prominent"),
                ("metrics", 2, "compact"),
                ("issues", 3, "grid"),
                ("visualizations", 4, "compact"),
                ("opportunities", 5, "compact"),
            ),
        ],
        "linear": [
            default_sections(),
            _sections(
                ("executive", 1, "prominent"),
                ("issues", 2, "cards"),
                ("visualizations", 3, "compact"),
                ("opportunities", 4, "list"),
            ),
            _sections(
                ("executive", 1, "prominent"),
                ("visualizations", 2, "compact"),
                ("issues", 3, "list"),
                ("opportunities", 4, "cards"),
            ),
        ],
        "tabbed": [
            _sections(
                ("executive", 1, "prominent"),
                ("visualizations", 2, "compact"),
                ("issues", 3, "cards"),
                ("opportunities", 4, "list"),
                ("services", 5, "list"),
            ),
        ],
        "timeline": [
            _sections(
                ("executive", 1, "prominent"),
                ("visualizations", 2, "prominent"),
                ("opportunities", 3, "list"),
                ("issues", 4, "compact"),
            ),
            _sections(
                ("executive", 1, "prominent"),
                ("opportunities", 2, "cards"),
                ("visualizations", 3, "compact"),
                ("issues", 4, "compact"),
            ),
        ],
    }
    return catalog[layout]


# ── Weights ───────────────────────────────────────────────────────

def layout_base_weights(profile: AnalysisProfile) -> dict[str, float]:
    """Heuristic score per layout.  Key order is the jitter draw order."""
    p = profile
    return {
        "dashboard": 1 + p.critical_count * 1.8 + p.high_count * 1.1,
        "tabbed": 1 + max(0, p.tech_stack_complexity - 4) * 0.9 + (2.5 if p.issues_count >= 10 else 0),
        "timeline": (
            1
            + p.migration_count * 1.6
            + (1.0 if p.opp_count >= 3 else 0)
            + (0.8 if p.issues_count <= 6 else 0)
        ),
        "linear": 1 + (1.2 if p.issues_count <= 6 else 0) + (0.8 if p.tech_stack_complexity <= 4 else 0),
    }


def _jittered_layout_weights(profile: AnalysisProfile, allowed: tuple[str, ...],
                             rand: RandomSource, t: float) -> dict[str, float]:
    weights = {}
    for layout, base in layout_base_weights(profile).items():
        jitter = 1 + (rand() - 0.5) * 2 * (JITTER_AMPLITUDE * t)
        weights[layout] = base * jitter
    return {k: (w if k in allowed else 0.0) for k, w in weights.items()}


# ── Per-field variation steps ─────────────────────────────────────

def vary_layout(current: str, profile: AnalysisProfile, rand: RandomSource, t: float) -> str:
    allowed = allowed_layouts(profile)
    weights = _jittered_layout_weights(profile, allowed, rand, t)
    layout = pick_weighted(weights, rand) if rand() < P_LAYOUT_REROLL * t else current
    return clamp_layout(layout, allowed)


def vary_emphasis(current: str, profile: AnalysisProfile, rand: RandomSource, t: float) -> str:
    if profile.locked_risky:
        return "critical-issues"
    if rand() < P_EMPHASIS_REROLL * t:
        return pick_weighted({
            "critical-issues": 2 if profile.critical_count > 0 else 0.5,
            "opportunities": 1.7 if profile.opp_count >= profile.issues_count else 1.0,
            "balanced": 1.3,
        }, rand)
    return current


def vary_color_scheme(current: str, profile: AnalysisProfile, rand: RandomSource, t: float) -> str:
    if profile.locked_risky or profile.critical_count > 0:
        return "red-alert"
    if rand() < P_COLOR_REROLL * t:
        return pick_weighted({
            "balanced": 1.4,
            "opportunity-green": 1.2 if profile.opp_count >= 2 else 0.6,
        }, rand)
    return current


def vary_sections(current: list[UiSection], layout: str, rand: RandomSource, t: float) -> list[UiSection]:
    if rand() < P_SECTION_TEMPLATE * t:
        options = section_templates(layout)
        return options[min(int(rand() * len(options)), len(options) - 1)]
    return current


def vary_visualizations(current: list, rand: RandomSource, t: float) -> list:
    visualizations = list(current)
    if len(visualizations) > 1 and rand() < P_SHUFFLE * t:
        shuffle_in_place(visualizations, rand)
    if len(visualizations) > MAX_RETAINED_VISUALIZATIONS and rand() < P_TRUNCATE * t:
        visualizations = visualizations[:MAX_RETAINED_VISUALIZATIONS]
    return visualizations


def vary_call_to_action(current: CallToAction, emphasize: str, profile: AnalysisProfile,
                        rand: RandomSource, t: float) -> CallToAction:
    if profile.locked_risky:
        return risk_call_to_action(current, profile)
    if rand() < P_CTA_TWEAK * t:
        if emphasize == "opportunities":
            return {"type": "educational", "message": EDUCATIONAL_VARIANT_MESSAGE}
        cta_type = "urgent" if current.get("type") == "urgent" else "standard"
        return {"type": cta_type, "message": EXECUTION_VARIANT_MESSAGE}
    return current


# ── Public entry point ────────────────────────────────────────────

def variation_seed_text(seed: str, analysis: RepoAnalysis) -> str:
    return f"{seed}|{seed_summary(analysis)}"


def apply_ui_variation(
    ui: UiConfiguration,
    analysis: RepoAnalysis,
    seed: str,
    intensity: float,
    rand: RandomSource | None = None,
) -> UiConfiguration:
    """Perturb *ui* deterministically.

    *rand* overrides the seeded generator (tests inject scripted sources).
    """
    t = clamp01(intensity)
    ui = copy.deepcopy(ui)
    if t <= 0:
        return ui

    if rand is None:
        rand = SeededRandom.from_text(variation_seed_text(seed, analysis))
    profile = profile_analysis(analysis)

    layout = vary_layout(ui["layout"], profile, rand, t)
    emphasize = vary_emphasis(ui["emphasize"], profile, rand, t)
    color_scheme = vary_color_scheme(ui["colorScheme"], profile, rand, t)
    sections = vary_sections(ui["sections"], layout, rand, t)
    visualizations = vary_visualizations(ui["visualizations"], rand, t)
    call_to_action = vary_call_to_action(ui["callToAction"], emphasize, profile, rand, t)

    log.debug("ui variation seed=%s t=%.2f layout %s→%s", seed, t, ui["layout"], layout)
    return {
        **ui,
        "layout": layout,
        "emphasize": emphasize,
        "colorScheme": color_scheme,
        "sections": sections,
        "visualizations": visualizations,
        "callToAction": call_to_action,
    }
