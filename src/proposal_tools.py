# proposal_tools.py — Tool layer for proposal generation and UI previews
#
# 4 tools.  Every handler returns a JSON string; user errors come back as
# {"error": ...} instead of raising.
#
#   generate_proposal         → analysis pass + services + UI config → stored proposal
#   load_proposal             → one stored proposal by id
#   list_proposals            → stored proposal summaries, newest first
#   preview_ui_configuration  → final UI config for an analysis, no storage
#
# The repository itself is never fetched here: callers pass the README,
# dependency list, and detected tech stack they already have.
# ──────────────────────────────────────────────────────────────────

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import BaseModel, Field

from ai.engine.reasoning_provider import ReasoningProvider
from ai.repo_analyzer import analyze_repository, coerce_analysis
from engine.guardrails import validate_ui_guardrails, validate_visualization_bounds
from engine.proposal_builder import build_demo_proposal, build_proposal, parse_github_url
from engine.proposal_store import ProposalStore, get_default_store
from engine.ui_config import DEFAULT_SEED, finalize_ui_configuration, plan_render

log = logging.getLogger(__name__)

DEMO_PROPOSAL_ID = "demo"


def _store(store: ProposalStore | None) -> ProposalStore:
    return store if store is not None else get_default_store()


# ══════════════════════════════════════════════════════════════════
# Tool 1 — generate_proposal
# ══════════════════════════════════════════════════════════════════

class GenerateProposalParams(BaseModel):
    repo_url: str = Field(description="GitHub repository URL (https://github.com/<owner>/<repo>).")
    client_name: str | None = Field(
        default=None,
        description="Display name of the client.  Defaults to the repository owner.",
    )
    readme: str = Field(default="", description="README text (truncated before prompting).")
    dependencies: list[str] = Field(default_factory=list, description="Declared dependency names.")
    tech_stack: list[str] = Field(default_factory=list, description="Detected technologies.")
    use_llm: bool = Field(
        default=True,
        description="False → skip the model and use the static mock analysis.",
    )


def generate_proposal(
    params: GenerateProposalParams,
    *,
    provider: ReasoningProvider | None = None,
    store: ProposalStore | None = None,
) -> str:
    """Analyze a repository, build a proposal, store it, and return its summary."""
    try:
        owner, repo = parse_github_url(params.repo_url)
    except ValueError as exc:
        return json.dumps({"error": str(exc)})

    repo_data = {
        "repoName": f"{owner}/{repo}",
        "readme": params.readme,
        "dependencies": params.dependencies,
        "techStack": params.tech_stack,
        "url": params.repo_url,
    }
    result = analyze_repository(
        repo_data,
        provider if params.use_llm else None,
        use_env_provider=params.use_llm,
    )
    proposal = build_proposal(
        result["analysis"],
        repo_url=params.repo_url,
        client_name=params.client_name or owner,
        ui_candidate=result["uiCandidate"],
    )
    _store(store).save(proposal)

    return json.dumps({
        "proposal_id": proposal["id"],
        "client_name": proposal["clientName"],
        "analysis_source": result["source"],
        "issue_count": len(proposal["analysis"]["issues"]),
        "opportunity_count": len(proposal["analysis"]["opportunities"]),
        "services": [s["id"] for s in proposal["services"]],
        "layout": proposal["uiConfiguration"]["layout"],
        "color_scheme": proposal["uiConfiguration"]["colorScheme"],
        "generated_at": proposal["generatedAt"],
    }, indent=2)


# ══════════════════════════════════════════════════════════════════
# Tool 2 — load_proposal
# ══════════════════════════════════════════════════════════════════

class LoadProposalParams(BaseModel):
    proposal_id: str = Field(description="Proposal id.  'demo' → the built-in showcase proposal.")


def load_proposal(params: LoadProposalParams, *, store: ProposalStore | None = None) -> str:
    """Return the full stored proposal record."""
    if params.proposal_id == DEMO_PROPOSAL_ID:
        return json.dumps(build_demo_proposal(), indent=2)

    proposal = _store(store).get(params.proposal_id)
    if proposal is None:
        return json.dumps({"error": f"Proposal not found: {params.proposal_id}"})
    return json.dumps(proposal, indent=2)


# ══════════════════════════════════════════════════════════════════
# Tool 3 — list_proposals
# ══════════════════════════════════════════════════════════════════

class ListProposalsParams(BaseModel):
    limit: int = Field(default=20, ge=1, le=200, description="Maximum proposals to return.")


def list_proposals(params: ListProposalsParams, *, store: ProposalStore | None = None) -> str:
    """Stored proposals, newest first, as lightweight summaries."""
    try:
        proposals = _store(store).list_recent(limit=params.limit)
    except OSError as exc:
        return json.dumps({"error": str(exc)})

    return json.dumps({
        "count": len(proposals),
        "proposals": [
            {
                "proposal_id": p.get("id"),
                "client_name": p.get("clientName"),
                "repo_url": p.get("repoUrl"),
                "issue_count": len(p.get("analysis", {}).get("issues", [])),
                "layout": p.get("uiConfiguration", {}).get("layout"),
                "generated_at": p.get("generatedAt"),
            }
            for p in proposals
        ],
    }, indent=2)


# ══════════════════════════════════════════════════════════════════
# Tool 4 — preview_ui_configuration
# ══════════════════════════════════════════════════════════════════

class PreviewUiConfigurationParams(BaseModel):
    analysis: dict[str, Any] = Field(
        description="Repository analysis: techStack, issues, opportunities.",
    )
    candidate: Any = Field(
        default=None,
        description="Optional untrusted UI configuration to normalize.",
    )
    seed: str = Field(default=DEFAULT_SEED, description="Variation seed (a proposal id).")


def preview_ui_configuration(params: PreviewUiConfigurationParams) -> str:
    """Final UI configuration for an analysis plus a guardrail report."""
    analysis = coerce_analysis(params.analysis, {})
    ui = finalize_ui_configuration(params.candidate, analysis, params.seed)
    violations = validate_ui_guardrails(ui, analysis) + validate_visualization_bounds(ui)
    if violations:
        # Finalized output is guarded; anything here is an engine defect.
        log.error("Guardrail violations in finalized UI config: %s", violations)

    return json.dumps({
        "uiConfiguration": ui,
        "render": plan_render(ui),
        "violations": violations,
    }, indent=2)
