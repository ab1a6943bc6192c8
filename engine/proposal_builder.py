"""Proposal assembly — analysis + services + UI configuration → Proposal record.

The proposal id doubles as the UI variation seed, so the stored
``uiConfiguration`` is exactly what a later re-computation would produce.
"""
from __future__ import annotations

import copy
import logging
import uuid
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlparse

from engine.services import SERVICES, get_service, map_services_to_proposal
from engine.ui_config import finalize_ui_configuration
from schemas.domain import Proposal, RepoAnalysis

log = logging.getLogger(__name__)

_GITHUB_HOSTS = {"github.com", "www.github.com"}


def is_github_url(url: str) -> bool:
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and parsed.netloc.lower() in _GITHUB_HOSTS


def parse_github_url(url: str) -> tuple[str, str]:
    """Return (owner, repo) for a github.com URL.  Raise on anything else."""
    if not is_github_url(url):
        raise ValueError(
            "Only GitHub repository URLs are supported. Please provide a github.com URL."
        )
    parts = [p for p in urlparse(url.strip()).path.split("/") if p]
    if len(parts) < 2:
        raise ValueError(f"Invalid GitHub URL: {url}")
    owner, repo = parts[0], parts[1]
    if repo.endswith(".git"):
        repo = repo[:-4]
    if not repo:
        raise ValueError(f"Invalid GitHub URL: {url}")
    return owner, repo


def client_name_from_url(url: str) -> str:
    owner, _ = parse_github_url(url)
    return owner


def build_proposal(
    analysis: RepoAnalysis,
    *,
    repo_url: str,
    client_name: str | None = None,
    ui_candidate: Any = None,
    proposal_id: str | None = None,
    generated_at: datetime | None = None,
) -> Proposal:
    """Assemble a new, immutable proposal record."""
    proposal_id = proposal_id or str(uuid.uuid4())
    services = map_services_to_proposal(analysis)
    ui = finalize_ui_configuration(ui_candidate, analysis, proposal_id)
    generated_at = generated_at or datetime.now(timezone.utc)

    log.info(
        "Proposal %s: %d issues, %d opportunities, %d services, layout=%s",
        proposal_id,
        len(analysis.get("issues", [])),
        len(analysis.get("opportunities", [])),
        len(services),
        ui["layout"],
    )
    return {
        "id": proposal_id,
        "clientName": client_name or client_name_from_url(repo_url),
        "repoUrl": repo_url,
        "analysis": analysis,
        "uiConfiguration": ui,
        "services": services,
        "generatedAt": generated_at.isoformat(),
    }


# ── Demo proposal ─────────────────────────────────────────────────

DEMO_ANALYSIS: RepoAnalysis = {
    "techStack": ["React", "Node.js", "MongoDB", "Express"],
    "issues": [
        {
            "id": "1",
            "title": "No Rate Limiting on API Endpoints",
            "severity": "critical",
            "description": (
                "Your API endpoints lack rate limiting, making them vulnerable to DDoS attacks "
                "and abuse. This could lead to service disruption and unexpected costs."
            ),
            "impact": "Vulnerable to DDoS attacks, could cost $50k+ in downtime and infrastructure costs",
            "recommendedService": "security-audit",
        },
        {
            "id": "2",
            "title": "Missing Environment Variable Validation",
            "severity": "high",
            "description": (
                "The application does not validate required environment variables at startup, "
                "which could lead to runtime errors in production."
            ),
            "impact": "Potential production outages and poor developer experience",
            "recommendedService": "security-audit",
        },
        {
            "id": "3",
            "title": "Inefficient Database Queries",
            "severity": "medium",
            "description": (
                "Several database queries lack proper indexing and use N+1 query patterns, "
                "causing slow response times under load."
            ),
            "impact": "Poor user experience, higher infrastructure costs, scalability issues",
            "recommendedService": "performance-optimization",
        },
        {
            "id": "4",
            "title": "Outdated Dependencies",
            "severity": "low",
            "description": "Multiple dependencies are outdated and may contain security vulnerabilities.",
            "impact": "Security risks and missing new features",
            "recommendedService": "monthly-retainer-basic",
        },
    ],
    "opportunities": [
        {
            "title": "TypeScript Migration",
            "description": (
                "Migrating to TypeScript would improve type safety, developer experience, "
                "and catch bugs at compile time."
            ),
            "recommendedService": "tech-stack-migration",
        },
        {
            "title": "CI/CD Pipeline Implementation",
            "description": (
                "Implementing automated testing and deployment would reduce manual errors "
                "and speed up releases."
            ),
            "recommendedService": "monthly-retainer-premium",
        },
    ],
}


def build_demo_proposal() -> Proposal:
    """Static showcase proposal offering the full catalog."""
    proposal = build_proposal(
        copy.deepcopy(DEMO_ANALYSIS),
        repo_url="https://github.com/acme/app",
        client_name="Acme Corp",
        proposal_id="demo",
    )
    proposal["services"] = [get_service(sid) for sid in SERVICES]
    return proposal
