"""Service catalog — the paid engagements a proposal can offer.

Issues and opportunities carry a ``recommendedService`` id; the proposal
lists each recommended catalog entry once, in first-seen order.
"""
from __future__ import annotations

import copy

from engine.ui_baseline import issues_of, opportunities_of
from schemas.domain import ProposalService, RepoAnalysis

SERVICES: dict[str, ProposalService] = {
    "security-audit": {
        "id": "security-audit",
        "name": "Security Audit",
        "description": "Comprehensive security assessment and vulnerability scanning",
        "price": 8000,
        "timeline": "2 weeks",
        "included": [
            "Full code security review",
            "Dependency vulnerability scan",
            "Penetration testing",
            "Security best practices report",
            "Remediation recommendations",
        ],
    },
    "performance-optimization": {
        "id": "performance-optimization",
        "name": "Performance Optimization",
        "description": "Identify and fix performance bottlenecks",
        "price": 10000,
        "timeline": "3 weeks",
        "included": [
            "Performance profiling",
            "Database query optimization",
            "Caching strategy implementation",
            "Load testing",
            "Performance improvement report",
        ],
    },
    "tech-stack-migration": {
        "id": "tech-stack-migration",
        "name": "Tech Stack Migration",
        "description": "Modernize your technology stack",
        "price": 15000,
        "timeline": "6-8 weeks",
        "included": [
            "Migration planning",
            "Code refactoring",
            "Testing and QA",
            "Deployment strategy",
            "Team training",
        ],
    },
    "monthly-retainer-basic": {
        "id": "monthly-retainer-basic",
        "name": "Monthly Retainer - Basic",
        "description": "Ongoing support and maintenance",
        "price": 3000,
        "timeline": "Monthly",
        "included": [
            "20 hours/month consulting",
            "Code reviews",
            "Technical support",
            "Monthly strategy session",
        ],
    },
    "monthly-retainer-premium": {
        "id": "monthly-retainer-premium",
        "name": "Monthly Retainer - Premium",
        "description": "Comprehensive ongoing support",
        "price": 7500,
        "timeline": "Monthly",
        "included": [
            "50 hours/month consulting",
            "Priority support",
            "Architecture reviews",
            "Team mentoring",
            "Weekly strategy sessions",
        ],
    },
}

DEFAULT_SERVICE_ID = "monthly-retainer-basic"


def get_service(service_id: str) -> ProposalService | None:
    service = SERVICES.get(service_id)
    return copy.deepcopy(service) if service else None


def map_services_to_proposal(analysis: RepoAnalysis) -> list[ProposalService]:
    """Catalog entries recommended by issues then opportunities, deduplicated."""
    seen: list[str] = []
    for item in issues_of(analysis) + opportunities_of(analysis):
        service_id = item.get("recommendedService")
        if isinstance(service_id, str) and service_id and service_id not in seen:
            seen.append(service_id)
    return [s for s in (get_service(sid) for sid in seen) if s is not None]
