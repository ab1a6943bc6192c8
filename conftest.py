"""Shared fixtures: synthetic repository analyses with controlled counts."""
from __future__ import annotations

import pytest

from schemas.taxonomy import MIGRATION_SERVICE


def build_analysis(
    critical: int = 0,
    high: int = 0,
    medium: int = 0,
    low: int = 0,
    opportunities: int = 0,
    migrations: int = 0,
    tech_stack: list[str] | None = None,
) -> dict:
    """Analysis with the given severity counts.

    The first *migrations* opportunities recommend the migration service.
    """
    issues = []
    for severity, count in (("critical", critical), ("high", high), ("medium", medium), ("low", low)):
        for _ in range(count):
            n = len(issues) + 1
            issues.append({
                "id": f"issue-{n}",
                "title": f"{severity.title()} issue {n}",
                "severity": severity,
                "description": "Synthetic issue.",
                "impact": "Synthetic impact.",
                "recommendedService": "security-audit",
            })
    opps = []
    for n in range(opportunities):
        opps.append({
            "title": f"Opportunity {n + 1}",
            "description": "Synthetic opportunity.",
            "recommendedService": MIGRATION_SERVICE if n < migrations else "monthly-retainer-premium",
        })
    return {
        "techStack": list(tech_stack) if tech_stack is not None else ["Python"],
        "issues": issues,
        "opportunities": opps,
    }


@pytest.fixture
def make_analysis():
    return build_analysis
