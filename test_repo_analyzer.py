"""Tests for the repository analysis pass (mock provider, no network).

Run:  pytest test_repo_analyzer.py -v
"""
from __future__ import annotations

import pytest

import ai.repo_analyzer as repo_analyzer
from ai.engine.reasoning_provider import MockReasoningProvider, split_system_prompt
from ai.prompts import DEPENDENCY_LIMIT, README_LIMIT, PromptPack
from ai.repo_analyzer import analyze_repository, coerce_analysis, mock_analysis


@pytest.fixture
def repo_data():
    return {
        "repoName": "acme/app",
        "readme": "# App\n" + "x" * 10_000,
        "dependencies": [f"dep-{n}" for n in range(80)],
        "techStack": ["React", "Node.js"],
        "url": "https://github.com/acme/app",
    }


# ── Prompt rendering ──────────────────────────────────────────────

def test_prompt_truncates_readme_and_dependencies(repo_data):
    text = PromptPack().analysis(repo_data, ["security-audit"])
    assert "Repository: acme/app" in text
    assert "Tech Stack Detected: React, Node.js" in text
    assert "x" * (README_LIMIT - len("# App\n")) in text
    assert "x" * README_LIMIT not in text
    assert f"dep-{DEPENDENCY_LIMIT - 1}" in text
    assert f"dep-{DEPENDENCY_LIMIT}," not in text
    assert '"security-audit"' in text
    assert "{{" not in text


def test_system_prompt_split():
    pack = PromptPack()
    system, user = split_system_prompt(pack.system + "\n---SYSTEM---\nhello")
    assert system == pack.system.strip()
    assert user == "hello"


# ── Happy path ────────────────────────────────────────────────────

def test_analysis_with_model_reply(repo_data):
    reply = {
        "techStack": ["React", "Node.js", "MongoDB"],
        "issues": [{"id": "issue-1", "title": "No rate limiting", "severity": "critical",
                    "description": "d", "impact": "i", "recommendedService": "security-audit"}],
        "opportunities": [{"title": "TS", "description": "d", "recommendedService": "tech-stack-migration"}],
        "uiConfiguration": {"layout": "dashboard", "colorScheme": "red-alert"},
    }
    provider = MockReasoningProvider(default=reply)
    result = analyze_repository(repo_data, provider)

    assert result["source"] == "llm"
    assert result["analysis"]["techStack"] == ["React", "Node.js", "MongoDB"]
    assert result["analysis"]["issues"][0]["severity"] == "critical"
    assert result["uiCandidate"] == {"layout": "dashboard", "colorScheme": "red-alert"}
    assert len(provider.calls) == 1
    assert "techStack" in provider.calls[0]["payload_keys"]


def test_ui_candidate_passed_through_untouched(repo_data):
    junk = {"layout": "bogus", "sections": "not-an-array"}
    result = analyze_repository(repo_data, MockReasoningProvider(default={"uiConfiguration": junk}))
    assert result["uiCandidate"] == junk


def test_missing_candidate_is_none(repo_data):
    result = analyze_repository(repo_data, MockReasoningProvider(default={"issues": []}))
    assert result["uiCandidate"] is None


# ── Coercion ──────────────────────────────────────────────────────

def test_coercion_defaults(repo_data):
    analysis = coerce_analysis({
        "techStack": "React",
        "issues": [
            {},
            {"id": 7, "title": "  ", "severity": "catastrophic"},
            "not an issue",
            {"severity": "low", "recommendedService": "performance-optimization"},
        ],
        "opportunities": [{}, None],
    }, repo_data)

    assert analysis["techStack"] == ["React", "Node.js"]
    assert analysis["issues"][0] == {
        "id": "issue-1",
        "title": "Untitled Issue",
        "severity": "medium",
        "description": "No description provided",
        "impact": "Unknown impact",
        "recommendedService": "monthly-retainer-basic",
    }
    assert analysis["issues"][1]["id"] == "7"
    assert analysis["issues"][1]["title"] == "Untitled Issue"
    assert analysis["issues"][1]["severity"] == "medium"
    # ids follow the position in the reply list
    assert analysis["issues"][2]["id"] == "issue-4"
    assert analysis["issues"][2]["recommendedService"] == "performance-optimization"
    assert analysis["opportunities"] == [{
        "title": "Untitled Opportunity",
        "description": "No description provided",
        "recommendedService": "monthly-retainer-basic",
    }]


def test_non_list_sections_become_empty(repo_data):
    analysis = coerce_analysis({"issues": {"a": 1}, "opportunities": "many"}, repo_data)
    assert analysis["issues"] == []
    assert analysis["opportunities"] == []


# ── Fallbacks ─────────────────────────────────────────────────────

def test_provider_error_falls_back_to_mock(repo_data, caplog):
    provider = MockReasoningProvider(default=RuntimeError("AOAI call failed: 500"))
    with caplog.at_level("WARNING", logger="ai.repo_analyzer"):
        result = analyze_repository(repo_data, provider)
    assert result == {"analysis": mock_analysis(), "uiCandidate": None, "source": "mock"}
    assert "falling back" in caplog.text


def test_non_object_reply_falls_back(repo_data):
    result = analyze_repository(repo_data, MockReasoningProvider(default=["a", "b"]))
    assert result["source"] == "mock"


def test_no_provider_configured(repo_data, monkeypatch):
    monkeypatch.delenv("AZURE_OPENAI_KEY", raising=False)
    monkeypatch.delenv("AZURE_OPENAI_ENDPOINT", raising=False)
    assert repo_analyzer.default_provider() is None
    assert analyze_repository(repo_data)["source"] == "mock"


def test_env_provider_can_be_disabled(repo_data, monkeypatch):
    monkeypatch.setattr(repo_analyzer, "default_provider", lambda: pytest.fail("provider built"))
    assert analyze_repository(repo_data, use_env_provider=False)["source"] == "mock"


def test_mock_analysis_shape():
    analysis = mock_analysis()
    assert [i["severity"] for i in analysis["issues"]] == ["critical", "high", "medium"]
    assert len(analysis["opportunities"]) == 2
    analysis["issues"].clear()
    assert len(mock_analysis()["issues"]) == 3
