"""Offline tests for the Azure OpenAI JSON client.

The SDK client is replaced with a fake; no network access.
Run:  pytest test_aoai_client.py -v
"""
from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

import ai.engine.aoai_client as aoai_client
from ai.engine.aoai_client import (
    AOAIClient,
    extract_json_object,
    missing_analysis_keys,
    parse_json_object,
    repair_truncated,
)


class FakeCompletions:
    def __init__(self, replies):
        self._replies = list(replies)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        message = SimpleNamespace(content=reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeAzureOpenAI:
    last = None

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.chat = SimpleNamespace(completions=FakeCompletions(FakeAzureOpenAI.replies))
        FakeAzureOpenAI.last = self


@pytest.fixture
def make_client(monkeypatch):
    monkeypatch.setenv("AZURE_OPENAI_KEY", "test-key")
    monkeypatch.setenv("AZURE_OPENAI_ENDPOINT", "https://example.openai.azure.com")
    monkeypatch.delenv("AZURE_OPENAI_DEPLOYMENT", raising=False)
    monkeypatch.setattr(aoai_client, "AzureOpenAI", FakeAzureOpenAI)
    monkeypatch.setattr(aoai_client.time, "sleep", lambda _s: None)

    def factory(*replies):
        FakeAzureOpenAI.replies = list(replies)
        return AOAIClient()

    return factory


# ── Configuration ─────────────────────────────────────────────────

def test_missing_credentials_raise(monkeypatch):
    monkeypatch.delenv("AZURE_OPENAI_KEY", raising=False)
    monkeypatch.delenv("AZURE_OPENAI_ENDPOINT", raising=False)
    with pytest.raises(EnvironmentError):
        AOAIClient()


def test_env_configuration(make_client):
    client = make_client()
    assert client.model == "gpt-4.1"
    assert FakeAzureOpenAI.last.kwargs["azure_endpoint"] == "https://example.openai.azure.com"
    assert FakeAzureOpenAI.last.kwargs["api_key"] == "test-key"


# ── run() ─────────────────────────────────────────────────────────

def test_run_parses_fenced_json(make_client):
    client = make_client('```json\n{"techStack": ["Go"], "issues": [], "opportunities": []}\n```')
    assert client.run("sys", "user") == {"techStack": ["Go"], "issues": [], "opportunities": []}
    call = FakeAzureOpenAI.last.chat.completions.calls[0]
    assert call["messages"][0] == {"role": "system", "content": "sys"}
    assert call["model"] == "gpt-4.1"


def test_run_retries_after_invalid_json(make_client):
    client = make_client("not json at all", '{"issues": []}')
    assert client.run("s", "u") == {"issues": []}
    assert len(FakeAzureOpenAI.last.chat.completions.calls) == 2


def test_run_repairs_truncated_output(make_client):
    truncated = '{"techStack": ["React"], "issues": [{"id": "issue-1", "title": "Cut'
    client = make_client(truncated, truncated, truncated)
    repaired = client.run("s", "u")
    assert repaired["techStack"] == ["React"]
    assert repaired["issues"][0]["title"] == "Cut"


def test_run_gives_up_with_value_error(make_client):
    client = make_client("nope", "still nope", "never")
    with pytest.raises(ValueError):
        client.run("s", "u")


def test_sdk_errors_wrapped(make_client):
    client = make_client(ConnectionError("boom"))
    with pytest.raises(RuntimeError, match="boom"):
        client.run("s", "u")


# ── Parsing helpers ───────────────────────────────────────────────

def test_extract_object_from_prose():
    text = 'Here is the analysis: {"a": {"b": "}"}} Hope this helps!'
    assert extract_json_object(text) == '{"a": {"b": "}"}}'


def test_parse_sanitizes_common_quirks():
    text = """{
      // model commentary
      'techStack': ['React',],
      "issues": [], /* trailing */
      "url": "https://github.com/a/b",
    }"""
    assert parse_json_object(text) == {
        "techStack": ["React"],
        "issues": [],
        "url": "https://github.com/a/b",
    }


def test_parse_rejects_non_object():
    with pytest.raises(json.JSONDecodeError):
        parse_json_object("[1, 2, 3]")


def test_repair_returns_none_for_hopeless_text():
    assert repair_truncated("") is None
    assert repair_truncated("hello") is None


def test_missing_keys_reported():
    assert missing_analysis_keys({"techStack": []}) == ["issues", "opportunities"]


def test_run_warns_on_missing_keys(make_client, caplog):
    client = make_client('{"techStack": []}')
    with caplog.at_level("WARNING", logger="ai.engine.aoai_client"):
        client.run("s", "u")
    assert "issues" in caplog.text
