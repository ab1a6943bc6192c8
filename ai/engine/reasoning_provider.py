"""Pluggable LLM backends for repository analysis.

Anything with ``complete(template, payload) -> dict`` can analyze a repo.
Azure OpenAI is the production backend; the mock replays canned replies.

    analyze_repository(repo_data, AOAIReasoningProvider())
    analyze_repository(repo_data, MockReasoningProvider(default={...}))
"""
from __future__ import annotations

from typing import Any, Protocol

SYSTEM_DELIMITER = "---SYSTEM---"

DEFAULT_SYSTEM_PROMPT = (
    "You are an expert technical consultant producing structured JSON for a consulting proposal."
)


class ReasoningProvider(Protocol):
    def complete(self, template: str, payload: dict) -> dict:
        """Run the rendered *template* and return the model's JSON object.

        Text before a ``---SYSTEM---`` line is the system prompt.  *payload*
        is the data the template was filled from; backends may log it but
        must not re-render the prompt from it.
        """
        ...


def split_system_prompt(template: str) -> tuple[str, str]:
    """(system, user) halves of *template*; the default system prompt if no delimiter."""
    head, sep, tail = template.partition(SYSTEM_DELIMITER)
    if not sep:
        return DEFAULT_SYSTEM_PROMPT, template
    return head.strip(), tail.strip()


# ── Azure OpenAI ──────────────────────────────────────────────────
class AOAIReasoningProvider:
    """ReasoningProvider over an AOAIClient; kwargs go to the client."""

    def __init__(self, **client_kwargs: Any):
        # openai is only needed once a real backend is built
        from ai.engine.aoai_client import AOAIClient

        self._client = AOAIClient(**client_kwargs)

    def complete(self, template: str, payload: dict) -> dict:
        return self._client.run(*split_system_prompt(template))


# ── Canned replies ────────────────────────────────────────────────
class MockReasoningProvider:
    """Replays fixed replies without touching the network.

    *responses* maps a substring of the template to a reply; the first
    match wins, otherwise *default* is used.  Exception replies are raised.
    """

    def __init__(self, responses: dict[str, Any] | None = None, default: Any = None):
        self._responses = dict(responses or {})
        self._default = {} if default is None else default
        self.calls: list[dict[str, Any]] = []

    def complete(self, template: str, payload: dict) -> dict:
        self.calls.append({"template": template[:200], "payload_keys": list(payload)})
        reply = next(
            (r for marker, r in self._responses.items() if marker in template),
            self._default,
        )
        if isinstance(reply, Exception):
            raise reply
        return reply
