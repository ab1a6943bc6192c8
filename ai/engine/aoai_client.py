"""Azure OpenAI JSON client.

Model replies are expected to be one JSON object, but in practice they
arrive wrapped in code fences, prefixed with prose, sprinkled with
comments and trailing commas, or cut off at ``max_tokens``.  The repair
steps are plain functions so the analyzer and tests can use them without
a client:

  strip_fences → extract_json_object → sanitize_json → json.loads
                                       (last resort: repair_truncated)
"""
from __future__ import annotations

import json
import logging
import os
import re
import time
from typing import Any

from dotenv import load_dotenv
from openai import AzureOpenAI

load_dotenv()

log = logging.getLogger(__name__)

# Maximum retries when the model returns invalid JSON
_MAX_RETRIES = 2
_RETRY_DELAY_SECONDS = 1

DEFAULT_DEPLOYMENT = "gpt-4.1"
DEFAULT_API_VERSION = "2024-02-15-preview"

# Top-level keys of an analysis reply.
EXPECTED_ANALYSIS_KEYS = ("techStack", "issues", "opportunities")

_TRAILING_COMMA = re.compile(r",\s*$")


# ── JSON repair helpers ───────────────────────────────────────────

def strip_fences(text: str) -> str:
    """Drop a surrounding ```json ... ``` block, if any."""
    body = text.strip()
    if body.startswith("```"):
        newline = body.find("\n")
        body = body[newline + 1:] if newline != -1 else body[3:]
    if body.endswith("```"):
        body = body[:-3].rstrip()
    return body


def _scan(text: str):
    """Yield (index, char, in_string), in_string as it stands after char."""
    inside = escaped = False
    for index, char in enumerate(text):
        if escaped:
            escaped = False
        elif inside and char == "\\":
            escaped = True
        elif char == '"':
            inside = not inside
        yield index, char, inside


def extract_json_object(text: str) -> str:
    """First balanced ``{...}`` in *text*, or everything from the first ``{``.

    Braces inside string literals do not count.
    """
    body = strip_fences(text)
    start = body.find("{")
    if start == -1:
        return body
    depth = 0
    for index, char, inside in _scan(body[start:]):
        if inside:
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return body[start:start + index + 1]
    return body[start:]


def sanitize_json(text: str) -> str:
    """Rewrite common model quirks into strict JSON.

    Outside string literals: ``//`` and ``/* */`` comments are removed and
    commas directly before ``}`` or ``]`` are dropped.  Single-quoted
    strings become double-quoted.
    """
    out: list[str] = []
    pos, size = 0, len(text)
    quote: str | None = None

    while pos < size:
        char = text[pos]

        if quote is not None:
            if char == "\\" and pos + 1 < size:
                out.append(text[pos:pos + 2])
                pos += 2
            elif char == quote:
                out.append('"')
                quote = None
                pos += 1
            else:
                out.append('\\"' if char == '"' else char)
                pos += 1
            continue

        if text.startswith("/*", pos):
            close = text.find("*/", pos + 2)
            pos = size if close == -1 else close + 2
        elif text.startswith("//", pos) and (pos == 0 or text[pos - 1] != ":"):
            newline = text.find("\n", pos)
            pos = size if newline == -1 else newline
        elif char == "," and text[pos + 1:].lstrip(" \t\r\n")[:1] in ("}", "]"):
            pos += 1
        elif char in ('"', "'"):
            out.append('"')
            quote = char
            pos += 1
        else:
            out.append(char)
            pos += 1

    return "".join(out)


def parse_json_object(text: str) -> dict[str, Any]:
    """Strict parse after extraction and sanitizing.

    Raises json.JSONDecodeError when the result is not a JSON object.
    """
    candidate = sanitize_json(extract_json_object(text))
    parsed = json.loads(candidate)
    if not isinstance(parsed, dict):
        raise json.JSONDecodeError("Top-level JSON value is not an object", candidate, 0)
    return parsed


def repair_truncated(text: str) -> dict[str, Any] | None:
    """Close a reply cut off mid-stream; None if it still will not parse."""
    if not text or not text.strip():
        return None
    body = _TRAILING_COMMA.sub("", sanitize_json(strip_fences(text)).rstrip())

    stack: list[str] = []
    open_string = False
    for _, char, open_string in _scan(body):
        if open_string:
            continue
        if char in "{[":
            stack.append("}" if char == "{" else "]")
        elif char in "}]" and stack and stack[-1] == char:
            stack.pop()

    if open_string:
        body += '"'
    body = _TRAILING_COMMA.sub("", body) + "".join(reversed(stack))
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def missing_analysis_keys(data: dict) -> list[str]:
    return [k for k in EXPECTED_ANALYSIS_KEYS if k not in data]


# ── Client ────────────────────────────────────────────────────────

class AOAIClient:
    """Azure OpenAI chat deployment that always answers with a JSON object."""

    def __init__(
        self,
        model: str | None = None,
        endpoint: str | None = None,
        key: str | None = None,
        api_version: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 8000,
    ):
        self.model = model or os.environ.get("AZURE_OPENAI_DEPLOYMENT", DEFAULT_DEPLOYMENT)
        self.endpoint = endpoint or os.environ.get("AZURE_OPENAI_ENDPOINT", "")
        self.key = key or os.environ.get("AZURE_OPENAI_KEY", "")
        self.api_version = api_version or os.environ.get("AZURE_OPENAI_API_VERSION", DEFAULT_API_VERSION)
        self.temperature = temperature
        self.max_tokens = max_tokens

        if not (self.key and self.endpoint):
            raise EnvironmentError("AZURE_OPENAI_KEY / AZURE_OPENAI_ENDPOINT not set.")

        self._client = AzureOpenAI(
            api_key=self.key,
            azure_endpoint=self.endpoint,
            api_version=self.api_version,
        )

    def _complete(self, system: str, user: str, temperature: float, max_tokens: int) -> str:
        response = self._client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return response.choices[0].message.content or ""

    def run(
        self,
        system: str,
        user: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> dict[str, Any]:
        """Return the reply as a dict.

        Invalid JSON is retried up to _MAX_RETRIES times, then repaired as
        truncated output.  SDK failures raise RuntimeError; unrecoverable
        replies raise ValueError.
        """
        temperature = self.temperature if temperature is None else temperature
        max_tokens = self.max_tokens if max_tokens is None else max_tokens

        raw = ""
        error: json.JSONDecodeError | None = None
        for attempt in range(1, _MAX_RETRIES + 2):
            log.info("Azure OpenAI request to %s (attempt %d)", self.model, attempt)
            try:
                raw = self._complete(system, user, temperature, max_tokens)
            except Exception as exc:
                raise RuntimeError(f"AOAI call failed: {exc}") from exc
            log.debug("Reply: %d chars, starts %r", len(raw), raw[:200])

            try:
                parsed = parse_json_object(raw)
            except json.JSONDecodeError as exc:
                error = exc
                log.warning("Reply is not valid JSON (attempt %d): %s", attempt, exc)
                if attempt <= _MAX_RETRIES:
                    time.sleep(_RETRY_DELAY_SECONDS)
                continue
            self._warn_missing(parsed)
            return parsed

        repaired = repair_truncated(extract_json_object(raw))
        if repaired is not None:
            log.warning("Reply was truncated; recovered by closing open brackets")
            self._warn_missing(repaired)
            return repaired

        log.error("Unparseable reply: %s", raw[:500])
        raise ValueError(f"Model did not return valid JSON after {_MAX_RETRIES + 1} attempts: {error}")

    @staticmethod
    def _warn_missing(data: dict) -> None:
        missing = missing_analysis_keys(data)
        if missing:
            log.warning("Analysis reply missing keys: %s", ", ".join(missing))
