"""Prompt loader — reads versioned .txt templates from this directory."""
from pathlib import Path

PROMPT_DIR = Path(__file__).parent

README_LIMIT = 4000
DEPENDENCY_LIMIT = 50


def _load(name: str) -> str:
    path = PROMPT_DIR / name
    if not path.exists():
        raise FileNotFoundError(f"Prompt template not found: {path}")
    return path.read_text(encoding="utf-8")


class PromptPack:
    """Versioned prompt templates for repository analysis."""

    def __init__(self):
        self._system = _load("system.txt")

    # ── Shared system prompt ──────────────────────────────────────
    @property
    def system(self) -> str:
        return self._system

    # ── Per-pass user prompts ─────────────────────────────────────
    def analysis(self, repo_data: dict, service_ids: list[str] | None = None) -> str:
        tpl = _load("analysis.txt")
        readme = (repo_data.get("readme") or "")[:README_LIMIT]
        dependencies = list(repo_data.get("dependencies") or [])[:DEPENDENCY_LIMIT]
        services = service_ids or []
        return (
            tpl
            .replace("{{REPO_NAME}}", str(repo_data.get("repoName", "")))
            .replace("{{TECH_STACK}}", ", ".join(repo_data.get("techStack") or []))
            .replace("{{DEPENDENCIES}}", ", ".join(dependencies))
            .replace("{{SERVICE_IDS}}", ", ".join(f'"{s}"' for s in services))
            # README last: its text may itself contain template markers
            .replace("{{README}}", readme)
        )
