# proposal_store.py — Process-wide proposal cache with JSON-file persistence
#
# Lifecycle:
#   save()  → populate the in-memory cache, then write <out>/proposals/<id>.json
#   get()   → cache hit, else read-through from disk and populate the cache
#   no eviction; a proposal record is never mutated after it is saved
#
# The UI configuration engine never touches this module.
# ──────────────────────────────────────────────────────────────────

from __future__ import annotations

import json
import logging
import os
import re
import threading
from pathlib import Path

from schemas.domain import Proposal

log = logging.getLogger(__name__)

_UNSAFE_ID_CHARS = re.compile(r"[^\w\-]")

# Listing cap, newest first.
LIST_LIMIT = 200


def _safe_id(proposal_id: str) -> str:
    """Convert a proposal id to a filesystem-safe file stem."""
    slug = _UNSAFE_ID_CHARS.sub("_", proposal_id.strip())
    return slug[:96] or "unknown"


def default_out_dir() -> Path:
    return Path(os.environ.get("DEEPSCAN_OUT_DIR", "out")).resolve()


class ProposalStore:
    """Key-value store of proposals keyed by id.

    *root* = None keeps everything in memory (tests, ephemeral workers).
    """

    def __init__(self, root: str | Path | None = None):
        self.root = Path(root) / "proposals" if root is not None else None
        self._cache: dict[str, Proposal] = {}
        self._lock = threading.Lock()

    # ── Paths ─────────────────────────────────────────────────────
    def _path(self, proposal_id: str) -> Path | None:
        if self.root is None:
            return None
        return self.root / f"{_safe_id(proposal_id)}.json"

    def _read(self, path: Path) -> Proposal | None:
        try:
            with path.open(encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError) as exc:
            log.error("Failed to read proposal file %s: %s", path, exc)
            return None

    # ── Write ─────────────────────────────────────────────────────
    def save(self, proposal: Proposal) -> str:
        proposal_id = proposal["id"]
        with self._lock:
            self._cache[proposal_id] = proposal
            size = len(self._cache)
        log.info("Proposal saved: %s (cached proposals: %d)", proposal_id, size)

        path = self._path(proposal_id)
        if path is None:
            return proposal_id
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(proposal, indent=2), encoding="utf-8")
        except OSError as exc:
            # The cached copy still serves this process.
            log.error("Failed to persist proposal %s: %s", proposal_id, exc)
        return proposal_id

    # ── Read ──────────────────────────────────────────────────────
    def get(self, proposal_id: str) -> Proposal | None:
        with self._lock:
            cached = self._cache.get(proposal_id)
        if cached is not None:
            return cached

        path = self._path(proposal_id)
        if path is None or not path.exists():
            log.warning("Proposal not found: %s", proposal_id)
            return None
        proposal = self._read(path)
        if proposal is None:
            return None
        if proposal.get("id") != proposal_id:
            # distinct ids can share a sanitised file stem
            log.warning("Proposal file %s holds id %r, not %r", path.name, proposal.get("id"), proposal_id)
            return None
        with self._lock:
            self._cache.setdefault(proposal_id, proposal)
            return self._cache[proposal_id]

    def list_recent(self, limit: int = LIST_LIMIT) -> list[Proposal]:
        """All known proposals, newest ``generatedAt`` first."""
        with self._lock:
            found: dict[str, Proposal] = dict(self._cache)
        if self.root is not None and self.root.is_dir():
            for path in sorted(self.root.glob("*.json")):
                proposal = self._read(path)
                if proposal and proposal.get("id") and proposal["id"] not in found:
                    found[proposal["id"]] = proposal
        ordered = sorted(found.values(), key=lambda p: p.get("generatedAt", ""), reverse=True)
        return ordered[:limit]

    def count(self) -> int:
        return len(self.list_recent(limit=10**9))

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()


# ══════════════════════════════════════════════════════════════════
# Process-wide default store
# ══════════════════════════════════════════════════════════════════

_default_store: ProposalStore | None = None
_default_lock = threading.Lock()


def get_default_store() -> ProposalStore:
    global _default_store
    with _default_lock:
        if _default_store is None:
            _default_store = ProposalStore(default_out_dir())
        return _default_store


def set_default_store(store: ProposalStore | None) -> None:
    """Replace the process-wide store (None → rebuild lazily from env)."""
    global _default_store
    with _default_lock:
        _default_store = store
