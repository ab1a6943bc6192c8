"""Tests for the proposal store (in-memory cache + JSON-file persistence).

Run:  pytest test_proposal_store.py -v
"""
from __future__ import annotations

import json
import threading

import pytest

import engine.proposal_store as proposal_store
from engine.proposal_store import ProposalStore, _safe_id, get_default_store, set_default_store


def _proposal(pid: str, generated_at: str = "2026-01-01T00:00:00+00:00") -> dict:
    return {
        "id": pid,
        "clientName": "acme",
        "repoUrl": "https://github.com/acme/app",
        "analysis": {"techStack": [], "issues": [], "opportunities": []},
        "uiConfiguration": {"layout": "linear"},
        "services": [],
        "generatedAt": generated_at,
    }


@pytest.fixture
def store(tmp_path):
    return ProposalStore(tmp_path)


# ── Save / get ────────────────────────────────────────────────────

def test_save_writes_json_file(store, tmp_path):
    store.save(_proposal("p-1"))
    path = tmp_path / "proposals" / "p-1.json"
    assert path.exists()
    assert json.loads(path.read_text(encoding="utf-8"))["id"] == "p-1"


def test_get_from_cache(store):
    proposal = _proposal("p-1")
    store.save(proposal)
    assert store.get("p-1") is proposal


def test_get_reads_through_from_disk(tmp_path):
    ProposalStore(tmp_path).save(_proposal("p-2"))
    fresh = ProposalStore(tmp_path)
    loaded = fresh.get("p-2")
    assert loaded["id"] == "p-2"
    # populated into the cache on first read
    assert fresh.get("p-2") is loaded


def test_get_unknown_returns_none(store):
    assert store.get("missing") is None


def test_corrupt_file_is_skipped(store, tmp_path):
    folder = tmp_path / "proposals"
    folder.mkdir()
    (folder / "bad.json").write_text("{not json", encoding="utf-8")
    assert store.get("bad") is None
    assert store.list_recent() == []


def test_memory_only_store():
    store = ProposalStore()
    store.save(_proposal("m-1"))
    assert store.get("m-1")["id"] == "m-1"
    store.clear_cache()
    assert store.get("m-1") is None


def test_unwritable_root_keeps_cached_copy(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    store = ProposalStore(blocker)  # proposals/ would live under a regular file
    store.save(_proposal("p-3"))
    assert store.get("p-3")["id"] == "p-3"


# ── Listing ───────────────────────────────────────────────────────

def test_list_newest_first_and_limit(store):
    store.save(_proposal("old", "2026-01-01T00:00:00+00:00"))
    store.save(_proposal("new", "2026-03-01T00:00:00+00:00"))
    store.save(_proposal("mid", "2026-02-01T00:00:00+00:00"))
    assert [p["id"] for p in store.list_recent()] == ["new", "mid", "old"]
    assert [p["id"] for p in store.list_recent(limit=2)] == ["new", "mid"]
    assert store.count() == 3


def test_list_merges_disk_and_cache(tmp_path):
    ProposalStore(tmp_path).save(_proposal("disk", "2026-01-01T00:00:00+00:00"))
    store = ProposalStore(tmp_path)
    store.save(_proposal("cache", "2026-05-01T00:00:00+00:00"))
    assert [p["id"] for p in store.list_recent()] == ["cache", "disk"]


# ── Ids ───────────────────────────────────────────────────────────

def test_safe_id():
    assert _safe_id("abc-123") == "abc-123"
    assert _safe_id("../../etc/passwd") == "______etc_passwd"
    assert _safe_id("   ") == "unknown"
    assert len(_safe_id("x" * 500)) == 96


def test_path_traversal_stays_in_folder(store, tmp_path):
    store.save(_proposal("../escape"))
    assert not (tmp_path / "escape.json").exists()
    assert (tmp_path / "proposals" / "___escape.json").exists()


def test_colliding_file_stem_not_served_for_other_id(tmp_path):
    assert _safe_id("a/b") == _safe_id("a?b")
    ProposalStore(tmp_path).save(_proposal("a/b"))
    fresh = ProposalStore(tmp_path)
    assert fresh.get("a?b") is None
    assert fresh.get("a/b")["id"] == "a/b"


# ── Concurrency ───────────────────────────────────────────────────

def test_concurrent_saves(store):
    def worker(n):
        for k in range(20):
            store.save(_proposal(f"t{n}-{k}"))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert store.count() == 100


# ── Default store ─────────────────────────────────────────────────

def test_default_store_uses_env(tmp_path, monkeypatch):
    monkeypatch.setenv("DEEPSCAN_OUT_DIR", str(tmp_path))
    monkeypatch.setattr(proposal_store, "_default_store", None)
    store = get_default_store()
    assert store.root == tmp_path.resolve() / "proposals"
    assert get_default_store() is store
    set_default_store(None)
