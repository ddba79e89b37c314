"""Unit tests for gitgate.journal."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from gitgate.journal import JournalStore, journal_paths
from gitgate.models import RepositoryContext


@pytest.fixture
def context(tmp_path: Path) -> RepositoryContext:
    return RepositoryContext(name="web-app", working_directory=tmp_path)


class TestJournalPaths:
    def test_unnamed_store(self, tmp_path: Path) -> None:
        paths = journal_paths(tmp_path)

        assert paths.operation_log.name == "mcp-git.log"
        assert paths.push_history.name == "push-history.json"
        assert paths.pending_changes.name == "pending-changes.json"

    def test_named_and_prefixed_store(self, tmp_path: Path) -> None:
        paths = journal_paths(tmp_path, "web-app", "team")

        assert paths.operation_log.name == "team.mcp-git.web-app.log"
        assert paths.push_history.name == "team.push-history.web-app.json"
        assert paths.pending_changes.name == "team.pending-changes.web-app.json"


class TestPendingChanges:
    def test_newest_first_and_persisted(
        self, tmp_path: Path, context: RepositoryContext
    ) -> None:
        store = JournalStore("web-app", directory=tmp_path)

        first = store.add_pending(["a.txt"], "fix A", context)
        second = store.add_pending(["b.txt"], "fix B", context)

        assert [c.id for c in store.pending_changes] == [second.id, first.id]
        assert second.id > first.id
        on_disk = json.loads(store.paths.pending_changes.read_text())  # type: ignore[union-attr]
        assert [c["content"] for c in on_disk] == ["fix B", "fix A"]
        assert on_disk[0]["repo_name"] == "web-app"
        assert on_disk[0]["reviewed"] is False

    def test_cap_evicts_oldest(self, context: RepositoryContext) -> None:
        store = JournalStore(max_pending_changes=3)

        for i in range(5):
            store.add_pending([f"f{i}"], f"change {i}", context)

        assert [c.content for c in store.pending_changes] == [
            "change 4",
            "change 3",
            "change 2",
        ]

    def test_ids_strictly_increase(self) -> None:
        store = JournalStore()
        ids = [store.next_id() for _ in range(50)]

        assert ids == sorted(set(ids))

    def test_mark_reviewed(self, tmp_path: Path, context: RepositoryContext) -> None:
        store = JournalStore(directory=tmp_path)
        store.add_pending(["a"], "one", context)
        store.add_pending(["b"], "two", context)

        store.mark_reviewed(store.pending_changes[:1])

        assert [c.reviewed for c in store.pending_changes] == [True, False]

    def test_clear_returns_count(self, tmp_path: Path, context: RepositoryContext) -> None:
        store = JournalStore(directory=tmp_path)
        store.add_pending(["a"], "one", context)
        store.add_pending(["b"], "two", context)

        assert store.clear_pending() == 2
        assert store.pending_changes == ()
        assert json.loads(store.paths.pending_changes.read_text()) == []  # type: ignore[union-attr]
        assert store.clear_pending() == 0


class TestPushHistory:
    def test_success_and_failure_recorded(self, context: RepositoryContext) -> None:
        store = JournalStore(max_push_history=2)

        store.record_push(context, "first")
        store.record_push(context, "second", error="rejected", exit_code=1)
        store.record_push(context, "third")

        history = store.push_history
        assert [e.message for e in history] == ["third", "second"]
        assert history[0].success is True
        assert history[1].success is False
        assert history[1].exit_code == 1
        assert history[1].remote_branch == "main"


class TestOperationLog:
    def test_appends_text_line(self, tmp_path: Path) -> None:
        store = JournalStore(directory=tmp_path)

        store.record_operation("tools/call", {"name": "git_status"}, {"ok": True})
        store.record_operation("bogus", {}, error="Method not found: bogus")

        lines = store.paths.operation_log.read_text().splitlines()  # type: ignore[union-attr]
        assert len(lines) == 2
        assert ' | tools/call | {"name": "git_status"} | SUCCESS | RESPONSE: {"ok": true}' in lines[0]
        assert lines[1].endswith("| bogus | {} | Method not found: bogus | RESPONSE: null")
        assert [e.method for e in store.operations] == ["bogus", "tools/call"]

    def test_memory_cap_does_not_truncate_file(self, tmp_path: Path) -> None:
        store = JournalStore(directory=tmp_path, max_operation_logs=2)

        for i in range(4):
            store.record_operation(f"m{i}", {})

        assert [e.method for e in store.operations] == ["m3", "m2"]
        assert len(store.paths.operation_log.read_text().splitlines()) == 4  # type: ignore[union-attr]

    def test_in_memory_store_writes_nothing(self, tmp_path: Path) -> None:
        store = JournalStore("api")

        store.record_operation("ping", {})

        assert store.persistent is False
        assert store.paths is None
        assert list(tmp_path.rglob("*.log")) == []


class TestLoad:
    def test_reload_round_trip(self, tmp_path: Path, context: RepositoryContext) -> None:
        store = JournalStore("web-app", directory=tmp_path)
        change = store.add_pending(["a"], "one", context)
        store.record_push(context, "msg")

        reloaded = JournalStore("web-app", directory=tmp_path)
        reloaded.load()
        reloaded.load()

        assert reloaded.pending_changes == store.pending_changes
        assert reloaded.push_history == store.push_history
        assert reloaded.next_id() > change.id

    def test_corrupt_file_treated_as_empty(self, tmp_path: Path) -> None:
        paths = journal_paths(tmp_path)
        paths.pending_changes.write_text("{not json")
        paths.push_history.write_text('{"not": "a list"}')

        store = JournalStore(directory=tmp_path)
        store.load()

        assert store.pending_changes == ()
        assert store.push_history == ()

    def test_invalid_entries_are_skipped(
        self, tmp_path: Path, context: RepositoryContext
    ) -> None:
        JournalStore(directory=tmp_path).add_pending(["a"], "valid", context)
        paths = journal_paths(tmp_path)
        data = json.loads(paths.pending_changes.read_text())
        paths.pending_changes.write_text(json.dumps([{"id": "nope"}, *data]))

        store = JournalStore(directory=tmp_path)
        store.load()
        store.add_pending(["b"], "newer", context)

        assert [c.content for c in store.pending_changes] == ["newer", "valid"]
        on_disk = json.loads(paths.pending_changes.read_text())
        assert [c["content"] for c in on_disk] == ["newer", "valid"]

    def test_operation_log_not_reloaded(self, tmp_path: Path) -> None:
        JournalStore(directory=tmp_path).record_operation("ping", {})

        store = JournalStore(directory=tmp_path)
        store.load()

        assert store.operations == ()


class TestRelocate:
    def test_writes_current_state_to_empty_directory(
        self, tmp_path: Path, context: RepositoryContext
    ) -> None:
        store = JournalStore("api")
        store.add_pending(["a"], "one", context)

        store.relocate(tmp_path / "logs")

        assert store.persistent is True
        data = json.loads(store.paths.pending_changes.read_text())  # type: ignore[union-attr]
        assert [c["content"] for c in data] == ["one"]
        assert store.paths.push_history.exists()  # type: ignore[union-attr]

    def test_loads_existing_records(
        self, tmp_path: Path, context: RepositoryContext
    ) -> None:
        JournalStore("api", directory=tmp_path).add_pending(["a"], "on disk", context)
        store = JournalStore("api")
        store.add_pending(["b"], "in memory", context)

        store.relocate(tmp_path)

        assert [c.content for c in store.pending_changes] == ["on disk"]

    def test_keeps_pending_when_only_history_exists(
        self, tmp_path: Path, context: RepositoryContext
    ) -> None:
        store = JournalStore("web")
        store.add_pending(["a.txt"], "fix A", context)
        journal_paths(tmp_path, "web").push_history.write_text("[]")

        store.relocate(tmp_path)

        assert [c.content for c in store.pending_changes] == ["fix A"]
        on_disk = json.loads(journal_paths(tmp_path, "web").pending_changes.read_text())
        assert [c["content"] for c in on_disk] == ["fix A"]

    def test_keeps_history_when_only_pending_exists(
        self, tmp_path: Path, context: RepositoryContext
    ) -> None:
        store = JournalStore("web")
        store.record_push(context, "feat: x")
        journal_paths(tmp_path, "web").pending_changes.write_text("[]")

        store.relocate(tmp_path)

        assert [e.message for e in store.push_history] == ["feat: x"]
        assert store.pending_changes == ()
