"""Tests for the public Tracker API."""

from dataclasses import FrozenInstanceError
from datetime import timedelta

import pytest

from covhistory.config import HistoryConfig
from covhistory.exceptions import (
    InvalidPathError,
    NoEntriesFoundError,
    OperationCancelledError,
    UnsupportedDataTypeError,
)
from covhistory.history.context import CancelToken
from covhistory.history.models import BuildInfo
from covhistory.history.tracker import Tracker

from conftest import build_coverage


class TestRecord:
    def test_record_defaults(self, make_tracker, now):
        tracker = make_tracker()

        entry = tracker.record(build_coverage(81.5))

        assert entry.branch == "main"
        assert entry.commit_sha.startswith("auto_")
        assert entry.timestamp == now
        assert len(tracker.store.entry_files()) == 1
        assert tracker.store.load_all_entries().entries == [entry]

    def test_record_with_options(self, make_tracker):
        tracker = make_tracker()
        info = BuildInfo(go_version="go1.22", platform="linux", workflow_id="77")

        entry = tracker.record(
            build_coverage(70.0),
            branch="develop",
            commit_sha="abc123def456",
            commit_url="https://example.com/c/abc123",
            metadata={"project": "acme/api"},
            build_info=info,
        )

        stored = tracker.store.load_all_entries().entries[0]
        assert stored == entry
        assert stored.branch == "develop"
        assert stored.commit_url == "https://example.com/c/abc123"
        assert stored.metadata == {"project": "acme/api"}
        assert stored.build_info.workflow_id == "77"

    def test_empty_branch_defaults_to_main(self, make_tracker):
        assert make_tracker().record(build_coverage(), branch="").branch == "main"

    def test_metadata_is_copied(self, make_tracker):
        meta = {"project": "acme"}
        entry = make_tracker().record(build_coverage(), metadata=meta)
        meta["project"] = "changed"
        assert entry.metadata == {"project": "acme"}

    def test_file_hashes_derived(self, make_tracker):
        coverage = build_coverage(70.0, packages={"pkg/a": (10, 7), "pkg/b": (4, 4)})
        entry = make_tracker().record(coverage)

        assert set(entry.file_hashes) == {"pkg/a/file.go", "pkg/b/file.go"}
        assert all(len(h) == 16 for h in entry.file_hashes.values())

    def test_file_hashes_stable_for_same_coverage(self, make_tracker):
        tracker = make_tracker()
        first = tracker.record(build_coverage(70.0, packages={"pkg/a": (10, 7)}))
        second = tracker.record(build_coverage(70.0, packages={"pkg/a": (10, 7)}))
        third = tracker.record(build_coverage(70.0, packages={"pkg/a": (10, 8)}))

        assert first.file_hashes == second.file_hashes
        assert first.file_hashes != third.file_hashes

    def test_package_stats_compare_with_previous_entry(self, store, make_entry, make_tracker, now):
        previous = make_entry(
            coverage=build_coverage(60.0, packages={"pkg/a": (10, 5), "pkg/b": (10, 8)}),
            days_ago=2,
        )
        store.save_entry(previous)
        tracker = make_tracker()
        first_run = tracker.record(previous.coverage, commit_sha="seed")
        seen = first_run.package_stats["pkg/a"].first_seen

        entry = tracker.record(
            build_coverage(65.0, packages={"pkg/a": (12, 9), "pkg/b": (10, 8), "pkg/c": (5, 1)}),
            commit_sha="next",
        )

        a = entry.package_stats["pkg/a"]
        assert a.previous_percentage == pytest.approx(50.0)
        assert a.trend == "up"
        assert a.trend_percentage == pytest.approx(75.0 - 50.0)
        assert a.lines_added == 2
        assert a.lines_removed == 0
        assert a.first_seen == seen

        b = entry.package_stats["pkg/b"]
        assert b.trend == "stable"
        assert b.trend_percentage == pytest.approx(0.0)

        c = entry.package_stats["pkg/c"]
        assert c.previous_percentage == 0.0
        assert c.first_seen == now
        assert c.file_count == 1

    def test_package_stats_ignore_other_branches(self, store, make_entry, make_tracker):
        store.save_entry(
            make_entry(coverage=build_coverage(50.0, packages={"pkg/a": (10, 1)}), branch="other")
        )
        entry = make_tracker().record(build_coverage(70.0, packages={"pkg/a": (10, 7)}))
        assert entry.package_stats["pkg/a"].previous_percentage == 0.0

    def test_same_instant_records_are_all_kept(self, make_tracker):
        tracker = make_tracker()
        first = tracker.record(build_coverage(70.0), branch="feature/x", commit_sha="abc12345")
        second = tracker.record(build_coverage(71.0), branch="feature_x", commit_sha="abc12345")

        assert first.timestamp == second.timestamp
        assert len(tracker.store.entry_files()) == 2
        assert sorted(e.percentage for e in tracker.store.load_all_entries().entries) == [70.0, 71.0]

    def test_wrongly_typed_history_file_does_not_block_record(self, store, make_entry, make_tracker):
        store.save_entry(make_entry(60.0, days_ago=1))
        (store.storage_dir / "bad.json").write_text('{"timestamp": "2025-06-14T08:30:00Z", "metadata": "x"}')
        tracker = make_tracker()

        tracker.record(build_coverage(65.0))

        assert tracker.get_trend().summary.total_entries == 2
        assert tracker.get_statistics().skipped_files == 1

    def test_legacy_add(self, make_tracker):
        tracker = make_tracker()
        entry = tracker.add("release", "f00dfeed", build_coverage(90.0))
        assert entry.branch == "release"
        assert entry.commit_sha == "f00dfeed"

    def test_legacy_add_rejects_other_payloads(self, make_tracker):
        with pytest.raises(UnsupportedDataTypeError) as excinfo:
            make_tracker().add("main", "abc", {"percentage": 90.0})
        assert excinfo.value.type_name == "dict"


class TestGetLatestEntry:
    def test_returns_newest_inside_window(self, store, make_entry, make_tracker):
        recent = make_entry(80.0, days_ago=1)
        store.save_entry(recent)
        store.save_entry(make_entry(70.0, days_ago=10))

        assert make_tracker().get_latest_entry("main") == recent

    def test_only_old_history_is_not_found(self, store, make_entry, make_tracker):
        store.save_entry(make_entry(70.0, days_ago=10))

        with pytest.raises(NoEntriesFoundError) as excinfo:
            make_tracker().get_latest_entry("main")

        assert excinfo.value.branch == "main"
        assert "main" in str(excinfo.value)

    def test_other_branch_is_not_found(self, store, make_entry, make_tracker):
        store.save_entry(make_entry(70.0, days_ago=1, branch="develop"))
        with pytest.raises(NoEntriesFoundError):
            make_tracker().get_latest_entry("main")


class TestGetTrend:
    def test_empty_history_is_empty_trend(self, make_tracker, now):
        data = make_tracker().get_trend()

        assert data.is_empty
        assert data.entries == []
        assert data.summary.total_entries == 0
        assert data.analysis.prediction is None
        assert data.generated_at == now

    def test_defaults_branch_and_window(self, store, make_entry, make_tracker):
        for days_ago, pct in ((1, 75.0), (10, 70.0), (29, 65.0), (31, 60.0)):
            store.save_entry(make_entry(pct, days_ago=days_ago))
        store.save_entry(make_entry(99.0, days_ago=1, branch="develop"))

        data = make_tracker().get_trend()

        assert [e.coverage.percentage for e in data.entries] == [75.0, 70.0, 65.0]
        assert data.summary.current_trend == "up"
        assert data.analysis.prediction is None

    def test_max_points_and_days(self, store, make_entry, make_tracker):
        for days_ago in range(10):
            store.save_entry(make_entry(50.0 + days_ago, days_ago=days_ago, branch="develop"))

        data = make_tracker().get_trend(branch="develop", days=90, max_points=5)

        assert len(data.entries) == 5
        assert data.entries[0].coverage.percentage == 50.0
        assert data.summary.current_trend == "down"
        assert data.analysis.prediction is not None


class TestCleanup:
    def test_joint_age_and_count_limits(self, store, make_entry, make_tracker):
        old = [make_entry(50.0, days_ago=100 + i) for i in range(10)]
        new = [make_entry(70.0 + i, days_ago=i + 1) for i in range(5)]
        for e in old + new:
            store.save_entry(e)

        tracker = make_tracker(retention_days=90, max_entries=3)
        removed = tracker.cleanup()

        remaining = store.load_all_entries().entries
        assert removed == 12
        assert remaining == new[:3]

    def test_disabled_is_noop(self, store, make_entry, make_tracker):
        store.save_entry(make_entry(days_ago=400))
        tracker = make_tracker(auto_cleanup=False, retention_days=0, max_entries=0)

        assert tracker.cleanup() == 0
        assert len(store.entry_files()) == 1

    def test_nothing_to_drop(self, store, make_entry, make_tracker):
        store.save_entry(make_entry(days_ago=1))
        assert make_tracker().cleanup() == 0
        assert len(store.entry_files()) == 1

    def test_count_limit_drops_recent_entries_too(self, store, make_entry, make_tracker):
        for i in range(4):
            store.save_entry(make_entry(days_ago=i))
        assert make_tracker(max_entries=2).cleanup() == 2
        assert len(store.entry_files()) == 2


class TestGetStatistics:
    def test_counts_and_range(self, store, make_entry, make_tracker):
        oldest = make_entry(days_ago=30, metadata={"project": "acme/api"})
        store.save_entry(oldest)
        store.save_entry(make_entry(days_ago=10, metadata={"project": "acme/api"}))
        store.save_entry(make_entry(days_ago=5, branch="develop", metadata={"project": "acme/web"}))
        newest = make_entry(days_ago=1, branch="develop")
        store.save_entry(newest)
        (store.storage_dir / "junk.json").write_text("{{{")

        stats = make_tracker().get_statistics()

        assert stats.total_entries == 4
        assert stats.oldest_entry == oldest.timestamp
        assert stats.newest_entry == newest.timestamp
        assert stats.unique_projects == {"acme/api": 2, "acme/web": 1}
        assert stats.unique_branches == {"main": 2, "develop": 2}
        assert stats.storage_size == sum(p.stat().st_size for p in store.entry_files())
        assert stats.skipped_files == 1

    def test_empty_store(self, make_tracker):
        stats = make_tracker().get_statistics()
        assert stats.total_entries == 0
        assert stats.oldest_entry is None
        assert stats.unique_branches == {}
        assert stats.storage_size == 0


class TestCancellation:
    @pytest.mark.parametrize(
        "call",
        [
            lambda t, ctx: t.record(build_coverage(), ctx=ctx),
            lambda t, ctx: t.get_trend(ctx=ctx),
            lambda t, ctx: t.get_latest_entry("main", ctx=ctx),
            lambda t, ctx: t.cleanup(ctx=ctx),
            lambda t, ctx: t.get_statistics(ctx=ctx),
        ],
    )
    def test_cancelled_token_stops_before_io(self, make_tracker, storage_dir, call):
        token = CancelToken()
        token.cancel()

        with pytest.raises(OperationCancelledError):
            call(make_tracker(), token)

        assert not storage_dir.exists()

    def test_expired_deadline(self, make_tracker):
        token = CancelToken(timeout=0)
        with pytest.raises(OperationCancelledError) as excinfo:
            make_tracker().get_trend(ctx=token)
        assert excinfo.value.reason == "deadline exceeded"

    def test_live_token_allows_operation(self, make_tracker):
        token = CancelToken(timeout=60)
        make_tracker().record(build_coverage(), ctx=token)
        assert not token.cancelled


class TestConfiguration:
    def test_default_config(self):
        tracker = Tracker()
        assert tracker.config == HistoryConfig()
        assert str(tracker.store.storage_dir) == ".github/coverage/history"

    def test_store_uses_configured_directory(self, storage_dir):
        tracker = Tracker(HistoryConfig(storage_path=str(storage_dir)))
        assert tracker.store.storage_dir == tracker.config.storage_dir == storage_dir

    def test_storage_path_pointing_at_a_file(self, tmp_path):
        blocker = tmp_path / "history"
        blocker.write_text("")
        tracker = Tracker(HistoryConfig(storage_path=str(blocker)))
        with pytest.raises(InvalidPathError):
            tracker.get_statistics()

    def test_config_is_immutable(self, make_tracker):
        tracker = make_tracker()
        with pytest.raises(FrozenInstanceError):
            tracker.config.max_entries = 5  # type: ignore[misc]

    def test_latest_entry_window_follows_clock(self, store, make_entry, storage_dir, now):
        store.save_entry(make_entry(days_ago=1))
        later = Tracker(HistoryConfig(storage_path=str(storage_dir)), clock=lambda: now + timedelta(days=8))
        with pytest.raises(NoEntriesFoundError):
            later.get_latest_entry()
