"""File-per-entry JSON store for coverage history.

Layout: one ``<YYYYmmdd-HHMMSS.ffffff>-<branch>-<sha[:8]>.json`` file per
entry inside the storage directory, with a ``-N`` suffix when the name is
already taken. Files are written to a temporary name and hard-linked into
place, so a reader never sees a half-written entry and nothing is overwritten.

Usage::

    store = EntryStore(".github/coverage/history")
    store.save_entry(entry)
    result = store.load_all_entries()
    for skipped in result.skipped:
        print(skipped.path, skipped.reason)
"""

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from ..exceptions import InvalidPathError, StorageError
from ..logging_config import get_logger
from ..timestamps import ensure_utc, utcnow
from .context import CancelToken, check_cancelled
from .models import Entry, LoadResult, SkippedFile, StoredEntry

logger = get_logger(__name__)

ENTRY_GLOB = "*.json"
FILENAME_TIME_FORMAT = "%Y%m%d-%H%M%S.%f"
DEFAULT_BRANCH = "main"
NO_COMMIT = "nocommit"
SHORT_SHA_LENGTH = 8
MAX_NAME_ATTEMPTS = 100


def _entry_key(entry: Entry) -> Tuple[datetime, str, str]:
    return (ensure_utc(entry.timestamp), entry.branch, entry.commit_sha)


def _filename_safe(branch: str) -> str:
    """Keep branch names like ``feature/login`` inside a single path component."""
    return branch.replace("/", "_").replace("\\", "_")


class EntryStore:
    """Persists entries as JSON files under one directory."""

    def __init__(self, storage_path: Union[str, Path]) -> None:
        self.storage_dir: Path = Path(storage_path)

    # ── paths ─────────────────────────────────────────────────────

    def ensure_storage_dir(self) -> None:
        """Create the storage directory if needed (idempotent).

        Raises:
            InvalidPathError: If the storage path exists but is not a directory.
            StorageError: If the directory cannot be created.
        """
        if self.storage_dir.exists() and not self.storage_dir.is_dir():
            raise InvalidPathError(self.storage_dir, "storage path exists and is not a directory")
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(self.storage_dir, f"cannot create storage directory: {e}") from e

    def entry_filename(self, entry: Entry) -> str:
        """File name for ``entry``: timestamp, branch and short commit SHA."""
        stamp = ensure_utc(entry.timestamp).strftime(FILENAME_TIME_FORMAT)
        branch = _filename_safe(entry.branch or DEFAULT_BRANCH)
        commit = (entry.commit_sha or NO_COMMIT)[:SHORT_SHA_LENGTH]
        return f"{stamp}-{branch}-{commit}.json"

    def entry_files(self) -> List[Path]:
        """All entry files currently in the store, sorted by name."""
        if not self.storage_dir.is_dir():
            return []
        return sorted(self.storage_dir.glob(ENTRY_GLOB))

    # ── writes ────────────────────────────────────────────────────

    def save_entry(self, entry: Entry, ctx: Optional[CancelToken] = None) -> Path:
        """Write ``entry`` atomically and return the final path.

        An existing entry file is never replaced. When another entry already
        holds the name (for example ``feature/x`` and ``feature_x`` recorded
        in the same microsecond), a numeric suffix is added.
        """
        check_cancelled(ctx)
        self.ensure_storage_dir()

        payload = json.dumps(entry.to_dict(), indent=2)

        fd, tmp_name = tempfile.mkstemp(prefix=".", suffix=".tmp", dir=str(self.storage_dir))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            target = self._publish(tmp_name, entry)
        except OSError as e:
            raise StorageError(
                self.storage_dir / self.entry_filename(entry), f"cannot write entry file: {e}"
            ) from e
        finally:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass

        logger.debug("Saved history entry %s", target.name)
        return target

    def _publish(self, tmp_name: str, entry: Entry) -> Path:
        """Hard-link the finished temp file under the first free entry name."""
        base = self.entry_filename(entry)[: -len(".json")]
        for attempt in range(MAX_NAME_ATTEMPTS):
            name = f"{base}.json" if attempt == 0 else f"{base}-{attempt}.json"
            target = self.storage_dir / name
            try:
                os.link(tmp_name, target)
            except FileExistsError:
                logger.debug("Entry file %s already exists", name)
                continue
            return target
        raise StorageError(self.storage_dir / f"{base}.json", "no free entry file name")

    def save_all_entries(
        self,
        entries: Iterable[Entry],
        current: Optional[LoadResult] = None,
        ctx: Optional[CancelToken] = None,
    ) -> int:
        """Make the loaded part of the store hold exactly ``entries``.

        Kept entries that have no file yet are written first; afterwards only
        the files of loaded entries outside ``entries`` are unlinked. Kept
        files are never rewritten, files added after ``current`` was loaded
        are left alone, and undecodable files are never deleted here.

        Args:
            entries: The entries to keep.
            current: A previous ``load_all_entries`` result; loaded if omitted.
            ctx: Optional cancel token, checked before each file operation.

        Returns:
            Number of entry files removed.
        """
        keep = list(entries)
        if current is None:
            current = self.load_all_entries(ctx)

        keep_keys = {_entry_key(e) for e in keep}
        present = set()
        stale: List[StoredEntry] = []
        for record in current.records:
            key = _entry_key(record.entry)
            if key in keep_keys:
                present.add(key)
            else:
                stale.append(record)

        for entry in keep:
            if _entry_key(entry) not in present:
                self.save_entry(entry, ctx)

        removed = 0
        for record in stale:
            check_cancelled(ctx)
            try:
                record.path.unlink()
            except FileNotFoundError:
                logger.debug("Entry file already removed: %s", record.path.name)
            except OSError as e:
                raise StorageError(record.path, f"cannot remove entry file: {e}") from e
            removed += 1

        if removed:
            logger.info("Removed %d history entries from %s", removed, self.storage_dir)
        return removed

    # ── reads ─────────────────────────────────────────────────────

    def load_all_entries(self, ctx: Optional[CancelToken] = None) -> LoadResult:
        """Read every entry file, newest first.

        A file that cannot be read or decoded is skipped: it is logged and
        listed in ``LoadResult.skipped`` and does not fail the read.
        """
        check_cancelled(ctx)
        self.ensure_storage_dir()

        result = LoadResult()
        for path in self.entry_files():
            check_cancelled(ctx)
            try:
                raw = json.loads(path.read_text(encoding="utf-8"))
                if not isinstance(raw, dict):
                    raise ValueError("entry file does not contain a JSON object")
                entry = Entry.from_dict(raw)
            except (OSError, ValueError, KeyError, TypeError) as e:
                reason = f"{type(e).__name__}: {e}"
                logger.warning("Skipping unreadable history entry %s (%s)", path, reason)
                result.skipped.append(SkippedFile(path=path, reason=reason))
                continue
            result.records.append(StoredEntry(entry=entry, path=path))

        result.records.sort(key=lambda r: ensure_utc(r.entry.timestamp), reverse=True)
        return result

    def load_entries(
        self,
        branch: str,
        days: Optional[int] = None,
        max_points: Optional[int] = None,
        now: Optional[datetime] = None,
        ctx: Optional[CancelToken] = None,
    ) -> List[Entry]:
        """Entries for ``branch`` newer than ``now - days``, newest first.

        ``days=None`` disables the age filter and ``max_points=None`` the
        count limit.
        """
        entries = self.load_all_entries(ctx).entries

        selected = [e for e in entries if e.branch == branch]
        if days is not None:
            cutoff = ensure_utc(now or utcnow()) - timedelta(days=days)
            selected = [e for e in selected if ensure_utc(e.timestamp) > cutoff]
        if max_points is not None:
            selected = selected[:max_points]
        return selected

    def storage_size(self, ctx: Optional[CancelToken] = None) -> int:
        """Total bytes of all entry files."""
        size = 0
        for path in self.entry_files():
            check_cancelled(ctx)
            try:
                size += path.stat().st_size
            except OSError:
                continue
        return size
