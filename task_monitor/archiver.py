"""
Archiver for removed task lists.

When a task list's files are deleted, its last known contents are written to
{tasks_dir}/.archive/{list_id}_{timestamp}.json before the cache forgets it.
"""

import os
import logging
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional, List

from task_monitor.cache import ReconciliationCache
from task_monitor.models import ArchiveRecord, Task


logger = logging.getLogger(__name__)


def format_archive_timestamp(moment: datetime) -> str:
    """Filename-safe UTC timestamp with millisecond resolution."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H-%M-%S-") + f"{moment.microsecond // 1000:03d}Z"


class TaskArchiver:
    """Writes one archive record per removed task list."""

    def __init__(self, archive_dir: Path):
        """
        Initialize archiver.

        Args:
            archive_dir: Directory receiving archive records
        """
        self.archive_dir = Path(archive_dir)

    def archive(self, list_id: str, tasks: List[Task]) -> Optional[Path]:
        """
        Archive a task list.

        Args:
            list_id: Task list ID
            tasks: Last known tasks of the list

        Returns:
            Path of the new archive file, or None if the write failed
        """
        now = datetime.now(timezone.utc)
        record = ArchiveRecord(id=list_id, archived_at=now, tasks=tasks)
        content = record.model_dump_json(by_alias=True, indent=2)

        try:
            self.archive_dir.mkdir(parents=True, exist_ok=True)
            archive_path = self._write_new_file(f"{list_id}_{format_archive_timestamp(now)}", content)
        except OSError as e:
            logger.error(f"Failed to archive {list_id}: {e}")
            return None

        logger.info(f"Saved {list_id} to {archive_path}")
        return archive_path

    def archive_from_cache(self, cache: ReconciliationCache, list_id: str) -> Optional[Path]:
        """
        Archive a list from its cached state and drop the cache entry.

        The entry is removed before writing, so each cached state is archived
        at most once even if the write fails.

        Returns:
            Path of the new archive file, or None if nothing was archived
        """
        cached = cache.pop(list_id)
        if cached is None or not cached.tasks:
            return None

        return self.archive(list_id, cached.tasks)

    def _write_new_file(self, base_name: str, content: str) -> Path:
        """Create a new archive file, never replacing an existing one."""
        attempt = 0
        while True:
            name = base_name if attempt == 0 else f"{base_name}-{attempt}"
            archive_path = self.archive_dir / f"{name}.json"
            try:
                with open(archive_path, "x", encoding="utf-8") as f:
                    f.write(content)
                    f.flush()
                    os.fsync(f.fileno())
                return archive_path
            except FileExistsError:
                attempt += 1
