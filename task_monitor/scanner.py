"""
Task scanner for task list directories.

Walks the tasks root, reads every task list and builds one snapshot:
- {tasks_dir}/{list_id}/*.json  - task files
- {tasks_dir}/{list_id}/prompt.md - optional prompt file
- {tasks_dir}/.archive/          - archived lists (never scanned)
"""

import re
import logging
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional, List, Tuple

from task_monitor.cache import ReconciliationCache
from task_monitor.constants import (
    TASK_MONITOR_TASKS_DIR,
    ARCHIVE_DIR_NAME,
    TASK_FILE_EXTENSION,
    PROMPT_FILE_NAME,
)
from task_monitor.models import (
    Task, TaskList, TaskListSummary, TaskMonitorData, TaskStatus
)
from task_monitor.reader import read_task_file


logger = logging.getLogger(__name__)

# Leading integer of a task ID ("12", " 7", "3-retry")
_LEADING_INT_PATTERN = re.compile(r"\s*([+-]?\d+)")


def task_sort_key(task: Task) -> Tuple[int, int]:
    """
    Sort key ordering tasks by numeric ID.

    IDs without a leading integer sort after every numeric ID. Python's sort
    is stable, so ties keep scan (filename) order.
    """
    match = _LEADING_INT_PATTERN.match(task.id)
    if match:
        return (0, int(match.group(1)))
    return (1, 0)


def list_id_for_path(tasks_dir: Path, path: Path, is_directory: bool = False) -> Optional[str]:
    """
    Get the task list ID a path belongs to.

    Task files must sit directly inside a list directory; a directory path
    must be a list directory itself. Paths outside the tasks root or inside
    the archive give None.
    """
    try:
        parts = Path(path).relative_to(tasks_dir).parts
    except ValueError:
        return None

    expected_depth = 1 if is_directory else 2
    if len(parts) != expected_depth or parts[0] == ARCHIVE_DIR_NAME:
        return None

    return parts[0]


class TaskScanner:
    """
    Scans the tasks root for task lists.

    Every successful scan of a non-empty list is recorded in the
    reconciliation cache so the list can be archived if it disappears.
    """

    def __init__(
        self,
        tasks_dir: Optional[Path] = None,
        cache: Optional[ReconciliationCache] = None
    ):
        """
        Initialize scanner.

        Args:
            tasks_dir: Root directory holding one subdirectory per task list
            cache: Reconciliation cache to update (creates one if None)
        """
        self.tasks_dir = Path(tasks_dir) if tasks_dir else TASK_MONITOR_TASKS_DIR
        self.cache = cache if cache is not None else ReconciliationCache()

    @property
    def archive_dir(self) -> Path:
        return self.tasks_dir / ARCHIVE_DIR_NAME

    def list_directories(self) -> List[Path]:
        """Get task list directories in name order, skipping the archive."""
        if not self.tasks_dir.is_dir():
            return []

        try:
            entries = sorted(self.tasks_dir.iterdir(), key=lambda p: p.name)
        except OSError as e:
            logger.warning(f"Cannot read tasks directory {self.tasks_dir}: {e}")
            return []

        return [
            entry for entry in entries
            if entry.name != ARCHIVE_DIR_NAME and entry.is_dir()
        ]

    def read_list_directory(self, list_dir: Path) -> Optional[Tuple[List[Task], datetime]]:
        """
        Read every task file in one list directory.

        Args:
            list_dir: Task list directory

        Returns:
            (tasks sorted by numeric ID, last modified time), or None when
            the directory cannot be read or holds no readable tasks
        """
        try:
            task_files = sorted(
                (
                    f for f in list_dir.iterdir()
                    if f.name.endswith(TASK_FILE_EXTENSION) and f.is_file()
                ),
                key=lambda p: p.name
            )
        except OSError as e:
            logger.warning(f"Skipping unreadable task list {list_dir}: {e}")
            return None

        tasks = []
        latest_mtime = None

        for task_file in task_files:
            task = read_task_file(task_file)
            if task is None:
                continue

            try:
                mtime = task_file.stat().st_mtime
            except OSError as e:
                # Deleted between read and stat
                logger.debug(f"Skipping vanished task file {task_file}: {e}")
                continue

            tasks.append(task)
            if latest_mtime is None or mtime > latest_mtime:
                latest_mtime = mtime

        if not tasks:
            return None

        tasks.sort(key=task_sort_key)
        return tasks, datetime.fromtimestamp(latest_mtime, tz=timezone.utc)

    def scan_task_lists(self) -> List[TaskList]:
        """
        Scan all task lists.

        Returns:
            Non-empty task lists, most recently modified first
        """
        task_lists = []

        for list_dir in self.list_directories():
            result = self.read_list_directory(list_dir)
            if result is None:
                continue

            tasks, last_modified = result
            self.cache.store(list_dir.name, tasks, last_modified)

            task_lists.append(TaskList(
                id=list_dir.name,
                tasks=tasks,
                last_modified=last_modified
            ))

        task_lists.sort(key=lambda t: t.last_modified, reverse=True)
        return task_lists

    def scan_summaries(self) -> List[TaskListSummary]:
        """
        Scan all task lists into summaries.

        Returns:
            Summaries of non-empty task lists, most recently modified first
        """
        summaries = []

        for list_dir in self.list_directories():
            result = self.read_list_directory(list_dir)
            if result is None:
                continue

            tasks, last_modified = result
            summaries.append(TaskListSummary(
                id=list_dir.name,
                path=str(list_dir),
                task_count=len(tasks),
                pending_count=sum(1 for t in tasks if t.status == TaskStatus.PENDING),
                in_progress_count=sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS),
                completed_count=sum(1 for t in tasks if t.status == TaskStatus.COMPLETED),
                last_modified=last_modified,
                has_prompt=(list_dir / PROMPT_FILE_NAME).exists()
            ))

        summaries.sort(key=lambda s: s.last_modified, reverse=True)
        return summaries

    def build_snapshot(self, project_dir: str) -> TaskMonitorData:
        """
        Build a complete snapshot of the tasks root.

        Args:
            project_dir: Project directory to embed in the snapshot

        Returns:
            TaskMonitorData with the most recent list selected
        """
        task_lists = self.scan_task_lists()
        available_lists = self.scan_summaries()

        return TaskMonitorData(
            task_lists=task_lists,
            available_lists=available_lists,
            selected_list_id=task_lists[0].id if task_lists else "",
            templates=[],
            project_dir=project_dir
        )

