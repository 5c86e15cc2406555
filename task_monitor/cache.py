"""
Reconciliation cache.

Keeps the last known tasks of every non-empty task list so that a list can
still be archived after its files have been deleted.
"""

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from task_monitor.models import Task


@dataclass(frozen=True)
class CachedTaskList:
    """Last known state of one task list."""
    tasks: List[Task]
    last_modified: datetime


class ReconciliationCache:
    """
    Last known task list contents keyed by list ID.

    Written by every scan, consumed at most once per entry when a list's
    files disappear. Watchdog callbacks run on observer threads, so access
    goes through a lock.
    """

    def __init__(self):
        self._entries: Dict[str, CachedTaskList] = {}
        self._lock = threading.Lock()

    def store(self, list_id: str, tasks: List[Task], last_modified: datetime) -> None:
        """Record the latest state of a list, replacing any previous entry."""
        with self._lock:
            self._entries[list_id] = CachedTaskList(tasks=list(tasks), last_modified=last_modified)

    def get(self, list_id: str) -> Optional[CachedTaskList]:
        with self._lock:
            return self._entries.get(list_id)

    def pop(self, list_id: str) -> Optional[CachedTaskList]:
        """Remove and return the entry for a list (None if absent)."""
        with self._lock:
            return self._entries.pop(list_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def list_ids(self) -> List[str]:
        with self._lock:
            return sorted(self._entries)

    def __contains__(self, list_id: str) -> bool:
        with self._lock:
            return list_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
