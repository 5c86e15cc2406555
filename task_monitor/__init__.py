"""
Task Monitor - Real-time dashboard for Claude task lists.

Watches a tasks root and republishes it as JSON plus a self-contained HTML
dashboard whenever something changes.

Layout: the directory structure is the source of truth.
- ~/.claude/tasks/{list_id}/*.json   - task files of one task list
- ~/.claude/tasks/{list_id}/prompt.md - optional prompt
- ~/.claude/tasks/.archive/          - last state of removed task lists
"""

__version__ = "2.2.1"
__author__ = "DataChat Project"

from task_monitor.models import (
    TaskStatus,
    Task,
    TaskList,
    TaskListSummary,
    TaskMonitorData,
    MonitorConfig,
    ArchiveRecord,
)

from task_monitor.config import ConfigManager, ConfigValidationError, DEFAULT_CONFIG_FILE
from task_monitor.atomic import AtomicFileWriter
from task_monitor.reader import read_task_file
from task_monitor.cache import ReconciliationCache
from task_monitor.scanner import TaskScanner
from task_monitor.archiver import TaskArchiver
from task_monitor.scheduler import RegenerationScheduler
from task_monitor.publisher import Publisher, PublishError
from task_monitor.api import ConfigAPI
from task_monitor.watchdog import TaskListWatcher, ConfigFileWatcher
from task_monitor.daemon import TaskMonitorDaemon

__all__ = [
    # Models
    "TaskStatus",
    "Task",
    "TaskList",
    "TaskListSummary",
    "TaskMonitorData",
    "MonitorConfig",
    "ArchiveRecord",
    # Config
    "ConfigManager",
    "ConfigValidationError",
    "DEFAULT_CONFIG_FILE",
    # Utilities
    "AtomicFileWriter",
    "read_task_file",
    # Components
    "ReconciliationCache",
    "TaskScanner",
    "TaskArchiver",
    "RegenerationScheduler",
    "Publisher",
    "PublishError",
    "ConfigAPI",
    "TaskListWatcher",
    "ConfigFileWatcher",
    "TaskMonitorDaemon",
]
