"""
Task monitor daemon.

Wires the watchers, scheduler, scanner, archiver and publisher together and
keeps the published artifacts in step with the tasks root and the config
file until a shutdown signal arrives.
"""

import signal
import logging
import threading
from pathlib import Path
from typing import Optional

from task_monitor.api import ConfigAPI
from task_monitor.archiver import TaskArchiver
from task_monitor.cache import ReconciliationCache
from task_monitor.config import ConfigManager
from task_monitor.constants import (
    TASK_MONITOR_TASKS_DIR,
    TASK_MONITOR_DEBOUNCE_MS,
    TASK_MONITOR_USE_POLLING,
)
from task_monitor.models import TaskMonitorData
from task_monitor.publisher import Publisher
from task_monitor.scanner import TaskScanner
from task_monitor.scheduler import RegenerationScheduler
from task_monitor.watchdog import TaskListWatcher, ConfigFileWatcher


logger = logging.getLogger(__name__)


class TaskMonitorDaemon:
    """
    Long-running task monitor service.

    Every event source (task file change, task file removal, config reload,
    config API write) ends in a scheduler request; the scheduler runs
    regenerate() one pass at a time.
    """

    def __init__(
        self,
        config_file: Optional[Path] = None,
        tasks_dir: Optional[Path] = None,
        output_dir: Optional[Path] = None,
        debounce_ms: int = TASK_MONITOR_DEBOUNCE_MS,
        use_polling: bool = TASK_MONITOR_USE_POLLING
    ):
        """
        Initialize daemon.

        Args:
            config_file: Path to configuration file (uses default if None)
            tasks_dir: Tasks root directory (uses default if None)
            output_dir: Artifact output directory (uses default if None)
            debounce_ms: Regeneration debounce window
            use_polling: Use polling observers instead of native events
        """
        self.config_manager = ConfigManager(config_file)
        self.cache = ReconciliationCache()
        self.scanner = TaskScanner(tasks_dir or TASK_MONITOR_TASKS_DIR, cache=self.cache)
        self.archiver = TaskArchiver(self.scanner.archive_dir)
        self.publisher = Publisher(output_dir)
        self.scheduler = RegenerationScheduler(self.regenerate, debounce_ms=debounce_ms)
        self.config_api = ConfigAPI(self.config_manager, self.scheduler)
        self.use_polling = use_polling

        self.task_watcher: Optional[TaskListWatcher] = None
        self.config_watcher: Optional[ConfigFileWatcher] = None

        self.running = False
        self.shutdown_requested = False
        self._stop_event = threading.Event()
        # Cache reads and writes happen only while holding this lock
        self._pass_lock = threading.Lock()

    def regenerate(self) -> Optional[TaskMonitorData]:
        """
        Run one aggregation + publish pass.

        Returns:
            The published snapshot, or None if the pass failed (the
            previously published artifacts are left in place)
        """
        config = self.config_manager.config
        logger.info("Regenerating monitor files...")

        try:
            with self._pass_lock:
                snapshot = self.scanner.build_snapshot(config.project_dir)
                self.publisher.publish(snapshot, config)
        except Exception as e:
            logger.error(f"Error regenerating files: {e}", exc_info=True)
            return None

        logger.info(f"Files regenerated successfully ({len(snapshot.task_lists)} task lists)")
        return snapshot

    def _on_task_file_changed(self, file_path: str) -> None:
        self.scheduler.request()

    def _on_task_file_removed(self, file_path: str, list_id: str) -> None:
        # Archive from the cache before the next pass forgets the list
        with self._pass_lock:
            self.archiver.archive_from_cache(self.cache, list_id)
        self.scheduler.request()

    def _on_config_file_changed(self) -> None:
        if self.config_manager.reload_if_changed():
            logger.info("Config file changed externally, regenerating")
            self.scheduler.request()

    def _setup_watchdog(self) -> None:
        """Create and start the task and config watchers."""
        if self.task_watcher is None:
            self.task_watcher = TaskListWatcher(
                self.scanner.tasks_dir,
                change_callback=self._on_task_file_changed,
                remove_callback=self._on_task_file_removed,
                use_polling=self.use_polling
            )
        if self.config_watcher is None:
            self.config_watcher = ConfigFileWatcher(
                self.config_manager.config_file,
                callback=self._on_config_file_changed,
                use_polling=self.use_polling
            )

        self.task_watcher.start()
        self.config_watcher.start()

    def start(self) -> None:
        """Prepare directories, publish once and start watching."""
        self.scanner.tasks_dir.mkdir(parents=True, exist_ok=True)
        try:
            self.config_manager.ensure_config_file()
        except OSError as e:
            logger.error(f"Failed to create config file {self.config_manager.config_file}: {e}")

        self.regenerate()
        self._setup_watchdog()
        self.running = True

        config = self.config_manager.config
        logger.info(f"Tasks:   {self.scanner.tasks_dir}")
        logger.info(f"Output:  {self.publisher.output_dir}")
        logger.info(f"Config:  {self.config_manager.config_file}")
        logger.info(f"Project: {config.project_dir}")

    def run(self) -> None:
        """Run until SIGINT/SIGTERM."""
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        self.start()
        logger.info("Watching for changes... (Ctrl+C to exit)")

        try:
            while not self.shutdown_requested:
                self._stop_event.wait(timeout=1.0)
        finally:
            self._shutdown()

    def _signal_handler(self, signum, frame) -> None:
        logger.info(f"Received signal {signum}, shutting down")
        self.shutdown_requested = True
        self._stop_event.set()

    def _shutdown(self) -> None:
        """Stop watchers and the scheduler."""
        self.shutdown_requested = True
        self._stop_event.set()

        if self.task_watcher:
            self.task_watcher.stop()
        if self.config_watcher:
            self.config_watcher.stop()

        self.scheduler.shutdown()
        self.running = False
        logger.info("Task monitor stopped")
