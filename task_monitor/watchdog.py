"""
Filesystem watchers for task-monitor.

TaskListWatcher reports task file changes and removals under the tasks root.
ConfigFileWatcher reports edits of the config file. Callback failures are
logged and never stop the observer.
"""

import os
import logging
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

from task_monitor.constants import TASK_FILE_EXTENSION, TASK_MONITOR_USE_POLLING
from task_monitor.scanner import list_id_for_path


logger = logging.getLogger(__name__)


class _ObservedHandler(FileSystemEventHandler):
    """Event handler owning the observer that feeds it."""

    def __init__(self, watch_path: Path, recursive: bool, use_polling: bool):
        super().__init__()
        self.watch_path = Path(watch_path)
        self.recursive = recursive
        self.use_polling = use_polling
        self._observer = None

    def start(self) -> None:
        """Start watching."""
        if self._observer is not None and self._observer.is_alive():
            logger.debug(f"Watcher for {self.watch_path} already running")
            return

        if not self.watch_path.exists():
            logger.warning(f"Cannot watch missing path: {self.watch_path}")
            return

        observer = PollingObserver() if self.use_polling else Observer()
        observer.schedule(self, str(self.watch_path), recursive=self.recursive)
        observer.start()
        self._observer = observer
        logger.info(f"Ready and watching: {self.watch_path}")

    def stop(self) -> None:
        """Stop watching."""
        if self._observer is None:
            return

        try:
            self._observer.stop()
            self._observer.join(timeout=5.0)
        except Exception as e:
            logger.error(f"Error stopping watcher for {self.watch_path}: {e}")
        finally:
            self._observer = None

    def is_running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()


class TaskListWatcher(_ObservedHandler):
    """
    Watches the tasks root for task file events.

    Created, modified and moved-in task files call change_callback(path).
    Deleted or moved-out task files, and deleted list directories, call
    remove_callback(path, list_id).
    """

    def __init__(
        self,
        tasks_dir: Path,
        change_callback: Callable[[str], None],
        remove_callback: Callable[[str, str], None],
        use_polling: bool = TASK_MONITOR_USE_POLLING
    ):
        """
        Initialize task list watcher.

        Args:
            tasks_dir: Tasks root directory
            change_callback: Called with the path of a changed task file
            remove_callback: Called with (path, list_id) on removal
            use_polling: Use watchdog's PollingObserver instead of native events
        """
        super().__init__(tasks_dir, recursive=True, use_polling=use_polling)
        self.tasks_dir = Path(tasks_dir)
        self.change_callback = change_callback
        self.remove_callback = remove_callback

    def _task_list_id(self, path: str) -> Optional[str]:
        if not path.endswith(TASK_FILE_EXTENSION):
            return None
        return list_id_for_path(self.tasks_dir, Path(path))

    def on_created(self, event):
        if event.is_directory:
            return
        self._handle_change(os.fsdecode(event.src_path), "added")

    def on_modified(self, event):
        if event.is_directory:
            return
        self._handle_change(os.fsdecode(event.src_path), "changed")

    def on_deleted(self, event):
        path = os.fsdecode(event.src_path)
        if event.is_directory:
            list_id = list_id_for_path(self.tasks_dir, Path(path), is_directory=True)
            if list_id:
                self._handle_removal(path, list_id)
            return

        list_id = self._task_list_id(path)
        if list_id:
            self._handle_removal(path, list_id)

    def on_moved(self, event):
        if event.is_directory:
            return

        src_path = os.fsdecode(event.src_path)
        list_id = self._task_list_id(src_path)
        if list_id:
            self._handle_removal(src_path, list_id)

        self._handle_change(os.fsdecode(event.dest_path), "added")

    def _handle_change(self, file_path: str, event_type: str) -> None:
        if self._task_list_id(file_path) is None:
            return

        logger.info(f"File {event_type}: {file_path}")
        try:
            self.change_callback(file_path)
        except Exception as e:
            logger.error(f"Error handling {event_type} event for {file_path}: {e}", exc_info=True)

    def _handle_removal(self, path: str, list_id: str) -> None:
        logger.info(f"File removed: {path}")
        try:
            self.remove_callback(path, list_id)
        except Exception as e:
            logger.error(f"Error handling removal of {path}: {e}", exc_info=True)


class ConfigFileWatcher(_ObservedHandler):
    """
    Watches the config file for edits.

    The parent directory is watched so that editors which save by writing a
    new file and renaming it over the old one are still seen.
    """

    def __init__(
        self,
        config_file: Path,
        callback: Callable[[], None],
        use_polling: bool = TASK_MONITOR_USE_POLLING
    ):
        super().__init__(Path(config_file).parent, recursive=False, use_polling=use_polling)
        self.config_file = Path(config_file)
        self.callback = callback

    def on_created(self, event):
        if not event.is_directory:
            self._handle_event(os.fsdecode(event.src_path))

    def on_modified(self, event):
        if not event.is_directory:
            self._handle_event(os.fsdecode(event.src_path))

    def on_moved(self, event):
        if not event.is_directory:
            self._handle_event(os.fsdecode(event.dest_path))

    def _handle_event(self, file_path: str) -> None:
        if Path(file_path) != self.config_file:
            return

        try:
            self.callback()
        except Exception as e:
            logger.error(f"Error handling config change: {e}", exc_info=True)
