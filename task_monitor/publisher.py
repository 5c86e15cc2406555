"""
Publisher for snapshot artifacts.

Writes the snapshot JSON and the rendered dashboard into the output
directory. Both files are replaced atomically; a failed write leaves the
previously published file in place.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

from task_monitor.atomic import AtomicFileWriter
from task_monitor.constants import TASK_MONITOR_OUTPUT, DATA_FILE_NAME, HTML_FILE_NAME
from task_monitor.models import MonitorConfig, TaskMonitorData
from task_monitor.renderer import render_dashboard


logger = logging.getLogger(__name__)


class PublishError(Exception):
    """An artifact could not be written."""


class Publisher:
    """Publishes one snapshot as two artifacts."""

    def __init__(self, output_dir: Optional[Path] = None):
        """
        Initialize publisher.

        Args:
            output_dir: Directory receiving the artifacts (uses default if None)
        """
        self.output_dir = Path(output_dir) if output_dir else TASK_MONITOR_OUTPUT

    @property
    def data_file(self) -> Path:
        return self.output_dir / DATA_FILE_NAME

    @property
    def html_file(self) -> Path:
        return self.output_dir / HTML_FILE_NAME

    def publish(self, snapshot: TaskMonitorData, config: MonitorConfig) -> Tuple[Path, Path]:
        """
        Write the snapshot JSON and the dashboard page.

        Args:
            snapshot: Snapshot to publish
            config: Configuration used for display values

        Returns:
            (data file path, HTML file path)

        Raises:
            PublishError: If either artifact could not be written
        """
        html = render_dashboard(snapshot, config)

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            AtomicFileWriter.write_text(self.data_file, snapshot.to_json(indent=2))
            AtomicFileWriter.write_text(self.html_file, html)
        except OSError as e:
            raise PublishError(f"Failed to write artifacts to {self.output_dir}: {e}") from e

        logger.debug(f"Published {len(snapshot.task_lists)} task lists to {self.output_dir}")
        return self.data_file, self.html_file
