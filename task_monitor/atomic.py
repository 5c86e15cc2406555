"""
Atomic file writes.

Content is written to a temporary file in the target directory, synced and
then moved over the target with os.replace, so readers only ever see the old
file or the complete new one.
"""

import os
import logging
from pathlib import Path
from tempfile import NamedTemporaryFile


logger = logging.getLogger(__name__)


class AtomicFileWriter:
    """Write text files via temp-file-then-replace."""

    @staticmethod
    def write_text(path: Path, content: str, encoding: str = "utf-8") -> None:
        """
        Atomically replace a file's contents.

        Args:
            path: Target file
            content: Text to write
            encoding: Text encoding

        Raises:
            OSError: If the write or replace fails (target left unchanged)
        """
        path = Path(path)
        tmp_file = None

        try:
            with NamedTemporaryFile(
                "w",
                encoding=encoding,
                delete=False,
                dir=str(path.parent),
                prefix=f".{path.name}.",
                suffix=".tmp"
            ) as tmp:
                tmp_file = tmp.name
                tmp.write(content)
                tmp.flush()
                os.fsync(tmp.fileno())

            os.replace(tmp_file, path)
        except OSError:
            if tmp_file and os.path.exists(tmp_file):
                try:
                    os.unlink(tmp_file)
                except OSError as cleanup_error:
                    logger.warning(f"Failed to remove temp file {tmp_file}: {cleanup_error}")
            raise
