"""
Configuration management for task-monitor.

The ConfigManager owns the single live MonitorConfig. It is changed by three
sources: the initial load, validated partial updates from the config API, and
external edits of the config file picked up by the file watcher.
"""

import json
import math
import logging
import threading
from pathlib import Path
from typing import Optional, Any, Dict, List

from pydantic import ValidationError

from task_monitor.atomic import AtomicFileWriter
from task_monitor.constants import (
    DEFAULT_CONFIG_FILE,
    POLL_INTERVAL_MIN,
    POLL_INTERVAL_MAX,
)
from task_monitor.models import MonitorConfig


logger = logging.getLogger(__name__)

CONFIG_KEYS = ("projectDir", "pollInterval", "agentNames")


class ConfigValidationError(ValueError):
    """A configuration update was rejected."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message

    def to_dict(self) -> Dict[str, str]:
        return {"error": self.message, "field": self.field}


def parse_config_text(text: str) -> MonitorConfig:
    """
    Parse persisted configuration, falling back to defaults field by field.

    Unparsable text yields a fully default configuration; an invalid field
    only resets that field.
    """
    try:
        raw = json.loads(text)
    except ValueError as e:
        logger.error(f"Failed to load config, using defaults: {e}")
        return MonitorConfig()

    if not isinstance(raw, dict):
        logger.error("Failed to load config, using defaults: not a JSON object")
        return MonitorConfig()

    values = {}
    for key in CONFIG_KEYS:
        if key not in raw:
            continue
        try:
            MonitorConfig.model_validate({key: raw[key]})
        except ValidationError:
            logger.warning(f"Invalid {key} in config, using default")
            continue
        values[key] = raw[key]

    return MonitorConfig.model_validate(values)


def _coerce_project_dir(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigValidationError("projectDir", "projectDir must be a non-empty string")
    return value.strip()


def _coerce_poll_interval(value: Any) -> int:
    error = ConfigValidationError(
        "pollInterval",
        f"pollInterval must be a number between {POLL_INTERVAL_MIN} and {POLL_INTERVAL_MAX}"
    )

    if isinstance(value, bool):
        raise error

    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise error

    if not isinstance(value, (int, float)) or math.isnan(value):
        raise error

    if not POLL_INTERVAL_MIN <= value <= POLL_INTERVAL_MAX or value != int(value):
        raise error

    return int(value)


def _coerce_agent_names(value: Any) -> List[str]:
    if not isinstance(value, list) or len(value) == 0:
        raise ConfigValidationError("agentNames", "agentNames must be a non-empty array of strings")

    names = []
    for name in value:
        if not isinstance(name, str) or not name.strip():
            raise ConfigValidationError("agentNames", "Each agent name must be a non-empty string")
        names.append(name.strip())

    return names


class ConfigManager:
    """
    Manages task-monitor configuration.

    Keeps the in-memory configuration and the config file in step. The text
    of the last write or load is remembered so the process's own writes are
    not mistaken for external edits.
    """

    def __init__(self, config_file: Optional[Path] = None):
        """
        Initialize config manager.

        Args:
            config_file: Path to configuration file (uses default if None)
        """
        self.config_file = Path(config_file) if config_file else DEFAULT_CONFIG_FILE
        self._lock = threading.RLock()
        self._last_seen_text: Optional[str] = None
        self.config = self.load_config()

    def _read_text(self) -> Optional[str]:
        try:
            return self.config_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read config file {self.config_file}: {e}")
            return None

    def load_config(self) -> MonitorConfig:
        """
        Load configuration from file.

        Returns:
            MonitorConfig (defaults when the file is missing or unreadable)
        """
        with self._lock:
            text = self._read_text()
            self._last_seen_text = text

            if text is None:
                return MonitorConfig()

            return parse_config_text(text)

    def save_config(self, config: Optional[MonitorConfig] = None) -> None:
        """
        Persist configuration to file.

        Args:
            config: Configuration to write (current configuration if None)
        """
        with self._lock:
            config = config or self.config
            text = json.dumps(config.to_dict(), indent=2, ensure_ascii=False) + "\n"

            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            AtomicFileWriter.write_text(self.config_file, text)
            self._last_seen_text = text

    def ensure_config_file(self) -> bool:
        """
        Write the current configuration if no config file exists.

        Returns:
            True if a new file was created
        """
        if self.config_file.exists():
            return False

        self.save_config()
        logger.info(f"Created default config at {self.config_file}")
        return True

    def update(self, changes: Dict[str, Any]) -> MonitorConfig:
        """
        Apply a partial configuration update.

        Only keys present in changes are validated and applied; unknown keys
        are ignored. Nothing changes unless every present key is valid.

        Args:
            changes: Partial configuration keyed by camelCase field name

        Returns:
            The new configuration

        Raises:
            ConfigValidationError: If any present field is invalid
            OSError: If the config file cannot be written
        """
        with self._lock:
            values = self.config.to_dict()

            if "projectDir" in changes:
                values["projectDir"] = _coerce_project_dir(changes["projectDir"])

            if "pollInterval" in changes:
                values["pollInterval"] = _coerce_poll_interval(changes["pollInterval"])

            if "agentNames" in changes:
                values["agentNames"] = _coerce_agent_names(changes["agentNames"])

            new_config = MonitorConfig.model_validate(values)
            self.save_config(new_config)
            self.config = new_config

            logger.info(
                f"Config updated: projectDir={new_config.project_dir}, "
                f"pollInterval={new_config.poll_interval}"
            )
            return new_config

    def reload_if_changed(self) -> bool:
        """
        Reload the config file after an external edit.

        Text identical to this process's last write or load is treated as an
        echo and ignored, as is content that parses to the current
        configuration. A removed file keeps the current configuration.

        Returns:
            True if the in-memory configuration changed
        """
        with self._lock:
            text = self._read_text()
            if text is None or text == self._last_seen_text:
                return False

            self._last_seen_text = text
            new_config = parse_config_text(text)

            if new_config == self.config:
                return False

            self.config = new_config
            logger.info(
                f"Reloaded: projectDir={new_config.project_dir}, "
                f"pollInterval={new_config.poll_interval}"
            )
            return True
