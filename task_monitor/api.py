"""
Config API surface for the HTTP layer.

Each operation returns (status code, JSON-serializable body) so a request
router can answer GET/POST /api/config without knowing the config rules.
"""

import json
import logging
from typing import Any, Dict, Tuple, Union

from task_monitor.config import ConfigManager, ConfigValidationError
from task_monitor.scheduler import RegenerationScheduler


logger = logging.getLogger(__name__)

ApiResponse = Tuple[int, Dict[str, Any]]


class ConfigAPI:
    """Read and partial-write operations on the live configuration."""

    def __init__(self, config_manager: ConfigManager, scheduler: RegenerationScheduler):
        self.config_manager = config_manager
        self.scheduler = scheduler

    def get_config(self) -> ApiResponse:
        """Return the current configuration verbatim."""
        return 200, self.config_manager.config.to_dict()

    def update_config(self, body: Union[str, bytes, Dict[str, Any]]) -> ApiResponse:
        """
        Apply a partial configuration update.

        Args:
            body: Raw request body, or an already decoded JSON object

        Returns:
            (200, full configuration) on success, (400, error) otherwise
        """
        if isinstance(body, (str, bytes)):
            try:
                body = json.loads(body)
            except ValueError:
                return 400, {"error": "Invalid JSON"}

        if not isinstance(body, dict):
            return 400, {"error": "Request body must be a JSON object"}

        try:
            config = self.config_manager.update(body)
        except ConfigValidationError as e:
            logger.info(f"Rejected config update: {e.message}")
            return 400, e.to_dict()
        except OSError as e:
            logger.error(f"Failed to save config: {e}")
            return 500, {"error": "Failed to save config"}

        self.scheduler.request()
        return 200, config.to_dict()
