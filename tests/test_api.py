"""Tests for the config API surface."""

import json
import pytest
from unittest.mock import MagicMock, patch

from task_monitor.api import ConfigAPI
from task_monitor.config import ConfigManager


@pytest.fixture
def scheduler():
    return MagicMock()


@pytest.fixture
def api(config_file, scheduler):
    manager = ConfigManager(config_file)
    manager.ensure_config_file()
    return ConfigAPI(manager, scheduler)


class TestConfigAPI:
    """Tests for ConfigAPI class."""

    def test_get_config(self, api):
        status, body = api.get_config()
        assert status == 200
        assert set(body) == {"projectDir", "pollInterval", "agentNames"}
        assert body["pollInterval"] == 2000

    def test_update_success(self, api, scheduler, config_file):
        """Test that a valid update is saved, returned and regenerates once."""
        status, body = api.update_config('{"agentNames": ["x", "y"]}')

        assert status == 200
        assert body["agentNames"] == ["x", "y"]
        assert body["pollInterval"] == 2000
        assert json.loads(config_file.read_text())["agentNames"] == ["x", "y"]
        scheduler.request.assert_called_once()

    def test_update_accepts_bytes_and_dicts(self, api, scheduler):
        assert api.update_config(b'{"pollInterval": 1000}')[0] == 200
        assert api.update_config({"pollInterval": 1500})[1]["pollInterval"] == 1500
        assert scheduler.request.call_count == 2

    def test_validation_error(self, api, scheduler, config_file):
        """Test that a rejected update changes nothing and does not regenerate."""
        before = config_file.read_bytes()

        status, body = api.update_config('{"pollInterval": 100}')

        assert status == 400
        assert body == {
            "error": "pollInterval must be a number between 500 and 60000",
            "field": "pollInterval"
        }
        assert config_file.read_bytes() == before
        scheduler.request.assert_not_called()

    def test_invalid_json(self, api, scheduler):
        assert api.update_config("{nope") == (400, {"error": "Invalid JSON"})
        scheduler.request.assert_not_called()

    @pytest.mark.parametrize("body", ["[1, 2]", '"text"', "null", "42"])
    def test_non_object_body(self, api, scheduler, body):
        assert api.update_config(body) == (400, {"error": "Request body must be a JSON object"})
        scheduler.request.assert_not_called()

    def test_save_failure(self, api, scheduler):
        """Test that a write failure is reported as a server error."""
        with patch("task_monitor.config.AtomicFileWriter.write_text", side_effect=OSError("read-only")):
            status, body = api.update_config({"pollInterval": 1000})

        assert status == 500
        assert body == {"error": "Failed to save config"}
        assert api.get_config()[1]["pollInterval"] == 2000
        scheduler.request.assert_not_called()
