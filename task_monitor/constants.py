"""
Environment variable names and default values for task-monitor.

All environment variables are optional and have sensible defaults.
"""

import os
from pathlib import Path

# Data and output locations
TASK_MONITOR_DATA_DIR = Path(os.getenv(
    "TASK_MONITOR_DATA_DIR",
    str(Path.home() / ".claude" / "claude-task-monitor")
)).expanduser()
TASK_MONITOR_OUTPUT = Path(os.getenv("TASK_MONITOR_OUTPUT", str(TASK_MONITOR_DATA_DIR))).expanduser()
TASK_MONITOR_TASKS_DIR = Path(os.getenv(
    "TASK_MONITOR_TASKS_DIR",
    str(Path.home() / ".claude" / "tasks")
)).expanduser()

# Watch settings
TASK_MONITOR_DEBOUNCE_MS = int(os.getenv("TASK_MONITOR_DEBOUNCE_MS", "300"))
TASK_MONITOR_USE_POLLING = os.getenv("TASK_MONITOR_USE_POLLING", "false").lower() == "true"
TASK_MONITOR_LOG_LEVEL = os.getenv("TASK_MONITOR_LOG_LEVEL", "INFO").upper()

# File layout
DEFAULT_CONFIG_FILE = TASK_MONITOR_DATA_DIR / "monitor-config.json"
DATA_FILE_NAME = "task-monitor-data.json"
HTML_FILE_NAME = "task-monitor.html"
ARCHIVE_DIR_NAME = ".archive"
TASK_FILE_EXTENSION = ".json"
PROMPT_FILE_NAME = "prompt.md"

# Configuration bounds and defaults
POLL_INTERVAL_MIN = 500
POLL_INTERVAL_MAX = 60000
DEFAULT_POLL_INTERVAL = 2000
DEFAULT_AGENT_NAMES = [
    "alpha", "beta", "gamma", "delta", "epsilon", "zeta", "eta", "theta",
    "iota", "kappa", "lambda", "mu", "nu", "xi", "omicron", "pi",
    "rho", "sigma", "tau", "upsilon", "phi", "chi", "psi", "omega",
]
