"""
Data models for task-monitor.

Task files, task lists and the published snapshot all use camelCase keys on
disk, so every model serializes by alias.
"""

import os
from enum import Enum
from datetime import datetime
from typing import Optional, List, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer
from pydantic.alias_generators import to_camel

from task_monitor.constants import (
    POLL_INTERVAL_MIN,
    POLL_INTERVAL_MAX,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_AGENT_NAMES,
)


class TaskStatus(str, Enum):
    """Status of a single task."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Task(BaseModel):
    """A single task read from a task file."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        coerce_numbers_to_str=True,
    )

    id: str
    subject: str
    description: str = ""
    active_form: Optional[str] = None
    status: TaskStatus
    blocks: List[str] = Field(default_factory=list)
    blocked_by: List[str] = Field(default_factory=list)
    owner: Optional[str] = None

    @model_serializer(mode="wrap")
    def _serialize(self, handler):
        # Optional fields absent from the task file stay absent; extra fields
        # and explicit nulls are written back as read
        data = handler(self)
        for name in ("active_form", "owner"):
            if getattr(self, name) is None and name not in self.model_fields_set:
                data.pop(name, None)
                data.pop(to_camel(name), None)
        return data


class Blocker(BaseModel):
    """Resolution of one entry in a task's blockedBy list."""
    id: str
    done: bool
    subject: str


class BlockerStatus(BaseModel):
    """Whether a task is held back by unfinished blockers."""
    is_blocked: bool = False
    blockers: List[Blocker] = Field(default_factory=list)
    ready: bool = False


class TaskList(BaseModel):
    """All readable tasks in one list directory, ordered by numeric id."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    tasks: List[Task] = Field(default_factory=list)
    last_modified: datetime

    def get_task(self, task_id: str) -> Optional[Task]:
        """Get a task by ID."""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def count_by_status(self, status: TaskStatus) -> int:
        return sum(1 for task in self.tasks if task.status == status)

    def blocker_status(self, task: Task) -> BlockerStatus:
        """
        Resolve a task's blockers against this list.

        A blocker is done only when it exists here and is completed.
        """
        if not task.blocked_by:
            return BlockerStatus()

        blockers = []
        for blocker_id in task.blocked_by:
            blocker = self.get_task(blocker_id)
            blockers.append(Blocker(
                id=blocker_id,
                done=blocker is not None and blocker.status == TaskStatus.COMPLETED,
                subject=blocker.subject if blocker else "Unknown"
            ))

        all_done = all(b.done for b in blockers)
        return BlockerStatus(
            is_blocked=not all_done,
            blockers=blockers,
            ready=all_done and len(blockers) > 0
        )

    def available_tasks(self) -> List[Task]:
        """Pending tasks with no unfinished blockers."""
        return [
            task for task in self.tasks
            if task.status == TaskStatus.PENDING
            and not self.blocker_status(task).is_blocked
        ]


class TaskListSummary(BaseModel):
    """Lightweight projection of a task list used for list selection."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    path: str
    task_count: int = 0
    pending_count: int = 0
    in_progress_count: int = 0
    completed_count: int = 0
    last_modified: datetime
    has_prompt: bool = False


class TaskMonitorData(BaseModel):
    """One published snapshot of every task list."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    task_lists: List[TaskList] = Field(default_factory=list)
    available_lists: List[TaskListSummary] = Field(default_factory=list)
    selected_list_id: str = ""
    templates: List[str] = Field(default_factory=list)
    project_dir: str = ""

    def get_task_list(self, list_id: str) -> Optional[TaskList]:
        for task_list in self.task_lists:
            if task_list.id == list_id:
                return task_list
        return None

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self, indent: Optional[int] = 2) -> str:
        return self.model_dump_json(by_alias=True, indent=indent)


class ArchiveRecord(BaseModel):
    """Last known contents of a task list whose files were removed."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    archived_at: datetime
    tasks: List[Task] = Field(default_factory=list)


def check_project_dir(value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError("projectDir must be a non-empty string")
    return value


def check_poll_interval(value: Any) -> Any:
    if (
        isinstance(value, bool)
        or not isinstance(value, (int, float))
        or not POLL_INTERVAL_MIN <= value <= POLL_INTERVAL_MAX
    ):
        raise ValueError(
            f"pollInterval must be a number between {POLL_INTERVAL_MIN} and {POLL_INTERVAL_MAX}"
        )
    return value


def check_agent_names(value: Any) -> List[str]:
    if not isinstance(value, list) or len(value) == 0:
        raise ValueError("agentNames must be a non-empty array of strings")
    for name in value:
        if not isinstance(name, str) or not name:
            raise ValueError("Each agent name must be a non-empty string")
    return value


class MonitorConfig(BaseModel):
    """
    Monitor configuration.

    Instances are immutable; the ConfigManager swaps in a new instance on
    every change so readers can hold one reference for a whole operation.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    project_dir: str = Field(default_factory=os.getcwd)
    poll_interval: int = DEFAULT_POLL_INTERVAL
    agent_names: List[str] = Field(default_factory=lambda: list(DEFAULT_AGENT_NAMES))

    @field_validator("project_dir", mode="before")
    @classmethod
    def _validate_project_dir(cls, value):
        return check_project_dir(value)

    @field_validator("poll_interval", mode="before")
    @classmethod
    def _validate_poll_interval(cls, value):
        return check_poll_interval(value)

    @field_validator("agent_names", mode="before")
    @classmethod
    def _validate_agent_names(cls, value):
        return check_agent_names(value)

    @property
    def poll_interval_seconds_text(self) -> str:
        """Poll interval in seconds, formatted without a trailing '.0'."""
        seconds = self.poll_interval / 1000
        return f"{seconds:g}"

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)
