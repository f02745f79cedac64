"""
builtin_tasks.py - Catalog of tasks shipped with taskdeck itself.

Built-in tasks are not backed by a project interface file. Their
definitions live in builtin_tasks.yaml next to this module and are
validated with the same rules as a project when the catalog is built.

Usage:
    from taskdeck.config.builtin_tasks import is_builtin_task, get_builtin_task
    from taskdeck.config.builtin_tasks import find_builtin_option, list_builtin_tasks
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

import yaml

from ..spec.types import (
    OptionDefinition,
    OptionRegistry,
    SelectOption,
    SwitchOption,
    TaskSpec,
    project_spec_from_dict,
)
from ..spec.validation import ensure_valid_project_data

logger = logging.getLogger(__name__)

_CONFIG_FILE = Path(__file__).parent / "builtin_tasks.yaml"

SLEEP_TASK_NAME = "__TASKDECK_SLEEP__"
LAUNCH_TASK_NAME = "__TASKDECK_LAUNCH__"
WEBHOOK_TASK_NAME = "__TASKDECK_WEBHOOK__"


class BuiltinTaskCatalog:
    """Registry of built-in tasks and the options they use."""

    _instance: Optional["BuiltinTaskCatalog"] = None

    def __init__(self, data: Dict[str, Any], source: str = "builtin catalog"):
        ensure_valid_project_data(data, source)
        project = project_spec_from_dict(data)

        self._tasks: Dict[str, TaskSpec] = {}
        for task in project.tasks:
            self._tasks.setdefault(task.name, task)
        self._options: OptionRegistry = project.options

        # task name -> option ids reachable from that task
        self._task_options: Dict[str, Set[str]] = {
            name: self._reachable_options(task) for name, task in self._tasks.items()
        }

    @classmethod
    def from_file(cls, config_path: Path = _CONFIG_FILE) -> "BuiltinTaskCatalog":
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        catalog = cls(data, source=str(config_path))
        logger.debug("Loaded %d built-in task(s) from %s", len(catalog._tasks), config_path)
        return catalog

    @classmethod
    def get_instance(cls) -> "BuiltinTaskCatalog":
        if cls._instance is None:
            cls._instance = cls.from_file()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset singleton for testing."""
        cls._instance = None

    def _reachable_options(self, task: TaskSpec) -> Set[str]:
        seen: Set[str] = set()
        pending: List[str] = list(task.option)
        while pending:
            option_id = pending.pop()
            if option_id in seen:
                continue
            seen.add(option_id)
            definition = self._options.get(option_id)
            if isinstance(definition, (SelectOption, SwitchOption)):
                for case in definition.cases:
                    pending.extend(case.option)
        return seen

    @property
    def options(self) -> OptionRegistry:
        """All options defined by built-in tasks."""
        return self._options

    @property
    def tasks(self) -> List[TaskSpec]:
        """All built-in tasks in declaration order."""
        return list(self._tasks.values())

    def is_builtin(self, task_name: str) -> bool:
        return task_name in self._tasks

    def get_task(self, task_name: str) -> Optional[TaskSpec]:
        return self._tasks.get(task_name)

    def get_task_option(self, task_name: str, option_id: str) -> Optional[OptionDefinition]:
        """Get an option definition, only if ``task_name`` uses it."""
        if option_id not in self._task_options.get(task_name, ()):
            return None
        return self._options.get(option_id)

    def find_option(self, option_id: str) -> Optional[OptionDefinition]:
        """Get an option definition by id, whichever task uses it."""
        return self._options.get(option_id)


# Module-level convenience functions
def get_builtin_catalog() -> BuiltinTaskCatalog:
    return BuiltinTaskCatalog.get_instance()


def is_builtin_task(task_name: str) -> bool:
    """Whether ``task_name`` is a built-in task."""
    return get_builtin_catalog().is_builtin(task_name)


def get_builtin_task(task_name: str) -> Optional[TaskSpec]:
    """Get a built-in task definition, or None."""
    return get_builtin_catalog().get_task(task_name)


def get_builtin_task_option(task_name: str, option_id: str) -> Optional[OptionDefinition]:
    """Get an option of a specific built-in task, or None."""
    return get_builtin_catalog().get_task_option(task_name, option_id)


def find_builtin_option(option_id: str) -> Optional[OptionDefinition]:
    """Find a built-in option definition by id across all built-in tasks."""
    return get_builtin_catalog().find_option(option_id)


def list_builtin_tasks() -> List[TaskSpec]:
    """List all built-in task definitions."""
    return get_builtin_catalog().tasks
