"""
Test fixtures and utilities for taskdeck tests.

This module provides reusable project interface documents, parsed projects
and selection helpers, plus isolation of the process-wide runtime config
and built-in catalog singletons.
"""

import copy
import sys
from pathlib import Path
from typing import Any, Dict

import pytest

_REPO_ROOT = Path(__file__).resolve().parent.parent
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from taskdeck.config.builtin_tasks import BuiltinTaskCatalog
from taskdeck.config.runtime_config import reset_runtime_config
from taskdeck.spec.types import ProjectSpec, project_spec_from_dict


# ============================================================================
# Singleton Isolation
# ============================================================================


@pytest.fixture(autouse=True)
def isolate_singletons(monkeypatch):
    """Reset cached config and catalog, and clear TASKDECK_* env vars."""
    for var in ("TASKDECK_BUILTIN_OUTPUT", "TASKDECK_STANDARD_OUTPUT", "TASKDECK_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    reset_runtime_config()
    BuiltinTaskCatalog.reset()
    yield
    reset_runtime_config()
    BuiltinTaskCatalog.reset()


# ============================================================================
# Project Interface Documents
# ============================================================================


SAMPLE_PROJECT: Dict[str, Any] = {
    "name": "sample",
    "version": "1.2.0",
    "task": [
        {
            "name": "Daily",
            "entry": "DailyEntry",
            "option": ["Difficulty", "AutoClaim"],
            "pipeline_override": {"DailyEntry": {"enabled": True}},
        },
        {
            "name": "Farm",
            "entry": "FarmEntry",
            "option": ["Stage", "Repeat"],
        },
        {
            "name": "Custom",
            "entry": "CustomEntry",
            "option": ["Missing", "Repeat"],
        },
    ],
    "option": {
        "Difficulty": {
            "type": "select",
            "default_case": "Normal",
            "cases": [
                {
                    "name": "Easy",
                    "pipeline_override": {"DailyEntry": {"difficulty": 1}},
                },
                {
                    "name": "Normal",
                    "pipeline_override": {"DailyEntry": {"difficulty": 2}},
                },
                {
                    "name": "Hard",
                    "option": ["HardBonus"],
                    "pipeline_override": {"DailyEntry": {"difficulty": 3}},
                },
            ],
        },
        "HardBonus": {
            "type": "switch",
            "default_case": "Yes",
            "cases": [
                {"name": "Yes", "pipeline_override": {"DailyEntry": {"bonus": True}}},
                {"name": "No", "pipeline_override": {"DailyEntry": {"bonus": False}}},
            ],
        },
        "AutoClaim": {
            "type": "switch",
            "cases": [
                {"name": "Y", "pipeline_override": {"ClaimNode": {"enabled": True}}},
                {"name": "N", "pipeline_override": {"ClaimNode": {"enabled": False}}},
            ],
        },
        "Stage": {
            "cases": [
                {"name": "1-7", "pipeline_override": {"FarmEntry": {"next": ["Stage1_7"]}}},
                {"name": "4-4", "pipeline_override": {"FarmEntry": {"next": ["Stage4_4"]}}},
            ],
        },
        "Repeat": {
            "type": "input",
            "inputs": [
                {"name": "times", "default": "3", "pipeline_type": "int", "verify": "^\\d+$"},
                {"name": "note", "default": "farm run"},
            ],
            "pipeline_override": {
                "FarmEntry": {
                    "custom_action_param": {"times": "{times}", "label": "{note} x{times}"}
                }
            },
        },
    },
}


@pytest.fixture
def project_data() -> Dict[str, Any]:
    """Return a fresh copy of the sample project interface document."""
    return copy.deepcopy(SAMPLE_PROJECT)


@pytest.fixture
def project(project_data) -> ProjectSpec:
    """Return the sample project, parsed."""
    return project_spec_from_dict(project_data)


@pytest.fixture
def sleep_like_project() -> ProjectSpec:
    """Return a project with one task combining an int input and a switch."""
    return project_spec_from_dict({
        "name": "sleep-like",
        "task": [
            {
                "name": "T",
                "option": ["O1", "O2"],
                "pipeline_override": {"Entry": {"action": "Custom", "custom_action": "X"}},
            }
        ],
        "option": {
            "O1": {
                "type": "input",
                "inputs": [{"name": "sleep_time", "default": "5", "pipeline_type": "int"}],
                "pipeline_override": {
                    "Entry": {"custom_action_param": {"sleep_time": "{sleep_time}"}}
                },
            },
            "O2": {
                "type": "switch",
                "default_case": "No",
                "cases": [
                    {
                        "name": "Yes",
                        "pipeline_override": {"Entry": {"custom_action_param": {"wait": True}}},
                    },
                    {
                        "name": "No",
                        "pipeline_override": {"Entry": {"custom_action_param": {"wait": False}}},
                    },
                ],
            },
        },
    })
