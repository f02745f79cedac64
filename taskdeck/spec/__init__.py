"""
taskdeck/spec - Project interface definitions and user selections.

This package provides the read-only inputs of override compilation:
- Option definitions (select, switch, input) and task definitions
- Selection values and selection stores
- Loader: reads JSON/JSONC/YAML project interfaces, resolving imports
- Validation: JSON Schema plus structural checks at load time

Usage:
    from taskdeck.spec import load_project, selected_task_from_dict

    project = load_project(Path("interface.json"))
    task = selected_task_from_dict({"task_name": "Daily", "option_values": {}})
"""

from .types import (
    CaseSpec,
    InputOption,
    InputSpec,
    OptionDefinition,
    OptionKind,
    OptionRegistry,
    OutputMode,
    PipelineType,
    ProjectSpec,
    SelectOption,
    SwitchOption,
    TaskSpec,
    option_definition_from_dict,
    option_registry_from_dict,
    project_spec_from_dict,
    task_spec_from_dict,
)

from .selections import (
    InputValue,
    OptionValue,
    SelectValue,
    SelectedTask,
    SelectionStore,
    SwitchValue,
    create_default_option_value,
    option_value_from_dict,
    selected_task_from_dict,
    selection_store_from_dict,
)

from .loader import (
    load_project,
    load_project_data,
    load_project_or_none,
    project_from_dict,
    validate_project_file,
)

from .validation import (
    ProjectError,
    ProjectNotFoundError,
    ProjectValidationError,
    ValidationIssue,
    ValidationResult,
    validate_input_value,
    validate_project_data,
)

__all__ = [
    # Types (dataclasses)
    "CaseSpec",
    "InputOption",
    "InputSpec",
    "OptionDefinition",
    "OptionKind",
    "OptionRegistry",
    "OutputMode",
    "PipelineType",
    "ProjectSpec",
    "SelectOption",
    "SwitchOption",
    "TaskSpec",
    "option_definition_from_dict",
    "option_registry_from_dict",
    "project_spec_from_dict",
    "task_spec_from_dict",
    # Selections
    "InputValue",
    "OptionValue",
    "SelectValue",
    "SelectedTask",
    "SelectionStore",
    "SwitchValue",
    "create_default_option_value",
    "option_value_from_dict",
    "selected_task_from_dict",
    "selection_store_from_dict",
    # Loader
    "load_project",
    "load_project_data",
    "load_project_or_none",
    "project_from_dict",
    "validate_project_file",
    # Validation
    "ProjectError",
    "ProjectNotFoundError",
    "ProjectValidationError",
    "ValidationIssue",
    "ValidationResult",
    "validate_input_value",
    "validate_project_data",
]
