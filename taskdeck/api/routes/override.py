"""
Override compile endpoints.

Provides REST endpoints for:
- Compiling the pipeline override of a selected task
- Listing built-in tasks
- Checking an input value against its option's verify pattern

Nothing is executed; the endpoints only return what would be handed to the
automation engine.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ...config.builtin_tasks import get_builtin_catalog
from ...override.compiler import OverrideCompiler
from ...spec.loader import project_from_dict
from ...spec.selections import selected_task_from_dict
from ...spec.types import InputOption, OutputMode, ProjectSpec
from ...spec.validation import ProjectValidationError, validate_input_value

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/override", tags=["override"])


# =============================================================================
# Pydantic Models
# =============================================================================


class SelectedTaskModel(BaseModel):
    """A selected task and the user's option values."""

    task_name: str = Field(..., min_length=1, description="Task name (e.g., '__TASKDECK_SLEEP__')")
    option_values: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict,
        description="Option id -> selection entry ({'kind': 'choice', 'case_name': ...})",
    )
    id: str = Field(default="", description="Task instance identifier")


class CompileRequest(BaseModel):
    """Request for the compile endpoint."""

    task: SelectedTaskModel
    project: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Inline project interface document; omit for built-in tasks",
    )
    mode: Optional[str] = Field(
        default=None,
        description="Output mode override: 'array', 'object' or 'wrapped'",
    )


class CompileResponse(BaseModel):
    """Response from the compile endpoint."""

    task_name: str
    builtin: bool
    override: Union[Dict[str, Any], List[Dict[str, Any]]]


class BuiltinTaskItem(BaseModel):
    """Summary of a built-in task."""

    name: str
    entry: str
    label: str
    options: List[str] = Field(default_factory=list)


class BuiltinTaskListResponse(BaseModel):
    """Response for listing built-in tasks."""

    tasks: List[BuiltinTaskItem]
    count: int


class VerifyInputRequest(BaseModel):
    """Request to check an input value against its verify pattern."""

    option_id: str
    input_name: str
    value: str
    project: Optional[Dict[str, Any]] = None


class VerifyInputResponse(BaseModel):
    """Result of an input check; ``error`` is None when the value is valid."""

    valid: bool
    error: Optional[str] = None


# =============================================================================
# Helper Functions
# =============================================================================


def _project_or_422(data: Optional[Dict[str, Any]]) -> Optional[ProjectSpec]:
    if data is None:
        return None
    try:
        return project_from_dict(data, source="request project")
    except ProjectValidationError as e:
        raise HTTPException(
            status_code=422,
            detail={
                "error": "invalid_project",
                "issues": [str(issue) for issue in e.issues],
            },
        )


def _mode_or_422(value: Optional[str]) -> Optional[OutputMode]:
    if value is None:
        return None
    try:
        return OutputMode(value.lower())
    except ValueError:
        raise HTTPException(
            status_code=422,
            detail={"error": "invalid_mode", "mode": value},
        )


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/compile", response_model=CompileResponse)
async def compile_override(request: CompileRequest) -> CompileResponse:
    """Compile the pipeline override for one selected task.

    Unknown tasks compile to ``[]``, matching what the engine receives.
    """
    project = _project_or_422(request.project)
    mode = _mode_or_422(request.mode)

    selected = selected_task_from_dict(request.task.model_dump())
    compiler = OverrideCompiler(project=project)
    override = compiler.compile_task(selected, mode)

    return CompileResponse(
        task_name=selected.task_name,
        builtin=compiler.catalog.is_builtin(selected.task_name),
        override=override,
    )


@router.get("/builtin-tasks", response_model=BuiltinTaskListResponse)
async def list_builtin_tasks() -> BuiltinTaskListResponse:
    """List the tasks shipped with taskdeck."""
    tasks = [
        BuiltinTaskItem(
            name=task.name,
            entry=task.entry,
            label=task.label,
            options=list(task.option),
        )
        for task in get_builtin_catalog().tasks
    ]
    return BuiltinTaskListResponse(tasks=tasks, count=len(tasks))


@router.post("/verify-input", response_model=VerifyInputResponse)
async def verify_input(request: VerifyInputRequest) -> VerifyInputResponse:
    """Check a value against the verify pattern of an input slot."""
    project = _project_or_422(request.project)

    definition = get_builtin_catalog().find_option(request.option_id)
    if definition is None and project is not None:
        definition = project.options.get(request.option_id)
    if not isinstance(definition, InputOption):
        raise HTTPException(status_code=404, detail=f"Input option not found: {request.option_id}")

    input_spec = next((i for i in definition.inputs if i.name == request.input_name), None)
    if input_spec is None:
        raise HTTPException(
            status_code=404,
            detail=f"Input '{request.input_name}' not found in option {request.option_id}",
        )

    error = validate_input_value(input_spec, request.value)
    return VerifyInputResponse(valid=error is None, error=error)
