"""
cli.py - Command line entry point for override compilation.

Usage:
    taskdeck-override compile --project interface.json --task Daily \\
        [--selections selections.json] [--output-mode object]
    taskdeck-override compile --task __TASKDECK_SLEEP__
    taskdeck-override validate --project interface.json
    taskdeck-override list [--project interface.json]

Selections files hold either a selected task document
({"task_name": ..., "option_values": {...}}) or a bare option_values mapping.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import commentjson

from .config.builtin_tasks import list_builtin_tasks
from .config.runtime_config import get_runtime_config
from .override.compiler import OverrideCompiler
from .spec.loader import load_project, validate_project_file
from .spec.selections import SelectedTask, selected_task_from_dict, selection_store_from_dict
from .spec.types import OutputMode, ProjectSpec
from .spec.validation import ProjectError

logger = logging.getLogger(__name__)


def _read_selections(path: Optional[Path], task_name: str) -> SelectedTask:
    if path is None:
        return SelectedTask(task_name=task_name)

    if not path.exists():
        raise ProjectError(f"Selections file not found at {path}")
    try:
        data = commentjson.loads(path.read_text(encoding="utf-8"))
    except Exception as e:
        raise ProjectError(f"Invalid JSON in selections file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ProjectError(f"Selections file {path} must be a mapping, got {type(data).__name__}")

    if "option_values" in data or "optionValues" in data:
        data = dict(data)
        data.setdefault("task_name", task_name)
        return selected_task_from_dict(data)
    return SelectedTask(task_name=task_name, option_values=selection_store_from_dict(data))


def cmd_compile(args: argparse.Namespace) -> int:
    project: Optional[ProjectSpec] = None
    if args.project:
        project = load_project(args.project)

    selected = _read_selections(args.selections, args.task)
    mode = OutputMode(args.output_mode) if args.output_mode else None

    compiler = OverrideCompiler(project=project)
    result = compiler.compile_task(selected, mode)

    if args.pretty:
        print(json.dumps(result, ensure_ascii=False, indent=2))
    else:
        print(json.dumps(result, ensure_ascii=False, separators=(",", ":")))
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    result = validate_project_file(args.project)
    for warning in result.warnings:
        print(f"WARNING: {warning}")
    for error in result.errors:
        print(f"ERROR: {error}")

    if result.errors:
        print(f"\n{len(result.errors)} error(s) found")
        return 1
    print("Project interface valid")
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    print("Built-in tasks:")
    for task in list_builtin_tasks():
        print(f"  {task.name}")

    if args.project:
        project = load_project(args.project)
        print(f"\nProject tasks ({project.name or args.project}):")
        for task in project.tasks:
            print(f"  {task.name}")
        print("\nOptions:")
        for option_id, definition in project.options.items():
            print(f"  {option_id} ({definition.kind.value})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taskdeck-override",
        description="Compile task option selections into pipeline overrides",
    )
    parser.add_argument("--log-level", help="Logging level (default from runtime config)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    compile_parser = subparsers.add_parser("compile", help="Compile a task's override")
    compile_parser.add_argument("--project", type=Path, help="Project interface file")
    compile_parser.add_argument("--task", required=True, help="Task name")
    compile_parser.add_argument("--selections", type=Path, help="Selections JSON file")
    compile_parser.add_argument(
        "--output-mode",
        choices=[m.value for m in OutputMode],
        help="Override the configured output mode",
    )
    compile_parser.add_argument("--pretty", action="store_true", help="Indent the output")
    compile_parser.set_defaults(func=cmd_compile)

    validate_parser = subparsers.add_parser("validate", help="Validate a project interface")
    validate_parser.add_argument("--project", type=Path, required=True)
    validate_parser.set_defaults(func=cmd_validate)

    list_parser = subparsers.add_parser("list", help="List tasks and options")
    list_parser.add_argument("--project", type=Path)
    list_parser.set_defaults(func=cmd_list)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=(args.log_level or get_runtime_config().log_level).upper(),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        return args.func(args)
    except ProjectError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
