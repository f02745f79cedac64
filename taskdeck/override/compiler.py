"""
compiler.py - Compile resolved fragments into the engine-facing override.

The compiler owns the two steps after option resolution:

1. Placeholder substitution for input options. The template is walked as a
   parsed tree. A string leaf that is exactly ``"{slot}"`` is replaced by a
   value of the slot's declared type (string, number or boolean). Any other
   occurrence of ``{slot}`` inside a string or key is replaced textually.
2. Deep merge. Fragments are merged left to right into a running result
   seeded with the task's own override. Two mappings merge key by key; any
   other incoming value replaces what was there.

Two task classes consume the result differently:
- standard tasks emit the unmerged fragment list (the engine then applies
  them in order, replacing whole top-level fields)
- built-in tasks always emit the deep-merged document, as a bare object or
  wrapped in a single-element list
"""

from __future__ import annotations

import copy
import json
import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..config.builtin_tasks import BuiltinTaskCatalog, get_builtin_catalog
from ..config.runtime_config import RuntimeConfig, get_runtime_config
from ..spec.selections import SelectedTask
from ..spec.types import (
    InputSpec,
    OptionDefinition,
    OutputMode,
    PipelineType,
    ProjectSpec,
    TaskSpec,
)
from .resolver import ResolvedFragment, StaticFragment, TemplateFragment, resolve_options

logger = logging.getLogger(__name__)

# Strings an input of pipeline_type "bool" treats as true (case-insensitive)
BOOL_TRUE_VALUES: Tuple[str, ...] = ("true", "1", "yes", "y")

CompiledOverride = Union[Dict[str, Any], List[Dict[str, Any]]]


class PlaceholderError(ValueError):
    """Raised when an input value cannot be coerced to its declared type."""

    def __init__(self, slot: str, value: str, pipeline_type: PipelineType):
        self.slot = slot
        self.value = value
        self.pipeline_type = pipeline_type
        super().__init__(
            f"Value {value!r} for '{{{slot}}}' is not a valid {pipeline_type.value}"
        )


# =============================================================================
# Placeholder Substitution
# =============================================================================


def input_slot_value(input_spec: InputSpec, values: Mapping[str, str]) -> str:
    """Raw string for a slot: the user's value, else the slot default.

    An explicitly entered empty string is kept as-is.
    """
    raw = values.get(input_spec.name)
    if raw is None:
        raw = input_spec.default
    return raw or ""


def coerce_input_value(raw: str, pipeline_type: PipelineType, slot: str = "") -> Any:
    """Convert a raw input string into the JSON value a whole placeholder becomes.

    Raises:
        PlaceholderError: If an int slot does not hold a JSON number.
    """
    if pipeline_type is PipelineType.INT:
        text = raw or "0"
        try:
            number = json.loads(text)
        except ValueError:
            number = None
        if isinstance(number, bool) or not isinstance(number, (int, float)) or not math.isfinite(number):
            raise PlaceholderError(slot, raw, pipeline_type)
        return number

    if pipeline_type is PipelineType.BOOL:
        return (raw or "").lower() in BOOL_TRUE_VALUES

    return raw


def _text_form(raw: str, pipeline_type: PipelineType) -> str:
    if pipeline_type is PipelineType.INT:
        return raw or "0"
    if pipeline_type is PipelineType.BOOL:
        return "true" if coerce_input_value(raw, pipeline_type) else "false"
    return raw


def _substitute_text(text: str, slots: Sequence[Tuple[InputSpec, str]]) -> str:
    for input_spec, raw in slots:
        if input_spec.placeholder in text:
            text = text.replace(input_spec.placeholder, _text_form(raw, input_spec.pipeline_type))
    return text


def _substitute_node(node: Any, slots: Sequence[Tuple[InputSpec, str]]) -> Any:
    if isinstance(node, dict):
        return {
            (_substitute_text(key, slots) if isinstance(key, str) else key): _substitute_node(value, slots)
            for key, value in node.items()
        }
    if isinstance(node, list):
        return [_substitute_node(item, slots) for item in node]
    if isinstance(node, str):
        for input_spec, raw in slots:
            if node == input_spec.placeholder:
                return coerce_input_value(raw, input_spec.pipeline_type, input_spec.name)
        return _substitute_text(node, slots)
    return node


def substitute_placeholders(
    template: Dict[str, Any],
    inputs: Sequence[InputSpec],
    values: Mapping[str, str],
) -> Dict[str, Any]:
    """Substitute ``{slot}`` placeholders in an input option's template.

    Args:
        template: The option's ``pipeline_override`` template.
        inputs: The option's slot definitions, in declaration order.
        values: Slot name -> user-entered string.

    Returns:
        A new fragment; the template is left untouched.

    Raises:
        PlaceholderError: If a slot value cannot take its declared type.
    """
    slots = [(input_spec, input_slot_value(input_spec, values)) for input_spec in inputs]
    return _substitute_node(template, slots)


def render_fragments(resolved: Sequence[ResolvedFragment]) -> List[Dict[str, Any]]:
    """Turn resolved fragments into plain override fragments.

    A template whose substitution fails is dropped with a warning; the
    remaining fragments are still rendered.
    """
    rendered: List[Dict[str, Any]] = []
    for fragment in resolved:
        if isinstance(fragment, StaticFragment):
            rendered.append(copy.deepcopy(fragment.payload))
        elif isinstance(fragment, TemplateFragment):
            try:
                rendered.append(
                    substitute_placeholders(fragment.template, fragment.inputs, fragment.values)
                )
            except PlaceholderError as e:
                logger.warning("Dropping override of option '%s': %s", fragment.option_id, e)
        else:
            raise TypeError(f"Unsupported fragment: {type(fragment).__name__}")
    return rendered


# =============================================================================
# Deep Merge
# =============================================================================


def _merge_into(target: Dict[str, Any], source: Mapping[str, Any]) -> None:
    for key, value in source.items():
        existing = target.get(key)
        if isinstance(existing, dict) and isinstance(value, Mapping):
            _merge_into(existing, value)
        else:
            target[key] = copy.deepcopy(value)


def deep_merge(target: Mapping[str, Any], source: Mapping[str, Any]) -> Dict[str, Any]:
    """Deep merge ``source`` into a deep copy of ``target``.

    Where both sides hold a mapping the merge recurses; otherwise the
    value from ``source`` replaces the one in ``target``. Lists are
    replaced, never concatenated. The result shares no nested values
    with either argument, and neither argument is modified.
    """
    result = copy.deepcopy(dict(target))
    _merge_into(result, source)
    return result


def merge_fragments(
    fragments: Sequence[Mapping[str, Any]],
    base: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Merge fragments left to right, seeded with ``base``."""
    merged: Dict[str, Any] = copy.deepcopy(dict(base)) if base else {}
    for fragment in fragments:
        merged = deep_merge(merged, fragment)
    return merged


def compile_fragments(
    fragments: Sequence[Mapping[str, Any]],
    base: Optional[Mapping[str, Any]] = None,
    mode: OutputMode = OutputMode.OBJECT,
) -> CompiledOverride:
    """Build the engine-facing override from rendered fragments.

    Args:
        fragments: Rendered fragments in resolution order.
        base: The task's own override, applied first.
        mode: ``array`` keeps fragments unmerged with ``base`` first;
            ``object`` returns the merged document; ``wrapped`` returns it
            as the only element of a list.
    """
    if mode is OutputMode.ARRAY:
        ordered = ([base] if base is not None else []) + list(fragments)
        return [copy.deepcopy(dict(f)) for f in ordered]

    merged = merge_fragments(fragments, base)
    if mode is OutputMode.WRAPPED:
        return [merged]
    return merged


# =============================================================================
# Task Compilation
# =============================================================================


class OverrideCompiler:
    """Compiles the pipeline override for selected tasks.

    Tasks are looked up in the built-in catalog first, then in the project.
    The compiler holds only read-only inputs and can be shared freely.
    """

    def __init__(
        self,
        project: Optional[ProjectSpec] = None,
        catalog: Optional[BuiltinTaskCatalog] = None,
        config: Optional[RuntimeConfig] = None,
    ):
        self.project = project
        self.catalog = catalog if catalog is not None else get_builtin_catalog()
        self.config = config if config is not None else get_runtime_config()

    def lookup_task(
        self, task_name: str
    ) -> Tuple[Optional[TaskSpec], Optional[Mapping[str, OptionDefinition]], bool]:
        """Find a task definition and the registry its options resolve against.

        Returns:
            (task, registry, is_builtin); task and registry are None when the
            task cannot be compiled.
        """
        builtin = self.catalog.get_task(task_name)
        if builtin is not None:
            registry = self.catalog.options
            if self.project is not None:
                registry = registry.merged_with(self.project.options)
            return builtin, registry, True

        if self.project is None:
            logger.warning("No project loaded, cannot compile task '%s'", task_name)
            return None, None, False

        task = self.project.get_task(task_name)
        if task is None:
            logger.warning("Task '%s' not found in project '%s'", task_name, self.project.name)
            return None, None, False
        return task, self.project.options, False

    def output_mode_for(self, is_builtin: bool, requested: Optional[OutputMode] = None) -> OutputMode:
        """Pick the output mode; built-in tasks are always merged."""
        if is_builtin:
            if requested is None or requested is OutputMode.ARRAY:
                return self.config.builtin_output
            return requested
        return requested if requested is not None else self.config.standard_output

    def compile_task(
        self,
        selected_task: SelectedTask,
        mode: Optional[OutputMode] = None,
    ) -> CompiledOverride:
        """Compile the override for one selected task.

        Returns ``[]`` when the task or the project is unavailable.
        """
        task, registry, is_builtin = self.lookup_task(selected_task.task_name)
        if task is None or registry is None:
            return []

        resolved = resolve_options(task.option, selected_task.option_values, registry)
        fragments = render_fragments(resolved)
        output_mode = self.output_mode_for(is_builtin, mode)

        logger.debug(
            "Compiled task '%s': %d fragment(s), mode=%s",
            task.name,
            len(fragments),
            output_mode.value,
        )
        return compile_fragments(fragments, task.pipeline_override, output_mode)

    def render_task(self, selected_task: SelectedTask, mode: Optional[OutputMode] = None) -> str:
        """Compile a task and serialize it as compact JSON."""
        return json.dumps(
            self.compile_task(selected_task, mode),
            ensure_ascii=False,
            separators=(",", ":"),
        )


def generate_task_pipeline_override(
    selected_task: SelectedTask,
    project: Optional[ProjectSpec],
    catalog: Optional[BuiltinTaskCatalog] = None,
    config: Optional[RuntimeConfig] = None,
) -> str:
    """Convenience wrapper: compile one task to its JSON override string."""
    return OverrideCompiler(project, catalog, config).render_task(selected_task)
