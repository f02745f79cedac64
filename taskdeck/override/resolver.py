"""
resolver.py - Walk a task's option tree into an ordered list of fragments.

Resolution is depth-first and pre-order: each option contributes the
override of its active case, followed by everything its nested options
contribute. The order of the returned fragments is the merge order.

Every problem found here is recoverable. An unknown option id, a
selection of the wrong kind, or a case name that no longer exists
contributes nothing and is logged at warning level.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..spec.selections import (
    OptionValue,
    SelectValue,
    SwitchValue,
    create_default_option_value,
)
from ..spec.types import (
    SWITCH_OFF_NAMES,
    SWITCH_ON_NAMES,
    CaseSpec,
    InputOption,
    InputSpec,
    OptionDefinition,
    SelectOption,
    SwitchOption,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StaticFragment:
    """A final override fragment from a select or switch case."""
    option_id: str
    payload: Dict[str, Any]


@dataclass(frozen=True)
class TemplateFragment:
    """An input option's template, not yet substituted."""
    option_id: str
    template: Dict[str, Any]
    inputs: Tuple[InputSpec, ...] = ()
    values: Mapping[str, str] = field(default_factory=dict)


ResolvedFragment = Union[StaticFragment, TemplateFragment]


def find_switch_case(cases: Sequence[CaseSpec], checked: bool) -> Optional[CaseSpec]:
    """Find the case matching a switch flag by its accepted spellings."""
    names = SWITCH_ON_NAMES if checked else SWITCH_OFF_NAMES
    for case in cases:
        if case.name in names:
            return case
    return None


def select_active_case(definition: OptionDefinition, value: OptionValue) -> Optional[CaseSpec]:
    """Pick the case a select or switch value activates.

    Returns None when the value names no existing case.
    """
    if isinstance(definition, SwitchOption) and isinstance(value, SwitchValue):
        switch_case = find_switch_case(definition.cases, value.value)
        if switch_case is not None:
            return switch_case
        return definition.find_case("Yes" if value.value else "No")

    if isinstance(definition, SelectOption) and isinstance(value, SelectValue):
        return definition.find_case(value.case_name)

    return None


def _collect(
    option_id: str,
    selections: Mapping[str, OptionValue],
    registry: Mapping[str, OptionDefinition],
    out: List[ResolvedFragment],
    path: Tuple[str, ...],
) -> None:
    definition = registry.get(option_id)
    if definition is None:
        logger.warning("Option '%s' not found in registry, skipping", option_id)
        return

    if option_id in path:
        logger.warning(
            "Option '%s' references itself through %s, skipping",
            option_id,
            " -> ".join(path + (option_id,)),
        )
        return

    value = selections.get(option_id)
    if value is None:
        value = create_default_option_value(definition)

    if value.kind is not definition.kind:
        logger.warning(
            "Selection for option '%s' is %s but the option is %s, skipping",
            option_id,
            value.kind.value,
            definition.kind.value,
        )
        return

    if isinstance(definition, InputOption):
        if definition.pipeline_override is not None:
            out.append(TemplateFragment(
                option_id=option_id,
                template=definition.pipeline_override,
                inputs=definition.inputs,
                values=dict(value.values),
            ))
        return

    case = select_active_case(definition, value)
    if case is None:
        logger.warning("Option '%s' has no case for selection %r, skipping", option_id, value)
        return

    logger.debug("Option '%s' resolved to case '%s'", option_id, case.name)

    if case.pipeline_override is not None:
        out.append(StaticFragment(option_id=option_id, payload=case.pipeline_override))

    for nested_id in case.option:
        _collect(nested_id, selections, registry, out, path + (option_id,))


def resolve_options(
    option_ids: Sequence[str],
    selections: Mapping[str, OptionValue],
    registry: Mapping[str, OptionDefinition],
) -> List[ResolvedFragment]:
    """Resolve top-level option ids into fragments, in declaration order.

    Args:
        option_ids: The task's top-level option ids.
        selections: Option id -> user value. Missing entries use defaults.
        registry: Option id -> definition.

    Returns:
        Static fragments for select/switch cases and template fragments for
        input options, nested options following their parent's fragment.
    """
    out: List[ResolvedFragment] = []
    for option_id in option_ids:
        _collect(option_id, selections, registry, out, ())
    return out
