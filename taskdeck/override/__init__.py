"""
taskdeck/override - Pipeline override resolution and merging.

- resolver: walks a task's option tree into ordered fragments
- compiler: substitutes input placeholders, deep-merges fragments and
  shapes the engine-facing output
"""

from .resolver import (
    ResolvedFragment,
    StaticFragment,
    TemplateFragment,
    find_switch_case,
    resolve_options,
    select_active_case,
)

from .compiler import (
    CompiledOverride,
    OverrideCompiler,
    PlaceholderError,
    compile_fragments,
    deep_merge,
    generate_task_pipeline_override,
    merge_fragments,
    render_fragments,
    substitute_placeholders,
)

__all__ = [
    # Resolver
    "ResolvedFragment",
    "StaticFragment",
    "TemplateFragment",
    "find_switch_case",
    "resolve_options",
    "select_active_case",
    # Compiler
    "CompiledOverride",
    "OverrideCompiler",
    "PlaceholderError",
    "compile_fragments",
    "deep_merge",
    "generate_task_pipeline_override",
    "merge_fragments",
    "render_fragments",
    "substitute_placeholders",
]
