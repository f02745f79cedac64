"""
taskdeck - Compile task option selections into pipeline overrides.

Subpackages:
- spec: project interface types, selections, loading and validation
- override: option tree resolution and fragment compilation
- config: runtime settings and the built-in task catalog
- api: FastAPI router exposing compilation previews
"""

__version__ = "0.3.0"
