"""Configuration: runtime settings and the built-in task catalog."""
