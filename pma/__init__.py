"""Project management API, workload analytics and operator CLI."""

__version__ = "1.0.0"
