"""Oracle: role-aware command and messaging core for accelerator dashboards."""

__version__ = "0.1.0"
