"""Interactive console for the workmode automation agent."""

__version__ = "0.3.0"
