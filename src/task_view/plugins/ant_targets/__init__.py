"""Ant targets parser plugin."""

from .parser import AntTargetsParser

# Parser class exposed for provider discovery
PLUGIN_CLASS = AntTargetsParser

__all__ = ["AntTargetsParser", "PLUGIN_CLASS"]
