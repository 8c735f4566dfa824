"""VS Code tasks parser plugin."""

from .parser import VsCodeTasksParser, strip_json_comments

# Parser class exposed for provider discovery
PLUGIN_CLASS = VsCodeTasksParser

__all__ = ["VsCodeTasksParser", "PLUGIN_CLASS", "strip_json_comments"]
