"""Exceptions raised inside Task View.

None of these are allowed to escape to the host: providers and commands
catch them at their boundary, log them and degrade to an empty result.
"""

from pathlib import Path


class TaskViewError(Exception):
    """Base class for all Task View errors."""


class ManifestParseError(TaskViewError):
    """A manifest file could not be read or parsed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class NoSelectionError(TaskViewError):
    """The run command was invoked with nothing selected in the tree."""

    def __init__(self):
        super().__init__("Nothing selected")


class NotRunnableError(TaskViewError):
    """The selected tree node does not resolve to a single task."""

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"'{label}' is not a runnable script")


class SchemaUnavailableError(TaskViewError):
    """A JSON schema could not be fetched or decoded."""
