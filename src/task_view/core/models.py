"""Core data models for Task View."""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class TaskKind(str, Enum):
    """Kinds of tasks that can be discovered."""

    ANT = "ant"  # <target> in build.xml
    NPM = "npm"  # "scripts" entry in package.json
    VSCODE = "vscode-task"  # entry in .vscode/tasks.json


class SourceLocation(BaseModel):
    """
    Zero-based range in a manifest file.

    The end position is exclusive, matching editor selection ranges.
    """

    model_config = ConfigDict(frozen=True)

    start_line: int = Field(..., ge=0)
    start_column: int = Field(..., ge=0)
    end_line: int = Field(..., ge=0)
    end_column: int = Field(..., ge=0)

    def contains(self, line: int, column: int) -> bool:
        """Return True if (line, column) lies inside this range."""
        if (line, column) < (self.start_line, self.start_column):
            return False
        return (line, column) < (self.end_line, self.end_column)

    @classmethod
    def from_offsets(cls, text: str, start: int, end: int) -> "SourceLocation":
        """Build a location from character offsets into text."""
        start_line, start_column = _offset_to_position(text, start)
        end_line, end_column = _offset_to_position(text, end)
        return cls(
            start_line=start_line,
            start_column=start_column,
            end_line=end_line,
            end_column=end_column,
        )


def _offset_to_position(text: str, offset: int) -> tuple[int, int]:
    line = text.count("\n", 0, offset)
    line_start = text.rfind("\n", 0, offset) + 1
    return line, offset - line_start


class Task(BaseModel):
    """
    A named, runnable unit discovered from a manifest.

    Tasks are immutable. Two tasks are the same task when their
    ``identity`` matches, regardless of detail or location.
    """

    model_config = ConfigDict(frozen=True)

    kind: TaskKind = Field(..., description="Kind of task")
    name: str = Field(..., description="Script, target or task label")
    file_path: Path = Field(..., description="Manifest that defines the task")
    detail: str = Field(..., description="Command string or target name")
    location: Optional[SourceLocation] = Field(
        None, description="Range of the task name in the manifest"
    )
    description: Optional[str] = Field(None, description="Human description if any")
    folder: Optional[Path] = Field(None, description="Workspace folder it was found under")

    @property
    def identity(self) -> tuple[TaskKind, Path, str]:
        """Identity key: (kind, file path, name)."""
        return (self.kind, self.file_path, self.name)

    @field_serializer("file_path", "folder")
    def serialize_path(self, path: Optional[Path]) -> Optional[str]:
        """Serialize Path to string for JSON output."""
        return str(path) if path is not None else None

    @field_validator("file_path", "folder", mode="before")
    @classmethod
    def validate_path(cls, v):
        """Convert string to Path if needed."""
        if isinstance(v, str):
            return Path(v)
        return v


class NodeType(str, Enum):
    """Levels of the task tree."""

    FOLDER = "folder"
    FILE = "file"
    TASK = "task"


class TreeNode(BaseModel):
    """A node of the task tree: a workspace folder, a manifest file or a task."""

    model_config = ConfigDict(frozen=True)

    node_type: NodeType
    label: str
    path: Path
    task: Optional[Task] = None
    children: tuple["TreeNode", ...] = ()

    @property
    def is_runnable(self) -> bool:
        return self.node_type == NodeType.TASK and self.task is not None


class RunResult(BaseModel):
    """Outcome of the run-selected-script command."""

    ok: bool
    message: str
    task: Optional[Task] = None
    exit_code: Optional[int] = None


TreeNode.model_rebuild()
