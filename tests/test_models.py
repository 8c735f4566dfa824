"""Tests for Task View data models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from task_view.core.models import NodeType, SourceLocation, Task, TaskKind, TreeNode


class TestTaskKind:
    """Tests for TaskKind enum."""

    def test_values(self):
        assert TaskKind.ANT.value == "ant"
        assert TaskKind.NPM.value == "npm"
        assert TaskKind.VSCODE.value == "vscode-task"

    def test_from_string(self):
        assert TaskKind("vscode-task") == TaskKind.VSCODE


class TestSourceLocation:
    """Tests for SourceLocation."""

    def test_contains_single_line(self):
        location = SourceLocation(start_line=2, start_column=4, end_line=2, end_column=9)

        assert location.contains(2, 4)
        assert location.contains(2, 8)
        assert not location.contains(2, 9)
        assert not location.contains(2, 3)
        assert not location.contains(1, 5)

    def test_contains_multi_line(self):
        location = SourceLocation(start_line=1, start_column=10, end_line=3, end_column=2)

        assert location.contains(2, 0)
        assert location.contains(1, 50)
        assert not location.contains(3, 2)

    def test_from_offsets(self):
        text = "ab\ncd\nef"
        location = SourceLocation.from_offsets(text, text.index("d"), text.index("f"))

        assert (location.start_line, location.start_column) == (1, 1)
        assert (location.end_line, location.end_column) == (2, 1)

    def test_negative_rejected(self):
        with pytest.raises(ValidationError):
            SourceLocation(start_line=-1, start_column=0, end_line=0, end_column=0)


class TestTask:
    """Tests for Task model."""

    def test_task_creation(self):
        """Test creating a valid task."""
        task = Task(
            kind=TaskKind.NPM,
            name="build",
            file_path=Path("/ws/package.json"),
            detail="tsc -p .",
        )

        assert task.name == "build"
        assert task.location is None
        assert task.folder is None

    def test_string_path_converted(self):
        """Test that string paths are converted to Path."""
        task = Task(kind="ant", name="jar", file_path="/ws/build.xml", detail="jar")

        assert isinstance(task.file_path, Path)
        assert task.kind == TaskKind.ANT

    def test_immutable(self):
        """Test tasks cannot be modified after construction."""
        task = Task(kind=TaskKind.NPM, name="a", file_path=Path("p"), detail="x")

        with pytest.raises(ValidationError):
            task.name = "b"

    def test_identity_ignores_detail(self):
        """Test identity is (kind, file path, name)."""
        first = Task(kind=TaskKind.NPM, name="a", file_path=Path("p"), detail="x")
        second = Task(kind=TaskKind.NPM, name="a", file_path=Path("p"), detail="y")
        other = Task(kind=TaskKind.ANT, name="a", file_path=Path("p"), detail="x")

        assert first.identity == second.identity
        assert first.identity != other.identity

    def test_missing_required_field(self):
        with pytest.raises(ValidationError):
            Task(kind=TaskKind.NPM, name="a", file_path=Path("p"))

    def test_json_serialization(self):
        """Test paths serialize as strings."""
        task = Task(
            kind=TaskKind.NPM,
            name="a",
            file_path=Path("/ws/package.json"),
            detail="x",
            folder=Path("/ws"),
        )
        data = task.model_dump(mode="json")

        assert data["file_path"] == "/ws/package.json"
        assert data["folder"] == "/ws"
        assert data["kind"] == "npm"


class TestTreeNode:
    """Tests for TreeNode."""

    def test_runnable_only_for_tasks(self):
        task = Task(kind=TaskKind.NPM, name="a", file_path=Path("p"), detail="x")
        task_node = TreeNode(node_type=NodeType.TASK, label="a", path=Path("p"), task=task)
        file_node = TreeNode(
            node_type=NodeType.FILE, label="p", path=Path("p"), children=(task_node,)
        )

        assert task_node.is_runnable
        assert not file_node.is_runnable
        assert file_node.children[0] is task_node
