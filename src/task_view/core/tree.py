"""Tree view adapter over the task provider."""

import logging
from collections import defaultdict
from pathlib import Path
from typing import Callable, Optional

from .events import EventBus, TasksInvalidated
from .models import NodeType, Task, TreeNode
from .provider import TaskProvider

logger = logging.getLogger(__name__)


class TaskTreeDataProvider:
    """
    Presents discovered tasks as folder -> manifest file -> task nodes.

    The tree is built lazily from the provider on first access and dropped
    by refresh(). Listeners registered with on_refresh() are called after
    every refresh so a view can redraw.
    """

    def __init__(self, provider: TaskProvider):
        self.provider = provider
        self._roots: Optional[tuple[TreeNode, ...]] = None
        self._listeners: list[Callable[[], None]] = []
        self.selection: Optional[TreeNode] = None

    def on_refresh(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    def refresh(self) -> None:
        """Drop the built tree and notify listeners."""
        self._roots = None
        for listener in list(self._listeners):
            listener()

    def get_children(self, node: Optional[TreeNode] = None) -> tuple[TreeNode, ...]:
        """Return root nodes, or the children of node."""
        if node is None:
            if self._roots is None:
                self._roots = self._build()
            return self._roots
        return node.children

    def iter_task_nodes(self):
        """Yield every task node in display order."""
        for folder_node in self.get_children():
            for file_node in folder_node.children:
                yield from file_node.children

    def select(self, node: Optional[TreeNode]) -> None:
        self.selection = node

    def select_task(self, name: str, kind=None) -> Optional[TreeNode]:
        """Select the first task node called name (optionally of kind)."""
        for node in self.iter_task_nodes():
            if node.task.name == name and (kind is None or node.task.kind == kind):
                self.selection = node
                return node
        self.selection = None
        return None

    def _build(self) -> tuple[TreeNode, ...]:
        by_folder: dict[Path, dict[Path, list[Task]]] = defaultdict(lambda: defaultdict(list))
        for task in self.provider.list():
            folder = task.folder or task.file_path.parent
            by_folder[folder][task.file_path].append(task)

        roots = []
        for folder in self.provider.folders:
            files = by_folder.get(folder)
            if not files:
                continue
            file_nodes = []
            for file_path in sorted(files, key=lambda p: _relative(p, folder)):
                task_nodes = tuple(
                    TreeNode(
                        node_type=NodeType.TASK,
                        label=task.name,
                        path=file_path,
                        task=task,
                    )
                    for task in sorted(files[file_path], key=lambda t: t.name)
                )
                file_nodes.append(
                    TreeNode(
                        node_type=NodeType.FILE,
                        label=_relative(file_path, folder),
                        path=file_path,
                        children=task_nodes,
                    )
                )
            roots.append(
                TreeNode(
                    node_type=NodeType.FOLDER,
                    label=folder.name or str(folder),
                    path=folder,
                    children=tuple(file_nodes),
                )
            )

        logger.debug(f"Built task tree with {len(roots)} folder(s)")
        return tuple(roots)

    def subscribe(self, bus: EventBus) -> list[Callable[[], None]]:
        return [bus.subscribe(TasksInvalidated, lambda e: self.refresh())]


def _relative(path: Path, folder: Path) -> str:
    try:
        return path.relative_to(folder).as_posix()
    except ValueError:
        return str(path)
