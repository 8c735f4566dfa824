"""Output formatters for discovered tasks."""

import json
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from .models import NodeType, Task, TaskKind, TreeNode

# Colour and icon per task kind
KIND_STYLE = {
    TaskKind.ANT: ("magenta", "🐜"),
    TaskKind.NPM: ("red", "📦"),
    TaskKind.VSCODE: ("blue", "🔧"),
}


class TextReporter:
    """Human-readable output using rich library."""

    def __init__(self, console: Console | None = None):
        """Initialize text reporter with optional console."""
        self.console = console or Console()

    def report_tree(self, roots: tuple[TreeNode, ...], selection: Optional[TreeNode] = None) -> None:
        """
        Print the task tree.

        Args:
            roots: Folder nodes from TaskTreeDataProvider.get_children()
            selection: Node to highlight, if any
        """
        if not roots:
            self.console.print("No tasks found", style="yellow bold")
            return

        for folder_node in roots:
            tree = Tree(f"📁 {escape(folder_node.label)}", style="bold")
            for file_node in folder_node.children:
                branch = tree.add(f"📄 {escape(file_node.label)}", style="cyan")
                for task_node in file_node.children:
                    branch.add(self._task_label(task_node, task_node == selection))
            self.console.print(tree)

    def report_list(self, tasks: list[Task]) -> None:
        """Print a flat task list followed by a summary line."""
        if not tasks:
            self.console.print("No tasks found", style="yellow bold")
            return

        for task in tasks:
            color, icon = KIND_STYLE[task.kind]
            self.console.print(
                f"{icon} [{color}]{task.kind.value}[/{color}] "
                f"[bold]{escape(task.name)}[/bold]  {escape(task.detail)}  "
                f"[dim]{escape(str(task.file_path))}[/dim]"
            )

        counts = {kind: 0 for kind in TaskKind}
        for task in tasks:
            counts[task.kind] += 1
        parts = [f"{n} {kind.value}" for kind, n in counts.items() if n]
        self.console.print(f"Summary: {', '.join(parts)} | {len(tasks)} tasks")

    def _task_label(self, node: TreeNode, selected: bool) -> str:
        task = node.task
        color, icon = KIND_STYLE[task.kind]
        label = f"{icon} [{color}]{escape(task.name)}[/{color}]"
        if task.detail != task.name:
            label += f" [dim]{escape(task.detail)}[/dim]"
        if task.description:
            label += f" [italic]{escape(task.description)}[/italic]"
        if selected:
            label = f"[reverse]{label}[/reverse]"
        return label


class JsonReporter:
    """JSON output for programmatic consumption."""

    def report_list(self, tasks: list[Task]) -> str:
        """
        Generate JSON for a task list.

        Returns:
            JSON string
        """
        return json.dumps([task.model_dump(mode="json") for task in tasks], indent=2)

    def report_tree(self, roots: tuple[TreeNode, ...]) -> str:
        """Generate nested JSON for the task tree."""
        return json.dumps([self._node(n) for n in roots], indent=2)

    def _node(self, node: TreeNode) -> dict:
        data = {"type": node.node_type.value, "label": node.label, "path": str(node.path)}
        if node.node_type == NodeType.TASK:
            data["task"] = node.task.model_dump(mode="json")
        else:
            data["children"] = [self._node(c) for c in node.children]
        return data
