"""Run-selected-script command and task executors."""

import logging
import shlex
import subprocess
from abc import ABC, abstractmethod

from .errors import NoSelectionError, NotRunnableError
from .models import RunResult, Task, TaskKind
from .tree import TaskTreeDataProvider

logger = logging.getLogger(__name__)


class TaskExecutor(ABC):
    """Runs a task and reports its exit status."""

    @abstractmethod
    def execute(self, task: Task) -> int:
        """Run task and return its exit code."""
        ...


class ShellTaskExecutor(TaskExecutor):
    """Runs tasks as shell commands in the manifest's directory."""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    @staticmethod
    def command_for(task: Task) -> list[str]:
        """
        Build the command line for task.

        Examples:
            npm script "build"    -> ["npm", "run", "build"]
            Ant target "compile"  -> ["ant", "-f", "build.xml", "compile"]
            VS Code task          -> ["sh", "-c", "<command and args>"]
        """
        if task.kind == TaskKind.NPM:
            return ["npm", "run", task.name]
        if task.kind == TaskKind.ANT:
            return ["ant", "-f", task.file_path.name, task.detail]
        return ["sh", "-c", task.detail]

    def execute(self, task: Task) -> int:
        command = self.command_for(task)
        # tasks.json lives in .vscode/, its commands run from the folder above
        cwd = task.file_path.parent
        if task.kind == TaskKind.VSCODE:
            cwd = task.folder or cwd.parent

        logger.info(f"Running {shlex.join(command)} in {cwd}")
        if self.dry_run:
            return 0

        try:
            completed = subprocess.run(command, cwd=cwd, check=False)
        except OSError as e:
            logger.error(f"Could not start {command[0]}: {e}")
            return 127
        return completed.returncode


def resolve_selection(tree: TaskTreeDataProvider) -> Task:
    """
    Resolve the tree's selection to exactly one task.

    Raises:
        NoSelectionError: Nothing is selected
        NotRunnableError: The selection is a folder/file node, or its task
            no longer exists
    """
    node = tree.selection
    if node is None:
        raise NoSelectionError()
    if not node.is_runnable:
        raise NotRunnableError(node.label)

    task = node.task
    current = {t.identity for t in tree.provider.list(task.kind)}
    if task.identity not in current:
        raise NotRunnableError(node.label)
    return task


def run_selected_script(tree: TaskTreeDataProvider, executor: TaskExecutor) -> RunResult:
    """
    Run the task selected in the tree.

    Failures are reported in the result and the log; nothing is raised.
    """
    try:
        task = resolve_selection(tree)
    except (NoSelectionError, NotRunnableError) as e:
        logger.warning(str(e))
        return RunResult(ok=False, message=str(e))

    exit_code = executor.execute(task)
    message = f"{task.kind.value} task '{task.name}' exited with code {exit_code}"
    if exit_code != 0:
        logger.warning(message)
    return RunResult(ok=exit_code == 0, message=message, task=task, exit_code=exit_code)
