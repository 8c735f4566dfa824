"""Parser plugin for VS Code .vscode/tasks.json files."""

import json
import logging
import re
import shlex
from pathlib import Path

from ...core.errors import ManifestParseError
from ...core.models import SourceLocation, Task, TaskKind
from ...core.plugin import BaseParser

logger = logging.getLogger(__name__)


def strip_json_comments(content: str) -> str:
    """
    Remove // and /* */ comments and trailing commas from JSONC content.

    VS Code allows both in tasks.json, but the standard JSON parser doesn't.
    String boundaries are respected so URLs like https:// are not treated
    as comment markers. Removed comments are replaced with spaces (newlines
    are kept) so offsets in the result still line up with the original.

    Args:
        content: JSONC content

    Returns:
        JSON content with comments removed
    """
    result = []
    i = 0
    in_string = False
    escape_next = False

    while i < len(content):
        char = content[i]

        # Handle escape sequences in strings
        if in_string and escape_next:
            result.append(char)
            escape_next = False
            i += 1
            continue

        # Track string boundaries
        if char == '"':
            in_string = not in_string
            result.append(char)
            i += 1
            continue

        # Mark next character as escaped
        if char == "\\" and in_string:
            escape_next = True
            result.append(char)
            i += 1
            continue

        if not in_string:
            # // single-line comment: blank until end of line
            if content[i:i + 2] == "//":
                while i < len(content) and content[i] != "\n":
                    result.append(" ")
                    i += 1
                continue

            # /* multi-line comment */
            if content[i:i + 2] == "/*":
                end = content.find("*/", i + 2)
                end = len(content) if end == -1 else end + 2
                result.extend("\n" if c == "\n" else " " for c in content[i:end])
                i = end
                continue

            # Trailing comma before a closing bracket
            if char == ",":
                rest = _skip_blank_and_comments(content, i + 1)
                if rest < len(content) and content[rest] in "}]":
                    result.append(" ")
                    i += 1
                    continue

        result.append(char)
        i += 1

    return "".join(result)


def _skip_blank_and_comments(content: str, i: int) -> int:
    while i < len(content):
        if content[i].isspace():
            i += 1
        elif content[i:i + 2] == "//":
            newline = content.find("\n", i)
            i = len(content) if newline == -1 else newline
        elif content[i:i + 2] == "/*":
            end = content.find("*/", i + 2)
            i = len(content) if end == -1 else end + 2
        else:
            break
    return i


def _command_line(task: dict) -> str:
    """Join a task's command and args into one display string."""
    command = task.get("command", "")
    if isinstance(command, dict):
        # {"value": "...", "quoting": "..."} form
        command = command.get("value", "")
    if isinstance(command, list):
        command = " ".join(str(c) for c in command)
    if not isinstance(command, str):
        return ""

    parts = [command] if command else []
    args = task.get("args", [])
    if isinstance(args, list):
        for arg in args:
            if isinstance(arg, dict):
                arg = arg.get("value", "")
            if isinstance(arg, str) and arg:
                parts.append(shlex.quote(arg) if " " in arg else arg)
    return " ".join(parts)


class VsCodeTasksParser(BaseParser):
    """Discovers tasks declared in .vscode/tasks.json."""

    kind = TaskKind.VSCODE

    def parse_text(self, text: str, file_path: Path) -> list[Task]:
        """
        Parse a tasks.json (JSONC) into tasks.

        Entries without a label (and without a script or command to name
        them by) are skipped with a warning.

        Args:
            text: tasks.json contents
            file_path: Path to tasks.json

        Returns:
            One Task per valid entry, in file order
        """
        clean = strip_json_comments(text)
        try:
            data = json.loads(clean)
        except json.JSONDecodeError as e:
            raise ManifestParseError(file_path, f"malformed JSON: {e}") from e
        except (ValueError, RecursionError) as e:
            # Nesting too deep for the decoder, or numbers too long to convert
            raise ManifestParseError(file_path, f"unreadable JSON: {e}") from e

        if not isinstance(data, dict):
            raise ManifestParseError(file_path, "top level is not an object")

        entries = data.get("tasks", [])
        if not isinstance(entries, list):
            logger.warning(f"Ignoring 'tasks' in {file_path}: not an array")
            return []

        tasks = []
        search_from = 0

        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                logger.warning(f"Skipping task #{index} in {file_path}: not an object")
                continue

            command = _command_line(entry)
            label = entry.get("label") or entry.get("script") or command
            if not isinstance(label, str) or not label:
                logger.warning(f"Skipping task #{index} in {file_path}: no label")
                continue

            location = None
            if isinstance(entry.get("label"), str):
                quoted = re.escape(json.dumps(label, ensure_ascii=False))
                found = re.compile(r'"label"\s*:\s*(' + quoted + ")").search(clean, search_from)
                if found:
                    location = SourceLocation.from_offsets(text, *found.span(1))
                    search_from = found.end()

            if entry.get("type") == "npm" and isinstance(entry.get("script"), str):
                command = command or f"npm run {entry['script']}"

            detail = entry.get("detail")
            tasks.append(
                Task(
                    kind=self.kind,
                    name=label,
                    file_path=file_path,
                    detail=command,
                    location=location,
                    description=detail if isinstance(detail, str) else None,
                )
            )

        logger.debug(f"Found {len(tasks)} VS Code task(s) in {file_path}")
        return tasks

    def get_metadata(self) -> dict:
        """Return parser metadata."""
        return {
            "name": "vscode-tasks",
            "version": "0.1.0",
            "kind": self.kind.value,
            "description": "Discovers VS Code tasks in .vscode/tasks.json",
        }

    def get_supported_files(self) -> list[str]:
        """Return supported file patterns."""
        return ["**/.vscode/tasks.json"]
