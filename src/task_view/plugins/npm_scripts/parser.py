"""Parser plugin for npm scripts in package.json."""

import json
import logging
import re
from pathlib import Path
from typing import Optional

from ...core.errors import ManifestParseError
from ...core.models import SourceLocation, Task, TaskKind
from ...core.plugin import BaseParser

logger = logging.getLogger(__name__)

# One JSON token: a string literal, a structural character, or a bare literal
_TOKEN_PATTERN = re.compile(r'"(?:[^"\\]|\\.)*"|[{}\[\]:,]|[^\s{}\[\]:,"]+', re.DOTALL)


def locate_scripts(text: str) -> dict[str, tuple[SourceLocation, Optional[SourceLocation]]]:
    """
    Find the source ranges of every entry in the top-level "scripts" object.

    json.loads() discards positions, so the text is tokenized separately.
    Only the top-level "scripts" object is considered; a "scripts" key
    nested deeper (e.g. inside "config") is ignored.

    Args:
        text: package.json contents

    Returns:
        Mapping of script name to (name range, value range). The value range
        is None when the value is not a JSON string.
    """
    found = {}
    # Each entry: (opening bracket, key that owns this container)
    stack: list[tuple[str, Optional[str]]] = []
    expect_key = False
    last_key = None
    key_span = None

    for match in _TOKEN_PATTERN.finditer(text):
        token = match.group()

        if token in ("{", "["):
            owner = last_key if stack and stack[-1][0] == "{" else None
            stack.append((token, owner))
            expect_key = token == "{"
            last_key = None
            continue

        if token in ("}", "]"):
            if stack:
                stack.pop()
            expect_key = False
            continue

        if token == ",":
            expect_key = bool(stack) and stack[-1][0] == "{"
            continue

        if token == ":":
            continue

        in_scripts = len(stack) == 2 and stack[0][0] == "{" and stack[1] == ("{", "scripts")

        if expect_key:
            expect_key = False
            try:
                last_key = json.loads(token) if token.startswith('"') else token
            except json.JSONDecodeError:
                last_key = token.strip('"')
            key_span = match.span()
            if in_scripts and last_key not in found:
                location = SourceLocation.from_offsets(text, *key_span)
                found[last_key] = (location, None)
        elif in_scripts and last_key in found and found[last_key][1] is None:
            if token.startswith('"'):
                found[last_key] = (
                    found[last_key][0],
                    SourceLocation.from_offsets(text, *match.span()),
                )

    return found


class NpmScriptsParser(BaseParser):
    """Discovers npm scripts declared in package.json files."""

    kind = TaskKind.NPM

    def parse_text(self, text: str, file_path: Path) -> list[Task]:
        """
        Parse package.json contents into npm tasks.

        Entries whose command is not a string are skipped with a warning;
        the remaining scripts are still returned.

        Args:
            text: package.json contents
            file_path: Path to the package.json

        Returns:
            One Task per valid script, in declaration order
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ManifestParseError(file_path, f"malformed JSON: {e}") from e
        except (ValueError, RecursionError) as e:
            # Nesting too deep for the decoder, or numbers too long to convert
            raise ManifestParseError(file_path, f"unreadable JSON: {e}") from e

        if not isinstance(data, dict):
            raise ManifestParseError(file_path, "top level is not an object")

        scripts = data.get("scripts", {})
        if not scripts:
            return []
        if not isinstance(scripts, dict):
            logger.warning(f"Ignoring 'scripts' in {file_path}: not an object")
            return []

        locations = locate_scripts(text)
        tasks = []

        for name, command in scripts.items():
            if not isinstance(command, str):
                logger.warning(
                    f"Skipping script '{name}' in {file_path}: command is not a string"
                )
                continue

            location = locations.get(name, (None, None))[0]
            tasks.append(
                Task(
                    kind=self.kind,
                    name=name,
                    file_path=file_path,
                    detail=command,
                    location=location,
                )
            )

        logger.debug(f"Found {len(tasks)} npm script(s) in {file_path}")
        return tasks

    def get_metadata(self) -> dict:
        """Return parser metadata."""
        return {
            "name": "npm-scripts",
            "version": "0.1.0",
            "kind": self.kind.value,
            "description": "Discovers npm scripts in package.json",
        }

    def get_supported_files(self) -> list[str]:
        """Return supported file patterns."""
        return ["**/package.json"]
