"""Hover text for npm script names in package.json documents."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, NamedTuple, Optional

from .cache import CacheKey, DiscoveryCache
from .errors import ManifestParseError
from .events import DocumentChanged, EventBus, FileChanged, WorkspaceFoldersChanged
from .models import Task, TaskKind
from .plugin import BaseParser

logger = logging.getLogger(__name__)


class Position(NamedTuple):
    """Zero-based line and column in a document."""

    line: int
    column: int


@dataclass(frozen=True)
class TextDocument:
    """
    A document to hover over.

    text holds the editor contents, which may be unsaved. When it is None
    the saved file is read from disk.
    """

    path: Path
    text: Optional[str] = None


class NpmScriptHoverProvider:
    """
    Answers hover requests over script names in package.json.

    Scripts are cached per document and dropped when the document's text
    changes or the file changes on disk.
    """

    def __init__(self, parser: Optional[BaseParser]):
        self.parser = parser
        self.cache = DiscoveryCache(self._load_from_disk)

    def _guarded(self, path: Path, parse: Callable[[], list[Task]]) -> tuple[Task, ...]:
        try:
            return tuple(parse())
        except ManifestParseError as e:
            logger.warning(f"No hover scripts for {e.path}: {e.reason}")
        except Exception as e:
            logger.error(f"Reading scripts from {path} failed: {e}")
        return ()

    def _load_from_disk(self, key: CacheKey) -> tuple[Task, ...]:
        return self._guarded(key.scope, lambda: self.parser.parse(key.scope))

    def _scripts(self, document: TextDocument) -> tuple[Task, ...]:
        key = CacheKey(document.path, TaskKind.NPM)
        if document.text is None:
            return self.cache.get(key)

        def load(key: CacheKey) -> tuple[Task, ...]:
            return self._guarded(
                document.path, lambda: self.parser.parse_text(document.text, document.path)
            )

        return self.cache.get(key, loader=load)

    def hover_at(self, document: TextDocument, position: Position) -> Optional[str]:
        """
        Return Markdown hover text for the script name at position.

        Returns:
            Hover text, or None if the document is not a package.json, the
            position is outside every script name, or the script is unknown
        """
        if self.parser is None or document.path.name != "package.json":
            return None

        for task in self._scripts(document):
            if task.location is not None and task.location.contains(*position):
                return self.format_hover(task)
        return None

    @staticmethod
    def format_hover(task: Task) -> str:
        return (
            f"**npm script** `{task.name}`\n\n"
            f"```sh\n{task.detail}\n```\n\n"
            f"Run with `npm run {task.name}`"
        )

    def invalidate(self, document_path: Optional[Path] = None) -> None:
        """Drop cached scripts for one document, or for all documents."""
        if document_path is None:
            self.cache.invalidate()
        else:
            self.cache.invalidate(CacheKey(document_path, TaskKind.NPM))

    def subscribe(self, bus: EventBus) -> list[Callable[[], None]]:
        return [
            bus.subscribe(DocumentChanged, lambda e: self.invalidate(e.path)),
            bus.subscribe(FileChanged, lambda e: self.invalidate(e.path)),
            bus.subscribe(WorkspaceFoldersChanged, lambda e: self.invalidate()),
        ]
