"""Manifest file watcher using watchfiles.

Translates raw file-system changes into FileChanged events for the
manifests Task View cares about:

- **/[Bb]uild.xml
- **/package.json
- **/.vscode/tasks.json

The active configuration file is watched too; its changes trigger a
configuration reload instead of a FileChanged event.
"""

import logging
import threading
from pathlib import Path, PurePath
from typing import Callable, Iterable, Optional

from watchfiles import Change, watch

from .events import ChangeType, EventBus, FileChanged

logger = logging.getLogger(__name__)

WATCHED_PATTERNS = ("[Bb]uild.xml", "package.json", ".vscode/tasks.json")
IGNORED_DIRS = frozenset({"node_modules", ".git"})

_CHANGE_TYPES = {
    Change.added: ChangeType.CREATED,
    Change.modified: ChangeType.CHANGED,
    Change.deleted: ChangeType.DELETED,
}


def is_watched(path: str | PurePath) -> bool:
    """Return True if path is a manifest Task View watches."""
    path = PurePath(path)
    if IGNORED_DIRS.intersection(path.parts):
        return False
    return any(path.match(pattern) for pattern in WATCHED_PATTERNS)


def translate(changes: Iterable[tuple[Change, str]]) -> list[FileChanged]:
    """
    Convert a watchfiles change batch into FileChanged events.

    Unwatched paths are dropped. Events are ordered by path so a batch
    always publishes in the same order.
    """
    events = [
        FileChanged(path=Path(raw_path), change=_CHANGE_TYPES[change])
        for change, raw_path in changes
        if is_watched(raw_path)
    ]
    return sorted(events, key=lambda e: (str(e.path), e.change.value))


class ManifestWatcher:
    """Watches workspace folders and publishes manifest changes on the bus."""

    def __init__(
        self,
        folders: list[Path],
        bus: EventBus,
        config_path: Optional[Path] = None,
        on_config_change: Optional[Callable[[], object]] = None,
    ):
        """
        Initialize the watcher.

        Args:
            folders: Workspace folders to watch
            bus: Bus receiving FileChanged events
            config_path: Settings file to watch as well (optional)
            on_config_change: Called when config_path is created, changed or deleted
        """
        self.folders = folders
        self.bus = bus
        self.config_path = config_path.resolve() if config_path is not None else None
        self.on_config_change = on_config_change
        self.stop_event = threading.Event()

    def _is_config(self, path: str) -> bool:
        return self.config_path is not None and Path(path).resolve() == self.config_path

    def _filter(self, change: Change, path: str) -> bool:
        return is_watched(path) or self._is_config(path)

    def _watch_paths(self) -> list[str]:
        paths = [f for f in self.folders if f.is_dir()]
        if self.config_path is not None and self.config_path.parent.is_dir():
            parent = self.config_path.parent
            if not any(parent == f.resolve() or f.resolve() in parent.parents for f in paths):
                paths.append(parent)
        return [str(p) for p in paths]

    def dispatch(self, changes: Iterable[tuple[Change, str]]) -> None:
        """Handle one watchfiles change batch."""
        changes = list(changes)
        if self.on_config_change is not None and any(
            self._is_config(path) for _, path in changes
        ):
            logger.info(f"Configuration file {self.config_path} changed, reloading")
            self.on_config_change()

        for event in translate(changes):
            logger.debug(f"{event.change.value}: {event.path}")
            self.bus.publish(event)

    def run(self, max_batches: Optional[int] = None) -> None:
        """
        Block, publishing events for each change batch until stopped.

        Args:
            max_batches: Stop after this many batches (None = until stop())
        """
        existing = self._watch_paths()
        if not existing:
            logger.warning("No workspace folders to watch")
            return

        logger.info(f"Watching {len(existing)} folder(s) for manifest changes")
        batches = 0
        for changes in watch(
            *existing,
            watch_filter=self._filter,
            stop_event=self.stop_event,
            raise_interrupt=False,
        ):
            self.dispatch(changes)
            batches += 1
            if max_batches is not None and batches >= max_batches:
                break

    def stop(self) -> None:
        self.stop_event.set()
