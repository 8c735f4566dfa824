"""Discovery cache: lazily populated, explicitly invalidated."""

import logging
from pathlib import Path
from typing import Callable, NamedTuple, Optional

from .events import (
    ConfigurationChanged,
    EventBus,
    FileChanged,
    TasksInvalidated,
    WorkspaceFoldersChanged,
)
from .config import EXCLUDE_KEYS
from .models import Task, TaskKind

logger = logging.getLogger(__name__)


class CacheKey(NamedTuple):
    """Cache scope: a workspace folder (or a single document) and a task kind."""

    scope: Path
    kind: TaskKind


Loader = Callable[[CacheKey], tuple[Task, ...]]


class DiscoveryCache:
    """
    Mapping of (scope, kind) to the most recently discovered tasks.

    Entries are populated on first read through the loader and replaced
    whole: a reader sees either no entry or a complete tuple, never a
    half-built one. Invalidation is idempotent.
    """

    def __init__(self, loader: Loader):
        self._loader = loader
        self._entries: dict[CacheKey, tuple[Task, ...]] = {}
        self.populations = 0

    def get(self, key: CacheKey, loader: Optional[Loader] = None) -> tuple[Task, ...]:
        """
        Return cached tasks for key, populating the entry if absent.

        Args:
            key: Scope and kind to look up
            loader: Optional loader to use instead of the default one
        """
        entry = self._entries.get(key)
        if entry is None:
            entry = tuple((loader or self._loader)(key))
            self._entries[key] = entry
            self.populations += 1
            logger.debug(f"Cached {len(entry)} {key.kind.value} task(s) for {key.scope}")
        return entry

    def peek(self, key: CacheKey) -> Optional[tuple[Task, ...]]:
        """Return the cached entry without populating it."""
        return self._entries.get(key)

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def invalidate(self, key: Optional[CacheKey] = None) -> None:
        """Drop one entry, or every entry when key is None."""
        if key is None:
            if self._entries:
                logger.debug(f"Invalidating all {len(self._entries)} cache entries")
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def invalidate_where(self, predicate: Callable[[CacheKey], bool]) -> int:
        """
        Drop every entry whose key satisfies predicate.

        Returns:
            Number of entries dropped
        """
        stale = [key for key in self._entries if predicate(key)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def invalidate_path(self, path: Path) -> int:
        """Drop entries for every scope that contains path (or is path)."""
        return self.invalidate_where(lambda key: path == key.scope or key.scope in path.parents)

    def subscribe(self, bus: EventBus) -> list[Callable[[], None]]:
        """
        Invalidate on workspace events and announce it with TasksInvalidated.

        Returns:
            Unsubscribe callables
        """

        def on_file_changed(event: FileChanged) -> None:
            dropped = self.invalidate_path(event.path)
            logger.info(f"{event.path} {event.change.value}, dropped {dropped} cache entries")
            bus.publish(TasksInvalidated(reason=f"{event.path} {event.change.value}"))

        def on_folders_changed(event: WorkspaceFoldersChanged) -> None:
            self.invalidate()
            bus.publish(TasksInvalidated(reason="workspace folders changed"))

        def on_configuration_changed(event: ConfigurationChanged) -> None:
            if event.keys & EXCLUDE_KEYS:
                self.invalidate()
                bus.publish(TasksInvalidated(reason="exclusion settings changed"))

        return [
            bus.subscribe(FileChanged, on_file_changed),
            bus.subscribe(WorkspaceFoldersChanged, on_folders_changed),
            bus.subscribe(ConfigurationChanged, on_configuration_changed),
        ]
