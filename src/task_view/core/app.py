"""Application wiring: builds the components and connects them to the bus."""

import logging
from pathlib import Path
from typing import Callable, Iterable, Optional

from .config import HTTP_KEYS, ConfigurationStore, TaskViewSettings, YamlConfigurationStore
from .events import (
    ConfigurationChanged,
    DocumentChanged,
    EventBus,
    WorkspaceFoldersChanged,
)
from .hover import NpmScriptHoverProvider
from .models import TaskKind
from .provider import TaskProvider
from .schema import SchemaFetcher
from .tree import TaskTreeDataProvider

logger = logging.getLogger(__name__)


class TaskViewApp:
    """
    Owns every Task View component for one workspace.

    activate() subscribes the components to the bus in dependency order:
    the provider adopts new settings first, then caches drop entries, then
    the tree refreshes.
    """

    def __init__(
        self,
        folders: Iterable[Path] = (),
        store: Optional[ConfigurationStore] = None,
        schema_fetcher: Optional[SchemaFetcher] = None,
    ):
        self.bus = EventBus()
        self.store = store if store is not None else ConfigurationStore()
        self.settings = TaskViewSettings.from_store(self.store)
        self.provider = TaskProvider(folders, settings=self.settings)
        self.tree = TaskTreeDataProvider(self.provider)
        self.hover = NpmScriptHoverProvider(self.provider.parser_for(TaskKind.NPM))
        self.schemas = schema_fetcher or SchemaFetcher(self.settings)
        self._unsubscribe: list[Callable[[], None]] = []
        self.active = False

    @property
    def folders(self) -> list[Path]:
        return self.provider.folders

    def activate(self) -> bool:
        """
        Connect components to the bus.

        Returns:
            True on success; activation errors are logged, not raised
        """
        if self.active:
            return True
        try:
            self._unsubscribe.extend(self.provider.subscribe(self.bus, self.store))
            self._unsubscribe.extend(self.provider.cache.subscribe(self.bus))
            self._unsubscribe.extend(self.hover.subscribe(self.bus))
            self._unsubscribe.extend(self.tree.subscribe(self.bus))
            self._unsubscribe.append(
                self.bus.subscribe(ConfigurationChanged, self._on_configuration_changed)
            )
        except Exception as e:
            logger.error(f"Task View failed to start: {e}")
            self.deactivate()
            return False

        self.active = True
        if self.settings.show_output:
            logger.info("Output display enabled (taskView.showOutput)")
        logger.info("Task View started successfully")
        return True

    def deactivate(self) -> None:
        """Remove every subscription made by activate()."""
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe.clear()
        self.active = False

    def _on_configuration_changed(self, event: ConfigurationChanged) -> None:
        self.settings = TaskViewSettings.from_store(self.store)
        # The HTTP helper is re-configured on every change, not only http.*
        self.schemas.configure(self.settings)
        if event.keys & HTTP_KEYS:
            logger.info("HTTP proxy settings changed")

    def reload_configuration(self) -> set[str]:
        """
        Re-read a file-backed store and announce changed keys.

        Returns:
            The changed keys (empty if nothing changed)
        """
        if not isinstance(self.store, YamlConfigurationStore):
            return set()
        changed = self.store.reload()
        if changed:
            self.bus.publish(ConfigurationChanged(keys=frozenset(changed)))
        return changed

    def update_configuration(self, values: dict) -> set[str]:
        """Replace the stored settings and announce changed keys."""
        changed = self.store.update(values)
        if changed:
            self.bus.publish(ConfigurationChanged(keys=frozenset(changed)))
        return changed

    def set_workspace_folders(self, folders: Iterable[Path]) -> None:
        """Replace the workspace folders and announce the difference."""
        new = [Path(f) for f in folders]
        added = tuple(f for f in new if f not in self.provider.folders)
        removed = tuple(f for f in self.provider.folders if f not in new)
        if added or removed:
            self.bus.publish(WorkspaceFoldersChanged(added=added, removed=removed))

    def document_changed(self, path: Path) -> None:
        self.bus.publish(DocumentChanged(path=path))
