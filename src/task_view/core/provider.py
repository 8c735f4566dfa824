"""Task provider: discovers tasks across workspace folders."""

from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Callable, Iterable, Optional

from .cache import CacheKey, DiscoveryCache
from .config import ConfigurationStore, TaskViewSettings
from .errors import ManifestParseError
from .events import ConfigurationChanged, EventBus, WorkspaceFoldersChanged
from .exclusion import ExcludeMatcher
from .models import Task, TaskKind
from .plugin import BaseParser

logger = logging.getLogger(__name__)

# Directories never searched for manifests
SKIPPED_DIRS = frozenset({"node_modules", ".git"})


class TaskProvider:
    """Lists tasks of each kind visible in the workspace."""

    # Parser registry
    PARSER_REGISTRY = {
        "ant-targets": "task_view.plugins.ant_targets",
        "npm-scripts": "task_view.plugins.npm_scripts",
        "vscode-tasks": "task_view.plugins.vscode_tasks",
    }

    def __init__(
        self,
        folders: Iterable[Path] = (),
        settings: Optional[TaskViewSettings] = None,
        cache: Optional[DiscoveryCache] = None,
    ):
        """
        Initialize provider and load parsers.

        Args:
            folders: Workspace folders to search
            settings: Settings snapshot (defaults when omitted)
            cache: Cache to use; a new one is created when omitted
        """
        self.folders = [Path(f) for f in folders]
        self.parsers: dict[str, BaseParser] = {}
        self.cache = cache if cache is not None else DiscoveryCache(self._load)
        self.apply_settings(settings or TaskViewSettings())
        self._load_parsers()

    def _load_parsers(self) -> None:
        """
        Load all registered parsers.

        Each parser module must expose a PLUGIN_CLASS variable pointing to
        the parser class.
        """
        for name, module_path in self.PARSER_REGISTRY.items():
            try:
                module = importlib.import_module(module_path)
                parser_class = getattr(module, "PLUGIN_CLASS")
                self.parsers[name] = parser_class()
                logger.info(f"Loaded parser: {name}")
            except Exception as e:
                logger.error(f"Failed to load parser {name}: {e}")
                # Continue loading other parsers

    def apply_settings(self, settings: TaskViewSettings) -> None:
        """Adopt a new settings snapshot and rebuild the exclusion matcher."""
        self.settings = settings
        self.matcher = ExcludeMatcher(
            settings.exclude,
            case_sensitive=settings.exclude_case_sensitive,
            mode=settings.exclude_match,
        )

    def parser_for(self, kind: TaskKind) -> Optional[BaseParser]:
        """Return the parser producing tasks of kind, if loaded."""
        for parser in self.parsers.values():
            if parser.kind == kind:
                return parser
        return None

    def kinds(self) -> list[TaskKind]:
        return [parser.kind for parser in self.parsers.values()]

    def list(self, kind: Optional[TaskKind] = None) -> list[Task]:
        """
        List tasks of one kind (or all kinds) across all workspace folders.

        Tasks from excluded manifests are never returned, even if they
        were cached under an older exclusion configuration.

        Args:
            kind: Task kind to list (None = every kind)

        Returns:
            Tasks ordered by folder, then discovery order
        """
        kinds = [kind] if kind is not None else self.kinds()
        tasks = []

        for folder in self.folders:
            for task_kind in kinds:
                for task in self.cache.get(CacheKey(folder, task_kind)):
                    if not self.matcher.is_excluded(task.file_path, folder):
                        tasks.append(task)

        return tasks

    def find(self, name: str, kind: Optional[TaskKind] = None) -> list[Task]:
        """Return all visible tasks called name."""
        return [task for task in self.list(kind) if task.name == name]

    def manifests(self, folder: Path, parser: BaseParser) -> list[Path]:
        """
        Find manifest files for parser under folder.

        node_modules and .git are skipped, as are files matching the
        exclusion globs.
        """
        found = set()
        for pattern in parser.get_supported_files():
            for path in folder.glob(pattern):
                relative_parts = path.relative_to(folder).parts
                if SKIPPED_DIRS.intersection(relative_parts):
                    continue
                if path.is_file():
                    found.add(path)
        return sorted(self.matcher.filter(sorted(found), folder))

    def _load(self, key: CacheKey) -> tuple[Task, ...]:
        """Populate one cache entry by parsing every manifest in the scope."""
        parser = self.parser_for(key.kind)
        if parser is None or not key.scope.is_dir():
            return ()

        tasks = []
        try:
            manifests = self.manifests(key.scope, parser)
        except OSError as e:
            logger.warning(f"Could not search {key.scope}: {e}")
            return ()

        for manifest in manifests:
            try:
                parsed = parser.parse(manifest)
            except ManifestParseError as e:
                logger.warning(f"Skipping {e.path}: {e.reason}")
                continue
            except Exception as e:
                logger.error(f"Parser {key.kind.value} failed on {manifest}: {e}")
                # Continue with other manifests
                continue
            tasks.extend(task.model_copy(update={"folder": key.scope}) for task in parsed)

        logger.info(f"Discovered {len(tasks)} {key.kind.value} task(s) in {key.scope}")
        return tuple(tasks)

    def subscribe(
        self, bus: EventBus, store: ConfigurationStore
    ) -> list[Callable[[], None]]:
        """
        Keep folders and settings in step with workspace events.

        Must be subscribed before the cache so the new settings are in place
        when views refresh.
        """

        def on_configuration_changed(event: ConfigurationChanged) -> None:
            self.apply_settings(TaskViewSettings.from_store(store))

        def on_folders_changed(event: WorkspaceFoldersChanged) -> None:
            removed = set(event.removed)
            self.folders = [f for f in self.folders if f not in removed]
            self.folders.extend(f for f in event.added if f not in self.folders)

        return [
            bus.subscribe(ConfigurationChanged, on_configuration_changed),
            bus.subscribe(WorkspaceFoldersChanged, on_folders_changed),
        ]

    def list_parsers(self) -> list[dict]:
        """
        Get metadata for all loaded parsers.

        Returns:
            List of parser metadata dictionaries
        """
        return [parser.get_metadata() for parser in self.parsers.values()]
