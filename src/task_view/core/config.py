"""Configuration store and settings snapshot.

Settings live in a YAML file. Keys can be nested::

    taskView:
      exclude: ["**/examples/**"]
      showOutput: true
    http:
      proxy: http://proxy:3128

or written as dotted keys (``taskView.exclude: [...]``). Both forms are
flattened into dotted keys when loaded.
"""

import logging
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".taskview.yaml"

EXCLUDE_KEYS = frozenset(
    {"taskView.exclude", "taskView.excludeCaseSensitive", "taskView.excludeMatch"}
)
HTTP_KEYS = frozenset({"http.proxy", "http.proxyStrictSSL"})


def _flatten(data: dict, prefix: str = "") -> dict[str, Any]:
    flat = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        # Only the section level nests; setting values may themselves be dicts
        if isinstance(value, dict) and not prefix:
            flat.update(_flatten(value, f"{dotted}."))
        else:
            flat[dotted] = value
    return flat


class ConfigurationStore:
    """In-memory key/value settings store."""

    def __init__(self, values: Optional[dict] = None):
        self._values = _flatten(values or {})

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under a dotted key, or default."""
        return self._values.get(key, default)

    def update(self, values: dict) -> set[str]:
        """
        Replace the stored values.

        Returns:
            Set of dotted keys whose value changed (added, removed or edited)
        """
        new_values = _flatten(values)
        changed = {
            key
            for key in set(self._values) | set(new_values)
            if self._values.get(key) != new_values.get(key)
        }
        self._values = new_values
        return changed


class YamlConfigurationStore(ConfigurationStore):
    """Configuration store backed by a YAML file."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(self._read())

    def _read(self) -> dict:
        if not self.path.exists():
            logger.debug(f"No configuration file at {self.path}")
            return {}

        try:
            with open(self.path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Could not load configuration {self.path}: {e}")
            return {}

        if data is None:
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring configuration {self.path}: top level is not a mapping")
            return {}
        return data

    def reload(self) -> set[str]:
        """Re-read the file and return the changed keys."""
        return self.update(self._read())


class TaskViewSettings(BaseModel):
    """Read-only snapshot of the settings Task View uses."""

    exclude: list[str] = Field(default_factory=list, description="Exclusion globs")
    exclude_case_sensitive: bool = Field(
        True, description="Match exclusion globs case-sensitively"
    )
    exclude_match: Literal["path", "segment"] = Field(
        "path", description="Match globs against the relative path or each path segment"
    )
    show_output: bool = Field(False, description="Show log output while running")
    proxy: str = Field("", description="HTTP proxy for schema downloads")
    proxy_strict_ssl: bool = Field(True, description="Verify TLS through the proxy")

    @classmethod
    def from_store(cls, store: ConfigurationStore) -> "TaskViewSettings":
        """
        Build a snapshot from a configuration store.

        Invalid values are logged and replaced with their defaults, so a
        broken setting never stops discovery.
        """
        exclude = store.get("taskView.exclude", [])
        if isinstance(exclude, str):
            exclude = [exclude]

        values = {
            "exclude": exclude,
            "exclude_case_sensitive": store.get("taskView.excludeCaseSensitive", True),
            "exclude_match": store.get("taskView.excludeMatch", "path"),
            "show_output": store.get("taskView.showOutput", False),
            "proxy": store.get("http.proxy", "") or "",
            "proxy_strict_ssl": store.get("http.proxyStrictSSL", True),
        }

        try:
            return cls(**values)
        except ValidationError as e:
            bad_fields = {str(err["loc"][0]) for err in e.errors() if err["loc"]}
            logger.warning(
                f"Invalid setting(s) {', '.join(sorted(bad_fields))}, using defaults"
            )
            return cls(**{k: v for k, v in values.items() if k not in bad_fields})


def find_config_file(folders: list[Path]) -> Optional[Path]:
    """Return the first workspace folder's config file path, if any folder is given."""
    if not folders:
        return None
    return folders[0] / CONFIG_FILE_NAME
