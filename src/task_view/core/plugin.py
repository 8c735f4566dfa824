"""Base parser interface for manifest parser plugins."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from .errors import ManifestParseError
from .models import Task, TaskKind

logger = logging.getLogger(__name__)

# Manifests larger than this are skipped
MAX_MANIFEST_BYTES = 10 * 1024 * 1024


class BaseParser(ABC):
    """
    Abstract base class for all manifest parser plugins.

    A parser turns the text of one manifest file into tasks. Parsers
    must implement four members to define their parsing behavior,
    metadata, and supported file patterns.
    """

    kind: TaskKind

    @abstractmethod
    def parse_text(self, text: str, file_path: Path) -> list[Task]:
        """
        Extract tasks from manifest contents.

        This method should:
        1. Parse the text (raise ManifestParseError if the whole file is unusable)
        2. Skip individual malformed entries with a logged warning
        3. Return one Task per valid entry, in file order

        Args:
            text: Manifest contents (may be unsaved editor text)
            file_path: Path of the manifest, recorded on each Task

        Returns:
            List of Task objects (may be empty)

        Raises:
            ManifestParseError: If the manifest cannot be parsed at all
        """
        ...

    @abstractmethod
    def get_metadata(self) -> dict:
        """
        Return parser metadata.

        Returns:
            Dictionary with keys:
            - name (str): Parser name (e.g., "npm-scripts")
            - version (str): Parser version (e.g., "0.1.0")
            - kind (str): TaskKind value this parser produces
            - description (str): Brief description of what is discovered
        """
        ...

    @abstractmethod
    def get_supported_files(self) -> list[str]:
        """
        Return glob patterns (relative to a workspace folder) for manifests
        this parser reads.

        Example:
            ```python
            def get_supported_files(self) -> list[str]:
                return ["**/package.json"]
            ```
        """
        ...

    def matches(self, file_path: Path) -> bool:
        """Return True if file_path is a manifest this parser reads."""
        return any(
            file_path.match(pattern.removeprefix("**/"))
            for pattern in self.get_supported_files()
        )

    def parse(self, file_path: Path) -> list[Task]:
        """
        Read and parse a manifest file from disk.

        Raises:
            ManifestParseError: If the file is unreadable, too large or malformed
        """
        try:
            size = file_path.stat().st_size
            if size > MAX_MANIFEST_BYTES:
                raise ManifestParseError(file_path, "exceeds 10MB size limit")
            with open(file_path, encoding="utf-8", errors="replace") as f:
                text = f.read()
        except OSError as e:
            raise ManifestParseError(file_path, f"could not read file: {e}") from e

        return self.parse_text(text, file_path)
