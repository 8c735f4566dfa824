"""Exclusion glob matching for discovered manifests."""

import fnmatch
import re
from pathlib import Path, PurePosixPath
from typing import Literal, Optional

MatchMode = Literal["path", "segment"]


class ExcludeMatcher:
    """
    Decide whether a manifest file is excluded by the configured globs.

    Two matching modes are supported:

    - ``path``: each glob is matched against the file's path relative to its
      workspace folder, in POSIX form (``packages/app/package.json``). A
      leading ``**/`` also matches at the folder root, so ``**/build.xml``
      excludes ``build.xml`` itself.
    - ``segment``: each glob is matched against every individual path segment
      (``node_modules``, ``package.json``), the way directory-name excludes
      are usually written.

    Case sensitivity is explicit rather than platform dependent.
    """

    def __init__(
        self,
        patterns: list[str],
        case_sensitive: bool = True,
        mode: MatchMode = "path",
    ):
        self.patterns = [p.strip().replace("\\", "/") for p in patterns if p and p.strip()]
        self.case_sensitive = case_sensitive
        self.mode = mode
        flags = 0 if case_sensitive else re.IGNORECASE
        self._compiled = [
            re.compile(fnmatch.translate(p), flags) for p in self._expand(self.patterns)
        ]

    @staticmethod
    def _expand(patterns: list[str]) -> list[str]:
        expanded = []
        for pattern in patterns:
            pattern = pattern.lstrip("/")
            expanded.append(pattern)
            # fnmatch's "*" already crosses "/", only the root case needs adding
            while pattern.startswith("**/"):
                pattern = pattern[3:]
                expanded.append(pattern)
            if pattern.endswith("/**"):
                expanded.append(pattern[:-3])
        return expanded

    def __bool__(self) -> bool:
        return bool(self.patterns)

    def is_excluded(self, file_path: Path, folder: Optional[Path] = None) -> bool:
        """
        Return True if file_path matches any exclusion glob.

        Args:
            file_path: Manifest path
            folder: Workspace folder the path is relative to (optional)
        """
        if not self._compiled:
            return False

        relative = _relative_posix(file_path, folder)

        if self.mode == "segment":
            candidates = list(relative.parts)
        else:
            # Also test parent directories so "dir/**" style globs exclude contents
            candidates = [str(relative)] + [str(p) for p in relative.parents if str(p) != "."]

        return any(rx.fullmatch(c) for rx in self._compiled for c in candidates)

    def filter(self, paths: list[Path], folder: Optional[Path] = None) -> list[Path]:
        """Return the paths that are not excluded."""
        return [p for p in paths if not self.is_excluded(p, folder)]


def _relative_posix(file_path: Path, folder: Optional[Path]) -> PurePosixPath:
    if folder is not None:
        try:
            return PurePosixPath(file_path.relative_to(folder).as_posix())
        except ValueError:
            pass
    return PurePosixPath(file_path.as_posix().lstrip("/"))
