"""Parser plugin for Ant build.xml targets."""

import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path

from ...core.errors import ManifestParseError
from ...core.models import SourceLocation, Task, TaskKind
from ...core.plugin import BaseParser

logger = logging.getLogger(__name__)

# <target ... name="x" ...>; group 2 is the name value
_TARGET_NAME_PATTERN = re.compile(
    r"<target\b[^>]*?\bname\s*=\s*([\"'])(.*?)\1", re.DOTALL
)


class AntTargetsParser(BaseParser):
    """
    Discovers Ant targets declared in build.xml files.

    Structure:
    <project name="app" default="compile">
      <target name="compile" description="Compile sources">...</target>
      <target name="-init"/>   (internal, still listed)
    </project>
    """

    kind = TaskKind.ANT

    def parse_text(self, text: str, file_path: Path) -> list[Task]:
        """
        Parse build.xml contents into Ant tasks.

        Targets without a name attribute are skipped with a warning.

        Args:
            text: build.xml contents
            file_path: Path to build.xml

        Returns:
            One Task per named target, in declaration order
        """
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            raise ManifestParseError(file_path, f"malformed XML: {e}") from e

        if root.tag != "project":
            raise ManifestParseError(file_path, f"root element is <{root.tag}>, not <project>")

        default_target = root.get("default")
        locations = self._locate_targets(text)
        tasks = []
        seen = set()

        for index, target in enumerate(root.findall("target")):
            name = (target.get("name") or "").strip()
            if not name:
                logger.warning(f"Skipping target #{index} in {file_path}: no name attribute")
                continue
            if name in seen:
                logger.warning(f"Skipping duplicate target '{name}' in {file_path}")
                continue
            seen.add(name)

            description = target.get("description")
            if name == default_target:
                description = f"{description} (default)" if description else "(default)"

            tasks.append(
                Task(
                    kind=self.kind,
                    name=name,
                    file_path=file_path,
                    detail=name,
                    location=locations.get(name),
                    description=description,
                )
            )

        logger.debug(f"Found {len(tasks)} Ant target(s) in {file_path}")
        return tasks

    def _locate_targets(self, text: str) -> dict[str, SourceLocation]:
        """Map target names to the range of their name attribute value."""
        locations = {}
        for match in _TARGET_NAME_PATTERN.finditer(text):
            name = match.group(2).strip()
            if name and name not in locations:
                locations[name] = SourceLocation.from_offsets(text, *match.span(2))
        return locations

    def get_metadata(self) -> dict:
        """Return parser metadata."""
        return {
            "name": "ant-targets",
            "version": "0.1.0",
            "kind": self.kind.value,
            "description": "Discovers Ant targets in build.xml",
        }

    def get_supported_files(self) -> list[str]:
        """Return supported file patterns."""
        return ["**/[Bb]uild.xml"]
