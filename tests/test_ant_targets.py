"""Tests for Ant targets parser plugin."""

from pathlib import Path

import pytest

from task_view.core.errors import ManifestParseError
from task_view.core.models import TaskKind
from task_view.plugins.ant_targets import AntTargetsParser


class TestAntTargetsParser:
    """Tests for Ant targets parser plugin."""

    def test_parser_metadata(self):
        """Test parser returns correct metadata."""
        metadata = AntTargetsParser().get_metadata()

        assert metadata["name"] == "ant-targets"
        assert metadata["kind"] == "ant"

    def test_supported_files_match_both_cases(self):
        """Test build.xml and Build.xml are both recognized."""
        parser = AntTargetsParser()

        assert parser.matches(Path("/ws/build.xml"))
        assert parser.matches(Path("/ws/sub/Build.xml"))
        assert not parser.matches(Path("/ws/BUILD.xml"))
        assert not parser.matches(Path("/ws/pom.xml"))

    def test_single_target(self, ant_project):
        """Test the compile target scenario."""
        tasks = AntTargetsParser().parse(ant_project / "build.xml")

        assert len(tasks) == 1
        assert tasks[0].kind == TaskKind.ANT
        assert tasks[0].name == "compile"
        assert tasks[0].detail == "compile"

    def test_default_target_marked(self, ant_project):
        """Test the project default target is noted in its description."""
        task = AntTargetsParser().parse(ant_project / "build.xml")[0]

        assert task.description == "Compile sources (default)"

    def test_target_location(self, ant_project):
        """Test the location covers the name attribute value."""
        task = AntTargetsParser().parse(ant_project / "build.xml")[0]

        assert task.location.start_line == 2
        line = (ant_project / "build.xml").read_text().splitlines()[2]
        assert line[task.location.start_column:task.location.end_column] == "compile"

    def test_unnamed_target_skipped(self):
        """Test a target without a name is skipped, others kept."""
        text = '<project><target name="a"/><target/><target name="b"/></project>'
        tasks = AntTargetsParser().parse_text(text, Path("build.xml"))

        assert [t.name for t in tasks] == ["a", "b"]

    def test_duplicate_target_skipped(self):
        """Test duplicate target names are listed once."""
        text = '<project><target name="a"/><target name="a"/></project>'
        tasks = AntTargetsParser().parse_text(text, Path("build.xml"))

        assert len(tasks) == 1

    def test_nested_targets_ignored(self):
        """Test only direct children of <project> are targets."""
        text = '<project><macrodef name="m"><target name="inner"/></macrodef></project>'
        tasks = AntTargetsParser().parse_text(text, Path("build.xml"))

        assert tasks == []

    def test_malformed_xml_raises(self):
        """Test malformed XML raises ManifestParseError."""
        with pytest.raises(ManifestParseError) as exc_info:
            AntTargetsParser().parse_text("<project><target name=", Path("build.xml"))

        assert "malformed XML" in exc_info.value.reason

    def test_wrong_root_raises(self):
        """Test a non-Ant XML file raises."""
        with pytest.raises(ManifestParseError):
            AntTargetsParser().parse_text("<configuration/>", Path("build.xml"))
