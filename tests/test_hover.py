"""Tests for the npm script hover provider."""

import json
from pathlib import Path

from task_view.core.events import ChangeType, DocumentChanged, EventBus, FileChanged
from task_view.core.hover import NpmScriptHoverProvider, Position, TextDocument
from task_view.plugins.npm_scripts import NpmScriptsParser

TEXT = '{\n  "name": "app",\n  "scripts": {\n    "build": "tsc -p ."\n  }\n}\n'
DOC = TextDocument(path=Path("/ws/package.json"), text=TEXT)


class TestNpmScriptHoverProvider:
    """Tests for hover_at."""

    def test_hover_on_script_name(self):
        """Test hovering a script name describes the script."""
        provider = NpmScriptHoverProvider(NpmScriptsParser())

        text = provider.hover_at(DOC, Position(3, 6))

        assert text is not None
        assert "`build`" in text
        assert "tsc -p ." in text
        assert "npm run build" in text

    def test_hover_on_name_edges(self):
        """Test the range includes the opening quote and excludes the end."""
        provider = NpmScriptHoverProvider(NpmScriptsParser())

        assert provider.hover_at(DOC, Position(3, 4)) is not None
        assert provider.hover_at(DOC, Position(3, 11)) is None

    def test_hover_outside_script_names(self):
        """Test positions outside every script name return None."""
        provider = NpmScriptHoverProvider(NpmScriptsParser())

        assert provider.hover_at(DOC, Position(1, 4)) is None  # "name" key
        assert provider.hover_at(DOC, Position(3, 16)) is None  # script value
        assert provider.hover_at(DOC, Position(40, 0)) is None

    def test_non_package_json_document(self):
        """Test other documents never get hovers."""
        provider = NpmScriptHoverProvider(NpmScriptsParser())
        other = TextDocument(path=Path("/ws/tsconfig.json"), text=TEXT)

        assert provider.hover_at(other, Position(3, 6)) is None

    def test_malformed_document(self):
        """Test unparsable text returns None."""
        provider = NpmScriptHoverProvider(NpmScriptsParser())
        broken = TextDocument(path=Path("/ws/package.json"), text='{"scripts": {"a": ')

        assert provider.hover_at(broken, Position(0, 14)) is None

    def test_document_read_from_disk(self, npm_project):
        """Test a document without text is read from disk."""
        provider = NpmScriptHoverProvider(NpmScriptsParser())
        document = TextDocument(path=npm_project / "package.json")

        # {"name": "app", "scripts": {"build": "tsc -p ."}}
        column = (npm_project / "package.json").read_text().index('"build"') + 1
        assert provider.hover_at(document, Position(0, column)) is not None

    def test_cached_until_document_changed(self):
        """Test cached scripts are reused until a DocumentChanged event."""
        bus = EventBus()
        provider = NpmScriptHoverProvider(NpmScriptsParser())
        provider.subscribe(bus)
        provider.hover_at(DOC, Position(3, 6))

        renamed = TextDocument(path=DOC.path, text=TEXT.replace('"build"', '"bundle"'))
        assert "`build`" in provider.hover_at(renamed, Position(3, 6))

        bus.publish(DocumentChanged(path=DOC.path))
        assert "`bundle`" in provider.hover_at(renamed, Position(3, 6))

    def test_file_change_invalidates(self):
        """Test FileChanged for the document drops its cached scripts."""
        bus = EventBus()
        provider = NpmScriptHoverProvider(NpmScriptsParser())
        provider.subscribe(bus)
        provider.hover_at(DOC, Position(3, 6))

        bus.publish(FileChanged(path=DOC.path, change=ChangeType.CHANGED))

        assert provider.cache.populations == 1
        provider.hover_at(DOC, Position(3, 6))
        assert provider.cache.populations == 2

    def test_no_parser(self):
        """Test a missing npm parser disables hovers."""
        provider = NpmScriptHoverProvider(None)

        assert provider.hover_at(DOC, Position(3, 6)) is None

    def test_multiple_scripts(self):
        """Test each script name resolves to its own hover."""
        text = json.dumps({"scripts": {"a": "one", "b": "two"}}, indent=2)
        document = TextDocument(path=Path("/ws/package.json"), text=text)
        provider = NpmScriptHoverProvider(NpmScriptsParser())

        lines = text.splitlines()
        b_line = next(i for i, line in enumerate(lines) if '"b"' in line)
        hover = provider.hover_at(document, Position(b_line, lines[b_line].index('"b"')))

        assert "two" in hover

    def test_deeply_nested_document(self):
        """Test a document too deep to decode yields no hover instead of failing."""
        text = '{"scripts": {"a": "b"}, "x": ' + "[" * 200000 + "]" * 200000 + "}"
        document = TextDocument(path=Path("/ws/package.json"), text=text)
        provider = NpmScriptHoverProvider(NpmScriptsParser())

        assert provider.hover_at(document, Position(0, 14)) is None
