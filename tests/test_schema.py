"""Tests for schema download and manifest validation."""

import json

import httpx

from task_view.core.config import TaskViewSettings
from task_view.core.schema import PACKAGE_JSON_SCHEMA_URL, SchemaFetcher

SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "scripts": {"type": "object", "additionalProperties": {"type": "string"}},
    },
}


def _transport(status=200, body=None, calls=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(str(request.url))
        return httpx.Response(status, json=SCHEMA if body is None else body)

    return httpx.MockTransport(handler)


class TestSchemaFetcher:
    """Tests for SchemaFetcher."""

    def test_fetch_memoizes(self):
        """Test a schema is downloaded once per URL."""
        calls = []
        fetcher = SchemaFetcher(transport=_transport(calls=calls))

        assert fetcher.fetch(PACKAGE_JSON_SCHEMA_URL) == SCHEMA
        fetcher.fetch(PACKAGE_JSON_SCHEMA_URL)

        assert calls == [PACKAGE_JSON_SCHEMA_URL]

    def test_valid_manifest(self, npm_project):
        """Test a valid package.json produces no messages."""
        fetcher = SchemaFetcher(transport=_transport())

        assert fetcher.validate_manifest(npm_project / "package.json") == []

    def test_invalid_manifest(self, tmp_path):
        """Test schema violations are reported with their path."""
        manifest = tmp_path / "package.json"
        manifest.write_text(json.dumps({"name": 1, "scripts": {"build": 2}}))
        fetcher = SchemaFetcher(transport=_transport())

        messages = fetcher.validate_manifest(manifest)

        assert len(messages) == 2
        assert any(m.startswith("name:") for m in messages)
        assert any(m.startswith("scripts/build:") for m in messages)

    def test_http_error_degrades(self, npm_project):
        """Test a failed download disables validation instead of failing."""
        fetcher = SchemaFetcher(transport=_transport(status=503))

        assert fetcher.schema_for(npm_project / "package.json") is None
        assert fetcher.validate_manifest(npm_project / "package.json") == []

    def test_non_object_schema_degrades(self, npm_project):
        """Test a schema that is not an object is treated as unavailable."""
        fetcher = SchemaFetcher(transport=_transport(body=[1, 2]))

        assert fetcher.schema_for(npm_project / "package.json") is None

    def test_unknown_manifest_has_no_schema(self, ant_project):
        """Test manifests without a known schema are skipped."""
        calls = []
        fetcher = SchemaFetcher(transport=_transport(calls=calls))

        assert fetcher.validate_manifest(ant_project / "build.xml") == []
        assert calls == []

    def test_configure_applies_proxy_settings(self):
        """Test proxy settings are picked up on configure."""
        fetcher = SchemaFetcher()
        assert fetcher.proxy is None

        fetcher.configure(TaskViewSettings(proxy="http://proxy:3128", proxy_strict_ssl=False))

        assert fetcher.proxy == "http://proxy:3128"
        assert fetcher.strict_ssl is False
