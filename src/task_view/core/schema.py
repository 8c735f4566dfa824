"""JSON schema download and manifest validation.

Validation is an optional extra: every failure here (no network, proxy
errors, bad schema) is logged and turns into "no schema", never into a
discovery error.
"""

import json
import logging
from pathlib import Path
from typing import Optional

import httpx
from jsonschema import Draft7Validator

from .config import TaskViewSettings
from .errors import SchemaUnavailableError

logger = logging.getLogger(__name__)

PACKAGE_JSON_SCHEMA_URL = "https://json.schemastore.org/package.json"

# Manifest file name -> schema URL
SCHEMA_URLS = {
    "package.json": PACKAGE_JSON_SCHEMA_URL,
}


class SchemaFetcher:
    """Fetches and memoizes JSON schemas using the configured HTTP proxy."""

    def __init__(
        self,
        settings: Optional[TaskViewSettings] = None,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 10.0,
    ):
        self._transport = transport
        self._timeout = timeout
        self._schemas: dict[str, dict] = {}
        self.configure(settings or TaskViewSettings())

    def configure(self, settings: TaskViewSettings) -> None:
        """Apply proxy settings; called again whenever configuration changes."""
        self.proxy = settings.proxy or None
        self.strict_ssl = settings.proxy_strict_ssl
        logger.debug(f"HTTP proxy: {self.proxy or 'none'}, strict SSL: {self.strict_ssl}")

    def _client(self) -> httpx.Client:
        if self._transport is not None:
            return httpx.Client(transport=self._transport, timeout=self._timeout)
        return httpx.Client(proxy=self.proxy, verify=self.strict_ssl, timeout=self._timeout)

    def fetch(self, url: str) -> dict:
        """
        Download the schema at url.

        Raises:
            SchemaUnavailableError: On any network, HTTP or decode failure
        """
        if url in self._schemas:
            return self._schemas[url]

        try:
            with self._client() as client:
                response = client.get(url)
                response.raise_for_status()
                schema = response.json()
        except (httpx.HTTPError, json.JSONDecodeError) as e:
            raise SchemaUnavailableError(f"{url}: {e}") from e

        if not isinstance(schema, dict):
            raise SchemaUnavailableError(f"{url}: schema is not a JSON object")

        self._schemas[url] = schema
        return schema

    def schema_for(self, manifest: Path) -> Optional[dict]:
        """Return the schema for manifest, or None if unknown or unavailable."""
        url = SCHEMA_URLS.get(manifest.name)
        if url is None:
            return None
        try:
            return self.fetch(url)
        except SchemaUnavailableError as e:
            logger.warning(f"Schema unavailable, skipping validation: {e}")
            return None

    def validate_manifest(self, manifest: Path) -> list[str]:
        """
        Validate a manifest against its schema.

        Returns:
            Validation messages ("path: message"); empty when the manifest is
            valid or no schema could be obtained
        """
        schema = self.schema_for(manifest)
        if schema is None:
            return []

        try:
            with open(manifest, encoding="utf-8") as f:
                instance = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            return [f"<root>: could not parse {manifest.name}: {e}"]

        messages = []
        try:
            for error in Draft7Validator(schema).iter_errors(instance):
                path = "/".join(str(p) for p in error.absolute_path) or "<root>"
                messages.append(f"{path}: {error.message}")
        except Exception as e:
            # Unresolvable remote $refs and invalid schemas end up here
            logger.warning(f"Schema validation of {manifest} aborted: {e}")
        return messages
