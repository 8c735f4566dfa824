"""Shared pytest fixtures for Task View tests."""

import json

import pytest


@pytest.fixture
def npm_project(tmp_path):
    """Single package.json with one script."""
    (tmp_path / "package.json").write_text(
        json.dumps({"name": "app", "scripts": {"build": "tsc -p ."}})
    )
    return tmp_path


@pytest.fixture
def ant_project(tmp_path):
    """build.xml with one target."""
    (tmp_path / "build.xml").write_text(
        '<?xml version="1.0"?>\n'
        '<project name="app" default="compile">\n'
        '  <target name="compile" description="Compile sources">\n'
        '    <javac srcdir="src"/>\n'
        "  </target>\n"
        "</project>\n"
    )
    return tmp_path


@pytest.fixture
def vscode_project(tmp_path):
    """.vscode/tasks.json with JSONC comments and a trailing comma."""
    vscode_dir = tmp_path / ".vscode"
    vscode_dir.mkdir()
    (vscode_dir / "tasks.json").write_text(
        """{
    // Configuration version
    "version": "2.0.0",
    /* Task definitions */
    "tasks": [
        {
            "label": "test", // Run tests
            "type": "shell",
            "command": "npm test",
        },
    ]
}
"""
    )
    return tmp_path


@pytest.fixture
def mixed_workspace(tmp_path):
    """Monorepo with npm, Ant and VS Code tasks plus a node_modules decoy."""
    (tmp_path / "package.json").write_text(
        json.dumps({
            "name": "root",
            "scripts": {"lint": "eslint .", "test": "jest"},
        })
    )

    app_dir = tmp_path / "packages" / "app"
    app_dir.mkdir(parents=True)
    (app_dir / "package.json").write_text(
        json.dumps({"name": "app", "scripts": {"start": "node index.js"}})
    )

    java_dir = tmp_path / "java"
    java_dir.mkdir()
    (java_dir / "Build.xml").write_text(
        '<project name="lib"><target name="jar"/><target name="clean"/></project>'
    )

    vscode_dir = tmp_path / ".vscode"
    vscode_dir.mkdir()
    (vscode_dir / "tasks.json").write_text(
        json.dumps({
            "version": "2.0.0",
            "tasks": [{"label": "serve", "type": "shell", "command": "python -m http.server"}],
        })
    )

    dep_dir = tmp_path / "node_modules" / "dep"
    dep_dir.mkdir(parents=True)
    (dep_dir / "package.json").write_text(
        json.dumps({"name": "dep", "scripts": {"postinstall": "node setup.js"}})
    )

    return tmp_path


@pytest.fixture
def malformed_package_json(tmp_path):
    """package.json with invalid JSON."""
    (tmp_path / "package.json").write_text('{"name": "broken", "scripts": {')
    return tmp_path
