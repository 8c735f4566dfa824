"""Command-line interface for Task View."""

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown

from .core.app import TaskViewApp
from .core.commands import ShellTaskExecutor, run_selected_script
from .core.config import YamlConfigurationStore, find_config_file
from .core.hover import Position, TextDocument
from .core.models import TaskKind
from .core.reporting import JsonReporter, TextReporter
from .core.watcher import ManifestWatcher

KIND_CHOICE = click.Choice([k.value for k in TaskKind], case_sensitive=False)
FOLDERS_ARGUMENT = click.argument(
    "folders",
    nargs=-1,
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
)


def setup_logging(verbose: int, show_output: bool) -> None:
    """Configure logging (-v for INFO, -vv for DEBUG)."""
    if verbose == 1:
        level = logging.INFO
    elif verbose >= 2:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    if show_output:
        # taskView.showOutput: route log output through rich on stderr
        logging.basicConfig(
            level=min(level, logging.INFO),
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
            force=True,
        )
    else:
        logging.basicConfig(level=level, format="%(levelname)s: %(message)s", force=True)


def build_app(ctx: click.Context, folders: tuple[Path, ...]) -> TaskViewApp:
    """Create and activate the app for folders (default: current directory)."""
    workspace = [f.resolve() for f in folders] or [Path(".").resolve()]
    config_path = ctx.obj.get("config") or find_config_file(workspace)
    store = YamlConfigurationStore(config_path)
    app = TaskViewApp(workspace, store=store)
    setup_logging(ctx.obj.get("verbose", 0), app.settings.show_output)
    app.activate()
    return app


@click.group(invoke_without_command=True)
@click.option(
    "--config",
    "-c",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Settings file (default: .taskview.yaml in the first folder)",
)
@click.option(
    "--verbose", "-v", count=True, help="Increase verbosity (-v for INFO, -vv for DEBUG)"
)
@click.option(
    "--list-parsers", is_flag=True, help="List available parsers and exit"
)
@click.pass_context
def main(ctx, config, verbose, list_parsers):
    """
    Task View - discover and run Ant, npm and VS Code tasks.

    Searches workspace FOLDERS for build.xml, package.json and
    .vscode/tasks.json files.
    """
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose
    setup_logging(verbose, False)

    if list_parsers:
        app = TaskViewApp()
        click.echo("Available parsers:")
        for meta in app.provider.list_parsers():
            click.echo(f"  - {meta['name']} ({meta['kind']}): {meta['description']}")
        return

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main.command("list")
@FOLDERS_ARGUMENT
@click.option("--kind", "-k", type=KIND_CHOICE, help="Only list tasks of this kind")
@click.option(
    "--format",
    "-f",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default="text",
    help="Output format (default: text)",
)
@click.pass_context
def list_command(ctx, folders, kind, format):
    """List tasks found in FOLDERS."""
    app = build_app(ctx, folders)
    tasks = app.provider.list(TaskKind(kind) if kind else None)

    if format == "json":
        click.echo(JsonReporter().report_list(tasks))
    else:
        TextReporter().report_list(tasks)


@main.command("tree")
@FOLDERS_ARGUMENT
@click.option(
    "--format",
    "-f",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default="text",
    help="Output format (default: text)",
)
@click.pass_context
def tree_command(ctx, folders, format):
    """Show tasks in FOLDERS as a tree."""
    app = build_app(ctx, folders)
    roots = app.tree.get_children()

    if format == "json":
        click.echo(JsonReporter().report_tree(roots))
    else:
        TextReporter().report_tree(roots)


@main.command("hover")
@click.argument(
    "file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.argument("line", type=click.IntRange(min=0))
@click.argument("column", type=click.IntRange(min=0))
@click.pass_context
def hover_command(ctx, file, line, column):
    """Show hover text for the npm script name at LINE:COLUMN (zero-based) of FILE."""
    file = file.resolve()
    app = build_app(ctx, (file.parent,))
    text = app.hover.hover_at(TextDocument(path=file), Position(line, column))

    if text is None:
        click.echo("No script at this position")
        raise SystemExit(1)
    Console().print(Markdown(text))


@main.command("run")
@FOLDERS_ARGUMENT
@click.option("--task", "-t", "task_name", required=True, help="Name of the task to run")
@click.option("--kind", "-k", type=KIND_CHOICE, help="Kind of the task")
@click.option("--dry-run", is_flag=True, help="Print the command instead of running it")
@click.pass_context
def run_command(ctx, folders, task_name, kind, dry_run):
    """Select a task by name and run it."""
    app = build_app(ctx, folders)
    node = app.tree.select_task(task_name, TaskKind(kind) if kind else None)

    executor = ShellTaskExecutor(dry_run=dry_run)
    if dry_run and node is not None:
        click.echo(" ".join(executor.command_for(node.task)))

    result = run_selected_script(app.tree, executor)
    if not result.ok:
        click.echo(result.message, err=True)
        raise SystemExit(result.exit_code or 1)


@main.command("watch")
@FOLDERS_ARGUMENT
@click.pass_context
def watch_command(ctx, folders):
    """Print the task tree and re-print it whenever a manifest or the settings file changes."""
    app = build_app(ctx, folders)
    reporter = TextReporter()

    def redraw() -> None:
        reporter.console.rule()
        reporter.report_tree(app.tree.get_children())

    app.tree.on_refresh(redraw)
    redraw()
    ManifestWatcher(
        app.folders,
        app.bus,
        config_path=app.store.path,
        on_config_change=app.reload_configuration,
    ).run()


@main.command("validate")
@click.argument(
    "file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.pass_context
def validate_command(ctx, file):
    """Validate a package.json against its published JSON schema."""
    file = file.resolve()
    app = build_app(ctx, (file.parent,))
    messages = app.schemas.validate_manifest(file)

    for message in messages:
        click.echo(message)
    if messages:
        raise SystemExit(1)
    click.echo(f"{file.name}: no problems found")


if __name__ == "__main__":
    main()
