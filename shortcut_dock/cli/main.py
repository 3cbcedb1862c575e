# shortcut_dock/cli/main.py

import asyncio
import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table
from tqdm import tqdm

from shortcut_dock.core.config_manager import load_settings
from shortcut_dock.core.errors import LaunchError, StorageError
from shortcut_dock.core.launcher import launch_shortcut
from shortcut_dock.core.models import BatchResult, BatchSession, ItemStatus
from shortcut_dock.core.pipeline import Pipeline, build_pipeline
from shortcut_dock.utils.logger import setup_logging

console = Console()
logger = logging.getLogger(__name__)

NOTICE_STYLES = {
    "info": "cyan",
    "success": "bold green",
    "warning": "yellow",
    "error": "bold red",
}

STATUS_STYLES = {
    ItemStatus.PENDING: "white",
    ItemStatus.PROCESSING: "cyan",
    ItemStatus.SUCCESS: "green",
    ItemStatus.ERROR: "red",
}


def open_with_system(path: str):
    """Opens a path with the desktop's default application."""
    if click.launch(path) != 0:
        raise LaunchError(f"no application could open '{path}'")


def console_notifier(level: str, message: str):
    style = NOTICE_STYLES.get(level, "white")
    console.print(f"[{style}]{message}[/{style}]")


async def prompt_for_path() -> Optional[str]:
    """The CLI's file dialog: a prompt where an empty answer means cancel."""
    answer = click.prompt("Path to add (empty to finish)", default="", show_default=False)
    return answer.strip() or None


def _pipeline(ctx: click.Context, category: Optional[str] = None) -> Pipeline:
    settings = ctx.obj["settings"]
    pipeline = build_pipeline(settings, category_id=category, file_dialog=prompt_for_path)
    try:
        known = pipeline.store.get_category(pipeline.processor.category_id) is not None
    except StorageError as e:
        console.print(f"[bold red]{e}[/bold red]")
        ctx.exit(1)
    if not known:
        raise click.BadParameter(f"unknown category '{pipeline.processor.category_id}'", param_hint="--category")
    return pipeline


def _session_table(session: BatchSession, title: str) -> Table:
    table = Table(title=title, style="cyan", title_style="bold magenta")
    table.add_column("#", justify="right")
    table.add_column("Name", style="green", no_wrap=True)
    table.add_column("Type", style="blue")
    table.add_column("Status")
    table.add_column("Detail", style="yellow")
    for number, item in enumerate(session.items, start=1):
        style = STATUS_STYLES[item.status]
        table.add_row(
            str(number),
            item.display_name,
            "Directory" if item.is_directory else "File",
            f"[{style}]{item.status.value}[/{style}]",
            item.error_detail or "",
        )
    return table


def _finish(ctx: click.Context, result: Optional[BatchResult]):
    if result is not None and result.error_count:
        ctx.exit(1)


# --- Main Command Group ---
@click.group(context_settings=dict(help_option_names=['-h', '--help']))
@click.version_option(version="1.0", prog_name="Shortcut Dock")
@click.option('--config', 'config_path', type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Path to a settings.json to use instead of the default one.")
@click.option('-v', '--verbose', is_flag=True, help="Show debug output on the console.")
@click.pass_context
def sdock(ctx: click.Context, config_path: Optional[Path], verbose: bool):
    """
    Shortcut Dock - turn files and folders into categorized shortcuts.

    Use `[COMMAND] --help` for more information on a specific command.
    """
    setup_logging(verbose=verbose)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = load_settings(config_path)


@sdock.command()
@click.argument('paths', nargs=-1)
@click.option('-c', '--category', default=None, help="Category id for the new shortcuts.")
@click.pass_context
def add(ctx: click.Context, paths, category: Optional[str]):
    """Adds every PATH in one go, the way a drop onto the dock does."""
    pipeline = _pipeline(ctx, category)
    orchestrator = pipeline.orchestrator(notify=console_notifier)

    result = asyncio.run(orchestrator.run_batch(list(paths)))
    if orchestrator.session.items:
        console.print(_session_table(orchestrator.session, "Batch Result"))
    _finish(ctx, result)
    if not paths:
        ctx.exit(1)


@sdock.command()
@click.argument('paths', nargs=-1)
@click.option('-c', '--category', default=None, help="Category id for the new shortcuts.")
@click.option('--pick', is_flag=True, help="Prompt for more paths before starting.")
@click.pass_context
def queue(ctx: click.Context, paths, category: Optional[str], pick: bool):
    """Queues PATHs, shows the queue, then processes it item by item."""
    pipeline = _pipeline(ctx, category)

    async def run() -> Optional[BatchResult]:
        controller = pipeline.queue_controller(notify=console_notifier)
        for path in paths:
            await controller.add_path(path)
        if pick:
            while await controller.add_from_dialog() is not None:
                pass

        if controller.session.items:
            console.print(_session_table(controller.session, "Queued Items"))

        with tqdm(total=len(controller.session), desc="Processing", unit="item") as bar:
            def advance(session: BatchSession):
                bar.n = session.completed_count
                bar.refresh()

            controller.on_session_changed = advance
            result = await controller.start()

        if controller.session.items:
            console.print(_session_table(controller.session, "Queue Result"))
        return result

    _finish(ctx, asyncio.run(run()))


@sdock.command(name="list")
@click.option('-c', '--category', default=None, help="Only show this category.")
@click.pass_context
def list_shortcuts(ctx: click.Context, category: Optional[str]):
    """Lists the stored shortcuts."""
    pipeline = build_pipeline(ctx.obj["settings"])
    try:
        shortcuts = pipeline.store.list_shortcuts(category)
        names = {c.id: c.name for c in pipeline.store.list_categories()}
    except StorageError as e:
        console.print(f"[bold red]{e}[/bold red]")
        ctx.exit(1)

    if not shortcuts:
        console.print("[yellow]No shortcuts stored yet.[/yellow]")
        return

    table = Table(title="Shortcuts", style="cyan", title_style="bold magenta")
    table.add_column("Id", style="dim")
    table.add_column("Name", style="green", no_wrap=True)
    table.add_column("Category", style="blue")
    table.add_column("Path", style="yellow")
    table.add_column("Uses", justify="right", style="bold magenta")
    for shortcut in shortcuts:
        table.add_row(shortcut.id, shortcut.name, names.get(shortcut.category_id, shortcut.category_id),
                      shortcut.path, str(shortcut.usage_count))
    console.print(table)


@sdock.command()
@click.pass_context
def categories(ctx: click.Context):
    """Lists the shortcut categories."""
    store = build_pipeline(ctx.obj["settings"]).store
    try:
        rows = store.list_categories()
        counts = {c.id: len(store.list_shortcuts(c.id)) for c in rows}
    except StorageError as e:
        console.print(f"[bold red]{e}[/bold red]")
        ctx.exit(1)

    table = Table(title="Categories", style="cyan", title_style="bold magenta")
    table.add_column("Id", style="dim")
    table.add_column("Name", style="green")
    table.add_column("Shortcuts", justify="right", style="bold magenta")
    for category in rows:
        table.add_row(category.id, category.name, str(counts[category.id]))
    console.print(table)


@sdock.command(name="category-add")
@click.argument('name')
@click.pass_context
def category_add(ctx: click.Context, name: str):
    """Creates a new category called NAME."""
    store = build_pipeline(ctx.obj["settings"]).store
    try:
        category = store.create_category(name)
    except StorageError as e:
        console.print(f"[bold red]Could not create category: {e}[/bold red]")
        ctx.exit(1)
    console.print(f"[bold green]Created category '{category.name}' ({category.id}).[/bold green]")


@sdock.command()
@click.argument('shortcut_id')
@click.pass_context
def remove(ctx: click.Context, shortcut_id: str):
    """Deletes the shortcut with id SHORTCUT_ID."""
    store = build_pipeline(ctx.obj["settings"]).store
    try:
        removed = store.delete_shortcut(shortcut_id)
    except StorageError as e:
        console.print(f"[bold red]{e}[/bold red]")
        ctx.exit(1)

    if not removed:
        console.print(f"[yellow]No shortcut with id '{shortcut_id}'.[/yellow]")
        ctx.exit(1)
    console.print("[bold green]Shortcut removed.[/bold green]")
    logger.info(f"Removed shortcut {shortcut_id} from the CLI.")


@sdock.command(name="category-remove")
@click.argument('category_id')
@click.pass_context
def category_remove(ctx: click.Context, category_id: str):
    """Deletes category CATEGORY_ID. Its shortcuts move to the default category."""
    store = build_pipeline(ctx.obj["settings"]).store
    try:
        removed = store.delete_category(category_id)
    except StorageError as e:
        console.print(f"[bold red]Could not delete category: {e}[/bold red]")
        ctx.exit(1)

    if not removed:
        console.print(f"[yellow]No category with id '{category_id}'.[/yellow]")
        ctx.exit(1)
    console.print("[bold green]Category deleted.[/bold green]")


@sdock.command(name="open")
@click.argument('shortcut_id')
@click.pass_context
def open_shortcut(ctx: click.Context, shortcut_id: str):
    """Opens the target of shortcut SHORTCUT_ID and counts the launch."""
    store = build_pipeline(ctx.obj["settings"]).store
    try:
        record = launch_shortcut(store, shortcut_id, open_with_system)
    except (LaunchError, StorageError) as e:
        console.print(f"[bold red]Could not open shortcut: {e}[/bold red]")
        ctx.exit(1)
    console.print(f"[bold green]Opened '{record.name}' ({record.usage_count} uses).[/bold green]")
