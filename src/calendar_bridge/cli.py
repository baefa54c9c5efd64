"""Command-line interface for calendar-bridge."""

import asyncio
from collections.abc import Coroutine
from datetime import datetime
from typing import Annotated, Any, TypeVar

import typer
from rich.console import Console
from rich.prompt import IntPrompt
from rich.table import Table

from calendar_bridge.applescript import AppleScriptError
from calendar_bridge.bridge import CalendarBridge, ConfigurationError
from calendar_bridge.config import PersistenceError, Settings
from calendar_bridge.logging import setup_logging
from calendar_bridge.models import BridgeState, CombinedAgenda, OperationResult, SetupOptions
from calendar_bridge.parsing import CalendarEvent

app = typer.Typer(
    name="calendar-bridge",
    help="Read and edit Apple Calendar and Reminders from the command line",
    no_args_is_help=True,
)
console = Console()

DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M"]

T = TypeVar("T")


def get_settings() -> Settings:
    """Load application settings."""
    return Settings()


def _run(coro: Coroutine[Any, Any, T]) -> T:
    """Run a bridge coroutine, turning bridge errors into exit code 1."""
    try:
        return asyncio.run(coro)
    except ConfigurationError as e:
        console.print(f"[red]Not configured:[/red] {e}")
        raise typer.Exit(1)
    except AppleScriptError as e:
        console.print(f"[red]AppleScript error:[/red] {e}")
        raise typer.Exit(1)
    except PersistenceError as e:
        console.print(f"[red]Could not save settings:[/red] {e}")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Invalid input:[/red] {e}")
        raise typer.Exit(1)


def _prompt_choice(title: str, choices: list[str]) -> int:
    console.print(f"\n[bold]{title}[/bold]")
    for i, choice in enumerate(choices, start=1):
        console.print(f"  {i}. {choice}")
    console.print("  0. Skip")
    return IntPrompt.ask("Choice", default=0, console=console)


async def _interactive_setup(bridge: CalendarBridge) -> None:
    """Ask the user for a calendar and a reminder list, then persist once."""
    options: SetupOptions = await bridge.setup_options()

    calendar_choice = 0
    if options.calendars:
        calendar_choice = _prompt_choice("Select a calendar for events", options.calendars)
    reminder_choice = 0
    if options.reminder_lists:
        reminder_choice = _prompt_choice(
            "Select a reminder list", options.reminder_lists
        )

    config = bridge.complete_setup(options, calendar_choice, reminder_choice)
    if config.schedule_calendar:
        console.print(f"[green]Calendar:[/green] {config.schedule_calendar}")
    if config.reminder_calendar:
        console.print(f"[green]Reminder list:[/green] {config.reminder_calendar}")
    if bridge.state is not BridgeState.CONFIGURED:
        console.print("[yellow]Nothing selected; setup skipped[/yellow]")


def _open_bridge() -> CalendarBridge:
    """Build a bridge with debug.log wired up, without loading or validating."""
    settings = get_settings()
    settings.ensure_data_dir()
    setup_logging(
        log_file=settings.debug_log_path,
        log_level=settings.log_level,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )
    return CalendarBridge.from_settings(settings)


async def _start_bridge(force_setup: bool = False) -> CalendarBridge:
    bridge = _open_bridge()
    state = await bridge.init()
    if force_setup or state is BridgeState.SETUP_IN_PROGRESS:
        await _interactive_setup(bridge)
    return bridge


def _print_events(title: str, events: list[CalendarEvent]) -> None:
    if not events:
        console.print(f"[yellow]{title}: nothing found[/yellow]")
        return

    table = Table(title=f"{title} ({len(events)})")
    table.add_column("Title", style="cyan")
    table.add_column("Start", style="green")
    table.add_column("End", style="green")
    table.add_column("All day", style="yellow")

    for event in events:
        table.add_row(
            event.title,
            event.start_date or "-",
            event.end_date or "-",
            "✓" if event.all_day else "",
        )

    console.print(table)


def _report_delete(kind: str, title: str, result: OperationResult) -> None:
    if result is OperationResult.SUCCESS:
        console.print(f"[green]Deleted {kind}:[/green] {title}")
    elif result is OperationResult.NOT_FOUND:
        console.print(f"[yellow]No {kind} found:[/yellow] {title}")
    else:
        console.print(f"[red]Failed to delete {kind}:[/red] {title}")
        raise typer.Exit(1)


def _report_add(kind: str, title: str, success: bool) -> None:
    if success:
        console.print(f"[green]Added {kind}:[/green] {title}")
    else:
        console.print(f"[red]Failed to add {kind}:[/red] {title}")
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from calendar_bridge import __version__

    console.print(f"calendar-bridge v{__version__}")


@app.command()
def setup() -> None:
    """Choose the calendar and reminder list to use."""
    _run(_start_bridge(force_setup=True))


@app.command()
def status() -> None:
    """Show which calendar and reminder list are connected."""
    bridge = _open_bridge()
    bridge.load()
    connection = bridge.status()

    table = Table(title="Connection Status")
    table.add_column("Category", style="cyan")
    table.add_column("Connected", style="yellow")
    table.add_column("Name", style="green")
    table.add_row(
        "Calendar",
        "✓" if connection.schedule_connected else "✗",
        connection.schedule_name or "-",
    )
    table.add_row(
        "Reminders",
        "✓" if connection.reminder_connected else "✗",
        connection.reminder_name or "-",
    )
    console.print(table)


@app.command()
def calendars() -> None:
    """List calendars and reminder lists available for setup."""
    bridge = _open_bridge()
    options = _run(bridge.setup_options())

    console.print("[bold]Calendars[/bold]")
    for name in options.calendars:
        console.print(f"  • {name}")
    console.print("[bold]Reminder lists[/bold]")
    for name in options.reminder_lists:
        console.print(f"  • {name}")


@app.command()
def events(
    days: Annotated[
        int | None, typer.Option("--days", "-d", help="Days ahead, starting today")
    ] = None,
    max_events: Annotated[
        int | None, typer.Option("--max", "-n", help="Maximum events to show")
    ] = None,
) -> None:
    """Show upcoming events from the configured calendar."""

    async def query() -> list[CalendarEvent]:
        bridge = await _start_bridge()
        return await bridge.get_events(days, max_events)

    _print_events("Events", _run(query()))


@app.command()
def reminders(
    days: Annotated[
        int | None, typer.Option("--days", "-d", help="Days ahead, starting today")
    ] = None,
    max_reminders: Annotated[
        int | None, typer.Option("--max", "-n", help="Maximum reminders to show")
    ] = None,
) -> None:
    """Show incomplete reminders from the configured list."""

    async def query() -> list[CalendarEvent]:
        bridge = await _start_bridge()
        return await bridge.get_reminders(days, max_reminders)

    _print_events("Reminders", _run(query()))


@app.command()
def agenda(
    days: Annotated[
        int | None, typer.Option("--days", "-d", help="Days ahead, starting today")
    ] = None,
    max_events: Annotated[int | None, typer.Option("--max-events")] = None,
    max_reminders: Annotated[int | None, typer.Option("--max-reminders")] = None,
) -> None:
    """Show events and reminders together."""

    async def query() -> CombinedAgenda:
        bridge = await _start_bridge()
        return await bridge.get_events_and_reminders(days, max_events, max_reminders)

    result = _run(query())
    if result.has_events:
        _print_events("Events", result.events)
    else:
        console.print("[dim]No calendar configured[/dim]")
    if result.has_reminders:
        _print_events("Reminders", result.reminders)
    else:
        console.print("[dim]No reminder list configured[/dim]")


@app.command("add-event")
def add_event(
    title: Annotated[str, typer.Argument(help="Event title")],
    start: Annotated[datetime, typer.Argument(formats=DATE_FORMATS, help="Start time")],
    end: Annotated[
        datetime | None,
        typer.Option("--end", "-e", formats=DATE_FORMATS, help="End time (default: start + 1h)"),
    ] = None,
) -> None:
    """Add an event to the configured calendar."""

    async def run() -> bool:
        bridge = await _start_bridge()
        return await bridge.add_event(title, start, end)

    _report_add("event", title, _run(run()))


@app.command("remove-event")
def remove_event(
    title: Annotated[str, typer.Argument(help="Exact title of the event to delete")],
) -> None:
    """Delete an event from the configured calendar."""

    async def run() -> OperationResult:
        bridge = await _start_bridge()
        return await bridge.remove_event(title)

    _report_delete("event", title, _run(run()))


@app.command("add-reminder")
def add_reminder(
    title: Annotated[str, typer.Argument(help="Reminder title")],
    due: Annotated[
        datetime | None,
        typer.Option("--due", formats=DATE_FORMATS, help="Due date"),
    ] = None,
) -> None:
    """Add a reminder to the configured list."""

    async def run() -> bool:
        bridge = await _start_bridge()
        return await bridge.add_reminder(title, due)

    _report_add("reminder", title, _run(run()))


@app.command("remove-reminder")
def remove_reminder(
    title: Annotated[str, typer.Argument(help="Exact title of the reminder to delete")],
) -> None:
    """Delete a reminder from the configured list."""

    async def run() -> OperationResult:
        bridge = await _start_bridge()
        return await bridge.remove_reminder(title)

    _report_delete("reminder", title, _run(run()))


@app.command("add-test-event")
def add_test_event() -> None:
    """Add a one-hour test event starting in ten minutes."""

    async def run() -> tuple[str, bool]:
        bridge = await _start_bridge()
        return await bridge.add_test_event()

    title, success = _run(run())
    _report_add("event", title, success)


@app.command("add-test-reminder")
def add_test_reminder() -> None:
    """Add a test reminder due in two hours."""

    async def run() -> tuple[str, bool]:
        bridge = await _start_bridge()
        return await bridge.add_test_reminder()

    title, success = _run(run())
    _report_add("reminder", title, success)


@app.command("self-test")
def self_test(
    init_only: Annotated[
        bool,
        typer.Option("--init-only", help="Load and validate the configuration, then exit"),
    ] = False,
) -> None:
    """Add and then remove a test event and reminder in the live apps."""

    async def run() -> list[tuple[str, str, bool, OperationResult]]:
        bridge = await _start_bridge()
        if init_only:
            return []

        results = []
        connection = bridge.status()
        if connection.schedule_connected:
            title, added = await bridge.add_test_event()
            removed = await bridge.remove_event(title) if added else OperationResult.FAILED
            results.append(("event", title, added, removed))
        if connection.reminder_connected:
            title, added = await bridge.add_test_reminder()
            removed = await bridge.remove_reminder(title) if added else OperationResult.FAILED
            results.append(("reminder", title, added, removed))
        return results

    results = _run(run())
    if init_only:
        console.print("[green]Initialized[/green]")
        return
    if not results:
        console.print("[yellow]Nothing configured to test. Run setup first.[/yellow]")
        raise typer.Exit(1)

    failed = False
    for kind, title, added, removed in results:
        ok = added and removed is OperationResult.SUCCESS
        failed = failed or not ok
        mark = "[green]✓[/green]" if ok else "[red]✗[/red]"
        console.print(f"{mark} {kind} {title}: added={added} removed={removed.value}")
    if failed:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
