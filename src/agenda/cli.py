"""Agenda CLI - calendar scheduling from the terminal."""

import json
import logging
import sys
import time
from datetime import datetime, timedelta

import click

from .adapters import (
    APSchedulerTriggerService,
    FixedLocationProvider,
    InMemoryTriggerService,
    IPLocationProvider,
    LogNotifier,
    TelegramNotifier,
)
from .adapters.location import DEFAULT_LOOKUP_URL
from .config import Config, load_config
from .core.availability import find_free_slots
from .core.errors import AgendaError
from .core.filters import EventFilter, SearchScope
from .ports.trigger_service import TriggerService
from .reminders import ReminderScheduler
from .seed import load_events, sample_events
from .store import EventStore

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def build_store(
    config: Config,
    service: TriggerService,
    events_file: str | None = None,
    sample: bool = False,
) -> EventStore:
    """Create a store wired to ``service`` and seed it."""
    try:
        settings = config.settings()
    except ValueError as e:
        _fail(f"WORK_HOURS: {e}")

    store = EventStore(ReminderScheduler(service), settings=settings)

    path = events_file or config.events_file
    events = []
    if path:
        try:
            events = load_events(path)
        except (OSError, ValueError) as e:
            _fail(str(e))
    elif sample:
        events = sample_events(datetime.now())

    for event in events:
        try:
            store.create(event)
        except AgendaError as e:
            click.echo(f"Skipping {event.title!r}: {e}", err=True)
    return store


def _store(ctx: click.Context, service: TriggerService | None = None) -> EventStore:
    opts = ctx.obj
    return build_store(opts["config"], service or InMemoryTriggerService(), opts["events_file"], opts["sample"])


@click.group()
@click.version_option(package_name="agenda")
@click.option("--events", "events_file", type=click.Path(dir_okay=False), help="JSON file of events to load")
@click.option("--sample", is_flag=True, help="Load demo events when no events file is given")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, events_file: str | None, sample: bool, verbose: bool):
    """Agenda - event scheduling engine."""
    if verbose:
        logging.basicConfig(format=LOG_FORMAT, level=logging.DEBUG)
    ctx.obj = {"config": load_config(), "events_file": events_file, "sample": sample}


def _show_events(events: list, as_json: bool, empty_msg: str = "No events.") -> None:
    """Shared event display logic."""
    if as_json:
        click.echo(json.dumps([e.to_dict() for e in events], indent=2))
        return

    if not events:
        click.echo(empty_msg)
        return

    current_date = None
    for event in events:
        event_date = event.start.date()
        if event_date != current_date:
            if current_date is not None:
                click.echo()
            click.echo(f"### {event_date.strftime('%A, %B %d')}")
            current_date = event_date

        marker = "!" if event.conflicted else " "
        loc = f" @ {event.location.display_text()}" if event.location else ""
        click.echo(f" {marker}{event.format_time():8} {event.title}{loc}")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def today(ctx, as_json: bool):
    """Show today's events."""
    store = _store(ctx)
    _show_events(store.todays_events, as_json, "No events today.")


@main.command()
@click.option("--days", default=None, type=int, help="How many days ahead to look")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def upcoming(ctx, days: int | None, as_json: bool):
    """Show upcoming events."""
    store = _store(ctx)
    _show_events(store.upcoming(days), as_json, "Nothing coming up.")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def now(ctx, as_json: bool):
    """Show events happening right now."""
    store = _store(ctx)
    _show_events(store.current_events, as_json, "Nothing happening right now.")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def conflicts(ctx, as_json: bool):
    """Show events that overlap another event."""
    store = _store(ctx)
    _show_events(store.conflicting_events, as_json, "No conflicts.")


@main.command("find-slot")
@click.option("--minutes", default=60, show_default=True, type=click.IntRange(min=1), help="Slot length")
@click.option("--date", "on_date", type=click.DateTime(formats=["%Y-%m-%d"]), help="Day to search (default today)")
@click.pass_context
def find_slot(ctx, minutes: int, on_date: datetime | None):
    """Find the earliest free slot during working hours."""
    store = _store(ctx)
    slot = store.find_slot(timedelta(minutes=minutes), on_date.date() if on_date else None)
    if slot is None:
        click.echo(f"No free {minutes}-minute slot during working hours.")
        return
    click.echo(f"{slot.format()} - {slot.reason} (confidence {slot.confidence:.0%})")


@main.command()
@click.option("--date", "on_date", type=click.DateTime(formats=["%Y-%m-%d"]), help="Day to inspect (default today)")
@click.option("--min", "min_duration", default=30, show_default=True, type=int, help="Minimum gap in minutes")
@click.pass_context
def free(ctx, on_date: datetime | None, min_duration: int):
    """List every free gap during working hours."""
    store = _store(ctx)
    day = on_date.date() if on_date else datetime.now().date()
    settings = store.settings
    slots = find_free_slots(
        store.events_on(day),
        work_start=settings.work_start,
        work_end=settings.work_end,
        min_duration=min_duration,
        target_date=day,
    )
    if not slots:
        click.echo("No free time.")
        return
    for slot in slots:
        click.echo(f"  {slot.format()}")


@main.command()
@click.pass_context
def suggest(ctx):
    """Show scheduling suggestions."""
    store = _store(ctx)
    suggestions = store.suggestions
    if not suggestions:
        click.echo("No suggestions.")
        return
    for s in suggestions:
        click.echo(f"[{s.confidence_text()}] {s.title}: {s.description}")
        for event in s.related_events:
            click.echo(f"    - {event.format_time()} {event.title}")


@main.command()
@click.argument("text")
@click.option(
    "--scope",
    type=click.Choice([s.value for s in SearchScope]),
    default=SearchScope.ALL.value,
    show_default=True,
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def search(ctx, text: str, scope: str, as_json: bool):
    """Search events by text."""
    store = _store(ctx)
    found = store.search(EventFilter(search_scope=SearchScope(scope)), text)
    _show_events(found, as_json, f"No events matching {text!r}.")


@main.command()
@click.pass_context
def locate(ctx):
    """Show the current coordinate used for location tagging."""
    config: Config = ctx.obj["config"]
    coordinate = config.fixed_coordinate()
    if coordinate is not None:
        provider = FixedLocationProvider(coordinate)
    else:
        provider = IPLocationProvider(config.location_lookup_url or DEFAULT_LOOKUP_URL)

    found = provider.current_coordinate()
    if found is None:
        _fail("Current location unavailable.")
    click.echo(f"{found.latitude:.5f}, {found.longitude:.5f}")


@main.command()
@click.pass_context
def remind(ctx):
    """Run the reminder scheduler until interrupted."""
    logging.basicConfig(format=LOG_FORMAT, level=logging.INFO)
    logger = logging.getLogger(__name__)
    config: Config = ctx.obj["config"]

    if config.telegram_bot_token:
        notifier = TelegramNotifier(config.telegram_bot_token, config.telegram_allowed_users)
    else:
        logger.warning("No TELEGRAM_BOT_TOKEN configured - reminders go to the log")
        notifier = LogNotifier()

    service = APSchedulerTriggerService(notifier, timezone=config.timezone or None)
    store = _store(ctx, service)
    service.start()

    logger.info(f"Watching {len(store)} events, {len(service.pending_keys())} reminders pending")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        service.shutdown()


if __name__ == "__main__":
    main()
