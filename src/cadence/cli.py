"""Cadence CLI - recurring tasks and habits from the terminal."""

import json
import logging
import sys
from datetime import datetime, timedelta
from typing import NoReturn

import click

from .adapters.json_store import StoreError
from .config import load_config
from .core.calendar_math import start_of_day
from .core.frequency import Frequency
from .core.habits import Habit
from .core.occurrences import generate_occurrences
from .core.parser import describe, parse_task_input
from .core.recurrence import RecurrenceRule, parse_rrule
from .core.streaks import HabitCompletionStatus, calendar_grid
from .core.tasks import sort_by_priority
from .workflows import (
    cancel_task,
    capture_task,
    check_in_habit,
    complete_task,
    get_habit_store,
    get_task_store,
    undo_habit_check_in,
    upcoming,
)

_GRID_MARKS = {
    HabitCompletionStatus.COMPLETED: "#",
    HabitCompletionStatus.MISSED: ".",
    HabitCompletionStatus.PENDING: "o",
    HabitCompletionStatus.FUTURE: " ",
}


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _parse_when(value: str | None, option: str) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        _fail(f"{option} must be an ISO date (YYYY-MM-DD[THH:MM]), got {value!r}")


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """Cadence - recurring tasks, habits and quick capture."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


@main.command()
@click.argument("text")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def parse(text: str, as_json: bool):
    """Show how a quick-capture line would be parsed (nothing is saved)."""
    config = load_config()
    draft = parse_task_input(text, config.now())
    if as_json:
        click.echo(json.dumps(draft.to_dict(), indent=2))
    else:
        click.echo(describe(draft))


@main.command()
@click.argument("text")
def add(text: str):
    """Capture a task from one line of text."""
    config = load_config()
    try:
        task = capture_task(text, get_task_store(config), config.now())
    except StoreError as e:
        _fail(str(e))
    click.echo(f"✓ Added {task.id}: {task.title or '(untitled)'}")


@main.command()
@click.option("--all", "show_all", is_flag=True, help="Include completed tasks")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def tasks(show_all: bool, as_json: bool):
    """List tasks, highest priority first."""
    config = load_config()
    try:
        items = get_task_store(config).list(None if show_all else (lambda t: t.is_pending))
    except StoreError as e:
        _fail(str(e))

    items = sort_by_priority(items)
    if as_json:
        click.echo(json.dumps([t.to_dict() for t in items], indent=2))
        return

    if not items:
        click.echo("No tasks.")
        return

    now = config.now()
    for task in items:
        due = f" (due {task.due_date:%Y-%m-%d %H:%M})" if task.due_date else ""
        overdue = " OVERDUE" if task.is_overdue(now) else ""
        repeat = f" [{task.recurrence_rule.display_string}]" if task.recurrence_rule else ""
        labels = "".join(f" #{label}" for label in task.labels)
        click.echo(f"{task.id[:8]} [{task.priority.display_name}] {task.title}{due}{repeat}{labels}{overdue}")


@main.command()
@click.argument("task_id")
def done(task_id: str):
    """Complete a task (recurring tasks get their next instance)."""
    config = load_config()
    try:
        task, follow_up = complete_task(task_id, get_task_store(config), config.now())
    except KeyError:
        _fail(f"No task with id {task_id}")
    except StoreError as e:
        _fail(str(e))

    click.echo(f"✓ Completed: {task.title}")
    if follow_up is not None and follow_up.due_date is not None:
        click.echo(f"  Next: {follow_up.due_date:%Y-%m-%d %H:%M} ({follow_up.id})")


@main.command()
@click.argument("task_id")
def cancel(task_id: str):
    """Cancel a task without completing it."""
    config = load_config()
    try:
        task = cancel_task(task_id, get_task_store(config))
    except KeyError:
        _fail(f"No task with id {task_id}")
    except StoreError as e:
        _fail(str(e))

    click.echo(f"✗ Cancelled: {task.title}")


@main.command("upcoming")
@click.option("--days", type=int, default=None, help="Days ahead to show (default from config)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def upcoming_cmd(days: int | None, as_json: bool):
    """Show task occurrences for the coming days."""
    config = load_config()
    days = days if days is not None else config.upcoming_days
    start = start_of_day(config.now())
    end = start + timedelta(days=days) - timedelta(microseconds=1)

    try:
        store = get_task_store(config)
        occurrences = upcoming(store, start, end, config.max_occurrence_steps)
        titles = {t.id: t.title for t in store.list()}
    except StoreError as e:
        _fail(str(e))

    if as_json:
        click.echo(
            json.dumps(
                [
                    {"task_id": o.owner_id, "title": titles.get(o.owner_id, ""), "date": o.date.isoformat()}
                    for o in occurrences
                ],
                indent=2,
            )
        )
        return

    if not occurrences:
        click.echo("Nothing scheduled.")
        return

    current_day = None
    for occurrence in occurrences:
        day = occurrence.date.date()
        if day != current_day:
            if current_day is not None:
                click.echo()
            click.echo(f"### {day.strftime('%A, %B %d')}")
            current_day = day
        click.echo(f"  {occurrence.date:%H:%M}  {titles.get(occurrence.owner_id, occurrence.owner_id)}")


@main.command()
@click.argument("rrule")
@click.option("--anchor", required=True, help="First scheduled instant (ISO)")
@click.option("--start", "range_start", default=None, help="Window start (ISO, default: anchor)")
@click.option("--end", "range_end", default=None, help="Window end (ISO, default: start + 30 days)")
def occurrences(rrule: str, anchor: str, range_start: str | None, range_end: str | None):
    """Expand an RRULE (e.g. FREQ=WEEKLY;BYDAY=MO,WE) into dates."""
    config = load_config()
    rule = parse_rrule(rrule)
    if rule is None:
        _fail(f"Not a valid RRULE: {rrule!r}")

    anchor_dt = _parse_when(anchor, "--anchor")
    start = _parse_when(range_start, "--start") or anchor_dt
    end = _parse_when(range_end, "--end") or start + timedelta(days=30)

    for d in generate_occurrences(rule, anchor_dt, start, end, config.max_occurrence_steps):
        click.echo(d.isoformat())


@main.group()
def habit():
    """Track habits and streaks."""
    pass


@habit.command("add")
@click.argument("name")
@click.option(
    "--frequency",
    type=click.Choice([f.value for f in Frequency], case_sensitive=False),
    default=Frequency.DAILY.value,
    show_default=True,
)
@click.option("--target", type=int, default=1, show_default=True, help="Completions per period")
def habit_add(name: str, frequency: str, target: int):
    """Create a habit."""
    config = load_config()
    new_habit = Habit(
        id=None,
        name=name,
        recurrence_rule=RecurrenceRule(Frequency.parse(frequency)),
        target_per_period=max(1, target),
        created_at=config.now(),
    )
    try:
        habit_id = get_habit_store(config).save(new_habit)
    except StoreError as e:
        _fail(str(e))
    click.echo(f"✓ Habit {habit_id}: {name} ({new_habit.target_description})")


@habit.command("list")
def habit_list():
    """List habits with their streaks."""
    config = load_config()
    now = config.now()
    try:
        habits = get_habit_store(config).list(lambda h: not h.archived)
    except StoreError as e:
        _fail(str(e))

    if not habits:
        click.echo("No habits.")
        return

    for h in sorted(habits, key=lambda h: h.name.lower()):
        h = h.with_streak(now, config.week_start_number)
        mark = "✓" if h.is_completed_on(now) else " "
        click.echo(
            f"[{mark}] {h.id[:8]} {h.name} - {h.target_description}, "
            f"streak {h.streak_current} (best {h.streak_best})"
        )


@habit.command("check")
@click.argument("habit_id")
def habit_check(habit_id: str):
    """Record a completion for today."""
    config = load_config()
    try:
        h = check_in_habit(habit_id, get_habit_store(config), config.now(), config.week_start_number)
    except KeyError:
        _fail(f"No habit with id {habit_id}")
    except StoreError as e:
        _fail(str(e))
    click.echo(f"✓ {h.name}: streak {h.streak_current} (best {h.streak_best})")


@habit.command("undo")
@click.argument("habit_id")
def habit_undo(habit_id: str):
    """Remove today's completions."""
    config = load_config()
    try:
        h = undo_habit_check_in(habit_id, get_habit_store(config), config.now(), config.week_start_number)
    except KeyError:
        _fail(f"No habit with id {habit_id}")
    except StoreError as e:
        _fail(str(e))
    click.echo(f"{h.name}: streak {h.streak_current} (best {h.streak_best})")


@habit.command("grid")
@click.argument("habit_id")
@click.option("--weeks", type=int, default=12, show_default=True)
def habit_grid(habit_id: str, weeks: int):
    """Show the last N weeks as a completion grid (Sunday first)."""
    config = load_config()
    now = config.now()
    try:
        h = get_habit_store(config).fetch(habit_id)
    except StoreError as e:
        _fail(str(e))
    if h is None:
        _fail(f"No habit with id {habit_id}")

    click.echo(f"{h.name}  (# done, . missed, o today)")
    click.echo("           S M T W T F S")
    for week in calendar_grid(now, weeks):
        marks = " ".join(_GRID_MARKS[h.status_for(day, now)] for day in week)
        click.echo(f"{week[0]:%Y-%m-%d} {marks}")


if __name__ == "__main__":
    main()
