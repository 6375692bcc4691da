"""Tests for the click command line interface."""

import json
from datetime import datetime

import pytest
from click.testing import CliRunner

from cadence import cli
from cadence.config import Config
from cadence.core.habits import Habit
from cadence.workflows import get_habit_store, get_task_store

NOW = datetime(2026, 1, 10, 14, 25)


@pytest.fixture
def config(tmp_path, monkeypatch):
    config = Config(data_dir=str(tmp_path))
    monkeypatch.setattr(cli, "load_config", lambda: config)
    monkeypatch.setattr(Config, "now", lambda self: NOW)
    return config


@pytest.fixture
def runner():
    return CliRunner()


class TestParse:
    def test_preview(self, runner, config):
        result = runner.invoke(cli.main, ["parse", "Buy milk p1 #shopping tomorrow"])
        assert result.exit_code == 0
        assert 'Title: "Buy milk"' in result.output
        assert "Priority: P1" in result.output

    def test_json(self, runner, config):
        result = runner.invoke(cli.main, ["parse", "--json", "Take vitamins daily"])
        data = json.loads(result.output)
        assert data["title"] == "Take vitamins"
        assert data["recurrence_rule"]["frequency"] == "daily"
        assert data["priority"] == 4


class TestTasks:
    def test_add_list_done(self, runner, config):
        result = runner.invoke(cli.main, ["add", "Water plants weekly today p2"])
        assert result.exit_code == 0
        assert "Added" in result.output

        [task] = get_task_store(config).list()
        listing = runner.invoke(cli.main, ["tasks"])
        assert "[P2] Water plants" in listing.output
        assert "[Weekly]" in listing.output

        done = runner.invoke(cli.main, ["done", task.id])
        assert done.exit_code == 0
        assert "Completed: Water plants" in done.output
        assert "Next: 2026-01-17 00:00" in done.output

    def test_tasks_empty(self, runner, config):
        result = runner.invoke(cli.main, ["tasks"])
        assert result.output.strip() == "No tasks."

    def test_tasks_json(self, runner, config):
        runner.invoke(cli.main, ["add", "Call mom p3 p1"])
        data = json.loads(runner.invoke(cli.main, ["tasks", "--json"]).output)
        assert [t["priority"] for t in data] == [1]

    def test_cancel(self, runner, config):
        runner.invoke(cli.main, ["add", "Water plants weekly today"])
        [task] = get_task_store(config).list()
        result = runner.invoke(cli.main, ["cancel", task.id])
        assert result.exit_code == 0
        assert "Cancelled: Water plants" in result.output
        assert runner.invoke(cli.main, ["tasks"]).output.strip() == "No tasks."

    def test_cancel_unknown(self, runner, config):
        result = runner.invoke(cli.main, ["cancel", "nope"])
        assert result.exit_code == 1
        assert "No task with id nope" in result.output

    def test_done_unknown(self, runner, config):
        result = runner.invoke(cli.main, ["done", "nope"])
        assert result.exit_code == 1
        assert "No task with id nope" in result.output

    def test_corrupt_store(self, runner, config, tmp_path):
        (tmp_path / "tasks.json").write_text("{broken")
        result = runner.invoke(cli.main, ["tasks"])
        assert result.exit_code == 1
        assert "Error:" in result.output


class TestUpcoming:
    def test_groups_by_day(self, runner, config):
        runner.invoke(cli.main, ["add", "Stretch daily today 7am"])
        result = runner.invoke(cli.main, ["upcoming", "--days", "2"])
        assert result.exit_code == 0
        assert "### Saturday, January 10" in result.output
        assert "### Sunday, January 11" in result.output
        assert result.output.count("07:00  Stretch") == 2

    def test_json(self, runner, config):
        runner.invoke(cli.main, ["add", "Dentist tomorrow 3pm"])
        data = json.loads(runner.invoke(cli.main, ["upcoming", "--json"]).output)
        assert data == [{"task_id": data[0]["task_id"], "title": "Dentist", "date": "2026-01-11T15:00:00"}]

    def test_nothing(self, runner, config):
        assert "Nothing scheduled." in runner.invoke(cli.main, ["upcoming"]).output


class TestOccurrences:
    def test_expands_rrule(self, runner, config):
        result = runner.invoke(
            cli.main,
            ["occurrences", "FREQ=WEEKLY;BYDAY=MO,WE", "--anchor", "2026-01-05T09:00", "--end", "2026-01-14T23:00"],
        )
        assert result.exit_code == 0
        assert result.output.split() == [
            "2026-01-05T09:00:00",
            "2026-01-07T09:00:00",
            "2026-01-12T09:00:00",
            "2026-01-14T09:00:00",
        ]

    def test_count_limits_output(self, runner, config):
        result = runner.invoke(cli.main, ["occurrences", "FREQ=DAILY;COUNT=3", "--anchor", "2026-01-05T09:00"])
        assert result.exit_code == 0
        assert result.output.split() == [
            "2026-01-05T09:00:00",
            "2026-01-06T09:00:00",
            "2026-01-07T09:00:00",
        ]

    def test_invalid_rrule(self, runner, config):
        result = runner.invoke(cli.main, ["occurrences", "FREQ=HOURLY", "--anchor", "2026-01-05"])
        assert result.exit_code == 1

    def test_invalid_anchor(self, runner, config):
        result = runner.invoke(cli.main, ["occurrences", "FREQ=DAILY", "--anchor", "someday"])
        assert result.exit_code == 1
        assert "--anchor" in result.output


class TestHabitCommands:
    def test_add_check_list(self, runner, config):
        result = runner.invoke(cli.main, ["habit", "add", "Gym", "--frequency", "weekly", "--target", "3"])
        assert result.exit_code == 0
        assert "3x per week" in result.output

        [habit] = get_habit_store(config).list()
        check = runner.invoke(cli.main, ["habit", "check", habit.id])
        assert check.exit_code == 0
        assert "Gym: streak 0" in check.output

        listing = runner.invoke(cli.main, ["habit", "list"])
        assert "[✓]" in listing.output
        assert "Gym - 3x per week" in listing.output

    def test_undo(self, runner, config):
        store = get_habit_store(config)
        habit_id = store.save(Habit(id=None, name="Read", completion_dates=(NOW,)))
        result = runner.invoke(cli.main, ["habit", "undo", habit_id])
        assert result.exit_code == 0
        assert store.fetch(habit_id).completion_dates == ()

    def test_check_unknown(self, runner, config):
        result = runner.invoke(cli.main, ["habit", "check", "nope"])
        assert result.exit_code == 1
        assert "No habit with id nope" in result.output

    def test_grid(self, runner, config):
        store = get_habit_store(config)
        habit_id = store.save(Habit(id=None, name="Read", completion_dates=(datetime(2026, 1, 9, 8),)))
        result = runner.invoke(cli.main, ["habit", "grid", habit_id, "--weeks", "1"])
        assert result.exit_code == 0
        assert "2026-01-04 . . . . . # o" in result.output

    def test_list_empty(self, runner, config):
        assert "No habits." in runner.invoke(cli.main, ["habit", "list"]).output
