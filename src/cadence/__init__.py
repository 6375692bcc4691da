"""Cadence - recurrence expansion, habit streaks and quick-capture parsing."""
