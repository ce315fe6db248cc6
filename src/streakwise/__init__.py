"""Streakwise: habit streaks, strength scoring and weekly reviews."""

__version__ = "0.1.0"
