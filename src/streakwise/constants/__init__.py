"""Seed catalogs shared by the CLI, the scheduler and tests."""

from .achievements import DEFAULT_ACHIEVEMENTS

__all__ = ["DEFAULT_ACHIEVEMENTS"]
