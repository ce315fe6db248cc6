"""Pure domain services; ``tracker`` is imported directly by callers."""

from . import (
    analytics,
    calendar,
    focus,
    milestones,
    review,
    streaks,
    strength,
)

__all__ = [
    "analytics",
    "calendar",
    "focus",
    "milestones",
    "review",
    "streaks",
    "strength",
]
