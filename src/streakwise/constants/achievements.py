"""
Achievement catalog seeded into the database.
Every entry names the user metric it is measured against explicitly.
"""

from __future__ import annotations

from ..services.milestones import AchievementCategory, AchievementDefinition, MetricSelector

STREAK = AchievementCategory.STREAK
COMPLETIONS = AchievementCategory.COMPLETIONS
CONSISTENCY = AchievementCategory.CONSISTENCY
SPECIAL = AchievementCategory.SPECIAL

DEFAULT_ACHIEVEMENTS: tuple[AchievementDefinition, ...] = (
    AchievementDefinition(
        key="streak_3",
        name="Getting Started",
        description="Maintain a 3-day streak",
        emoji="🔥",
        category=STREAK,
        metric=MetricSelector.MAX_STREAK,
        threshold=3,
        xp_reward=25,
    ),
    AchievementDefinition(
        key="streak_7",
        name="Week Warrior",
        description="Maintain a 7-day streak",
        emoji="🔥",
        category=STREAK,
        metric=MetricSelector.MAX_STREAK,
        threshold=7,
        xp_reward=50,
    ),
    AchievementDefinition(
        key="streak_14",
        name="Fortnight Fighter",
        description="Maintain a 14-day streak",
        emoji="🔥",
        category=STREAK,
        metric=MetricSelector.MAX_STREAK,
        threshold=14,
        xp_reward=75,
    ),
    AchievementDefinition(
        key="streak_21",
        name="Habit Builder",
        description="Maintain a 21-day streak",
        emoji="💪",
        category=STREAK,
        metric=MetricSelector.MAX_STREAK,
        threshold=21,
        xp_reward=100,
    ),
    AchievementDefinition(
        key="streak_30",
        name="Monthly Master",
        description="Maintain a 30-day streak",
        emoji="🌟",
        category=STREAK,
        metric=MetricSelector.MAX_STREAK,
        threshold=30,
        xp_reward=150,
    ),
    AchievementDefinition(
        key="streak_66",
        name="Habit Formed",
        description="Maintain a 66-day streak (science says it's a habit!)",
        emoji="🧠",
        category=STREAK,
        metric=MetricSelector.MAX_STREAK,
        threshold=66,
        xp_reward=300,
    ),
    AchievementDefinition(
        key="streak_100",
        name="Century Club",
        description="Maintain a 100-day streak",
        emoji="💯",
        category=STREAK,
        metric=MetricSelector.MAX_STREAK,
        threshold=100,
        xp_reward=500,
    ),
    AchievementDefinition(
        key="streak_365",
        name="Year Champion",
        description="Maintain a 365-day streak",
        emoji="👑",
        category=STREAK,
        metric=MetricSelector.MAX_STREAK,
        threshold=365,
        xp_reward=1000,
    ),
    AchievementDefinition(
        key="completions_10",
        name="First Steps",
        description="Complete habits 10 times",
        emoji="🌱",
        category=COMPLETIONS,
        metric=MetricSelector.TOTAL_COMPLETIONS,
        threshold=10,
        xp_reward=20,
    ),
    AchievementDefinition(
        key="completions_50",
        name="Building Momentum",
        description="Complete habits 50 times",
        emoji="🚀",
        category=COMPLETIONS,
        metric=MetricSelector.TOTAL_COMPLETIONS,
        threshold=50,
        xp_reward=50,
    ),
    AchievementDefinition(
        key="completions_100",
        name="Century of Votes",
        description="Complete habits 100 times",
        emoji="💯",
        category=COMPLETIONS,
        metric=MetricSelector.TOTAL_COMPLETIONS,
        threshold=100,
        xp_reward=100,
    ),
    AchievementDefinition(
        key="completions_500",
        name="Dedicated",
        description="Complete habits 500 times",
        emoji="⭐",
        category=COMPLETIONS,
        metric=MetricSelector.TOTAL_COMPLETIONS,
        threshold=500,
        xp_reward=250,
    ),
    AchievementDefinition(
        key="completions_1000",
        name="Thousand Strong",
        description="Complete habits 1000 times",
        emoji="🎯",
        category=COMPLETIONS,
        metric=MetricSelector.TOTAL_COMPLETIONS,
        threshold=1000,
        xp_reward=500,
    ),
    AchievementDefinition(
        key="perfect_day",
        name="Perfect Day",
        description="Complete all active habits in a single day",
        emoji="✨",
        category=CONSISTENCY,
        metric=MetricSelector.PERFECT_DAYS,
        threshold=1,
        xp_reward=25,
    ),
    AchievementDefinition(
        key="perfect_week",
        name="Perfect Week",
        description="Achieve 7 perfect days",
        emoji="🌈",
        category=CONSISTENCY,
        metric=MetricSelector.PERFECT_DAYS,
        threshold=7,
        xp_reward=100,
    ),
    AchievementDefinition(
        key="perfect_month",
        name="Perfect Month",
        description="Achieve 30 perfect days",
        emoji="💫",
        category=CONSISTENCY,
        metric=MetricSelector.PERFECT_DAYS,
        threshold=30,
        xp_reward=300,
    ),
    AchievementDefinition(
        key="first_habit",
        name="First Step",
        description="Create your first habit",
        emoji="🎉",
        category=SPECIAL,
        metric=MetricSelector.HABIT_COUNT,
        threshold=1,
        xp_reward=10,
    ),
    AchievementDefinition(
        key="first_completion",
        name="Off the Ground",
        description="Complete a habit for the first time",
        emoji="✅",
        category=SPECIAL,
        metric=MetricSelector.TOTAL_COMPLETIONS,
        threshold=1,
        xp_reward=15,
    ),
    AchievementDefinition(
        key="habits_3",
        name="Triple Threat",
        description="Track 3 habits simultaneously",
        emoji="🎯",
        category=SPECIAL,
        metric=MetricSelector.HABIT_COUNT,
        threshold=3,
        xp_reward=30,
    ),
    AchievementDefinition(
        key="habits_5",
        name="High Five",
        description="Track 5 habits simultaneously",
        emoji="🖐️",
        category=SPECIAL,
        metric=MetricSelector.HABIT_COUNT,
        threshold=5,
        xp_reward=50,
    ),
    AchievementDefinition(
        key="strength_strong",
        name="Second Nature",
        description="Grow a habit to Strong strength",
        emoji="🏆",
        category=SPECIAL,
        metric=MetricSelector.MAX_STRENGTH,
        threshold=80,
        xp_reward=200,
    ),
    AchievementDefinition(
        key="comeback_3",
        name="Comeback Kid",
        description="Return to a habit after missing 3 scheduled days in a row",
        emoji="🔁",
        category=SPECIAL,
        metric=MetricSelector.COMEBACKS,
        threshold=3,
        xp_reward=40,
    ),
)
