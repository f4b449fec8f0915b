"""Habit suggestions: a fixed template catalog ranked against an owner's habits."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from habitup.models import Category, Difficulty, HabitTemplate, Priority

SUGGESTION_LIMIT = 10

E, M, H = Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD


def _templates(category: Category, entries: list[tuple[str, str, Difficulty]]) -> list[HabitTemplate]:
    return [HabitTemplate(name, desc, category, diff) for name, desc, diff in entries]


HABIT_CATALOG: tuple[HabitTemplate, ...] = tuple(
    _templates(Category.HEALTH_FITNESS, [
        ("Drink 8 glasses of water", "Stay hydrated throughout the day", E),
        ("Exercise for 30 minutes", "Physical activity for better health", M),
        ("Get 8 hours of sleep", "Maintain a healthy sleep schedule", M),
        ("Take vitamins", "Daily vitamin supplement", E),
        ("Stretch for 10 minutes", "Daily stretching routine", E),
    ])
    + _templates(Category.PRODUCTIVITY, [
        ("Plan tomorrow today", "Spend 10 minutes planning the next day", E),
        ("No social media first hour", "Avoid social media for the first hour after waking", M),
        ("Complete MIT (Most Important Task)", "Focus on your most important task first", M),
        ("Organize workspace", "Keep your workspace clean and organized", E),
        ("Time blocking", "Schedule your day in time blocks", H),
    ])
    + _templates(Category.MINDFULNESS, [
        ("Meditate for 10 minutes", "Daily meditation practice", M),
        ("Write in gratitude journal", "Write 3 things you're grateful for", E),
        ("Practice deep breathing", "5 minutes of deep breathing exercises", E),
        ("Mindful eating", "Eat at least one meal mindfully", M),
        ("Digital detox hour", "One hour without any digital devices", H),
    ])
    + _templates(Category.LEARNING, [
        ("Read for 30 minutes", "Daily reading habit", M),
        ("Learn a new word", "Expand your vocabulary daily", E),
        ("Practice a skill", "Dedicate time to skill development", M),
        ("Listen to educational podcast", "Learn something new through podcasts", E),
        ("Write in journal", "Reflect and write daily thoughts", E),
    ])
    + _templates(Category.SOCIAL, [
        ("Call family/friends", "Stay connected with loved ones", E),
        ("Compliment someone", "Give a genuine compliment daily", E),
        ("Practice active listening", "Focus on truly listening in conversations", M),
        ("Random act of kindness", "Do something nice for someone", M),
    ])
)


def rank_suggestions(
    existing_categories: Iterable[Category],
    catalog: Iterable[HabitTemplate] = HABIT_CATALOG,
    limit: int = SUGGESTION_LIMIT,
) -> list[HabitTemplate]:
    """Rank templates: uncovered categories first, then easiest first.

    The sort is stable, so remaining ties keep catalog order. Each returned
    template carries the priority it was ranked with.
    """
    covered = set(existing_categories)
    ranked = [
        replace(t, priority=Priority.LOW if t.category in covered else Priority.HIGH)
        for t in catalog
    ]
    ranked.sort(key=lambda t: (t.priority is Priority.LOW, t.difficulty.rank))
    return ranked[:limit]
