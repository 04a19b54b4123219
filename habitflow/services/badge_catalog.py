"""
Badge catalog - the static set of achievements a user can earn.

The catalog is read-only; pass a different mapping to GamificationService
to use another set of definitions.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from habitflow.models.achievement import Badge, BadgeKey


@dataclass(frozen=True)
class BadgeDefinition:
    key: str
    name: str
    icon: str
    description: str
    repeatable: bool = False


BadgeCatalog = Mapping[str, BadgeDefinition]


def build_catalog(definitions: Iterable[BadgeDefinition]) -> BadgeCatalog:
    """Freeze a list of definitions into a key -> definition lookup"""
    catalog = {}
    for definition in definitions:
        if definition.key in catalog:
            raise ValueError(f"Duplicate badge key: {definition.key}")
        catalog[definition.key] = definition
    return MappingProxyType(catalog)


BADGE_DEFINITIONS = (
    # Starter
    BadgeDefinition(BadgeKey.FIRST_STEP.value, "Aspirant", "🌱", "Completed your first study session."),
    BadgeDefinition(BadgeKey.CHAPTER_CLOSER.value, "Chapter Closer", "📕", "Finished your first syllabus chapter."),

    # Streaks (repeatable)
    BadgeDefinition(BadgeKey.STREAK_3.value, "Momentum", "🔥", "Studied for 3 consecutive days.", repeatable=True),
    BadgeDefinition(BadgeKey.STREAK_7.value, "Week Warrior", "⚔️", "Consistent effort for 7 days. JEE level dedication.", repeatable=True),
    BadgeDefinition(BadgeKey.STREAK_14.value, "Fortnight Focus", "🏰", "Two weeks of unbroken consistency.", repeatable=True),
    BadgeDefinition(BadgeKey.STREAK_30.value, "IITian Mindset", "🧠", "30-day streak. Discipline is key.", repeatable=True),
    BadgeDefinition(BadgeKey.STREAK_60.value, "Unstoppable", "🚀", "60-day streak. You are a machine.", repeatable=True),

    # Volume
    BadgeDefinition(BadgeKey.COMPLETION_100.value, "Centurion", "💯", "Completed 100 study tasks."),
    BadgeDefinition(BadgeKey.COMPLETION_500.value, "Grandmaster", "🧙‍♂️", "Completed 500 study tasks."),
    BadgeDefinition(BadgeKey.HIGH_POINTS.value, "Ranker", "🏆", "Earned over 500 streak points."),

    # Time / schedule
    BadgeDefinition(BadgeKey.NIGHT_OWL.value, "Night Owl", "🦉", "Completed a task after 11 PM."),
    BadgeDefinition(BadgeKey.EARLY_BIRD.value, "Brahma Muhurta", "🌅", "Completed a task before 6 AM."),
    BadgeDefinition(BadgeKey.WEEKEND_WARRIOR.value, "No Days Off", "📅", "Completed tasks on both Saturday and Sunday.", repeatable=True),
    BadgeDefinition(BadgeKey.TWELVE_HOUR_TITAN.value, "12-Hour Titan", "🏋️", "Logged 12+ hours of study in a single day."),

    # Syllabus
    BadgeDefinition(BadgeKey.SYLLABUS_10.value, "Getting Started", "📚", "Completed 10% of the total syllabus."),
    BadgeDefinition(BadgeKey.SYLLABUS_50.value, "Halfway There", "⛰️", "Completed 50% of the total syllabus."),
    BadgeDefinition(BadgeKey.SYLLABUS_100.value, "Syllabus Conqueror", "🎓", "Completed 100% of the entire syllabus!"),

    # Subjects
    BadgeDefinition(BadgeKey.PHYSICS_MASTER.value, "Newton", "🍎", "Completed 20% of Physics chapters."),
    BadgeDefinition(BadgeKey.PHYSICS_100.value, "Einstein", "⚛️", "Completed 100% of Physics syllabus."),
    BadgeDefinition(BadgeKey.CHEM_MASTER.value, "Alchemist", "🧪", "Completed 20% of Chemistry chapters."),
    BadgeDefinition(BadgeKey.CHEM_100.value, "Marie Curie", "⚗️", "Completed 100% of Chemistry syllabus."),
    BadgeDefinition(BadgeKey.MATH_MASTER.value, "Ramanujan", "📐", "Completed 20% of Mathematics chapters."),
    BadgeDefinition(BadgeKey.MATH_100.value, "Euler", "🔢", "Completed 100% of Mathematics syllabus."),
    BadgeDefinition(BadgeKey.CHAPTERS_48.value, "Marathon Runner", "🏃", "Completed 48 Chapters."),

    # Task types
    BadgeDefinition(BadgeKey.MOCK_TEST_SURVIVOR.value, "Exam Ready", "📝", "Completed a Mock Test or Past Paper."),
    BadgeDefinition(BadgeKey.COMEBACK_KID.value, "Comeback Kid", "📈", "Resumed a streak after missing a day."),
)

BADGE_CATALOG: BadgeCatalog = build_catalog(BADGE_DEFINITIONS)


def build_badge(
    definition: BadgeDefinition,
    count: int = 1,
    date_earned: Optional[datetime] = None,
) -> Badge:
    """Create an earned badge instance from its definition"""
    return Badge(
        id=str(uuid.uuid4()),
        key=definition.key,
        name=definition.name,
        icon=definition.icon,
        description=definition.description,
        date_earned=date_earned or datetime.now(timezone.utc),
        count=count,
    )
