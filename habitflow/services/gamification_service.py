import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence

from habitflow.models.achievement import Badge, BadgeKey, SyllabusProgress, ToggleResult
from habitflow.models.chapter import Chapter, Subject
from habitflow.models.habit import Habit
from habitflow.models.user import UserProfile
from habitflow.services import streak_engine
from habitflow.services.badge_catalog import BADGE_CATALOG, BadgeCatalog, build_badge

logger = logging.getLogger(__name__)

# First "<number>[.<number>] <unit>" in a habit name, e.g. "2.5 hours", "45min"
DURATION_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(hours?|hrs?|h|minutes?|mins?|m)", re.IGNORECASE)

BADGE_REQUIREMENTS: Mapping[str, Dict[str, Any]] = MappingProxyType({
    BadgeKey.STREAK_3.value: {"type": "streak", "requirement": 3},
    BadgeKey.STREAK_7.value: {"type": "streak", "requirement": 7},
    BadgeKey.STREAK_14.value: {"type": "streak", "requirement": 14},
    BadgeKey.STREAK_30.value: {"type": "streak", "requirement": 30},
    BadgeKey.STREAK_60.value: {"type": "streak", "requirement": 60},
    BadgeKey.WEEKEND_WARRIOR.value: {"type": "weekend", "requirement": 1},
    BadgeKey.FIRST_STEP.value: {"type": "completions", "requirement": 1},
    BadgeKey.COMPLETION_100.value: {"type": "completions", "requirement": 100},
    BadgeKey.COMPLETION_500.value: {"type": "completions", "requirement": 500},
    BadgeKey.HIGH_POINTS.value: {"type": "points", "requirement": 500},
    BadgeKey.CHAPTER_CLOSER.value: {"type": "chapters", "requirement": 1},
    BadgeKey.CHAPTERS_48.value: {"type": "chapters", "requirement": 48},
    BadgeKey.SYLLABUS_10.value: {"type": "syllabus", "requirement": 10},
    BadgeKey.SYLLABUS_50.value: {"type": "syllabus", "requirement": 50},
    BadgeKey.SYLLABUS_100.value: {"type": "syllabus", "requirement": 100},
    BadgeKey.PHYSICS_MASTER.value: {"type": "subject", "subject": Subject.PHYSICS, "requirement": 20},
    BadgeKey.PHYSICS_100.value: {"type": "subject", "subject": Subject.PHYSICS, "requirement": 100},
    BadgeKey.CHEM_MASTER.value: {"type": "subject", "subject": Subject.CHEMISTRY, "requirement": 20},
    BadgeKey.CHEM_100.value: {"type": "subject", "subject": Subject.CHEMISTRY, "requirement": 100},
    BadgeKey.MATH_MASTER.value: {"type": "subject", "subject": Subject.MATHEMATICS, "requirement": 20},
    BadgeKey.MATH_100.value: {"type": "subject", "subject": Subject.MATHEMATICS, "requirement": 100},
    BadgeKey.NIGHT_OWL.value: {"type": "late_hour", "requirement": 23},
    BadgeKey.EARLY_BIRD.value: {"type": "early_hour", "requirement": 6},
    BadgeKey.TWELVE_HOUR_TITAN.value: {"type": "daily_hours", "requirement": 12},
    BadgeKey.MOCK_TEST_SURVIVOR.value: {"type": "task_type", "keywords": ("mock", "test", "paper")},
})


def parse_duration(name: str) -> float:
    """Hours encoded in a habit name ("2.5 hours" -> 2.5, "45 min" -> 0.75)"""
    match = DURATION_PATTERN.search(name or "")
    if not match:
        return 0.0
    value = float(match.group(1))
    unit = match.group(2).lower()
    return value / 60 if unit.startswith("m") else value


def syllabus_progress(chapters: Sequence[Chapter]) -> SyllabusProgress:
    """Overall and per-subject completion percentages (0 for empty groups)"""

    def percentage(group: Sequence[Chapter]) -> float:
        if not group:
            return 0.0
        return sum(1 for c in group if c.is_completed) / len(group) * 100

    return SyllabusProgress(
        total_chapters=len(chapters),
        completed_chapters=sum(1 for c in chapters if c.is_completed),
        overall_percentage=percentage(chapters),
        subject_percentages={
            subject.value: percentage([c for c in chapters if c.subject == subject])
            for subject in Subject
        },
    )


@dataclass
class ProgressSnapshot:
    """Everything the badge rules look at, computed once per evaluation"""
    total_completions: int
    streak_segments: List[int]
    weekend_count: int
    total_points: int
    syllabus: SyllabusProgress
    hour: int
    hours_today: float
    habit_names: List[str] = field(default_factory=list)


class GamificationService:
    def __init__(
        self,
        catalog: Optional[BadgeCatalog] = None,
        badge_requirements: Optional[Mapping[str, Dict[str, Any]]] = None
    ):
        self.catalog = catalog if catalog is not None else BADGE_CATALOG
        self.badge_requirements = badge_requirements if badge_requirements is not None else BADGE_REQUIREMENTS

    # ------------------------------------------------------------------
    # Streaks and points
    # ------------------------------------------------------------------

    def points_delta(self, completed_dates: Sequence[str], day: str, today: Optional[date] = None) -> int:
        """
        Point change caused by toggling `day`.

        Adding a completion earns a point only when the resulting streak is
        longer than 1. Removing one refunds a point only when the streak before
        removal was longer than 1.
        """
        if day in set(completed_dates):
            before = streak_engine.current_streak(completed_dates, today)
            return -1 if before > 1 else 0

        after = streak_engine.current_streak(list(completed_dates) + [day], today)
        return 1 if after > 1 else 0

    def toggle_completion(self, habit: Habit, day: str, today: Optional[date] = None) -> ToggleResult:
        """Add or remove `day` from a habit's completions without mutating it"""
        delta = self.points_delta(habit.completed_dates, day, today)

        if day in habit.completed_dates:
            completed_dates = [d for d in habit.completed_dates if d != day]
            completed = False
        else:
            completed_dates = list(habit.completed_dates) + [day]
            completed = True

        streak = streak_engine.current_streak(completed_dates, today)
        updated = habit.model_copy(update={"completed_dates": completed_dates, "streak": streak})

        return ToggleResult(habit=updated, completed=completed, streak=streak, points_delta=delta)

    @staticmethod
    def apply_points(total: int, delta: int) -> int:
        return max(0, (total or 0) + delta)

    # ------------------------------------------------------------------
    # Badges
    # ------------------------------------------------------------------

    def build_snapshot(
        self,
        user: UserProfile,
        habits: Sequence[Habit],
        chapters: Sequence[Chapter],
        now: datetime
    ) -> ProgressSnapshot:
        all_dates = set()
        for habit in habits:
            all_dates.update(habit.completed_dates)

        today = now.date()
        hours_today = sum(
            parse_duration(habit.name)
            for habit in habits
            if today in streak_engine.unique_dates(habit.completed_dates)
        )

        return ProgressSnapshot(
            total_completions=sum(len(set(h.completed_dates)) for h in habits),
            streak_segments=streak_engine.streak_segments(all_dates),
            weekend_count=streak_engine.weekend_pairs(all_dates),
            total_points=user.total_streak_points or 0,
            syllabus=syllabus_progress(chapters),
            hour=now.hour,
            hours_today=hours_today,
            habit_names=[h.name for h in habits if h.completed_dates],
        )

    def check_requirement(self, requirements: Dict[str, Any], snapshot: ProgressSnapshot) -> int:
        """Times a badge has been earned for the snapshot (0 when not earned)"""
        rule = requirements["type"]
        requirement = requirements.get("requirement", 1)

        if rule == "streak":
            return streak_engine.repeat_count(snapshot.streak_segments, requirement)

        if rule == "weekend":
            return snapshot.weekend_count if snapshot.weekend_count >= requirement else 0

        if rule == "completions":
            earned = snapshot.total_completions >= requirement
        elif rule == "points":
            earned = snapshot.total_points >= requirement
        elif rule == "chapters":
            earned = snapshot.syllabus.completed_chapters >= requirement
        elif rule == "syllabus":
            earned = snapshot.syllabus.overall_percentage >= requirement
        elif rule == "subject":
            subject = requirements["subject"].value
            earned = snapshot.syllabus.subject_percentages.get(subject, 0.0) >= requirement
        elif rule == "late_hour":
            # Evaluation-time clock, not completion time
            earned = snapshot.hour >= requirement
        elif rule == "early_hour":
            earned = snapshot.hour < requirement
        elif rule == "daily_hours":
            earned = snapshot.hours_today >= requirement
        elif rule == "task_type":
            keywords = requirements["keywords"]
            earned = any(
                keyword in name.lower()
                for name in snapshot.habit_names
                for keyword in keywords
            )
        else:
            logger.warning(f"Unknown badge rule type: {rule}")
            earned = False

        return 1 if earned else 0

    def evaluate(
        self,
        user: UserProfile,
        habits: Sequence[Habit],
        chapters: Sequence[Chapter] = (),
        now: Optional[datetime] = None
    ) -> List[Badge]:
        """Badges that are newly earned or whose count went up"""
        now = now or datetime.now()
        snapshot = self.build_snapshot(user, habits, chapters, now)
        existing_badges = {badge.key: badge for badge in user.badges}
        badges_to_update = []

        for key, requirements in self.badge_requirements.items():
            definition = self.catalog.get(key)
            if definition is None:
                continue

            count = self.check_requirement(requirements, snapshot)
            if count < 1:
                continue

            existing = existing_badges.get(key)
            if existing is None:
                badges_to_update.append(build_badge(definition, count=count, date_earned=now))
            elif (existing.count or 1) < count:
                badges_to_update.append(
                    build_badge(definition, count=count, date_earned=existing.date_earned)
                )

        if badges_to_update:
            logger.debug(f"Badges to update: {[b.key for b in badges_to_update]}")
        return badges_to_update

    @staticmethod
    def merge_badges(existing: Mapping[str, Badge], incoming: Sequence[Badge]) -> Dict[str, Badge]:
        """Upsert badges by key; an existing badge is replaced only by a higher count"""
        merged = dict(existing)
        for badge in incoming:
            current = merged.get(badge.key)
            if current is None:
                merged[badge.key] = badge
            elif (badge.count or 1) > (current.count or 1):
                merged[badge.key] = badge.model_copy(update={"date_earned": current.date_earned})
        return merged
