from datetime import date
from typing import Dict, Optional, Sequence

from habitflow.models.achievement import AnalyticsSummary, HabitStats, SubjectProgress
from habitflow.models.chapter import Chapter, Subject
from habitflow.models.habit import Habit
from habitflow.services import streak_engine


def habit_stats(habit: Habit, today: Optional[date] = None) -> HabitStats:
    """Per-habit totals, current/longest streak and completion rate"""
    today = today or date.today()
    total = len(set(habit.completed_dates))

    # Rate over the days since the habit was created, both ends inclusive
    completion_rate = 0.0
    if habit.created_at is not None:
        days_active = (today - habit.created_at.date()).days + 1
        if days_active > 0:
            completion_rate = min(round(total / days_active * 100, 1), 100.0)

    return HabitStats(
        habit_id=habit.id,
        total_completions=total,
        current_streak=streak_engine.current_streak(habit.completed_dates, today),
        longest_streak=streak_engine.longest_streak(habit.completed_dates),
        completion_rate=completion_rate,
    )


def summary(
    habits: Sequence[Habit],
    chapters: Sequence[Chapter] = (),
    today: Optional[date] = None
) -> AnalyticsSummary:
    """Analytics dashboard data for a user's habits and syllabus"""
    total_completions = sum(len(set(h.completed_dates)) for h in habits)
    average_streak = round(sum(h.streak for h in habits) / len(habits)) if habits else 0

    category_distribution: Dict[str, int] = {}
    habit_distribution: Dict[str, int] = {}
    for habit in habits:
        done = len(set(habit.completed_dates))
        if done == 0:
            continue
        category_distribution[habit.category] = category_distribution.get(habit.category, 0) + done
        habit_distribution[habit.name] = habit_distribution.get(habit.name, 0) + done

    syllabus = []
    for subject in Subject:
        subject_chapters = [c for c in chapters if c.subject == subject]
        total = len(subject_chapters)
        completed = sum(1 for c in subject_chapters if c.is_completed)
        syllabus.append(SubjectProgress(
            subject=subject.value,
            total=total,
            completed=completed,
            percentage=round(completed / total * 100) if total > 0 else 0,
        ))

    return AnalyticsSummary(
        total_completions=total_completions,
        average_streak=average_streak,
        category_distribution=category_distribution,
        habit_distribution=habit_distribution,
        syllabus=syllabus,
        habits=[habit_stats(h, today) for h in habits],
    )
