from fastapi import APIRouter, HTTPException, Depends, Query, status
from typing import List, Optional, Sequence
from datetime import date
from supabase import Client

from habitflow.models.habit import Habit, HabitCreate, HabitPeriod, HabitSkip, HabitToggle, OneTimeTaskCreate
from habitflow.core.security import verify_token
from habitflow.core.database import get_database
from habitflow.services.gamification_service import GamificationService
from habitflow.services.progress_service import ProgressService
from habitflow.services.streak_engine import parse_iso_date

router = APIRouter()
gamification_service = GamificationService()


def habits_for_day(habits: Sequence[Habit], day: str) -> List[Habit]:
    """Habits shown on the daily view for `day`, one-time tasks first"""
    visible = [
        h for h in habits
        if day not in h.skipped_dates and (not h.is_one_time or h.specific_date == day)
    ]
    return sorted(visible, key=lambda h: 0 if h.is_one_time else 1)


def weekly_habits(habits: Sequence[Habit]) -> List[Habit]:
    return [h for h in habits if not h.is_one_time]


def monthly_habits(habits: Sequence[Habit]) -> List[Habit]:
    return [h for h in habits if not h.is_one_time and h.period == HabitPeriod.MONTHLY]


def _validate_day(day: str) -> str:
    if parse_iso_date(day) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid date '{day}', expected YYYY-MM-DD 📅"
        )
    return day


@router.get("/", response_model=List[Habit])
async def list_habits(user_id: str = Depends(verify_token), db: Client = Depends(get_database)):
    """Get all habits and one-time tasks for the user"""
    return await ProgressService(db, gamification_service).list_habits(user_id)


@router.post("/", response_model=Habit, status_code=status.HTTP_201_CREATED)
async def create_habit(
    habit_data: HabitCreate,
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    """Create a recurring habit"""
    service = ProgressService(db, gamification_service)
    return await service.create_habit(user_id, habit_data.model_dump(mode="json"))


@router.post("/one-time", response_model=Habit, status_code=status.HTTP_201_CREATED)
async def create_one_time_task(
    task_data: OneTimeTaskCreate,
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    """Create a task that only exists on a single date"""
    _validate_day(task_data.date)
    service = ProgressService(db, gamification_service)
    return await service.create_one_time_task(user_id, task_data.name, task_data.date)


@router.get("/daily", response_model=List[Habit])
async def get_daily_habits(
    day: Optional[str] = Query(None, alias="date"),
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    """Habits to show for a single day (defaults to today)"""
    day = _validate_day(day) if day else date.today().isoformat()
    habits = await ProgressService(db, gamification_service).list_habits(user_id)
    return habits_for_day(habits, day)


@router.get("/weekly", response_model=List[Habit])
async def get_weekly_habits(user_id: str = Depends(verify_token), db: Client = Depends(get_database)):
    """Recurring habits for the weekly grid"""
    habits = await ProgressService(db, gamification_service).list_habits(user_id)
    return weekly_habits(habits)


@router.get("/monthly", response_model=List[Habit])
async def get_monthly_habits(user_id: str = Depends(verify_token), db: Client = Depends(get_database)):
    """Monthly recurring habits for the monthly grid"""
    habits = await ProgressService(db, gamification_service).list_habits(user_id)
    return monthly_habits(habits)


@router.post("/{habit_id}/toggle")
async def toggle_habit(
    habit_id: str,
    toggle_data: HabitToggle,
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    """Mark or unmark a habit as done for a date, updating streak, points and badges"""
    _validate_day(toggle_data.date)
    service = ProgressService(db, gamification_service)

    try:
        result = await service.toggle_habit(user_id, habit_id, toggle_data.date)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Habit not found! 🔍")

    new_badges = result["new_badges"]
    return {
        **result,
        "message": f"🎉 Badge Unlocked: {new_badges[0].name}!" if new_badges else None
    }


@router.post("/{habit_id}/skip")
async def skip_habit(
    habit_id: str,
    skip_data: HabitSkip,
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    """Remove a habit from one day's list; one-time tasks are deleted"""
    _validate_day(skip_data.date)
    service = ProgressService(db, gamification_service)

    try:
        action = await service.skip_habit(user_id, habit_id, skip_data.date)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Habit not found! 🔍")

    return {"habit_id": habit_id, "action": action, "date": skip_data.date}


@router.delete("/{habit_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_habit(
    habit_id: str,
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    """Delete a habit and its whole history"""
    service = ProgressService(db, gamification_service)

    try:
        await service.delete_habit(user_id, habit_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Habit not found! 🔍")
