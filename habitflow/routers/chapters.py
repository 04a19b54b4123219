from fastapi import APIRouter, HTTPException, Depends, status
from typing import List
from supabase import Client

from habitflow.models.chapter import Chapter, ChapterCreate, PushToDaily
from habitflow.models.habit import Habit
from habitflow.core.security import verify_token
from habitflow.core.database import get_database
from habitflow.services.gamification_service import GamificationService
from habitflow.services.progress_service import ProgressService
from habitflow.services.streak_engine import parse_iso_date

router = APIRouter()
gamification_service = GamificationService()


@router.get("/", response_model=List[Chapter])
async def list_chapters(user_id: str = Depends(verify_token), db: Client = Depends(get_database)):
    """Get the user's syllabus chapters"""
    return await ProgressService(db, gamification_service).list_chapters(user_id)


@router.post("/", response_model=Chapter, status_code=status.HTTP_201_CREATED)
async def create_chapter(
    chapter_data: ChapterCreate,
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    """Add a chapter to the syllabus"""
    service = ProgressService(db, gamification_service)
    return await service.create_chapter(user_id, chapter_data.name, chapter_data.subject.value)


@router.post("/{chapter_id}/toggle")
async def toggle_chapter(
    chapter_id: str,
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    """Flip a chapter between done and not done, then re-check syllabus badges"""
    service = ProgressService(db, gamification_service)

    try:
        return await service.toggle_chapter(user_id, chapter_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chapter not found! 📕❌")


@router.post("/{chapter_id}/push-to-daily", response_model=Habit, status_code=status.HTTP_201_CREATED)
async def push_chapter_to_daily(
    chapter_id: str,
    push_data: PushToDaily,
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    """Schedule a one-time study task for a chapter on a given date"""
    if parse_iso_date(push_data.date) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid date '{push_data.date}', expected YYYY-MM-DD 📅"
        )

    service = ProgressService(db, gamification_service)
    try:
        chapter = await service.get_chapter(user_id, chapter_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chapter not found! 📕❌")

    task_name = f"Study: {chapter.name} ({chapter.subject.value})"
    return await service.create_one_time_task(user_id, task_name, push_data.date)


@router.delete("/{chapter_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_chapter(
    chapter_id: str,
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    """Delete a chapter"""
    service = ProgressService(db, gamification_service)

    try:
        await service.delete_chapter(user_id, chapter_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chapter not found! 📕❌")
