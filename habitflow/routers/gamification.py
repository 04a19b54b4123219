from fastapi import APIRouter, Depends
from typing import List
from supabase import Client

from habitflow.models.achievement import AnalyticsSummary, BadgeGalleryEntry
from habitflow.models.user import UserProfile, UserUpdate
from habitflow.core.security import verify_token
from habitflow.core.database import get_database
from habitflow.services import analytics_service
from habitflow.services.coach_service import CoachService
from habitflow.services.gamification_service import GamificationService, syllabus_progress
from habitflow.services.progress_service import ProgressService

router = APIRouter()
gamification_service = GamificationService()
coach_service = CoachService()

@router.get("/profile")
async def get_user_game_profile(user_id: str = Depends(verify_token), db: Client = Depends(get_database)):
    """Get complete gamification profile for user"""
    service = ProgressService(db, gamification_service)
    profile = await service.ensure_profile(user_id)
    habits = await service.list_habits(user_id)
    chapters = await service.list_chapters(user_id)

    return {
        "user": profile,
        "stats": {
            "total_streak_points": profile.total_streak_points,
            "total_completions": sum(len(set(h.completed_dates)) for h in habits),
            "badges_count": len(profile.badges),
            "syllabus": syllabus_progress(chapters)
        }
    }

@router.put("/profile", response_model=UserProfile)
async def update_user_profile(
    update_data: UserUpdate,
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    """Update editable profile fields"""
    service = ProgressService(db, gamification_service)
    await service.ensure_profile(user_id)

    changes = update_data.model_dump(exclude_none=True)
    if changes:
        db.table("users").update(changes).eq("id", user_id).execute()

    return await service.get_profile(user_id)

@router.get("/badges", response_model=List[BadgeGalleryEntry])
async def get_badge_gallery(user_id: str = Depends(verify_token), db: Client = Depends(get_database)):
    """Every badge in the catalog with the user's earned state"""
    profile = await ProgressService(db, gamification_service).ensure_profile(user_id)
    earned = {badge.key: badge for badge in profile.badges}

    gallery = []
    for key, definition in gamification_service.catalog.items():
        badge = earned.get(key)
        gallery.append(BadgeGalleryEntry(
            key=key,
            name=definition.name,
            icon=definition.icon,
            description=definition.description,
            repeatable=definition.repeatable,
            earned=badge is not None,
            count=badge.count if badge else 0,
            date_earned=badge.date_earned if badge else None
        ))
    return gallery

@router.post("/evaluate")
async def evaluate_badges(user_id: str = Depends(verify_token), db: Client = Depends(get_database)):
    """Re-run every badge rule against the user's current data"""
    service = ProgressService(db, gamification_service)
    profile = await service.ensure_profile(user_id)
    habits = await service.list_habits(user_id)
    chapters = await service.list_chapters(user_id)

    new_badges = await service.sync_badges_and_points(profile, habits, chapters)

    return {
        "new_badges": new_badges,
        "message": f"🎉 Badge Unlocked: {new_badges[0].name}!" if new_badges else "No new badges yet. Keep going! 💪"
    }

@router.get("/analytics", response_model=AnalyticsSummary)
async def get_analytics(user_id: str = Depends(verify_token), db: Client = Depends(get_database)):
    """Completion, streak and syllabus analytics"""
    service = ProgressService(db, gamification_service)
    habits = await service.list_habits(user_id)
    chapters = await service.list_chapters(user_id)

    return analytics_service.summary(habits, chapters)

@router.get("/insights")
async def get_habit_insights(user_id: str = Depends(verify_token), db: Client = Depends(get_database)):
    """Coaching tips generated from the user's habit history"""
    habits = await ProgressService(db, gamification_service).list_habits(user_id)
    insights = await coach_service.get_habit_insights(habits)

    return {"insights": insights}
