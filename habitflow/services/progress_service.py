import logging
import uuid
from datetime import date, datetime, timezone
from typing import Dict, List, Optional

from supabase import Client

from habitflow.models.achievement import Badge
from habitflow.models.chapter import Chapter
from habitflow.models.habit import Habit
from habitflow.models.user import UserProfile
from habitflow.services.gamification_service import GamificationService

logger = logging.getLogger(__name__)


class ProgressService:
    """Loads a user's snapshot from Supabase, runs the engines and saves the results"""

    def __init__(self, db: Client, gamification: Optional[GamificationService] = None):
        self.db = db
        self.gamification = gamification or GamificationService()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def get_profile(self, user_id: str) -> UserProfile:
        result = self.db.table("users").select("*").eq("id", user_id).execute()
        if not result.data:
            raise ValueError("User not found")
        row = result.data[0]
        return UserProfile.model_validate({**row, "badges": row.get("badges") or []})

    async def ensure_profile(self, user_id: str, email: Optional[str] = None) -> UserProfile:
        """Fetch the user's profile row, creating an empty one on first sign-in"""
        try:
            return await self.get_profile(user_id)
        except ValueError:
            pass

        username = email.split("@")[0] if email else f"user-{user_id[:8]}"
        new_user = {
            "id": user_id,
            "username": username,
            "email": email,
            "joined_at": datetime.now(timezone.utc).isoformat(),
            "badges": [],
            "total_streak_points": 0,
        }
        result = self.db.table("users").insert(new_user).execute()
        if not result.data:
            raise RuntimeError("Failed to create user profile")

        logger.info(f"Created profile for user {user_id}")
        return UserProfile.model_validate(result.data[0])

    async def list_habits(self, user_id: str) -> List[Habit]:
        result = self.db.table("habits").select("*").eq("user_id", user_id).execute()
        return [Habit.model_validate(self._habit_row(row)) for row in result.data or []]

    async def get_habit(self, user_id: str, habit_id: str) -> Habit:
        result = self.db.table("habits").select("*").eq("id", habit_id).eq("user_id", user_id).execute()
        if not result.data:
            raise ValueError("Habit not found")
        return Habit.model_validate(self._habit_row(result.data[0]))

    async def list_chapters(self, user_id: str) -> List[Chapter]:
        result = self.db.table("chapters").select("*").eq("user_id", user_id).execute()
        return [Chapter.model_validate(row) for row in result.data or []]

    async def get_chapter(self, user_id: str, chapter_id: str) -> Chapter:
        result = self.db.table("chapters").select("*").eq("id", chapter_id).eq("user_id", user_id).execute()
        if not result.data:
            raise ValueError("Chapter not found")
        return Chapter.model_validate(result.data[0])

    @staticmethod
    def _habit_row(row: Dict) -> Dict:
        # Array columns come back as NULL for rows created before they existed
        return {
            **row,
            "completed_dates": row.get("completed_dates") or [],
            "skipped_dates": row.get("skipped_dates") or [],
        }

    # ------------------------------------------------------------------
    # Habits
    # ------------------------------------------------------------------

    async def create_habit(self, user_id: str, data: Dict) -> Habit:
        habit_data = {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "frequency": "daily",
            "streak": 0,
            "points": 0,
            "completed_dates": [],
            "skipped_dates": [],
            "created_at": datetime.now(timezone.utc).isoformat(),
            **data,
        }
        result = self.db.table("habits").insert(habit_data).execute()
        if not result.data:
            raise RuntimeError("Failed to create habit")
        return Habit.model_validate(self._habit_row(result.data[0]))

    async def create_one_time_task(self, user_id: str, name: str, day: str) -> Habit:
        return await self.create_habit(user_id, {
            "name": name,
            "emoji": "📝",
            "category": "Daily Task",
            "specific_date": day,
            "weekly_goal": 0,
            "monthly_goal": 0,
        })

    async def toggle_habit(self, user_id: str, habit_id: str, day: str, today: Optional[date] = None) -> Dict:
        """Toggle a completion, fold the point delta into the user's total and re-check badges"""
        habit = await self.get_habit(user_id, habit_id)
        profile = await self.ensure_profile(user_id)

        toggle = self.gamification.toggle_completion(habit, day, today)

        self.db.table("habits").update({
            "completed_dates": toggle.habit.completed_dates,
            "streak": toggle.streak
        }).eq("id", habit_id).execute()

        previous_points = profile.total_streak_points
        profile = profile.model_copy(update={
            "total_streak_points": self.gamification.apply_points(previous_points, toggle.points_delta)
        })

        habits = [toggle.habit if h.id == habit_id else h for h in await self.list_habits(user_id)]
        chapters = await self.list_chapters(user_id)
        new_badges = await self.sync_badges_and_points(profile, habits, chapters, previous_points)

        return {
            "habit": toggle.habit,
            "completed": toggle.completed,
            "streak": toggle.streak,
            "points_delta": toggle.points_delta,
            "total_streak_points": profile.total_streak_points,
            "new_badges": new_badges
        }

    async def skip_habit(self, user_id: str, habit_id: str, day: str) -> str:
        """Hide a recurring habit for one day; a one-time task is deleted instead"""
        habit = await self.get_habit(user_id, habit_id)

        if habit.is_one_time:
            self.db.table("habits").delete().eq("id", habit_id).execute()
            return "deleted"

        skipped_dates = list(habit.skipped_dates)
        if day not in skipped_dates:
            skipped_dates.append(day)
        self.db.table("habits").update({"skipped_dates": skipped_dates}).eq("id", habit_id).execute()
        return "skipped"

    async def delete_habit(self, user_id: str, habit_id: str) -> None:
        await self.get_habit(user_id, habit_id)
        self.db.table("habits").delete().eq("id", habit_id).execute()

    # ------------------------------------------------------------------
    # Chapters
    # ------------------------------------------------------------------

    async def create_chapter(self, user_id: str, name: str, subject: str) -> Chapter:
        chapter_data = {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "name": name,
            "subject": subject,
            "is_completed": False
        }
        result = self.db.table("chapters").insert(chapter_data).execute()
        if not result.data:
            raise RuntimeError("Failed to create chapter")
        return Chapter.model_validate(result.data[0])

    async def toggle_chapter(self, user_id: str, chapter_id: str) -> Dict:
        chapter = await self.get_chapter(user_id, chapter_id)
        profile = await self.ensure_profile(user_id)
        updated = chapter.model_copy(update={"is_completed": not chapter.is_completed})

        self.db.table("chapters").update({"is_completed": updated.is_completed}).eq("id", chapter_id).execute()

        chapters = [updated if c.id == chapter_id else c for c in await self.list_chapters(user_id)]
        habits = await self.list_habits(user_id)
        new_badges = await self.sync_badges_and_points(profile, habits, chapters)

        return {"chapter": updated, "new_badges": new_badges}

    async def delete_chapter(self, user_id: str, chapter_id: str) -> None:
        await self.get_chapter(user_id, chapter_id)
        self.db.table("chapters").delete().eq("id", chapter_id).execute()

    # ------------------------------------------------------------------
    # Badges and points
    # ------------------------------------------------------------------

    async def sync_badges_and_points(
        self,
        profile: UserProfile,
        habits: List[Habit],
        chapters: List[Chapter],
        previous_points: Optional[int] = None,
        now: Optional[datetime] = None
    ) -> List[Badge]:
        """Evaluate badges for the snapshot and persist anything that changed"""
        candidates = self.gamification.evaluate(profile, habits, chapters, now=now)
        existing = {badge.key: badge for badge in profile.badges}
        merged = self.gamification.merge_badges(existing, candidates)

        new_badges = [badge for badge in candidates if merged.get(badge.key) is not existing.get(badge.key)]
        points_changed = previous_points is not None and previous_points != profile.total_streak_points

        if new_badges or points_changed:
            self.db.table("users").update({
                "badges": [badge.model_dump(mode="json") for badge in merged.values()],
                "total_streak_points": profile.total_streak_points
            }).eq("id", profile.id).execute()

        for badge in new_badges:
            logger.info(f"Badge unlocked for {profile.id}: {badge.key} x{badge.count}")

        return [merged[badge.key] for badge in new_badges]
