from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime
from enum import Enum

from habitflow.models.habit import Habit

class BadgeKey(str, Enum):
    FIRST_STEP = "first_step"                  # First completion
    CHAPTER_CLOSER = "chapter_closer"          # First chapter finished
    STREAK_3 = "streak_3"                      # Repeatable
    STREAK_7 = "streak_7"                      # Repeatable
    STREAK_14 = "streak_14"                    # Repeatable
    STREAK_30 = "streak_30"                    # Repeatable
    STREAK_60 = "streak_60"                    # Repeatable
    COMPLETION_100 = "completion_100"
    COMPLETION_500 = "completion_500"
    HIGH_POINTS = "high_points"                # 500 streak points
    NIGHT_OWL = "night_owl"                    # After 11 PM
    EARLY_BIRD = "early_bird"                  # Before 6 AM
    WEEKEND_WARRIOR = "weekend_warrior"        # Repeatable, Saturday + Sunday
    TWELVE_HOUR_TITAN = "12_hour_titan"
    SYLLABUS_10 = "syllabus_10"
    SYLLABUS_50 = "syllabus_50"
    SYLLABUS_100 = "syllabus_100"
    PHYSICS_MASTER = "physics_master"          # 20% of Physics
    PHYSICS_100 = "physics_100"
    CHEM_MASTER = "chem_master"                # 20% of Chemistry
    CHEM_100 = "chem_100"
    MATH_MASTER = "math_master"                # 20% of Mathematics
    MATH_100 = "math_100"
    CHAPTERS_48 = "chapters_48"
    MOCK_TEST_SURVIVOR = "mock_test_survivor"
    COMEBACK_KID = "comeback_kid"              # Display only, never awarded

class Badge(BaseModel):
    id: str
    key: str
    name: str
    icon: str
    description: str
    date_earned: datetime
    count: int = 1

class BadgeGalleryEntry(BaseModel):
    key: str
    name: str
    icon: str
    description: str
    repeatable: bool
    earned: bool
    count: int = 0
    date_earned: Optional[datetime] = None

class ToggleResult(BaseModel):
    habit: Habit
    completed: bool
    streak: int
    points_delta: int

class SyllabusProgress(BaseModel):
    total_chapters: int = 0
    completed_chapters: int = 0
    overall_percentage: float = 0.0
    subject_percentages: Dict[str, float] = Field(default_factory=dict)

class HabitStats(BaseModel):
    habit_id: str
    total_completions: int
    current_streak: int
    longest_streak: int
    completion_rate: float

class SubjectProgress(BaseModel):
    subject: str
    total: int
    completed: int
    percentage: int

class AnalyticsSummary(BaseModel):
    total_completions: int
    average_streak: int
    category_distribution: Dict[str, int]
    habit_distribution: Dict[str, int]
    syllabus: List[SubjectProgress]
    habits: List[HabitStats]
