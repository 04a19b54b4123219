from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum

class HabitPeriod(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"

class Habit(BaseModel):
    id: str
    name: str
    emoji: str = "📝"
    category: str = "Daily Task"
    frequency: str = "daily"
    period: Optional[HabitPeriod] = None
    specific_date: Optional[str] = None  # YYYY-MM-DD, marks a one-time task
    completed_dates: List[str] = Field(default_factory=list)
    skipped_dates: List[str] = Field(default_factory=list)
    streak: int = 0
    weekly_goal: int = 0
    monthly_goal: int = 0
    points: int = 0
    created_at: Optional[datetime] = None
    user_id: Optional[str] = None

    @property
    def is_one_time(self) -> bool:
        return self.specific_date is not None

class HabitCreate(BaseModel):
    name: str
    emoji: str = "📚"
    category: str
    weekly_goal: int = 0
    monthly_goal: int = 0
    period: HabitPeriod = HabitPeriod.WEEKLY

class OneTimeTaskCreate(BaseModel):
    name: str
    date: str  # YYYY-MM-DD

class HabitToggle(BaseModel):
    date: str

class HabitSkip(BaseModel):
    date: str
