from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime

from habitflow.models.achievement import Badge


class UserProfile(BaseModel):
    id: str
    username: str
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    joined_at: Optional[datetime] = None
    total_streak_points: int = 0
    badges: List[Badge] = Field(default_factory=list)


class UserUpdate(BaseModel):
    username: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
