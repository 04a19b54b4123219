from pydantic import BaseModel
from typing import Optional
from enum import Enum

class Subject(str, Enum):
    PHYSICS = "Physics"
    CHEMISTRY = "Chemistry"
    MATHEMATICS = "Mathematics"

class Chapter(BaseModel):
    id: str
    name: str = ""
    subject: Subject
    is_completed: bool = False
    user_id: Optional[str] = None

class ChapterCreate(BaseModel):
    name: str
    subject: Subject

class PushToDaily(BaseModel):
    date: str  # YYYY-MM-DD
