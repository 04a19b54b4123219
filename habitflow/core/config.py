from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    # Database
    supabase_url: str = ""
    supabase_key: str = ""

    # Security (Supabase JWT secret)
    secret_key: str = ""
    algorithm: str = "HS256"
    jwt_audience: Optional[str] = "authenticated"

    # AI coach
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # App
    app_name: str = "HabitFlow"
    version: str = "1.0.0"
    debug: bool = True
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    class Config:
        env_file = ".env"

settings = Settings()
