from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
from habitflow.core.config import settings
from habitflow.core.logger import setup_logger
from habitflow.routers import habits, chapters, gamification

logger = setup_logger("habitflow", settings.log_level, settings.log_file)

# Create FastAPI instance
app = FastAPI(
    title=settings.app_name,
    description="Habit, syllabus and streak tracker for exam preparation",
    version=settings.version
)

# CORS middleware for the web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)

app.include_router(habits.router, prefix="/habits", tags=["Habits"])
app.include_router(chapters.router, prefix="/chapters", tags=["Chapters"])
app.include_router(gamification.router, prefix="/gamification", tags=["Gamification"])

@app.get("/")
async def root():
    return {
        "message": "Welcome to HabitFlow API! 📚🔥",
        "version": settings.version,
        "docs": "/docs",
        "status": "ready_to_study"
    }

@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "services": {
            "database": "configured" if settings.supabase_url else "not_configured",
            "gamification": "active"
        }
    }

logger.info(f"{settings.app_name} {settings.version} ready")

if __name__ == "__main__":
    uvicorn.run(
        "habitflow.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
