import logging

from fastapi import FastAPI

from config import Settings
from database import engine
from fitness_agent.api import router as fitness_router
import models

logging.basicConfig(
    level=getattr(logging, Settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create tables if they do not exist
models.Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Fitness Agent",
    description="Text-message fitness coaching assistant: briefings, notes, templates and weight suggestions.",
    version="1.0.0"
)

app.include_router(fitness_router)


@app.get("/")
async def root():
    return {"message": "Fitness Agent server is running. Try GET /health or /api/cron/daily-briefing"}


@app.get("/health")
async def health_check():
    """
    Service health check.
    """
    return {
        "status": "ok",
        "timezone": Settings.USER_TIMEZONE,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=Settings.int_value("PORT"))
