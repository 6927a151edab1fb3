from datetime import datetime
from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from lessonhub.dependencies import get_db

router = APIRouter(tags=["System"])


@router.get("/")
async def root():
    return {"message": "Digital Life Lessons server is running"}


@router.get("/health")
async def health(db: AsyncIOMotorDatabase = Depends(get_db)):
    """Liveness plus a database ping"""
    record = {
        "backend": "UP",
        "database": "DOWN",
        "timestamp": datetime.utcnow(),
    }
    try:
        await db.command("ping")
        record["database"] = "UP"
    except Exception as e:
        record["error"] = str(e)[:80]
    return record
