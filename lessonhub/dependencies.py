from fastapi import Request, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from lessonhub.config import Config

# ==================== DEPENDENCY FUNCTIONS ====================

async def get_db(request: Request) -> AsyncIOMotorDatabase:
    """Database dependency (handle is created on startup)"""
    return request.app.state.db


async def get_settings(request: Request) -> Config:
    return request.app.state.config


async def get_payment_gateway(request: Request):
    """Payment provider dependency"""
    gateway = getattr(request.app.state, "payment_gateway", None)
    if gateway is None:
        raise HTTPException(status_code=500, detail="Payment provider not configured")
    return gateway
