from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel
from typing import Optional
from bson import ObjectId

from lessonhub.auth.firebase_auth import get_current_user
from lessonhub.community.reactions import (
    LOVE_REACTS, FAVORITES, toggle_reaction, reaction_state, subjects_for
)
from lessonhub.dependencies import get_db
from lessonhub.errors import LessonHubError, to_http
from lessonhub.mongo import serialize_many

router = APIRouter(tags=["Reactions"])


class ReactionRequest(BaseModel):
    userEmail: Optional[str] = None

# ==================== LOVE REACT ====================

@router.post("/loveReact/{lesson_id}")
async def toggle_love_react(
    lesson_id: str,
    payload: ReactionRequest,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: dict = Depends(get_current_user)
):
    try:
        state = await toggle_reaction(db[LOVE_REACTS], lesson_id, payload.userEmail)
    except LessonHubError as e:
        raise to_http(e)
    return {"liked": state.is_member, "totalLikes": state.total_count}


@router.get("/loveReact/{lesson_id}")
async def get_love_react(
    lesson_id: str,
    email: Optional[str] = None,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    state = await reaction_state(db[LOVE_REACTS], lesson_id, email)
    return {"liked": state.is_member, "totalLikes": state.total_count}

# ==================== FAVORITES ====================

@router.post("/favorite/{lesson_id}")
async def toggle_favorite(
    lesson_id: str,
    payload: ReactionRequest,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: dict = Depends(get_current_user)
):
    try:
        state = await toggle_reaction(db[FAVORITES], lesson_id, payload.userEmail)
    except LessonHubError as e:
        raise to_http(e)
    return {"favorited": state.is_member, "totalFavorites": state.total_count}


@router.get("/favorite/{lesson_id}")
async def get_favorite(
    lesson_id: str,
    email: Optional[str] = None,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    state = await reaction_state(db[FAVORITES], lesson_id, email)
    return {"favorited": state.is_member, "totalFavorites": state.total_count}


@router.get("/checkFavorite")
async def check_favorite(
    lessonId: str,
    email: str,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    state = await reaction_state(db[FAVORITES], lessonId, email)
    return {"isFavorite": state.is_member}


@router.get("/favoriteFullLessons")
async def favorite_full_lessons(email: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    """Full lesson documents the user has favorited"""
    try:
        lesson_ids = await subjects_for(db[FAVORITES], email)
    except LessonHubError as e:
        raise to_http(e)

    object_ids = [ObjectId(i) for i in lesson_ids if ObjectId.is_valid(i)]
    if not object_ids:
        return []

    cursor = db.lessons.find({"_id": {"$in": object_ids}}).sort("createdAt", -1)
    lessons = await cursor.to_list(length=None)
    return serialize_many(lessons)
