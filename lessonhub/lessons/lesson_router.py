from fastapi import APIRouter, HTTPException, Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional

from lessonhub.auth.firebase_auth import get_current_user, ensure_self_or_admin, is_admin
from lessonhub.dependencies import get_db
from lessonhub.errors import LessonHubError, to_http
from lessonhub.lessons.models import AccessLevel, LessonCreate, LessonUpdate
from lessonhub.lessons.database import (
    create_lesson, list_lessons, list_public_lessons, get_lesson,
    update_lesson, delete_lesson, count_lessons
)
from lessonhub.mongo import serialize_mongo, serialize_many, insert_result, update_result, delete_result
from lessonhub.utils import normalize_email

router = APIRouter(tags=["Lessons"])


def verify_lesson_owner(request: Request, lesson: dict, user: dict) -> None:
    """Authors edit their own lessons; admins edit any"""
    email = normalize_email(user.get("email"))
    if email and normalize_email(lesson.get("authorEmail")) == email:
        return
    if is_admin(request, user):
        return
    raise HTTPException(status_code=403, detail="Not authorized")


@router.post("/add_lessons")
async def add_lesson_endpoint(
    lesson: LessonCreate,
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: dict = Depends(get_current_user)
):
    """Lessons are published under the caller's own email"""
    ensure_self_or_admin(request, user, lesson.authorEmail)
    result = await create_lesson(db, lesson.dict())
    return insert_result(result)


@router.get("/lessons")
async def list_lessons_endpoint(
    email: Optional[str] = None,
    accessLevel: Optional[AccessLevel] = None,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """All lessons, or one author's lessons when ?email= is given"""
    lessons = await list_lessons(db, author_email=email, access_level=accessLevel)
    return serialize_many(lessons)


@router.get("/lessons/public")
async def list_public_lessons_endpoint(db: AsyncIOMotorDatabase = Depends(get_db)):
    lessons = await list_public_lessons(db)
    return serialize_many(lessons)


@router.get("/lessons/count")
async def count_lessons_endpoint(
    email: Optional[str] = None,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Lesson counts per access tier"""
    free = await count_lessons(db, AccessLevel.FREE, author_email=email)
    premium = await count_lessons(db, AccessLevel.PREMIUM, author_email=email)
    return {"free": free, "premium": premium, "total": free + premium}


@router.get("/lessons/{lesson_id}")
async def get_lesson_endpoint(lesson_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    try:
        lesson = await get_lesson(db, lesson_id)
    except LessonHubError as e:
        raise to_http(e)
    return serialize_mongo(lesson)


@router.patch("/lessons/{lesson_id}")
async def update_lesson_endpoint(
    lesson_id: str,
    updates: LessonUpdate,
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: dict = Depends(get_current_user)
):
    try:
        lesson = await get_lesson(db, lesson_id)
        verify_lesson_owner(request, lesson, user)
        result = await update_lesson(db, lesson_id, updates.dict())
    except LessonHubError as e:
        raise to_http(e)
    return update_result(result)


@router.delete("/lessons/{lesson_id}")
async def delete_lesson_endpoint(
    lesson_id: str,
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: dict = Depends(get_current_user)
):
    try:
        lesson = await get_lesson(db, lesson_id)
        verify_lesson_owner(request, lesson, user)
        result = await delete_lesson(db, lesson_id)
    except LessonHubError as e:
        raise to_http(e)
    return delete_result(result)
