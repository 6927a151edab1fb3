from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from lessonhub.auth.firebase_auth import get_current_user, get_current_admin
from lessonhub.dependencies import get_db
from lessonhub.errors import LessonHubError, to_http
from lessonhub.lessons.models import ReportCreate, ReportRemove
from lessonhub.lessons.moderation import (
    report_lesson, list_reported_lessons, remove_report, clear_reports
)
from lessonhub.mongo import serialize_many, update_result

router = APIRouter(tags=["Moderation"])


@router.post("/lessons/report/{lesson_id}")
async def report_lesson_endpoint(
    lesson_id: str,
    payload: ReportCreate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: dict = Depends(get_current_user)
):
    try:
        report = await report_lesson(db, lesson_id, payload.reason, payload.reporterEmail)
    except LessonHubError as e:
        raise to_http(e)
    return {"success": True, "message": "Lesson reported", "report": report}


# ==================== ADMIN ====================

@router.get("/admin/reported-lessons")
async def reported_lessons_endpoint(
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin: dict = Depends(get_current_admin)
):
    lessons = await list_reported_lessons(db)
    return serialize_many(lessons)


@router.patch("/admin/lessons/{lesson_id}/remove-report")
async def remove_report_endpoint(
    lesson_id: str,
    payload: ReportRemove,
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin: dict = Depends(get_current_admin)
):
    try:
        result = await remove_report(db, lesson_id, payload.reporterEmail)
    except LessonHubError as e:
        raise to_http(e)
    return update_result(result)


@router.patch("/admin/lessons/{lesson_id}/clear-reports")
async def clear_reports_endpoint(
    lesson_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin: dict = Depends(get_current_admin)
):
    try:
        result = await clear_reports(db, lesson_id)
    except LessonHubError as e:
        raise to_http(e)
    return update_result(result)
