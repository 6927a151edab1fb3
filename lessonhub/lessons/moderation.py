"""
Lesson moderation: user reports embedded in the lesson document

One report per (lesson, reporter). `reportCount` mirrors the length of
`reports` and is only ever changed in the same update that edits the list.
"""

from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime
from typing import List

from lessonhub.errors import Conflict, NotFound, ValidationFailed
from lessonhub.mongo import parse_object_id
from lessonhub.utils import normalize_email

REPORTED_LESSON_PROJECTION = {
    "title": 1,
    "authorEmail": 1,
    "authorName": 1,
    "accessLevel": 1,
    "isPublic": 1,
    "reports": 1,
    "reportCount": 1,
    "createdAt": 1,
}


async def _lesson_exists(db: AsyncIOMotorDatabase, oid) -> bool:
    return await db.lessons.count_documents({"_id": oid}, limit=1) > 0


async def report_lesson(
    db: AsyncIOMotorDatabase,
    lesson_id: str,
    reason: str,
    reporter_email: str
) -> dict:
    """
    Append a moderation report

    Single conditional update: the push only applies when the reporter
    has no report on this lesson yet.
    """
    reporter_email = normalize_email(reporter_email)
    if not reason or not reporter_email:
        raise ValidationFailed("Reason and reporter email are required")

    oid = parse_object_id(lesson_id)
    report = {
        "reason": reason,
        "reporterEmail": reporter_email,
        "reportedAt": datetime.utcnow(),
    }

    result = await db.lessons.update_one(
        {"_id": oid, "reports.reporterEmail": {"$ne": reporter_email}},
        {"$push": {"reports": report}, "$inc": {"reportCount": 1}}
    )

    if result.matched_count == 0:
        if not await _lesson_exists(db, oid):
            raise NotFound("Lesson not found")
        raise Conflict("You have already reported this lesson")

    print(f"🚩 Lesson {lesson_id} reported by {reporter_email}")
    return report


async def list_reported_lessons(db: AsyncIOMotorDatabase) -> List[dict]:
    """Lessons with at least one report, most reported first"""
    cursor = db.lessons.find(
        {"reportCount": {"$gt": 0}},
        REPORTED_LESSON_PROJECTION
    ).sort("reportCount", -1)
    return await cursor.to_list(length=None)


async def remove_report(db: AsyncIOMotorDatabase, lesson_id: str, reporter_email: str):
    """Remove one reporter's report and decrement the counter"""
    reporter_email = normalize_email(reporter_email)
    if not reporter_email:
        raise ValidationFailed("Reporter email is required")

    oid = parse_object_id(lesson_id)
    result = await db.lessons.update_one(
        {"_id": oid, "reports.reporterEmail": reporter_email},
        {
            "$pull": {"reports": {"reporterEmail": reporter_email}},
            "$inc": {"reportCount": -1}
        }
    )

    if result.matched_count == 0:
        if not await _lesson_exists(db, oid):
            raise NotFound("Lesson not found")
        raise NotFound("Report not found")

    print(f"✅ Report by {reporter_email} removed from lesson {lesson_id}")
    return result


async def clear_reports(db: AsyncIOMotorDatabase, lesson_id: str):
    """Dismiss every report on a lesson"""
    result = await db.lessons.update_one(
        {"_id": parse_object_id(lesson_id)},
        {"$set": {"reports": [], "reportCount": 0}}
    )
    if result.matched_count == 0:
        raise NotFound("Lesson not found")
    return result
