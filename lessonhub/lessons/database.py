from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime
from typing import List, Optional

from lessonhub.errors import NotFound, ValidationFailed
from lessonhub.lessons.models import AccessLevel
from lessonhub.mongo import parse_object_id
from lessonhub.utils import normalize_email

# Fields owned by the report/review endpoints, never written through update
PROTECTED_FIELDS = {"_id", "reports", "reviews", "reportCount", "reviewCount", "averageRating", "createdAt"}

# ==================== LESSON CRUD ====================

async def create_lesson(db: AsyncIOMotorDatabase, lesson_data: dict):
    """
    Insert a new lesson with empty moderation/review state
    Returns the driver's InsertOneResult
    """
    now = datetime.utcnow()
    lesson = {k: v for k, v in lesson_data.items() if k not in PROTECTED_FIELDS}
    lesson["accessLevel"] = AccessLevel(lesson.get("accessLevel") or AccessLevel.FREE).value
    lesson["isPublic"] = bool(lesson.get("isPublic", True))
    lesson.update({
        "createdAt": now,
        "updatedAt": now,
        "reports": [],
        "reviews": [],
        "reportCount": 0,
        "reviewCount": 0,
        "averageRating": 0.0,
    })

    result = await db.lessons.insert_one(lesson)
    print(f"✅ Lesson created: {result.inserted_id} by {lesson.get('authorEmail')}")
    return result


async def list_lessons(
    db: AsyncIOMotorDatabase,
    author_email: Optional[str] = None,
    access_level: Optional[str] = None
) -> List[dict]:
    """List lessons, newest first, optionally filtered by author and tier"""
    query = {}
    if author_email:
        query["authorEmail"] = normalize_email(author_email)
    if access_level:
        query["accessLevel"] = AccessLevel(access_level).value

    cursor = db.lessons.find(query).sort("createdAt", -1)
    return await cursor.to_list(length=None)


async def list_public_lessons(db: AsyncIOMotorDatabase) -> List[dict]:
    cursor = db.lessons.find({"isPublic": True}).sort("createdAt", -1)
    return await cursor.to_list(length=None)


async def get_lesson(db: AsyncIOMotorDatabase, lesson_id: str) -> dict:
    """Get lesson by id (400 on malformed id, 404 when absent)"""
    lesson = await db.lessons.find_one({"_id": parse_object_id(lesson_id)})
    if not lesson:
        raise NotFound("Lesson not found")
    return lesson


async def update_lesson(db: AsyncIOMotorDatabase, lesson_id: str, updates: dict):
    """
    Partial update of editable lesson fields
    Counters and embedded lists are only changed by the report/review paths
    """
    oid = parse_object_id(lesson_id)
    changes = {
        k: (v.value if isinstance(v, AccessLevel) else v)
        for k, v in updates.items()
        if v is not None and k not in PROTECTED_FIELDS
    }
    if not changes:
        raise ValidationFailed("No fields to update")

    changes["updatedAt"] = datetime.utcnow()
    result = await db.lessons.update_one({"_id": oid}, {"$set": changes})
    if result.matched_count == 0:
        raise NotFound("Lesson not found")
    return result


async def delete_lesson(db: AsyncIOMotorDatabase, lesson_id: str):
    result = await db.lessons.delete_one({"_id": parse_object_id(lesson_id)})
    print(f"🗑️  Lesson delete {lesson_id}: {result.deleted_count} removed")
    return result


async def count_lessons(
    db: AsyncIOMotorDatabase,
    access_level: str,
    author_email: Optional[str] = None
) -> int:
    query = {"accessLevel": AccessLevel(access_level).value}
    if author_email:
        query["authorEmail"] = normalize_email(author_email)
    return await db.lessons.count_documents(query)
