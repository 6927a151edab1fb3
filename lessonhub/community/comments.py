from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime
from typing import List

from lessonhub.errors import ValidationFailed
from lessonhub.utils import normalize_email

MAX_COMMENT_LENGTH = 2000


async def add_comment(db: AsyncIOMotorDatabase, comment_data: dict):
    """Insert an immutable comment on a post (lesson)"""
    post_id = comment_data.get("postId")
    text = (comment_data.get("text") or "").strip()
    author_email = normalize_email(comment_data.get("authorEmail"))

    if not post_id or not text or not author_email:
        raise ValidationFailed("postId, text and authorEmail are required")
    if len(text) > MAX_COMMENT_LENGTH:
        raise ValidationFailed(f"Comment exceeds {MAX_COMMENT_LENGTH} characters")

    comment = {
        "postId": post_id,
        "text": text,
        "authorEmail": author_email,
        "authorName": comment_data.get("authorName") or "Anonymous",
        "authorPhoto": comment_data.get("authorPhoto"),
        "createdAt": datetime.utcnow(),
    }
    return await db.comments.insert_one(comment)


async def list_comments(db: AsyncIOMotorDatabase, post_id: str, skip: int = 0, limit: int = 100) -> List[dict]:
    """Comments for a post, newest first"""
    if not post_id:
        raise ValidationFailed("postId is required")
    cursor = db.comments.find({"postId": post_id}).sort("createdAt", -1).skip(skip).limit(limit)
    return await cursor.to_list(length=limit)
