from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel
from typing import Optional

from lessonhub.auth.firebase_auth import get_current_user
from lessonhub.community.comments import add_comment, list_comments
from lessonhub.dependencies import get_db
from lessonhub.errors import LessonHubError, to_http
from lessonhub.mongo import serialize_many, insert_result

router = APIRouter(tags=["Community & Comments"])

# ==================== MODELS ====================

class CommentCreate(BaseModel):
    postId: Optional[str] = None
    text: Optional[str] = None
    authorEmail: Optional[str] = None
    authorName: Optional[str] = None
    authorPhoto: Optional[str] = None

# ==================== COMMENTS ====================

@router.post("/comments")
async def add_comment_endpoint(
    comment: CommentCreate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: dict = Depends(get_current_user)
):
    try:
        result = await add_comment(db, comment.dict())
    except LessonHubError as e:
        raise to_http(e)
    return insert_result(result)


@router.get("/comments")
async def get_comments_endpoint(
    postId: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    try:
        comments = await list_comments(db, postId, skip, limit)
    except LessonHubError as e:
        raise to_http(e)
    return serialize_many(comments)
