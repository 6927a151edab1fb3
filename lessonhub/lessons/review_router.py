from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from lessonhub.auth.firebase_auth import get_current_user
from lessonhub.dependencies import get_db
from lessonhub.errors import LessonHubError, to_http
from lessonhub.lessons.models import ReviewCreate, ReviewSummary
from lessonhub.lessons.reviews import add_review, list_reviews

router = APIRouter(tags=["Reviews"])


@router.post("/lessons/{lesson_id}/review", response_model=ReviewSummary)
async def add_review_endpoint(
    lesson_id: str,
    review: ReviewCreate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: dict = Depends(get_current_user)
):
    try:
        return await add_review(db, lesson_id, review.dict())
    except LessonHubError as e:
        raise to_http(e)


@router.get("/lessons/{lesson_id}/reviews")
async def list_reviews_endpoint(lesson_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    try:
        return await list_reviews(db, lesson_id)
    except LessonHubError as e:
        raise to_http(e)
