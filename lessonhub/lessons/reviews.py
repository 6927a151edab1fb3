"""
Lesson reviews with a running average rating

The mean is updated incrementally from the stored aggregate, never by
rescanning the embedded review list. The update is an aggregation pipeline,
so the new mean is computed by the server from the values it is replacing
and concurrent reviews from different reviewers all land.
"""

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from datetime import datetime

from lessonhub.errors import Conflict, NotFound, ValidationFailed
from lessonhub.mongo import parse_object_id
from lessonhub.utils import normalize_email

MIN_RATING = 1
MAX_RATING = 5


def _validate_review(payload: dict) -> float:
    rating = payload.get("rating")
    if rating is None or not payload.get("comment") or not normalize_email(payload.get("reviewerEmail")):
        raise ValidationFailed("Rating, comment and reviewer email are required")

    if isinstance(rating, bool):
        raise ValidationFailed("Rating must be a number")
    try:
        rating = float(rating)
    except (TypeError, ValueError):
        raise ValidationFailed("Rating must be a number")

    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationFailed(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
    return rating


def rolling_average_update(review: dict) -> list:
    """
    Pipeline appending `review` and folding its rating into the aggregate:
    (averageRating * reviewCount + rating) / (reviewCount + 1)

    All expressions in one $set stage read the pre-update document.
    Legacy lessons without the counters count as empty.
    """
    count = {"$ifNull": ["$reviewCount", 0]}
    mean = {"$ifNull": ["$averageRating", 0]}
    return [{
        "$set": {
            "averageRating": {
                "$divide": [
                    {"$add": [{"$multiply": [mean, count]}, review["rating"]]},
                    {"$add": [count, 1]}
                ]
            },
            "reviewCount": {"$add": [count, 1]},
            # $literal keeps user text such as "$5 well spent" from being read as a field path
            "reviews": {"$concatArrays": [{"$ifNull": ["$reviews", []]}, [{"$literal": review}]]},
        }
    }]


async def add_review(db: AsyncIOMotorDatabase, lesson_id: str, payload: dict) -> dict:
    """
    Append a review and roll it into averageRating / reviewCount

    One conditional update guarded on the reviewer being absent. A miss
    means the lesson is gone or the reviewer already reviewed it.

    Returns:
        {"averageRating": float, "reviewCount": int}
    """
    rating = _validate_review(payload)
    reviewer_email = normalize_email(payload["reviewerEmail"])
    oid = parse_object_id(lesson_id)

    review = {
        "rating": rating,
        "comment": payload["comment"],
        "reviewerEmail": reviewer_email,
        "reviewerName": payload.get("reviewerName"),
        "reviewerPhoto": payload.get("reviewerPhoto"),
        "createdAt": datetime.utcnow(),
    }

    lesson = await db.lessons.find_one_and_update(
        {"_id": oid, "reviews.reviewerEmail": {"$ne": reviewer_email}},
        rolling_average_update(review),
        projection={"averageRating": 1, "reviewCount": 1},
        return_document=ReturnDocument.AFTER
    )

    if lesson is None:
        if not await db.lessons.count_documents({"_id": oid}, limit=1):
            raise NotFound("Lesson not found")
        raise Conflict("You have already reviewed this lesson")

    average, count = lesson["averageRating"], lesson["reviewCount"]
    print(f"⭐ Review {rating} on lesson {lesson_id} -> avg {average:.2f} ({count})")
    return {"averageRating": average, "reviewCount": count}


async def list_reviews(db: AsyncIOMotorDatabase, lesson_id: str) -> dict:
    """Reviews newest first, with the stored aggregate"""
    lesson = await db.lessons.find_one(
        {"_id": parse_object_id(lesson_id)},
        {"reviews": 1, "averageRating": 1, "reviewCount": 1}
    )
    if not lesson:
        raise NotFound("Lesson not found")

    reviews = sorted(
        lesson.get("reviews") or [],
        key=lambda r: r.get("createdAt") or datetime.min,
        reverse=True
    )
    return {
        "reviews": reviews,
        "averageRating": lesson.get("averageRating") or 0.0,
        "reviewCount": lesson.get("reviewCount") or 0,
    }
