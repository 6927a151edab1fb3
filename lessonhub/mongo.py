from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId

from lessonhub.errors import InvalidIdentifier


def serialize_mongo(doc: Optional[dict]) -> Optional[dict]:
    """Convert MongoDB document to JSON-serializable dict"""
    if doc is None:
        return None
    doc = dict(doc)
    if "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc


def serialize_many(docs: list[dict]) -> list[dict]:
    return [serialize_mongo(doc) for doc in docs]


def parse_object_id(value: str) -> ObjectId:
    """Parse a lesson id, rejecting malformed ids before any lookup"""
    if not value:
        # ObjectId(None) would mint a fresh id
        raise InvalidIdentifier("Lesson id is required")
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise InvalidIdentifier(f"Invalid lesson id: {value}")


def insert_result(result) -> dict:
    return {"acknowledged": True, "insertedId": str(result.inserted_id)}


def update_result(result) -> dict:
    return {
        "acknowledged": True,
        "matchedCount": result.matched_count,
        "modifiedCount": result.modified_count,
    }


def delete_result(result) -> dict:
    return {"acknowledged": True, "deletedCount": result.deleted_count}
