"""
Reaction toggle shared by love reacts and favorites

A reaction record is {"lessonId": str, "users": [email, ...]} where `users`
has set semantics. Records are created lazily on the first reaction and are
never deleted.
"""

from dataclasses import dataclass
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import DuplicateKeyError

from lessonhub.errors import ValidationFailed
from lessonhub.utils import normalize_email

LOVE_REACTS = "loveReacts"
FAVORITES = "favorites"


@dataclass
class ReactionState:
    is_member: bool
    total_count: int


async def reaction_state(
    collection: AsyncIOMotorCollection,
    subject_id: str,
    participant: Optional[str] = None
) -> ReactionState:
    participant = normalize_email(participant)
    record = await collection.find_one({"lessonId": subject_id})
    users = (record or {}).get("users") or []
    return ReactionState(
        is_member=bool(participant) and participant in users,
        total_count=len(users)
    )


async def toggle_reaction(
    collection: AsyncIOMotorCollection,
    subject_id: str,
    participant: str
) -> ReactionState:
    """
    Flip `participant`'s membership in the subject's set

    The mutation is an atomic $pull / $addToSet. The returned state is
    re-read from the store afterwards, so it may include toggles made by
    other callers in between.
    """
    participant = normalize_email(participant)
    if not participant:
        raise ValidationFailed("User email is required")
    if not subject_id:
        raise ValidationFailed("Lesson id is required")

    record = await collection.find_one({"lessonId": subject_id})

    if record and participant in (record.get("users") or []):
        await collection.update_one(
            {"lessonId": subject_id},
            {"$pull": {"users": participant}}
        )
    else:
        try:
            await collection.update_one(
                {"lessonId": subject_id},
                {"$addToSet": {"users": participant}},
                upsert=True
            )
        except DuplicateKeyError:
            # Lost the race to create the record; it exists now
            await collection.update_one(
                {"lessonId": subject_id},
                {"$addToSet": {"users": participant}}
            )

    return await reaction_state(collection, subject_id, participant)


async def subjects_for(collection: AsyncIOMotorCollection, participant: str) -> List[str]:
    """Lesson ids the participant has reacted to"""
    participant = normalize_email(participant)
    if not participant:
        raise ValidationFailed("User email is required")
    cursor = collection.find({"users": participant}, {"lessonId": 1})
    records = await cursor.to_list(length=None)
    return [r["lessonId"] for r in records]
