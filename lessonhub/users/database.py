from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError
from datetime import datetime
from typing import List, Optional
from enum import Enum

from lessonhub.errors import NotFound, ValidationFailed
from lessonhub.utils import normalize_email


class Plan(str, Enum):
    FREE = "free"
    PREMIUM = "premium"


async def upsert_user(db: AsyncIOMotorDatabase, user_data: dict) -> Optional[str]:
    """
    Create the user on first sign-in

    Returns the new document id, or None when the email is already known
    (only lastLoginAt is refreshed then).
    """
    email = normalize_email(user_data.get("email"))
    if not email:
        raise ValidationFailed("Email is required")

    now = datetime.utcnow()
    existing = await db.users.find_one({"email": email})
    if existing:
        await db.users.update_one({"email": email}, {"$set": {"lastLoginAt": now}})
        return None

    user = {
        "email": email,
        "name": user_data.get("name"),
        "photoURL": user_data.get("photoURL"),
        "plan": Plan.FREE.value,
        "premiumSince": None,
        "createdAt": now,
        "updatedAt": now,
        "lastLoginAt": now,
    }
    result = await db.users.insert_one(user)
    print(f"✅ New user registered: {email}")
    return str(result.inserted_id)


async def list_users(db: AsyncIOMotorDatabase) -> List[dict]:
    cursor = db.users.find({}).sort("createdAt", -1)
    return await cursor.to_list(length=None)


async def get_user(db: AsyncIOMotorDatabase, email: str) -> dict:
    email = normalize_email(email)
    if not email:
        raise ValidationFailed("Email is required")
    user = await db.users.find_one({"email": email})
    if not user:
        raise NotFound("User not found")
    return user


async def update_user_plan(db: AsyncIOMotorDatabase, email: str, plan: str):
    """Set a user's plan; moving to premium stamps premiumSince"""
    email = normalize_email(email)
    if not email or not plan:
        raise ValidationFailed("Email and plan are required")
    try:
        plan = Plan(plan)
    except ValueError:
        raise ValidationFailed(f"Invalid plan: {plan}")

    now = datetime.utcnow()
    changes = {"plan": plan.value, "updatedAt": now}
    changes["premiumSince"] = now if plan == Plan.PREMIUM else None

    result = await db.users.update_one({"email": email}, {"$set": changes})
    if result.matched_count == 0:
        raise NotFound("User not found")
    return result


async def upgrade_to_premium(db: AsyncIOMotorDatabase, email: str) -> bool:
    """
    Upgrade to premium unless already premium, creating the user if the
    buyer never signed in through /users

    Returns True only when this call performed the upgrade
    """
    email = normalize_email(email)
    now = datetime.utcnow()
    try:
        result = await db.users.update_one(
            {"email": email, "plan": {"$ne": Plan.PREMIUM.value}},
            {
                "$set": {"plan": Plan.PREMIUM.value, "premiumSince": now, "updatedAt": now},
                "$setOnInsert": {"name": None, "photoURL": None, "createdAt": now}
            },
            upsert=True
        )
    except DuplicateKeyError:
        # Unique email: the user exists and is already premium
        return False
    return result.modified_count > 0 or result.upserted_id is not None


async def update_user_profile(db: AsyncIOMotorDatabase, email: str, updates: dict):
    email = normalize_email(email)
    if not email:
        raise ValidationFailed("Email is required")

    changes = {k: v for k, v in updates.items() if k in ("name", "photoURL") and v is not None}
    if not changes:
        raise ValidationFailed("No fields to update")
    changes["updatedAt"] = datetime.utcnow()

    result = await db.users.update_one({"email": email}, {"$set": changes})
    if result.matched_count == 0:
        raise NotFound("User not found")
    return result
