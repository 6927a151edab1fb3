"""
Premium purchase flow

verify_payment is idempotent: a payment row is keyed by the provider's
transaction id (unique index), and the plan upgrade is an upsert that is a
no-op for users who are already premium. Every path that finds the payment
already recorded re-applies the upgrade, so a crash between the insert and
the upgrade is repaired by the next verification.
"""

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError
from datetime import datetime
from typing import List, Optional

from lessonhub.config import Config
from lessonhub.errors import Conflict, UpstreamError, ValidationFailed
from lessonhub.users.database import Plan, upgrade_to_premium
from lessonhub.utils import normalize_email


async def start_checkout(
    db: AsyncIOMotorDatabase,
    gateway,
    config: Config,
    email: str,
    lesson_id: Optional[str] = None
) -> dict:
    """Create a hosted checkout for the premium plan"""
    email = normalize_email(email)
    if not email:
        raise ValidationFailed("Email is required")

    user = await db.users.find_one({"email": email})
    if user and user.get("plan") == Plan.PREMIUM.value:
        raise Conflict("User is already premium")

    session = gateway.create_checkout_session(
        amount=config.PREMIUM_PRICE,
        currency=config.PAYMENT_CURRENCY,
        email=email,
        callback_url=f"{config.CLIENT_URL}/payment/success",
        lesson_id=lesson_id
    )
    print(f"💳 Checkout {session['id']} created for {email}")
    return session


async def _already_recorded(db: AsyncIOMotorDatabase, transaction_id: str, email: str) -> dict:
    upgraded = await upgrade_to_premium(db, email) if email else False
    if upgraded:
        print(f"⚠️  Payment {transaction_id} was recorded without an upgrade; upgraded {email} now")
    return {
        "success": True,
        "alreadyRecorded": True,
        "transactionId": transaction_id,
        "email": email,
        "upgraded": upgraded,
    }


async def verify_payment(db: AsyncIOMotorDatabase, gateway, session_id: str) -> dict:
    """
    Confirm a checkout session and grant premium

    Returns:
        {"success": bool, "alreadyRecorded": bool, ...}
    """
    if not session_id:
        raise ValidationFailed("session_id is required")

    recorded = await db.payments.find_one({"sessionId": session_id})
    if recorded:
        return await _already_recorded(db, recorded["transactionId"], recorded.get("email"))

    session = gateway.retrieve_session(session_id)
    if not session.paid:
        return {"success": False, "alreadyRecorded": False, "status": session.status}

    transaction_id = session.transaction_id or session.id
    recorded = await db.payments.find_one({"transactionId": transaction_id})
    if recorded:
        return await _already_recorded(db, transaction_id, recorded.get("email"))

    email = normalize_email(session.metadata.get("email"))
    if not email:
        raise UpstreamError("Payment session has no buyer email")

    payment = {
        "transactionId": transaction_id,
        "sessionId": session.id,
        "email": email,
        "lessonId": session.metadata.get("lessonId") or None,
        "amount": session.amount,
        "currency": session.currency,
        "status": session.status,
        "paidAt": datetime.utcnow(),
    }

    try:
        await db.payments.insert_one(payment)
    except DuplicateKeyError:
        print(f"⚠️  Payment {transaction_id} recorded concurrently")
        return await _already_recorded(db, transaction_id, email)

    upgraded = await upgrade_to_premium(db, email)
    print(f"✅ Payment {transaction_id} recorded for {email} (upgraded={upgraded})")

    return {
        "success": True,
        "alreadyRecorded": False,
        "transactionId": transaction_id,
        "email": email,
        "upgraded": upgraded,
    }


async def list_payments(db: AsyncIOMotorDatabase, email: Optional[str] = None) -> List[dict]:
    email = normalize_email(email)
    query = {"email": email} if email else {}
    cursor = db.payments.find(query).sort("paidAt", -1)
    return await cursor.to_list(length=None)
