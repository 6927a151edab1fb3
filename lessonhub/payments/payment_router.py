"""
Razorpay premium checkout

POST /create-checkout-session -> hosted payment link
GET  /verify-payment          -> records payment, upgrades plan (idempotent)
GET  /Payments                -> payment history
"""

from fastapi import APIRouter, HTTPException, Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel
from typing import Optional

from lessonhub.auth.firebase_auth import get_current_user, is_admin
from lessonhub.config import Config
from lessonhub.dependencies import get_db, get_payment_gateway, get_settings
from lessonhub.errors import LessonHubError, to_http
from lessonhub.mongo import serialize_many
from lessonhub.payments.service import start_checkout, verify_payment, list_payments
from lessonhub.utils import normalize_email

router = APIRouter(tags=["Payment"])


class CheckoutRequest(BaseModel):
    email: Optional[str] = None
    lessonId: Optional[str] = None


@router.post("/create-checkout-session")
async def create_checkout_session(
    data: CheckoutRequest,
    db: AsyncIOMotorDatabase = Depends(get_db),
    gateway=Depends(get_payment_gateway),
    config: Config = Depends(get_settings),
    user: dict = Depends(get_current_user)
):
    try:
        return await start_checkout(db, gateway, config, data.email, data.lessonId)
    except LessonHubError as e:
        raise to_http(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/verify-payment")
async def verify_payment_endpoint(
    session_id: Optional[str] = None,
    db: AsyncIOMotorDatabase = Depends(get_db),
    gateway=Depends(get_payment_gateway)
):
    try:
        return await verify_payment(db, gateway, session_id)
    except LessonHubError as e:
        raise to_http(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/Payments")
async def payment_history(
    request: Request,
    email: Optional[str] = None,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: dict = Depends(get_current_user)
):
    """Admins may list everyone's payments; users only their own"""
    if not is_admin(request, user):
        own = normalize_email(user.get("email"))
        if not own or (email and normalize_email(email) != own):
            raise HTTPException(status_code=403, detail="Access denied")
        email = own
    payments = await list_payments(db, email)
    return serialize_many(payments)
