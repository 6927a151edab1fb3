from fastapi import APIRouter, Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel
from typing import Optional

from lessonhub.auth.firebase_auth import get_current_user, get_current_admin, ensure_self_or_admin
from lessonhub.dependencies import get_db
from lessonhub.errors import LessonHubError, to_http
from lessonhub.mongo import serialize_mongo, serialize_many, update_result
from lessonhub.users.database import (
    upsert_user, list_users, get_user, update_user_plan, update_user_profile
)

router = APIRouter(tags=["Users"])


class UserCreate(BaseModel):
    email: Optional[str] = None
    name: Optional[str] = None
    photoURL: Optional[str] = None


class PlanUpdate(BaseModel):
    email: Optional[str] = None
    plan: Optional[str] = None


class ProfileUpdate(BaseModel):
    email: Optional[str] = None
    name: Optional[str] = None
    photoURL: Optional[str] = None


@router.post("/users")
async def create_user_endpoint(user: UserCreate, db: AsyncIOMotorDatabase = Depends(get_db)):
    try:
        inserted_id = await upsert_user(db, user.dict())
    except LessonHubError as e:
        raise to_http(e)

    if inserted_id is None:
        return {"message": "User already exists", "insertedId": None}
    return {"acknowledged": True, "insertedId": inserted_id}


@router.get("/users")
async def list_users_endpoint(
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin: dict = Depends(get_current_admin)
):
    users = await list_users(db)
    return serialize_many(users)


@router.get("/user")
async def get_user_endpoint(email: Optional[str] = None, db: AsyncIOMotorDatabase = Depends(get_db)):
    try:
        user = await get_user(db, email)
    except LessonHubError as e:
        raise to_http(e)
    return serialize_mongo(user)


@router.put("/updateUserPlan")
async def update_plan_endpoint(
    payload: PlanUpdate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin: dict = Depends(get_current_admin)
):
    try:
        result = await update_user_plan(db, payload.email, payload.plan)
    except LessonHubError as e:
        raise to_http(e)
    return update_result(result)


@router.put("/updateUserProfile")
async def update_profile_endpoint(
    payload: ProfileUpdate,
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: dict = Depends(get_current_user)
):
    ensure_self_or_admin(request, user, payload.email)
    try:
        result = await update_user_profile(db, payload.email, payload.dict(exclude={"email"}))
    except LessonHubError as e:
        raise to_http(e)
    return update_result(result)
