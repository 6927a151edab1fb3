from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from motor.motor_asyncio import AsyncIOMotorClient

from lessonhub.config import get_config
from lessonhub.auth.firebase_auth import init_firebase
from lessonhub.database_setup import create_indexes
from lessonhub.payments.gateway import RazorpayGateway
from lessonhub.lessons.lesson_router import router as lesson_router
from lessonhub.lessons.moderation_router import router as moderation_router
from lessonhub.lessons.review_router import router as review_router
from lessonhub.community.reaction_router import router as reaction_router
from lessonhub.community.community_router import router as community_router
from lessonhub.users.user_router import router as user_router
from lessonhub.payments.payment_router import router as payment_router
from lessonhub.system.health_router import router as health_router


app = FastAPI(title="Digital Life Lessons API")
app.state.config = get_config()
app.state.firebase_ready = False


app.add_middleware(
    CORSMiddleware,
    allow_origins=app.state.config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    config = app.state.config

    # MongoDB
    app.state.mongo_client = AsyncIOMotorClient(config.MONGO_URL)
    app.state.db = app.state.mongo_client[config.DB_NAME]
    await create_indexes(app.state.db)

    # External providers
    app.state.firebase_ready = init_firebase(config)
    app.state.payment_gateway = RazorpayGateway.from_config(config)

    print(f"🚀 Digital Life Lessons server ready (db: {config.DB_NAME})")


@app.on_event("shutdown")
async def shutdown_event():
    client = getattr(app.state, "mongo_client", None)
    if client is not None:
        client.close()


# ==================== ROUTER REGISTRATION ====================
app.include_router(health_router)
app.include_router(lesson_router)
app.include_router(moderation_router)
app.include_router(review_router)
app.include_router(reaction_router)
app.include_router(community_router)
app.include_router(user_router)
app.include_router(payment_router)
# ============================================================
