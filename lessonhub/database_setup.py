from motor.motor_asyncio import AsyncIOMotorDatabase

from lessonhub.community.reactions import LOVE_REACTS, FAVORITES


async def create_indexes(db: AsyncIOMotorDatabase):
    """
    Create MongoDB indexes for data integrity and query performance
    Called during application startup
    """
    try:
        # Users (one document per email)
        await db.users.create_index("email", unique=True)

        # Payments (unique transaction id keeps verification idempotent)
        await db.payments.create_index("transactionId", unique=True)
        await db.payments.create_index("sessionId")
        await db.payments.create_index([("email", 1), ("paidAt", -1)])

        # Reactions (one record per lesson)
        await db[LOVE_REACTS].create_index("lessonId", unique=True)
        await db[FAVORITES].create_index("lessonId", unique=True)
        await db[FAVORITES].create_index("users")

        # Comments
        await db.comments.create_index([("postId", 1), ("createdAt", -1)])

        # Lessons
        await db.lessons.create_index("authorEmail")
        await db.lessons.create_index([("isPublic", 1), ("createdAt", -1)])
        await db.lessons.create_index("accessLevel")
        await db.lessons.create_index("reportCount")

        print("✅ LessonHub indexes created successfully")
    except Exception as e:
        print(f"⚠️  Index creation warning: {e}")
