from pydantic import BaseModel, Field, validator
from typing import Any, Optional
from enum import Enum

# ==================== ENUMS ====================

class AccessLevel(str, Enum):
    FREE = "free"
    PREMIUM = "premium"

# ==================== LESSON MODELS ====================

class LessonCreate(BaseModel):
    title: str
    description: str
    authorEmail: str
    authorName: Optional[str] = None
    authorPhoto: Optional[str] = None
    category: Optional[str] = None
    emotionalTone: Optional[str] = None
    image: Optional[str] = None
    accessLevel: AccessLevel = AccessLevel.FREE
    isPublic: bool = True

    @validator('title', 'description', 'authorEmail')
    def not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError('must not be empty')
        return v.strip()

    @validator('authorEmail')
    def lowercase_email(cls, v):
        return v.lower()


class LessonUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    emotionalTone: Optional[str] = None
    image: Optional[str] = None
    accessLevel: Optional[AccessLevel] = None
    isPublic: Optional[bool] = None

# ==================== MODERATION MODELS ====================

class ReportCreate(BaseModel):
    reason: Optional[str] = None
    reporterEmail: Optional[str] = None


class ReportRemove(BaseModel):
    reporterEmail: Optional[str] = None

# ==================== REVIEW MODELS ====================

class ReviewCreate(BaseModel):
    # Loosely typed so missing or non-numeric fields reach the storage layer and come back as 400
    rating: Optional[Any] = None
    comment: Optional[str] = None
    reviewerEmail: Optional[str] = None
    reviewerName: Optional[str] = None
    reviewerPhoto: Optional[str] = None


class ReviewSummary(BaseModel):
    averageRating: float = Field(0.0, ge=0)
    reviewCount: int = Field(0, ge=0)
