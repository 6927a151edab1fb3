"""
Firebase Authentication
Verifies Firebase ID tokens sent as bearer tokens and enforces the admin allowlist
"""

from typing import Optional

from fastapi import HTTPException, Header, Request, Depends
from firebase_admin import credentials, auth
import firebase_admin

from lessonhub.config import Config
from lessonhub.utils import normalize_email


def init_firebase(config: Config) -> bool:
    """
    Initialize Firebase Admin SDK at app startup

    Returns:
        bool: True when the SDK is ready to verify tokens

    Raises:
        RuntimeError: If credentials are present but Firebase init fails
    """
    if not config.firebase_configured:
        print("⚠️  Firebase credentials not set - protected routes will be unavailable")
        return False

    try:
        if not firebase_admin._apps:
            cred = credentials.Certificate({
                "type": "service_account",
                "project_id": config.FIREBASE_PROJECT_ID,
                "private_key": config.FIREBASE_PRIVATE_KEY,
                "client_email": config.FIREBASE_CLIENT_EMAIL,
                "token_uri": "https://oauth2.googleapis.com/token",
            })
            firebase_admin.initialize_app(cred)

        print("✅ Firebase Admin SDK initialized")
        print(f"✅ Admin allowlist: {len(config.ADMIN_EMAILS)} email(s)")
        return True

    except Exception as e:
        raise RuntimeError(f"❌ FATAL: Firebase initialization failed: {e}")


def verify_firebase_token(firebase_token: str, config: Config) -> dict:
    """
    Verify Firebase ID token with claim validation

    Args:
        firebase_token: Firebase ID token from frontend
        config: Loaded configuration (used for audience/issuer checks)

    Returns:
        dict: Decoded token claims

    Raises:
        HTTPException: If token invalid
    """
    try:
        decoded_token = auth.verify_id_token(firebase_token)
    except (auth.InvalidIdTokenError, auth.ExpiredIdTokenError, auth.RevokedIdTokenError):
        raise HTTPException(status_code=401, detail="Unauthorized access")
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Token verification failed: {e}")

    _validate_token_claims(decoded_token, config)
    return decoded_token


def _validate_token_claims(decoded_token: dict, config: Config) -> None:
    aud = decoded_token.get('aud')
    if aud != config.FIREBASE_PROJECT_ID:
        raise HTTPException(status_code=401, detail="Unauthorized access")

    expected_issuer = f"https://securetoken.google.com/{config.FIREBASE_PROJECT_ID}"
    if decoded_token.get('iss') != expected_issuer:
        raise HTTPException(status_code=401, detail="Unauthorized access")


async def get_current_user(request: Request, authorization: str = Header(None)) -> dict:
    """
    FastAPI dependency for routes that need a signed-in user

    Usage:
        @router.post("/comments")
        async def add_comment(user: dict = Depends(get_current_user)):
            ...
    """
    if not getattr(request.app.state, "firebase_ready", False):
        raise HTTPException(status_code=500, detail="Authentication system not initialized")

    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Unauthorized access. Token Not Found")

    token = authorization[len("Bearer "):].strip()
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized access. Token Not Found")
    return verify_firebase_token(token, request.app.state.config)


def is_admin(request: Request, user: dict) -> bool:
    email = normalize_email(user.get("email"))
    return bool(email) and email in request.app.state.config.ADMIN_EMAILS


def ensure_self_or_admin(request: Request, user: dict, email: Optional[str]) -> None:
    """
    Reject acting on another user's data

    Raises:
        HTTPException: 403 unless email belongs to the caller or the caller is an admin
    """
    own = normalize_email(user.get("email"))
    if own and normalize_email(email) == own:
        return
    if not is_admin(request, user):
        raise HTTPException(status_code=403, detail="Access denied")


async def get_current_admin(request: Request, user: dict = Depends(get_current_user)) -> dict:
    """FastAPI dependency protecting moderation and admin routes"""
    if not is_admin(request, user):
        raise HTTPException(status_code=403, detail="Access denied")
    return user
