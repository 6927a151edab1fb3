"""
LessonHub Configuration
Environment-driven settings for the database, Firebase and Razorpay
"""

import os
from typing import Optional, Set


class Config:
    """Validated configuration - fails fast on bad values"""

    def __init__(self):
        # MongoDB
        self.MONGO_URL = os.getenv("MONGO_URL", "mongodb://localhost:27017")
        self.DB_NAME = os.getenv("DB_NAME", "Digital_Life_Lessons")

        # Firebase (all three or nothing)
        self.FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")
        private_key = os.getenv("FIREBASE_PRIVATE_KEY")
        self.FIREBASE_PRIVATE_KEY = private_key.replace('\\n', '\n') if private_key else None
        self.FIREBASE_CLIENT_EMAIL = os.getenv("FIREBASE_CLIENT_EMAIL")
        self.ADMIN_EMAILS = self._parse_csv(os.getenv("ADMIN_EMAILS", ""), lower=True)

        # Razorpay
        self.RAZORPAY_KEY_ID = os.getenv("RAZORPAY_KEY_ID")
        self.RAZORPAY_KEY_SECRET = os.getenv("RAZORPAY_KEY_SECRET")
        self.PREMIUM_PRICE = self._parse_price(os.getenv("PREMIUM_PRICE", "1500"))
        self.PAYMENT_CURRENCY = os.getenv("PAYMENT_CURRENCY", "INR").upper()
        self.CLIENT_URL = os.getenv("CLIENT_URL", "http://localhost:5173").rstrip("/")

        self.CORS_ORIGINS = sorted(self._parse_csv(os.getenv("CORS_ORIGINS", "*"))) or ["*"]

    @property
    def firebase_configured(self) -> bool:
        return bool(self.FIREBASE_PROJECT_ID and self.FIREBASE_PRIVATE_KEY and self.FIREBASE_CLIENT_EMAIL)

    @property
    def razorpay_configured(self) -> bool:
        return bool(self.RAZORPAY_KEY_ID and self.RAZORPAY_KEY_SECRET)

    @staticmethod
    def _parse_csv(value: str, lower: bool = False) -> Set[str]:
        """Parse comma-separated values into a set"""
        items = {item.strip() for item in value.split(',') if item.strip()}
        if lower:
            items = {item.lower() for item in items}
        return items

    @staticmethod
    def _parse_price(value: str) -> int:
        """Premium price in major currency units (e.g. rupees)"""
        try:
            price = int(value)
        except ValueError:
            raise RuntimeError(f"❌ FATAL: PREMIUM_PRICE must be an integer, got {value!r}")
        if price <= 0:
            raise RuntimeError("❌ FATAL: PREMIUM_PRICE must be greater than 0")
        return price


_config: Optional[Config] = None


def get_config() -> Config:
    """Load configuration once per process"""
    global _config
    if _config is None:
        _config = Config()
    return _config
