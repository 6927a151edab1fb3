from typing import Optional


def normalize_email(value: Optional[str]) -> str:
    """Emails are compared case-insensitively everywhere"""
    return (value or "").strip().lower()
