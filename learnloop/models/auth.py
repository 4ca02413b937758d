"""
Account API Models (Pydantic)
"""

from datetime import datetime
from typing import Optional

from learnloop.models.base import StrictRequest, StrictResponse


class RegisterRequest(StrictRequest):
    username: Optional[str] = None
    password: Optional[str] = None
    email: Optional[str] = None
    display_name: Optional[str] = None


class LoginRequest(StrictRequest):
    username: Optional[str] = None
    password: Optional[str] = None


class UserResponse(StrictResponse):
    """Public profile. The password hash is never exposed."""

    id: int
    username: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    joined_at: datetime
    last_login_at: Optional[datetime] = None
