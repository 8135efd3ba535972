"""User registration schemas"""

from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime


class RegisterRequest(BaseModel):
    """Register request schema"""
    email: str
    user_id: Optional[str] = None


class UserResponse(BaseModel):
    """User response schema"""
    id: str
    email: str
    created_at: datetime
    created: bool = False

    model_config = ConfigDict(from_attributes=True)
