"""Admin schemas"""

from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class UserUsage(BaseModel):
    """Usage of a single user"""
    user_id: str
    email: Optional[str] = None
    document_count: int
    message_count: int
    total_chats: int
    average_chats_per_day: float
    last_activity: Optional[datetime] = None


class UsageTotals(BaseModel):
    """Totals across all users"""
    total_users: int
    signed_in_users: int
    anonymous_users: int
    active_users: int
    total_documents: int
    total_chats: int
    average_chats_per_day: float


class UsageStatsResponse(BaseModel):
    """Admin usage statistics"""
    users: List[UserUsage]
    totals: UsageTotals


class DeleteUserResponse(BaseModel):
    """Result of removing a user"""
    success: bool = True
    user_id: str
    deleted_documents: int
    deleted_files: int
    failed_files: int


class ClearBlobsResponse(BaseModel):
    """Result of clearing all stored files"""
    success: bool = True
    deleted: int
    failed: int
    total: int
