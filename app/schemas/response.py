"""Generic response schemas"""

from pydantic import BaseModel
from datetime import datetime


class HealthResponse(BaseModel):
    """Health check response schema"""
    status: str
    timestamp: datetime
    dependencies: dict


class DeleteResponse(BaseModel):
    """Deletion acknowledgement"""
    success: bool = True
    message: str
