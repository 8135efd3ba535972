"""Admin API endpoints"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from app.database.session import get_db
from app.schemas.admin import ClearBlobsResponse, DeleteUserResponse, UsageStatsResponse
from app.services.admin_service import AdminService, get_admin_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/admin/stats", response_model=UsageStatsResponse)
def usage_stats(
    db: Session = Depends(get_db),
    admin: AdminService = Depends(get_admin_service)
):
    """Per-user usage and overall totals"""
    return UsageStatsResponse(**admin.get_usage_stats(db))


@router.delete("/admin/users/{user_id}", response_model=DeleteUserResponse)
def delete_user(
    user_id: str,
    db: Session = Depends(get_db),
    admin: AdminService = Depends(get_admin_service)
):
    """Remove a user and everything they own"""
    result = admin.delete_user(db, user_id)
    logger.info(f"Admin removed user {user_id}")
    return DeleteUserResponse(**result)


@router.post("/admin/blobs/clear", response_model=ClearBlobsResponse)
def clear_blobs(admin: AdminService = Depends(get_admin_service)):
    """Delete every stored upload; document and chunk rows are kept"""
    result = admin.clear_blobs()
    logger.warning(f"Admin cleared stored files: {result['deleted']} deleted, {result['failed']} failed")
    return ClearBlobsResponse(**result)
