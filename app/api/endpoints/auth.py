"""User registration API endpoint"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from app.database.session import get_db
from app.schemas.auth import RegisterRequest, UserResponse
from app.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/auth/register", response_model=UserResponse)
def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db)
):
    """
    Register a user by email

    Passing an existing ``user_id`` keeps documents uploaded before
    registration linked to the account.
    """
    user, created = user_service.register_user(db, payload.email, payload.user_id)
    return UserResponse(
        id=user.id,
        email=user.email,
        created_at=user.created_at,
        created=created
    )
