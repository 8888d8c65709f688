from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from alumni.core.database import get_db
from alumni.core.dependencies import get_current_user
from alumni.core.limiter import limiter
from alumni.models.user import User
from alumni.schemas.auth import LoginRequest, TokenResponse, UserResponse
from alumni.schemas.common import ApiResponse
from alumni.services.auth import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=ApiResponse[TokenResponse])
@limiter.limit("10/minute")
def login(request: Request, credentials: LoginRequest, db: Session = Depends(get_db)):
    """Email/password login returning a Bearer access token"""
    return {
        "success": True,
        "message": "Login successful",
        "data": auth_service.login(credentials, db),
    }


@router.get("/me", response_model=ApiResponse[UserResponse])
def get_current_user_info(current_user: Annotated[User, Depends(get_current_user)]):
    """Get current user information"""
    return {"success": True, "data": current_user}
