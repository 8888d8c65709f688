# alumni/services/auth.py
import logging
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from alumni.core.hasher import PasswordHelper
from alumni.core.security import jwt_manager
from alumni.models.user import User
from alumni.schemas.auth import LoginRequest

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self):
        self.password_helper = PasswordHelper()

    def login(self, request: LoginRequest, db: Session) -> dict:
        """
        Email/password login. Returns an access token and the user profile.
        """
        user = db.query(User).filter(User.email == request.email.lower()).first()

        if not user or not self.password_helper.check_password(
            request.password, user.hashed_password
        ):
            logger.info(f"Failed login for {request.email.lower()}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password",
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Account not found or deactivated",
            )

        login_time = datetime.now(timezone.utc)
        access_token = jwt_manager.create_access_token(user=user, login_time=login_time)

        if self.password_helper.needs_rehash(user.hashed_password):
            user.hashed_password = self.password_helper.hash_password(request.password)
            logger.info(f"Password hash of user {user.id} upgraded")

        user.last_login = login_time
        db.commit()
        db.refresh(user)

        logger.info(f"User {user.id} logged in")
        return {"access_token": access_token, "token_type": "bearer", "user": user}


auth_service = AuthService()
