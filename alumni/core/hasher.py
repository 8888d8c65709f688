import logging
from typing import Optional

import bcrypt

from alumni.core.config import settings

logger = logging.getLogger(__name__)


class PasswordHelper:
    """bcrypt hashing; the cost factor comes from ``settings.password_hash_rounds``."""

    @staticmethod
    def hash_password(password: str) -> str:
        salt = bcrypt.gensalt(rounds=settings.password_hash_rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    @staticmethod
    def check_password(password: str, hashed_password: Optional[str]) -> bool:
        """Accounts created without a password never match."""
        if not hashed_password:
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password hash is not a valid bcrypt hash")
            return False

    @staticmethod
    def needs_rehash(hashed_password: str) -> bool:
        # $2b$<rounds>$<salt+hash>
        parts = hashed_password.split("$")
        return len(parts) < 4 or parts[2] != f"{settings.password_hash_rounds:02d}"
