import logging
from functools import wraps

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


class DBException(Exception):
    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def db_exception(func):
    """
    Translate persistence failures raised by a service method.

    Unique-constraint races surface as a 400 conflict instead of a 500.
    The service session (``self.db``) is rolled back first.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except IntegrityError as e:
            _rollback(args)
            logger.warning(f"Integrity error in {func.__qualname__}: {e.orig}")
            raise DBException("Duplicate entry: already exists", 400)
        except SQLAlchemyError as e:
            _rollback(args)
            logger.error(f"Database error in {func.__qualname__}: {e}")
            raise DBException("Database error occurred", 500)

    return wrapper


def _rollback(args):
    db = getattr(args[0], "db", None) if args else None
    if db is not None:
        db.rollback()
