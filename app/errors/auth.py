"""Authentication and authorization errors."""

from logging import getLogger

from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN

from app.configs import file_logger
from app.errors.base import BaseAppError, create_exception_handler

logger = file_logger(getLogger(__name__))


class UnauthenticatedError(BaseAppError):
    """Raised when no valid caller identity is present."""

    def __init__(self, detail: str = "Unauthorized") -> None:
        super().__init__(detail, HTTP_401_UNAUTHORIZED)


class ForbiddenError(BaseAppError):
    """Raised when the caller is authenticated but does not own the resource."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(detail, HTTP_403_FORBIDDEN)


auth_exception_handler = create_exception_handler(logger, message_key="error")
