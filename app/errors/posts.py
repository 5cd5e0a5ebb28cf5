"""Post-specific errors."""

from logging import getLogger

from starlette.status import HTTP_400_BAD_REQUEST, HTTP_404_NOT_FOUND

from app.configs import file_logger
from app.errors.base import BaseAppError, create_exception_handler

logger = file_logger(getLogger(__name__))


class PostNotFoundError(BaseAppError):
    """Raised when the target post does not exist."""

    def __init__(self, detail: str = "Post not found") -> None:
        super().__init__(detail, HTTP_404_NOT_FOUND)


class InvalidPostError(BaseAppError):
    """Raised when post input cannot be turned into a valid row."""

    def __init__(self, detail: str = "Invalid post") -> None:
        super().__init__(detail, HTTP_400_BAD_REQUEST)


post_exception_handler = create_exception_handler(logger, message_key="error")
