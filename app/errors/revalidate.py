"""Errors raised by the revalidation endpoint."""

from logging import getLogger

from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_500_INTERNAL_SERVER_ERROR

from app.configs import file_logger
from app.configs.settings import INVALID_SECRET_MESSAGE
from app.errors.base import BaseAppError, create_exception_handler

logger = file_logger(getLogger(__name__))


class InvalidSecretError(BaseAppError):
    """Raised when the presented secret does not match the server secret."""

    def __init__(self, detail: str = INVALID_SECRET_MESSAGE) -> None:
        super().__init__(detail, HTTP_401_UNAUTHORIZED)


class RevalidationError(BaseAppError):
    """Raised when the cache could not be invalidated."""

    def __init__(self, error: str, detail: str = "Error revalidating") -> None:
        super().__init__(detail, HTTP_500_INTERNAL_SERVER_ERROR)
        self.error = error


revalidate_exception_handler = create_exception_handler(logger, message_key="message")
