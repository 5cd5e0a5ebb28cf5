from app.errors.auth import ForbiddenError, UnauthenticatedError, auth_exception_handler
from app.errors.base import BASE_EXCEPTION, BaseAppError, create_exception_handler
from app.errors.cache import (
    CacheCompressionError,
    CacheDecompressionError,
    CacheDeserializationError,
    CacheExceptionError,
    CacheKeyError,
    CacheSerializationError,
    cache_exception_handler,
)
from app.errors.database import (
    BackingStoreUnavailableError,
    DatabaseConnectionError,
    DatabaseError,
    DuplicateEntryError,
    database_exception_handler,
)
from app.errors.posts import InvalidPostError, PostNotFoundError, post_exception_handler
from app.errors.revalidate import (
    InvalidSecretError,
    RevalidationError,
    revalidate_exception_handler,
)
from app.errors.upload import (
    ImageTooLargeError,
    InvalidImageError,
    StorageError,
    UnsupportedImageTypeError,
    UploadError,
    upload_exception_handler,
)
from app.errors.validation import validation_exception_handler

__all__ = [
    "BASE_EXCEPTION",
    "BackingStoreUnavailableError",
    "BaseAppError",
    "CacheCompressionError",
    "CacheDecompressionError",
    "CacheDeserializationError",
    "CacheExceptionError",
    "CacheKeyError",
    "CacheSerializationError",
    "DatabaseConnectionError",
    "DatabaseError",
    "DuplicateEntryError",
    "ForbiddenError",
    "ImageTooLargeError",
    "InvalidImageError",
    "InvalidPostError",
    "InvalidSecretError",
    "PostNotFoundError",
    "RevalidationError",
    "StorageError",
    "UnauthenticatedError",
    "UnsupportedImageTypeError",
    "UploadError",
    "auth_exception_handler",
    "cache_exception_handler",
    "create_exception_handler",
    "database_exception_handler",
    "post_exception_handler",
    "revalidate_exception_handler",
    "upload_exception_handler",
    "validation_exception_handler",
]
