"""Repository layer for database operations."""

from app.repositories.post import PostRepository, to_response

__all__ = ["PostRepository", "to_response"]
