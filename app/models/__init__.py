"""Database models for the application."""

from app.models.author import AuthorDB
from app.models.post import PostDB

__all__ = ["AuthorDB", "PostDB"]
