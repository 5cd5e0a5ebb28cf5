"""Author database model using SQLModel."""

from typing import cast
from uuid import UUID

from sqlalchemy.orm import declared_attr
from sqlmodel import Column, Field, SQLModel, String


class AuthorDB(SQLModel, table=True):
    """Authors are provisioned by the identity provider and only read here."""

    __tablename__ = cast("declared_attr[str]", "authors")

    id: UUID = Field(primary_key=True, nullable=False, description="Author ID")
    name: str = Field(
        sa_column=Column(String(100), nullable=False),
        description="Display name",
    )
    picture: str | None = Field(
        default=None,
        sa_column=Column(String(1024)),
        description="Avatar URL",
    )
