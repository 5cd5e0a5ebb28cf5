from uuid import UUID

from pydantic import BaseModel


class TokenData(BaseModel):
    """Verified claims of an access token."""

    author_id: UUID
    jti: str
    token_type: str = "access"
