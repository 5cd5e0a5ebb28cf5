from pydantic import BaseModel, Field


class CoverUploadResponse(BaseModel):
    """Location of a stored cover image."""

    url: str = Field(description="Public URL to store as the post's coverImage")
    path: str = Field(description="Object path inside the bucket, e.g. covers/1718000000000-ab12cd.png")
    size: int = Field(description="Size in bytes")
    content_type: str = Field(alias="contentType")

    model_config = {"populate_by_name": True}
