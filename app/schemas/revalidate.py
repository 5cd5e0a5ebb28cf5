from pydantic import BaseModel, Field


class RevalidateResponse(BaseModel):
    """Successful revalidation."""

    revalidated: bool = True
    message: str = "Revalidation successful"
    timestamp: str = Field(description="UTC ISO-8601 time of the invalidation")
    tags: list[str] = Field(default_factory=list, description="Cache tags invalidated")


class RevalidateUsage(BaseModel):
    model_config = {"populate_by_name": True}

    revalidate_path: str = Field(alias="revalidatePath")
    revalidate_post: str = Field(alias="revalidatePost")
    revalidate_home: str = Field(alias="revalidateHome")


class RevalidateInfoResponse(BaseModel):
    """Usage help returned by ``GET /api/revalidate``."""

    message: str = "Revalidate API is working"
    usage: RevalidateUsage
