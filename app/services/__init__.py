from app.services.media import MediaService
from app.services.posts import PostService
from app.services.revalidation import Revalidator, tags_for_selector

__all__ = ["MediaService", "PostService", "Revalidator", "tags_for_selector"]
