from app.routes.posts import router as posts_router
from app.routes.revalidate import router as revalidate_router
from app.routes.uploads import router as uploads_router

__all__ = ["posts_router", "revalidate_router", "uploads_router"]
