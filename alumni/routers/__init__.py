from .auth import router as auth_router
from .categories import router as categories_router
from .communities import router as communities_router
from .community_comments import router as community_comments_router
from .community_memberships import router as community_memberships_router
from .community_posts import router as community_posts_router
from .likes import router as likes_router
from .reports import router as reports_router

routes = [
    auth_router,
    categories_router,
    communities_router,
    community_memberships_router,
    community_posts_router,
    community_comments_router,
    likes_router,
    reports_router,
]
