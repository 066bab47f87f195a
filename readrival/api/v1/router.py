from fastapi import APIRouter

from readrival.api.v1.endpoints import (
    books,
    challenges,
    feed,
    leaderboards,
    library,
    profile,
    recommendations,
    subscriptions,
)

api_router = APIRouter()

api_router.include_router(profile.router, prefix="/profile", tags=["profile"])
api_router.include_router(books.router, prefix="/books", tags=["books"])
api_router.include_router(library.router, prefix="/library", tags=["library"])
api_router.include_router(challenges.router, prefix="/challenges", tags=["challenges"])
api_router.include_router(
    leaderboards.router, prefix="/leaderboards", tags=["leaderboards"]
)
api_router.include_router(feed.router, prefix="/feed", tags=["feed"])
api_router.include_router(
    recommendations.router, prefix="/recommendations", tags=["recommendations"]
)
api_router.include_router(
    subscriptions.router, prefix="/subscriptions", tags=["subscriptions"]
)
