from fastapi import APIRouter

from .endpoints import career_coach
from .endpoints import health

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(health.router, prefix="", tags=["health"])
api_router.include_router(career_coach.router, prefix="", tags=["career_coach"])
