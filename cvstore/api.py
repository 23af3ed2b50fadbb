"""API router: all JSON endpoints under the /api prefix."""

from fastapi import APIRouter

from .auth.routes import router as auth_router
from .cv.routes import router as cv_router

api_router = APIRouter(prefix="/api")

api_router.include_router(auth_router)
api_router.include_router(cv_router)
