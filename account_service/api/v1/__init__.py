"""API v1 routing configuration.

This module defines all v1 API routes.
"""

from fastapi import APIRouter

from account_service.api.v1 import auth, users

router = APIRouter()

# Domain routers
router.include_router(auth.router, prefix="/auth", tags=["Auth"])
router.include_router(users.router, prefix="/users", tags=["Users"])
