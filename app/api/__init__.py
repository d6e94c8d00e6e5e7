from fastapi import APIRouter
from app.api.v1 import api_router_v1

# This is the main API router for the entire application.
api_router = APIRouter()

# Include the v1 router.
# Task routes end up at /api/v1/task/{taskId}
api_router.include_router(api_router_v1, prefix="/v1")
