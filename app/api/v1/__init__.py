from fastapi import APIRouter
from app.api.v1.endpoints import auth, tasks

# Create the main router for API version 1
api_router_v1 = APIRouter()

# Include the credentials router
api_router_v1.include_router(
    auth.router,
    prefix="/auth",
    tags=["Authentication"]
)

# Include the task definition router
api_router_v1.include_router(
    tasks.router,
    prefix="/task",
    tags=["Tasks"]
)
