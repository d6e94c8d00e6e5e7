from fastapi import APIRouter, Depends

from app.core.security import get_credentials
from app.models.credentials import Credentials

router = APIRouter()


@router.get("/current-scopes", response_model=Credentials)
async def read_current_scopes(
    credentials: Credentials = Depends(get_credentials)
):
    """
    Echoes the client id and scopes the caller's token carries.
    Anonymous callers get no scopes.
    """
    return credentials
