import pydantic
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

# Import the 'settings' instance from our config module
from config.settings import settings
from app.core.exceptions import InvalidCredentialsError
from app.models.credentials import Credentials, anonymous

# A missing Authorization header is not an error: the caller is anonymous
# and holds no scopes.
bearer_scheme = HTTPBearer(auto_error=False)


# --- JSON Web Token (JWT) Management ---

def create_access_token(
    client_id: str,
    scopes: List[str],
    expires_delta: timedelta | None = None,
) -> str:
    """
    Creates a new, signed JWT carrying a client id and its scopes.
    """
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        # Use the default expiration time from our settings
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {"sub": client_id, "scopes": list(scopes), "exp": expire}

    encoded_jwt = jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )
    return encoded_jwt

def decode_credentials(token: str) -> Credentials:
    """
    Decodes a JWT, validates its signature and expiration, and returns
    the credentials it carries.

    Raises:
        InvalidCredentialsError for anything that isn't a valid token.
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except JWTError as e:
        # This catches any error from 'jwt.decode' (e.g., expired, invalid signature)
        raise InvalidCredentialsError(f"Could not validate credentials: {e}") from e

    client_id: str | None = payload.get("sub")
    if client_id is None:
        raise InvalidCredentialsError("Token has no subject")

    try:
        return Credentials(client_id=client_id, scopes=payload.get("scopes", []))
    except pydantic.ValidationError as e:
        raise InvalidCredentialsError("Token scopes must be a list of strings") from e


# --- FastAPI Dependency ---

async def get_credentials(
    bearer: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Credentials:
    """
    A FastAPI dependency that resolves the caller's credentials.
    No token means anonymous; a bad token is rejected with 401.
    """
    if bearer is None:
        return anonymous()

    try:
        return decode_credentials(bearer.credentials)
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
