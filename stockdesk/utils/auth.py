# stockdesk/utils/auth.py
import time

from jose import jwt, JWTError
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from stockdesk.config import settings
from stockdesk.schemas.user import CurrentUser, UserProfile
from stockdesk.utils.api_client import BackendError, InventoryApiClient, get_api_client

# Authorization scheme; a missing header is reported as 401, not 403
bearer_scheme = HTTPBearer(auto_error=False)


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


# Check token claims locally before asking the backend
def read_token_claims(token: str) -> dict:
    try:
        if settings.JWT_SECRET:
            claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        else:
            claims = jwt.get_unverified_claims(token)
    except JWTError:
        raise _credentials_exception()

    exp = claims.get("exp")
    if exp is not None and float(exp) < time.time():
        raise _credentials_exception()
    return claims


# Resolve the user behind the bearer token; gates every screen
async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    client: InventoryApiClient = Depends(get_api_client),
) -> CurrentUser:
    if credentials is None or not credentials.credentials:
        raise _credentials_exception()
    token = credentials.credentials
    read_token_claims(token)

    try:
        profile = await client.profile(token)
    except BackendError as e:
        if e.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
            raise _credentials_exception()
        raise

    user = UserProfile.model_validate(profile)
    if not user.is_active:
        raise _credentials_exception()
    return CurrentUser(profile=user, token=token)


# Dependency factory for Role-Based Access Control
def role_required(*allowed_roles):
    allowed = {r.lower() for r in allowed_roles}

    def _checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if allowed and (current_user.profile.role or "").lower() not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Forbidden"
            )
        return current_user
    return _checker
