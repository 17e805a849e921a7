# stockdesk/routes/auth.py
from fastapi import APIRouter, Depends, HTTPException, status, Request

from stockdesk.schemas import user as schemas
from stockdesk.utils.api_client import BackendError, InventoryApiClient, get_api_client
from stockdesk.utils.auth import get_current_user
from stockdesk.utils.audit import write_log

router = APIRouter(tags=["Auth"])


# Authenticate against the backend and hand its tokens to the caller
@router.post("/login", response_model=schemas.Token)
async def login(payload: schemas.UserLogin, request: Request, client: InventoryApiClient = Depends(get_api_client)):
    try:
        data = await client.login(payload.email, payload.password)
    except BackendError as e:
        if e.status_code in (status.HTTP_400_BAD_REQUEST, status.HTTP_401_UNAUTHORIZED):
            write_log(user_id=None, action="LOGIN", resource="auth", status="FAIL",
                      ip=request.client.host, meta={"email": payload.email})
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
        raise

    # Log successful login event
    user_id = (data.get("user") or {}).get("id")
    write_log(user_id=user_id, action="LOGIN", resource="auth", status="SUCCESS",
              ip=request.client.host, meta={"email": payload.email})
    return data


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserProfile)
async def me(current_user: schemas.CurrentUser = Depends(get_current_user)):
    return current_user.profile
