# stockdesk/routes/categories.py
from typing import Optional, Literal

from fastapi import APIRouter, Depends, Query, Request, Response

from stockdesk.config import settings
from stockdesk.schemas.catalog import Category, CategoryCreate, CategoryUpdate, CatalogPage
from stockdesk.schemas.user import CurrentUser
from stockdesk.utils.api_client import InventoryApiClient, get_api_client
from stockdesk.utils.auth import get_current_user, role_required
from stockdesk.utils.audit import write_log
from stockdesk.utils.listing import entity_response, list_params, to_page

router = APIRouter(prefix="/categories", tags=["Categories"])

can_manage = role_required(*settings.MANAGE_ROLES)


@router.get("/", response_model=CatalogPage)
async def list_categories(
    q: Optional[str] = Query(None, description="Search by name"),
    is_active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
    sort_by: Literal["name", "created_at"] = "name",
    order: Literal["asc", "desc"] = "asc",
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(get_current_user),
):
    params = list_params(page, page_size, name=q, is_active=is_active, sort_by=sort_by, sort_order=order)
    data = await client.get("/categories", current_user.token, params=params)
    return to_page(data, "categories", Category, page, page_size)


@router.get("/{category_id}", response_model=Category)
async def get_category(
    category_id: str,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await client.get(f"/categories/{category_id}", current_user.token)


@router.post("/", response_model=Category, status_code=201)
async def create_category(
    payload: CategoryCreate,
    request: Request,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(can_manage),
):
    created = await client.post("/categories", current_user.token, json=payload.model_dump())
    write_log(user_id=current_user.profile.id, action="CATEGORY_CREATE", resource="category", ip=request.client.host, meta={"id": (created or {}).get("id")})
    return entity_response(created, 201)


@router.put("/{category_id}", response_model=Category)
async def update_category(
    category_id: str,
    payload: CategoryUpdate,
    request: Request,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(can_manage),
):
    updated = await client.put(f"/categories/{category_id}", current_user.token, json=payload.model_dump(exclude_none=True))
    write_log(user_id=current_user.profile.id, action="CATEGORY_UPDATE", resource="category", ip=request.client.host, meta={"id": category_id})
    return entity_response(updated)


@router.delete("/{category_id}", status_code=204)
async def delete_category(
    category_id: str,
    request: Request,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(can_manage),
):
    await client.delete(f"/categories/{category_id}", current_user.token)
    write_log(user_id=current_user.profile.id, action="CATEGORY_DELETE", resource="category", ip=request.client.host, meta={"id": category_id})
    return Response(status_code=204)
