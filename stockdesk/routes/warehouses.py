# stockdesk/routes/warehouses.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from stockdesk.config import settings
from stockdesk.schemas.catalog import Warehouse, WarehouseCreate, WarehouseUpdate, CatalogPage
from stockdesk.schemas.user import CurrentUser
from stockdesk.utils.api_client import InventoryApiClient, get_api_client
from stockdesk.utils.auth import get_current_user, role_required
from stockdesk.utils.audit import write_log
from stockdesk.utils.listing import entity_response, list_params, to_page

router = APIRouter(prefix="/warehouses", tags=["Warehouses"])

can_manage = role_required(*settings.MANAGE_ROLES)


@router.get("/", response_model=CatalogPage)
async def list_warehouses(
    q: Optional[str] = Query(None, description="Search by name or location"),
    is_active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(get_current_user),
):
    params = list_params(page, page_size, search=q, is_active=is_active)
    data = await client.get("/warehouses", current_user.token, params=params)
    return to_page(data, "warehouses", Warehouse, page, page_size)


@router.get("/{warehouse_id}", response_model=Warehouse)
async def get_warehouse(
    warehouse_id: str,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await client.get(f"/warehouses/{warehouse_id}", current_user.token)


@router.post("/", response_model=Warehouse, status_code=201)
async def create_warehouse(
    payload: WarehouseCreate,
    request: Request,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(can_manage),
):
    created = await client.post("/warehouses", current_user.token, json=payload.model_dump(exclude_none=True))
    write_log(user_id=current_user.profile.id, action="WAREHOUSE_CREATE", resource="warehouse", ip=request.client.host, meta={"id": (created or {}).get("id")})
    return entity_response(created, 201)


@router.put("/{warehouse_id}", response_model=Warehouse)
async def update_warehouse(
    warehouse_id: str,
    payload: WarehouseUpdate,
    request: Request,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(can_manage),
):
    updated = await client.put(f"/warehouses/{warehouse_id}", current_user.token, json=payload.model_dump(exclude_none=True))
    write_log(user_id=current_user.profile.id, action="WAREHOUSE_UPDATE", resource="warehouse", ip=request.client.host, meta={"id": warehouse_id})
    return entity_response(updated)


@router.delete("/{warehouse_id}", status_code=204)
async def delete_warehouse(
    warehouse_id: str,
    request: Request,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(can_manage),
):
    await client.delete(f"/warehouses/{warehouse_id}", current_user.token)
    write_log(user_id=current_user.profile.id, action="WAREHOUSE_DELETE", resource="warehouse", ip=request.client.host, meta={"id": warehouse_id})
    return Response(status_code=204)
