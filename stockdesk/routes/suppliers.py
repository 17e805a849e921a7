# stockdesk/routes/suppliers.py
from typing import Optional, Literal

from fastapi import APIRouter, Depends, Query, Request, Response

from stockdesk.config import settings
from stockdesk.schemas.catalog import Supplier, SupplierCreate, SupplierUpdate, CatalogPage
from stockdesk.schemas.user import CurrentUser
from stockdesk.utils.api_client import InventoryApiClient, get_api_client
from stockdesk.utils.auth import get_current_user, role_required
from stockdesk.utils.audit import write_log
from stockdesk.utils.listing import entity_response, list_params, to_page

router = APIRouter(prefix="/suppliers", tags=["Suppliers"])

can_manage = role_required(*settings.MANAGE_ROLES)


@router.get("/", response_model=CatalogPage)
async def list_suppliers(
    q: Optional[str] = Query(None, description="Search by name"),
    city: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
    sort_by: Literal["name", "city", "created_at"] = "name",
    order: Literal["asc", "desc"] = "asc",
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(get_current_user),
):
    params = list_params(page, page_size, name=q, city=city, is_active=is_active, sort_by=sort_by, sort_order=order)
    data = await client.get("/suppliers", current_user.token, params=params)
    return to_page(data, "suppliers", Supplier, page, page_size)


@router.get("/{supplier_id}", response_model=Supplier)
async def get_supplier(
    supplier_id: str,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await client.get(f"/suppliers/{supplier_id}", current_user.token)


# Products offered by a supplier (used by the purchase form)
@router.get("/{supplier_id}/products")
async def list_supplier_products(
    supplier_id: str,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(get_current_user),
):
    data = await client.get(f"/products/supplier/{supplier_id}", current_user.token) or {}
    return {"items": data.get("products") or []}


@router.post("/", response_model=Supplier, status_code=201)
async def create_supplier(
    payload: SupplierCreate,
    request: Request,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(can_manage),
):
    created = await client.post("/suppliers", current_user.token, json=payload.model_dump())
    write_log(user_id=current_user.profile.id, action="SUPPLIER_CREATE", resource="supplier", ip=request.client.host, meta={"id": (created or {}).get("id")})
    return entity_response(created, 201)


@router.put("/{supplier_id}", response_model=Supplier)
async def update_supplier(
    supplier_id: str,
    payload: SupplierUpdate,
    request: Request,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(can_manage),
):
    updated = await client.put(f"/suppliers/{supplier_id}", current_user.token, json=payload.model_dump(exclude_none=True))
    write_log(user_id=current_user.profile.id, action="SUPPLIER_UPDATE", resource="supplier", ip=request.client.host, meta={"id": supplier_id})
    return entity_response(updated)


@router.delete("/{supplier_id}", status_code=204)
async def delete_supplier(
    supplier_id: str,
    request: Request,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(can_manage),
):
    await client.delete(f"/suppliers/{supplier_id}", current_user.token)
    write_log(user_id=current_user.profile.id, action="SUPPLIER_DELETE", resource="supplier", ip=request.client.host, meta={"id": supplier_id})
    return Response(status_code=204)
