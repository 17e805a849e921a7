# stockdesk/routes/products.py
from typing import Optional, Literal

from fastapi import APIRouter, Depends, Query, Request, Response

from stockdesk.config import settings
from stockdesk.schemas.catalog import Product, ProductCreate, ProductUpdate, CatalogPage
from stockdesk.schemas.user import CurrentUser
from stockdesk.utils.api_client import InventoryApiClient, get_api_client
from stockdesk.utils.auth import get_current_user, role_required
from stockdesk.utils.audit import write_log
from stockdesk.utils.listing import entity_response, list_params, to_page

router = APIRouter(prefix="/products", tags=["Products"])

can_manage = role_required(*settings.MANAGE_ROLES)


def _norm_sku(sku: Optional[str]) -> Optional[str]:
    if sku is None:
        return None
    s = sku.strip()
    return s if s else None


@router.get("/", response_model=CatalogPage)
async def list_products(
    q: Optional[str] = Query(None, description="Search by name"),
    category_id: Optional[str] = Query(None),
    supplier_id: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
    sort_by: Literal["name", "sku", "unit_price", "created_at"] = "name",
    order: Literal["asc", "desc"] = "asc",
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(get_current_user),
):
    params = list_params(
        page, page_size,
        name=q, category_id=category_id, supplier_id=supplier_id,
        sort_by=sort_by, sort_order=order,
    )
    data = await client.get("/products", current_user.token, params=params)
    return to_page(data, "products", Product, page, page_size)


@router.get("/{product_id}", response_model=Product)
async def get_product(
    product_id: str,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await client.get(f"/products/{product_id}", current_user.token)


@router.post("/", response_model=Product, status_code=201)
async def create_product(
    payload: ProductCreate,
    request: Request,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(can_manage),
):
    body = payload.model_dump(exclude_none=True)
    body["sku"] = _norm_sku(payload.sku)
    created = await client.post("/products", current_user.token, json=body)
    write_log(user_id=current_user.profile.id, action="PRODUCT_CREATE", resource="product", ip=request.client.host, meta={"sku": body["sku"]})
    return entity_response(created, 201)


@router.put("/{product_id}", response_model=Product)
async def update_product(
    product_id: str,
    payload: ProductUpdate,
    request: Request,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(can_manage),
):
    body = payload.model_dump(exclude_none=True)
    if "sku" in body:
        body["sku"] = _norm_sku(body["sku"])
    updated = await client.put(f"/products/{product_id}", current_user.token, json=body)
    write_log(user_id=current_user.profile.id, action="PRODUCT_UPDATE", resource="product", ip=request.client.host, meta={"id": product_id})
    return entity_response(updated)


@router.delete("/{product_id}", status_code=204)
async def delete_product(
    product_id: str,
    request: Request,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(can_manage),
):
    await client.delete(f"/products/{product_id}", current_user.token)
    write_log(user_id=current_user.profile.id, action="PRODUCT_DELETE", resource="product", ip=request.client.host, meta={"id": product_id})
    return Response(status_code=204)
