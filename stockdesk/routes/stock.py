# stockdesk/routes/stock.py
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from stockdesk.config import settings
from stockdesk.schemas import stock as stock_schemas
from stockdesk.schemas.catalog import CatalogPage
from stockdesk.schemas.user import CurrentUser
from stockdesk.utils.api_client import BackendError, InventoryApiClient, get_api_client
from stockdesk.utils.auth import get_current_user, role_required
from stockdesk.utils.audit import write_log
from stockdesk.utils.grouping import clamp_page, filter_movements_by_search_term, paginate
from stockdesk.utils.listing import entity_response, list_params, to_page

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stock", tags=["Stock"])

can_manage = role_required(*settings.MANAGE_ROLES)


async def load_movements(client: InventoryApiClient, query: stock_schemas.MovementQuery, token: str):
    """Fetch one page of movements; on failure log and show an empty list.

    Rejected credentials still propagate so the caller is sent to login.
    """
    try:
        records, _ = await client.list_movements(query, token)
    except BackendError as e:
        if e.status_code in (401, 403):
            raise
        logger.error(f"Loading stock movements failed ({e.status_code}): {e.detail}")
        return []
    return records


def page_response(rows, page: int, page_size: int) -> dict:
    # Out-of-range pages show the nearest existing page
    _, total_pages = paginate(rows, page, page_size)
    page = clamp_page(page, total_pages)
    items, _ = paginate(rows, page, page_size)
    return {"items": items, "total": len(rows), "page": page, "page_size": page_size, "total_pages": total_pages}


# Stock history: every movement, newest first as the backend returns them
@router.get("/movements", response_model=stock_schemas.StockMovementPage)
async def list_movements(
    q: Optional[str] = Query(None, description="Product, SKU, warehouse or reason"),
    movement_type: Optional[stock_schemas.MovementType] = Query(None),
    product_id: Optional[str] = Query(None),
    warehouse_id: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(get_current_user),
):
    query = stock_schemas.MovementQuery(
        movement_type=movement_type,
        product_id=product_id,
        warehouse_id=warehouse_id,
        date_from=date_from,
        date_to=date_to,
        limit=settings.MOVEMENTS_FETCH_LIMIT,
    )
    records = await load_movements(client, query, current_user.token)
    return page_response(filter_movements_by_search_term(records, q), page, page_size)


@router.post("/movements", response_model=stock_schemas.StockMovementRecord, status_code=201)
async def create_movement(
    payload: stock_schemas.StockMovementCreate,
    request: Request,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(can_manage),
):
    created = await client.post("/stock-movements", current_user.token, json=payload.model_dump(mode="json", exclude_none=True))
    write_log(user_id=current_user.profile.id, action="STOCK_MOVEMENT", resource="stock", ip=request.client.host,
              meta={"id": (created or {}).get("id"), "type": payload.movement_type, "qty": payload.quantity})
    return entity_response(created, 201)


# Current stock on hand per product and warehouse
@router.get("/levels", response_model=CatalogPage)
async def list_stock_levels(
    q: Optional[str] = Query(None, description="Search by product name"),
    sku: Optional[str] = Query(None),
    product_id: Optional[str] = Query(None),
    warehouse_id: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(get_current_user),
):
    params = list_params(
        page, page_size,
        product_name=q, product_sku=sku, product_id=product_id, warehouse_id=warehouse_id,
    )
    data = await client.get("/stock-levels", current_user.token, params=params)
    return to_page(data, "stock_levels", stock_schemas.StockLevel, page, page_size)
