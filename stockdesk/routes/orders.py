# stockdesk/routes/orders.py
"""Screens listing stock documents built from grouped movements.

Stock-in orders, purchase orders, transfers and adjustments are all read
from the same movement listing and grouped by reference id; they differ in
which rows they keep and in how line quantities are totalled.
"""
import logging
import uuid
from typing import Callable, List, NamedTuple, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from stockdesk.config import settings
from stockdesk.routes.stock import load_movements, page_response
from stockdesk.schemas import stock as stock_schemas
from stockdesk.schemas.stock import GroupedOrder, MovementQuery, QuantityConvention, StockMovementRecord
from stockdesk.schemas.user import CurrentUser
from stockdesk.utils.api_client import BackendError, InventoryApiClient, get_api_client
from stockdesk.utils.auth import get_current_user, role_required
from stockdesk.utils.audit import write_log
from stockdesk.utils.grouping import filter_by_period, filter_by_search_term, filter_by_supplier, group_movements

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stock", tags=["Stock documents"])

can_manage = role_required(*settings.MANAGE_ROLES)


class DocumentView(NamedTuple):
    query: MovementQuery
    predicate: Optional[Callable[[StockMovementRecord], bool]]
    convention: QuantityConvention


VIEWS = {
    "in-orders": DocumentView(
        MovementQuery(limit=settings.MOVEMENTS_FETCH_LIMIT),
        lambda m: m.movement_type == "in",
        QuantityConvention.SIGNED,
    ),
    "purchase-orders": DocumentView(
        MovementQuery(movement_type="in", limit=settings.MOVEMENTS_FETCH_LIMIT),
        None,
        QuantityConvention.SIGNED,
    ),
    "transfers": DocumentView(
        MovementQuery(limit=settings.MOVEMENTS_FETCH_LIMIT),
        lambda m: m.reference_type == "transfer",
        QuantityConvention.SIGNED,
    ),
    # Adjustments mix additions and removals; their total is the volume moved
    "adjustments": DocumentView(
        MovementQuery(limit=settings.MOVEMENTS_FETCH_LIMIT),
        lambda m: m.reference_type == "adjustment",
        QuantityConvention.MAGNITUDE,
    ),
}


async def load_documents(kind: str, client: InventoryApiClient, token: str) -> List[GroupedOrder]:
    view = VIEWS[kind]
    records = await load_movements(client, view.query, token)
    return group_movements(records, view.predicate, view.convention)


async def _get_document(kind: str, reference_id: str, client: InventoryApiClient, token: str) -> GroupedOrder:
    for doc in await load_documents(kind, client, token):
        if doc.reference_id == reference_id:
            return doc
    raise HTTPException(status_code=404, detail="Document not found")


# ==========================================
#  LISTS
# ==========================================
@router.get("/in-orders", response_model=stock_schemas.GroupedOrderPage)
async def list_stock_in_orders(
    q: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(get_current_user),
):
    docs = await load_documents("in-orders", client, current_user.token)
    return page_response(filter_by_search_term(docs, q), page, page_size)


@router.get("/purchase-orders", response_model=stock_schemas.GroupedOrderPage)
async def list_purchase_orders(
    q: Optional[str] = Query(None),
    year: Optional[int] = Query(None, ge=1900, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    supplier: Optional[str] = Query(None, description="Supplier name"),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(get_current_user),
):
    if month is not None and year is None:
        raise HTTPException(status_code=400, detail="month requires year")

    docs = await load_documents("purchase-orders", client, current_user.token)
    docs = filter_by_search_term(docs, q)
    if year is not None:
        docs = filter_by_period(docs, year, month)
    docs = filter_by_supplier(docs, supplier)
    return page_response(docs, page, page_size)


@router.get("/transfers", response_model=stock_schemas.GroupedOrderPage)
async def list_transfers(
    q: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(get_current_user),
):
    docs = await load_documents("transfers", client, current_user.token)
    return page_response(filter_by_search_term(docs, q), page, page_size)


@router.get("/adjustments", response_model=stock_schemas.GroupedOrderPage)
async def list_adjustments(
    q: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(get_current_user),
):
    docs = await load_documents("adjustments", client, current_user.token)
    return page_response(filter_by_search_term(docs, q), page, page_size)


# ==========================================
#  DETAILS
# ==========================================
@router.get("/in-orders/{reference_id}", response_model=GroupedOrder)
async def get_stock_in_order(
    reference_id: str,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await _get_document("in-orders", reference_id, client, current_user.token)


@router.get("/purchase-orders/{reference_id}", response_model=GroupedOrder)
async def get_purchase_order(
    reference_id: str,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await _get_document("purchase-orders", reference_id, client, current_user.token)


@router.get("/transfers/{reference_id}", response_model=GroupedOrder)
async def get_transfer(
    reference_id: str,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await _get_document("transfers", reference_id, client, current_user.token)


@router.get("/adjustments/{reference_id}", response_model=GroupedOrder)
async def get_adjustment(
    reference_id: str,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await _get_document("adjustments", reference_id, client, current_user.token)


# ==========================================
#  FORMS
# ==========================================
@router.post("/in-orders", response_model=List[GroupedOrder], status_code=201)
async def create_stock_in(
    payload: stock_schemas.StockInCreate,
    request: Request,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(can_manage),
):
    body = payload.model_dump(mode="json", exclude_none=True)
    body["processed_by"] = current_user.profile.id
    data = await client.post("/stock-movements/bulk", current_user.token, json=body) or {}

    records = [StockMovementRecord.model_validate(row) for row in data.get("stock_movements") or []]
    write_log(user_id=current_user.profile.id, action="STOCK_IN", resource="stock", ip=request.client.host,
              meta={"supplier_id": payload.supplier_id, "count": len(records)})
    return group_movements(records)


@router.post("/transfers", status_code=201)
async def create_transfer(
    payload: stock_schemas.TransferCreate,
    request: Request,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(can_manage),
):
    if not payload.items:
        raise HTTPException(status_code=400, detail="Add at least one item to the transfer")
    for item in payload.items:
        if item.from_warehouse_id == item.to_warehouse_id:
            raise HTTPException(status_code=400, detail="From and To warehouses must be different")

    reference_id = str(uuid.uuid4())
    processed_date = stock_schemas.as_timestamp(payload.processed_date)
    count = 0
    try:
        # Each line leaves the source warehouse and enters the destination
        for item in payload.items:
            for movement_type, warehouse_id in (("out", item.from_warehouse_id), ("in", item.to_warehouse_id)):
                body = {
                    "product_id": item.product_id,
                    "warehouse_id": warehouse_id,
                    "movement_type": movement_type,
                    "quantity": item.quantity,
                    "reference_type": "transfer",
                    "reference_id": reference_id,
                    "reason": item.reason,
                }
                if processed_date:
                    body["processed_date"] = processed_date
                await client.post("/stock-movements", current_user.token, json=body)
                count += 1
    except BackendError:
        # Movements already posted stay recorded under reference_id
        logger.error("Transfer %s stopped after %d of %d movements", reference_id, count, 2 * len(payload.items))
        write_log(user_id=current_user.profile.id, action="STOCK_TRANSFER", resource="stock", status="FAIL",
                  ip=request.client.host, meta={"reference_id": reference_id, "count": count})
        raise

    write_log(user_id=current_user.profile.id, action="STOCK_TRANSFER", resource="stock", ip=request.client.host,
              meta={"reference_id": reference_id, "count": count})
    return {"reference_id": reference_id, "movements": count}


@router.post("/adjustments", status_code=201)
async def create_adjustment(
    payload: stock_schemas.AdjustmentCreate,
    request: Request,
    client: InventoryApiClient = Depends(get_api_client),
    current_user: CurrentUser = Depends(can_manage),
):
    if not payload.items:
        raise HTTPException(status_code=400, detail="Add at least one item to the adjustment")

    reference_id = str(uuid.uuid4())
    processed_date = stock_schemas.as_timestamp(payload.processed_date)
    count = 0
    try:
        for item in payload.items:
            body = {
                "product_id": item.product_id,
                "warehouse_id": item.warehouse_id,
                "movement_type": "in" if item.quantity > 0 else "out",
                "quantity": abs(item.quantity),
                "reference_type": "adjustment",
                "reference_id": reference_id,
                "reason": item.reason,
            }
            if processed_date:
                body["processed_date"] = processed_date
            await client.post("/stock-movements", current_user.token, json=body)
            count += 1
    except BackendError:
        logger.error("Adjustment %s stopped after %d of %d movements", reference_id, count, len(payload.items))
        write_log(user_id=current_user.profile.id, action="STOCK_ADJUSTMENT", resource="stock", status="FAIL",
                  ip=request.client.host, meta={"reference_id": reference_id, "count": count})
        raise

    write_log(user_id=current_user.profile.id, action="STOCK_ADJUSTMENT", resource="stock", ip=request.client.host,
              meta={"reference_id": reference_id, "count": len(payload.items)})
    return {"reference_id": reference_id, "movements": len(payload.items)}
