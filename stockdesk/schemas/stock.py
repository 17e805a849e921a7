# stockdesk/schemas/stock.py
import enum
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_serializer, field_validator, model_validator

# Allowed values as sent by the inventory backend
MovementType = Literal["in", "out", "transfer", "adjustment"]
ReferenceType = Literal["purchase_order", "adjustment", "transfer", "unspecified"]

REFERENCE_TYPES = {"purchase_order", "adjustment", "transfer"}


# How a grouped document sums its line quantities
class QuantityConvention(str, enum.Enum):
    SIGNED = "signed"
    MAGNITUDE = "magnitude"


def as_timestamp(d: Optional[date]) -> Optional[str]:
    # The backend only parses RFC 3339 timestamps
    if d is None:
        return None
    return datetime.combine(d, time.min, tzinfo=timezone.utc).isoformat()


def _full_name(first: Optional[str], last: Optional[str]) -> Optional[str]:
    if first and last:
        return f"{first} {last}"
    return None


# One row of the backend's stock movement listing.
# Missing display fields are filled in here once, so views never need fallbacks.
class StockMovementRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    product_id: Optional[str] = None
    product_name: str = "Unknown"
    product_sku: str = ""
    warehouse_id: Optional[str] = None
    warehouse_name: str = ""
    movement_type: MovementType
    quantity: int = 0
    cost_price: Optional[Decimal] = None
    total_amount: Optional[Decimal] = None
    reference_id: Optional[str] = None
    reference_type: ReferenceType = "unspecified"
    reference_number: Optional[str] = None
    supplier_name: Optional[str] = None
    reason: Optional[str] = None
    processed_by: str = "Unknown"
    processed_by_id: Optional[str] = None
    processed_date: Optional[datetime] = None
    created_at: datetime

    @model_validator(mode="before")
    @classmethod
    def _fill_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        raw = dict(data)

        for key in ("id", "product_id", "warehouse_id", "reference_id"):
            if raw.get(key) is not None:
                raw[key] = str(raw[key])
        if not raw.get("reference_id"):
            raw["reference_id"] = None

        # The backend sends the processing user's id; screens show a name.
        # Rows already shaped by this model carry processed_by_id and keep theirs.
        if "processed_by_id" not in raw:
            raw["processed_by_id"] = str(raw["processed_by"]) if raw.get("processed_by") else None
            raw["processed_by"] = (
                _full_name(raw.get("processed_by_first_name"), raw.get("processed_by_last_name"))
                or _full_name(raw.get("user_first_name"), raw.get("user_last_name"))
                or raw.get("processed_by_name")
                or raw.get("user_name")
                or "Unknown"
            )

        if raw.get("reference_type") not in REFERENCE_TYPES:
            raw["reference_type"] = "unspecified"

        for key, fallback in (("product_name", "Unknown"), ("product_sku", ""), ("warehouse_name", "")):
            if not raw.get(key):
                raw[key] = fallback

        if raw.get("quantity") is None:
            raw["quantity"] = 0
        if not raw.get("created_at"):
            raw["created_at"] = raw.get("processed_date")
        if not raw.get("processed_date"):
            raw["processed_date"] = raw.get("created_at")
        return raw


# Aggregated view of all movements sharing one reference id
class GroupedOrder(BaseModel):
    reference_id: str
    reference_type: ReferenceType
    reference_number: Optional[str] = None
    supplier_name: Optional[str] = None
    total_quantity: int = 0
    total_amount: Decimal = Decimal("0")
    processed_by: str
    processed_date: Optional[datetime] = None
    created_at: datetime
    items: List[StockMovementRecord] = Field(default_factory=list)

    @computed_field
    @property
    def item_count(self) -> int:
        return len(self.items)


# Paginated response for grouped documents
class GroupedOrderPage(BaseModel):
    items: List[GroupedOrder]
    total: int
    page: int
    page_size: int
    total_pages: int


# Paginated response for the flat stock history
class StockMovementPage(BaseModel):
    items: List[StockMovementRecord]
    total: int
    page: int
    page_size: int
    total_pages: int


class MovementQuery(BaseModel):
    """Parameters for one call to the backend's movement listing.

    Screens keep only this as state; grouped results are rebuilt from the
    fetched rows on every load.
    """

    model_config = ConfigDict(frozen=True)

    movement_type: Optional[MovementType] = None
    reference_type: Optional[ReferenceType] = None
    search: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    product_id: Optional[str] = None
    warehouse_id: Optional[str] = None
    page: int = Field(1, ge=1)
    limit: int = Field(100, ge=1, le=100)

    def to_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {"page": self.page, "limit": self.limit}
        for key in ("movement_type", "reference_type", "search", "product_id", "warehouse_id"):
            value = getattr(self, key)
            if value:
                params[key] = value
        if self.date_from:
            params["date_from"] = self.date_from.isoformat()
        if self.date_to:
            params["date_to"] = self.date_to.isoformat()
        return params


# Schema for recording a single movement
class StockMovementCreate(BaseModel):
    product_id: str
    warehouse_id: str
    movement_type: MovementType
    quantity: int = Field(gt=0)
    cost_price: Optional[float] = Field(None, ge=0)
    reference_type: Optional[ReferenceType] = None
    reference_id: Optional[str] = None
    reason: Optional[str] = None
    processed_date: Optional[date] = None

    @field_serializer("processed_date")
    def _processed_date_as_timestamp(self, v: Optional[date]) -> Optional[str]:
        return as_timestamp(v)


# Schema for a single line of a bulk stock-in
class StockInItem(BaseModel):
    product_id: str
    warehouse_id: str
    quantity: int = Field(gt=0)
    cost_price: Optional[float] = Field(None, ge=0)
    reason: Optional[str] = None


# Schema for registering a bulk stock-in from one supplier
class StockInCreate(BaseModel):
    supplier_id: str
    reference_number: Optional[str] = None
    processed_date: Optional[date] = None
    items: List[StockInItem] = Field(min_length=1)

    @field_serializer("processed_date")
    def _processed_date_as_timestamp(self, v: Optional[date]) -> Optional[str]:
        return as_timestamp(v)


class TransferItem(BaseModel):
    product_id: str
    from_warehouse_id: str
    to_warehouse_id: str
    quantity: int = Field(gt=0)
    reason: str = Field(min_length=1)

    @field_validator("reason")
    @classmethod
    def _reason_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("reason is required")
        return v.strip()


class TransferCreate(BaseModel):
    items: List[TransferItem]
    processed_date: Optional[date] = None


class AdjustmentItem(BaseModel):
    product_id: str
    warehouse_id: str
    # Positive adds stock, negative removes it
    quantity: int
    reason: str = Field(min_length=1)

    @field_validator("quantity")
    @classmethod
    def _quantity_not_zero(cls, v: int) -> int:
        if v == 0:
            raise ValueError("quantity must not be zero")
        return v

    @field_validator("reason")
    @classmethod
    def _reason_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("reason is required")
        return v.strip()


class AdjustmentCreate(BaseModel):
    items: List[AdjustmentItem]
    processed_date: Optional[date] = None


# On-hand quantity of one product in one warehouse
class StockLevel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    product_id: str
    warehouse_id: str
    product_name: Optional[str] = None
    product_sku: Optional[str] = None
    warehouse_name: Optional[str] = None
    quantity: int = 0
    reserved_quantity: int = 0
    available_quantity: int = 0
    min_stock_level: int = 0
    max_stock_level: Optional[int] = None
    last_updated: Optional[datetime] = None

    @computed_field
    @property
    def is_low(self) -> bool:
        return self.available_quantity <= self.min_stock_level
