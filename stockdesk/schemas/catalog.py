# stockdesk/schemas/catalog.py
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from decimal import Decimal
from typing import Optional, List


# Backend entities carry more fields than the screens use
class BackendEntity(BaseModel):
    model_config = ConfigDict(extra="allow")


# ---- Categories ----
class CategoryCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    description: str = Field("", max_length=500)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)


class Category(BackendEntity):
    id: str
    name: str
    description: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None


# ---- Suppliers ----
class SupplierCreate(BaseModel):
    name: str = Field(min_length=2, max_length=255)
    contact_person: str = Field("", max_length=255)
    email: str = Field("", max_length=255)
    phone: str = Field("", max_length=50)
    address: str = ""
    city: str = Field("", max_length=100)
    state: str = Field("", max_length=100)
    country: str = Field("", max_length=100)
    postal_code: str = Field("", max_length=20)


class SupplierUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    contact_person: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    postal_code: Optional[str] = Field(None, max_length=20)
    is_active: Optional[bool] = None


class Supplier(BackendEntity):
    id: str
    name: str
    contact_person: Optional[str] = None
    email: Optional[str] = None
    city: Optional[str] = None
    is_active: bool = True


# ---- Warehouses ----
class WarehouseCreate(BaseModel):
    name: str = Field(min_length=1)
    location: str = Field(min_length=1)
    address: Optional[str] = None
    contact_person: Optional[str] = None
    contact_phone: Optional[str] = None


class WarehouseUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = None
    contact_person: Optional[str] = None
    contact_phone: Optional[str] = None
    is_active: Optional[bool] = None


class Warehouse(BackendEntity):
    id: str
    name: str
    location: Optional[str] = None
    is_active: bool = True


# ---- Products ----
class ProductCreate(BaseModel):
    sku: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: Optional[str] = None
    category_id: Optional[str] = None
    supplier_id: Optional[str] = None
    unit_price: float = Field(ge=0)


class ProductUpdate(BaseModel):
    """All fields optional; only the ones sent are forwarded."""
    sku: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    category_id: Optional[str] = None
    supplier_id: Optional[str] = None
    unit_price: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None


class Product(BackendEntity):
    id: str
    sku: str
    name: str
    category: Optional[str] = None
    supplier: Optional[str] = None
    unit_price: Decimal = Decimal("0")
    is_active: bool = True


# Paginated list envelope shared by the catalog screens
class CatalogPage(BaseModel):
    items: List[dict]
    total: int
    page: int
    page_size: int
    total_pages: int
