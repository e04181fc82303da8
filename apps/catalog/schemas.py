"""API Schemas for Catalog app."""
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional
from ninja import Schema


# =============================================================================
# Curated products
# =============================================================================

class CuratedProductOut(Schema):
    id: int
    cj_pid: str
    cj_vid: str
    product_name: str
    original_cj_title: str
    seo_title: str
    product_description: str
    product_image: str
    category: str
    cj_cost_price: Decimal
    suggested_price: Decimal
    custom_price: Optional[Decimal] = None
    display_price: Decimal
    stock_quantity: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class CuratedProductIn(Schema):
    cj_pid: str
    product_name: str
    cj_cost_price: Decimal
    cj_vid: Optional[str] = None
    original_cj_title: Optional[str] = None
    seo_title: Optional[str] = None
    product_description: Optional[str] = None
    product_image: Optional[str] = None
    category: Optional[str] = None


class CuratedProductUpdateIn(Schema):
    custom_price: Optional[Decimal] = None
    is_active: Optional[bool] = None
    product_name: Optional[str] = None
    original_cj_title: Optional[str] = None
    seo_title: Optional[str] = None
    product_description: Optional[str] = None
    product_image: Optional[str] = None
    category: Optional[str] = None
    stock_quantity: Optional[int] = None
    cj_vid: Optional[str] = None
    cj_pid: Optional[str] = None


# =============================================================================
# Local products
# =============================================================================

class LocalProductOut(Schema):
    id: int
    name: str
    description: str
    price: Decimal
    compare_at_price: Optional[Decimal] = None
    stock_quantity: int
    sku: str
    category: str
    tags: List[str]
    images: List[str]
    weight_kg: Optional[Decimal] = None
    dimensions: Dict
    is_featured: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime


class LocalProductIn(Schema):
    name: str
    price: Decimal
    stock_quantity: int
    description: Optional[str] = None
    compare_at_price: Optional[Decimal] = None
    sku: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    images: Optional[List[str]] = None
    weight_kg: Optional[Decimal] = None
    dimensions: Optional[Dict] = None
    is_featured: bool = False
    is_active: bool = True


class LocalProductUpdateIn(Schema):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = None
    compare_at_price: Optional[Decimal] = None
    stock_quantity: Optional[int] = None
    sku: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    images: Optional[List[str]] = None
    weight_kg: Optional[Decimal] = None
    dimensions: Optional[Dict] = None
    is_featured: Optional[bool] = None
    is_active: Optional[bool] = None


class StockUpdateIn(Schema):
    id: int
    stock_quantity: int


class BulkStockUpdateIn(Schema):
    updates: List[StockUpdateIn]


class StockUpdateOut(Schema):
    id: int
    name: str
    stock_quantity: int


class BulkStockUpdateOut(Schema):
    updated: int
    products: List[StockUpdateOut]
