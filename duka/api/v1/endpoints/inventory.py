"""
Inventory API endpoints for managing products and stock levels.
"""
from typing import Dict, Any, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from duka.api.deps import get_current_member, service_error
from duka.services.inventory_monitor import InventoryMonitor

router = APIRouter()
inventory_monitor = InventoryMonitor()


class ProductRequest(BaseModel):
    """Request model for adding a product."""
    name: str = Field(..., min_length=1, description="Product name")
    selling_price: float = Field(..., ge=0, description="Selling price")
    cost_price: float = Field(0, ge=0, description="Buying price")
    quantity: int = Field(0, ge=0, description="Units in stock")
    low_stock_threshold: Optional[int] = Field(None, ge=0, description="Alert when stock is at or below this")
    category: Optional[str] = Field(None, description="Category, defaults to General")
    unit: Optional[str] = Field(None, description="Unit of sale, defaults to pcs")


class ProductUpdateRequest(BaseModel):
    """Request model for a partial product update."""
    name: Optional[str] = Field(None, min_length=1)
    selling_price: Optional[float] = Field(None, ge=0)
    cost_price: Optional[float] = Field(None, ge=0)
    quantity: Optional[int] = Field(None, ge=0)
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    category: Optional[str] = None
    unit: Optional[str] = None


class RestockRequest(BaseModel):
    """Request model for adding stock."""
    quantity: int = Field(..., gt=0, description="Units received")


@router.get("/")
async def list_products(
    q: Optional[str] = None,
    member: Dict[str, Any] = Depends(get_current_member)
):
    """
    List the shop's products ordered by name.

    Pass `q` to filter by a case-insensitive substring of the name.
    """
    try:
        if q:
            products = await inventory_monitor.search_products(member["shop_id"], q)
        else:
            products = await inventory_monitor.list_products(member["shop_id"])
        return {"products": products, "count": len(products)}
    except Exception as e:
        raise service_error("list products", e)


@router.post("/", status_code=201)
async def add_product(
    request: ProductRequest,
    member: Dict[str, Any] = Depends(get_current_member)
):
    """Add a product (owners only)."""
    try:
        return await inventory_monitor.add_product(member, request.model_dump())
    except Exception as e:
        raise service_error("add product", e)


@router.get("/low-stock")
async def get_low_stock_products(member: Dict[str, Any] = Depends(get_current_member)):
    """
    Get products with low stock levels.

    Returns products at or below their threshold that need restocking.
    """
    try:
        products = await inventory_monitor.get_low_stock_products(member["shop_id"])
        return {"products": products, "count": len(products)}
    except Exception as e:
        raise service_error("get low stock products", e)


@router.get("/{product_id}")
async def get_product(product_id: int, member: Dict[str, Any] = Depends(get_current_member)):
    try:
        return await inventory_monitor.get_product(member["shop_id"], product_id)
    except Exception as e:
        raise service_error("get product", e)


@router.put("/{product_id}")
async def update_product(
    product_id: int,
    request: ProductUpdateRequest,
    member: Dict[str, Any] = Depends(get_current_member)
):
    """Update a product (owners only). Omitted fields are left unchanged."""
    try:
        return await inventory_monitor.update_product(
            member, product_id, request.model_dump(exclude_none=True)
        )
    except Exception as e:
        raise service_error("update product", e)


@router.delete("/{product_id}")
async def delete_product(product_id: int, member: Dict[str, Any] = Depends(get_current_member)):
    """Delete a product (owners only)."""
    try:
        await inventory_monitor.delete_product(member, product_id)
        return {"status": "deleted", "id": product_id}
    except Exception as e:
        raise service_error("delete product", e)


@router.post("/{product_id}/restock")
async def restock_product(
    product_id: int,
    request: RestockRequest,
    member: Dict[str, Any] = Depends(get_current_member)
):
    """Add received units to a product's stock (owners only)."""
    try:
        return await inventory_monitor.restock(member, product_id, request.quantity)
    except Exception as e:
        raise service_error("restock product", e)
