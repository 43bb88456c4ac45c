"""
Inventory Monitor service for managing products and stock levels.
"""
import logging
from typing import List, Dict, Any
from sqlalchemy import func

from duka.core.config import settings
from duka.core.database import get_db_context
from duka.core.redis_client import invalidate_shop_stats
from duka.models.inventory import Product
from duka.services.shop_accounts import ensure_owner

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "category", "unit", "cost_price", "selling_price", "quantity", "low_stock_threshold")


def serialize_product(product: Product) -> Dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "category": product.category,
        "unit": product.unit,
        "cost_price": product.cost_price,
        "selling_price": product.selling_price,
        "quantity": product.quantity,
        "low_stock_threshold": product.low_stock_threshold,
        "is_low_stock": product.is_low_stock,
        "stock_value": product.stock_value,
        "created_at": product.created_at.isoformat(),
        "updated_at": product.updated_at.isoformat()
    }


class InventoryMonitor:
    """Service for the shop's product list and stock levels."""

    async def add_product(self, member: Dict[str, Any], product_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Add a product to the owner's shop.

        Args:
            member: Session membership of the caller (must be the owner)
            product_data: Dictionary containing product information
                - name: str
                - selling_price: float
                - cost_price: Optional[float]
                - quantity: Optional[int]
                - low_stock_threshold: Optional[int]
                - category: Optional[str]
                - unit: Optional[str]

        Returns:
            Dict containing the created product
        """
        ensure_owner(member)
        values = {
            "name": (product_data.get("name") or "").strip(),
            "category": product_data.get("category") or "General",
            "unit": product_data.get("unit") or "pcs",
            "cost_price": product_data.get("cost_price") or 0.0,
            "selling_price": product_data.get("selling_price"),
            "quantity": product_data.get("quantity") or 0,
            "low_stock_threshold": product_data.get("low_stock_threshold", settings.default_low_stock_threshold)
        }
        if values["low_stock_threshold"] is None:
            values["low_stock_threshold"] = settings.default_low_stock_threshold
        self._validate(values)

        with get_db_context() as db:
            product = Product(shop_id=member["shop_id"], **values)
            db.add(product)
            db.commit()

            invalidate_shop_stats(member["shop_id"])
            logger.info(f"Product added to shop {member['shop_id']}: {product.name}")
            return serialize_product(product)

    async def update_product(
        self,
        member: Dict[str, Any],
        product_id: int,
        updates: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Apply a partial update; only fields present and not None change."""
        ensure_owner(member)

        with get_db_context() as db:
            product = self._get_product(db, member["shop_id"], product_id)

            changes = {k: v for k, v in updates.items() if k in EDITABLE_FIELDS and v is not None}
            if "name" in changes:
                changes["name"] = changes["name"].strip()
            values = {field: getattr(product, field) for field in EDITABLE_FIELDS}
            values.update(changes)
            self._validate(values)

            for field, value in changes.items():
                setattr(product, field, value)
            db.commit()

            invalidate_shop_stats(member["shop_id"])
            logger.info(f"Product {product_id} updated: {sorted(changes)}")
            return serialize_product(product)

    async def delete_product(self, member: Dict[str, Any], product_id: int) -> bool:
        """Delete a product. Past sales keep their captured name and prices."""
        ensure_owner(member)

        with get_db_context() as db:
            product = self._get_product(db, member["shop_id"], product_id)
            db.delete(product)
            db.commit()

            invalidate_shop_stats(member["shop_id"])
            logger.info(f"Product {product_id} deleted from shop {member['shop_id']}")
            return True

    async def restock(self, member: Dict[str, Any], product_id: int, quantity: int) -> Dict[str, Any]:
        """Add units to a product's stock."""
        ensure_owner(member)
        if quantity is None or quantity <= 0:
            raise ValueError("Restock quantity must be greater than zero")

        with get_db_context() as db:
            product = self._get_product(db, member["shop_id"], product_id)
            previous_quantity = product.quantity
            product.quantity = previous_quantity + quantity
            db.commit()

            invalidate_shop_stats(member["shop_id"])
            logger.info(f"Product {product_id} restocked: {previous_quantity} -> {product.quantity}")
            return serialize_product(product)

    async def list_products(self, shop_id: int) -> List[Dict[str, Any]]:
        """All products of a shop ordered by name."""
        with get_db_context() as db:
            products = db.query(Product).filter(
                Product.shop_id == shop_id
            ).order_by(Product.name.asc()).all()
            return [serialize_product(p) for p in products]

    async def search_products(self, shop_id: int, query: str) -> List[Dict[str, Any]]:
        """Case-insensitive substring search on product names."""
        query = (query or "").strip().lower()
        if not query:
            return await self.list_products(shop_id)

        with get_db_context() as db:
            products = db.query(Product).filter(
                Product.shop_id == shop_id,
                func.lower(Product.name).contains(query, autoescape=True)
            ).order_by(Product.name.asc()).all()
            return [serialize_product(p) for p in products]

    async def get_low_stock_products(self, shop_id: int) -> List[Dict[str, Any]]:
        """Products at or below their low-stock threshold, lowest stock first."""
        with get_db_context() as db:
            products = db.query(Product).filter(
                Product.shop_id == shop_id,
                Product.quantity <= Product.low_stock_threshold
            ).order_by(Product.quantity.asc(), Product.name.asc()).all()
            return [serialize_product(p) for p in products]

    async def get_product(self, shop_id: int, product_id: int) -> Dict[str, Any]:
        with get_db_context() as db:
            return serialize_product(self._get_product(db, shop_id, product_id))

    @staticmethod
    def _get_product(db, shop_id: int, product_id: int) -> Product:
        product = db.query(Product).filter(
            Product.id == product_id,
            Product.shop_id == shop_id
        ).first()
        if not product:
            raise LookupError(f"Product {product_id} not found")
        return product

    @staticmethod
    def _validate(values: Dict[str, Any]) -> None:
        if not (values.get("name") or "").strip():
            raise ValueError("Product name is required")
        if values.get("selling_price") is None or values["selling_price"] < 0:
            raise ValueError("Selling price must be zero or more")
        if values.get("cost_price", 0) < 0:
            raise ValueError("Cost price must be zero or more")
        if values.get("quantity", 0) < 0:
            raise ValueError("Quantity cannot be negative")
        if values.get("low_stock_threshold", 0) < 0:
            raise ValueError("Low-stock threshold cannot be negative")
