"""
Sales Logger service for recording sales and building sales reports.
"""
import logging
from collections import OrderedDict
from typing import List, Dict, Any, Optional
from datetime import datetime, timedelta
from sqlalchemy import and_, func

from duka.core.clock import to_local_date, utcnow
from duka.core.database import get_db_context
from duka.core.redis_client import invalidate_shop_stats
from duka.models.inventory import Product
from duka.models.sales import Sale
from duka.models.credit import Customer, CreditSale
from duka.services.credit_ledger import credit_status

logger = logging.getLogger(__name__)

REPORT_RANGES = {"7d": 7, "30d": 30, "all": None}
DAILY_BUCKETS = 7
TOP_PRODUCTS = 5


def serialize_sale(sale: Sale) -> Dict[str, Any]:
    return {
        "id": sale.id,
        "product_id": sale.product_id,
        "product_name": sale.product_name,
        "quantity": sale.quantity,
        "unit_price": sale.unit_price,
        "total_amount": sale.total_amount,
        "profit": sale.profit,
        "recorded_by": sale.recorded_by,
        "created_at": sale.created_at.isoformat()
    }


class SalesLogger:
    """Service for logging sales and summarising them."""

    async def record_sale(
        self,
        shop_id: int,
        product_id: int,
        quantity: int,
        recorded_by: Optional[int] = None,
        customer_id: Optional[int] = None,
        on_credit: bool = False
    ) -> Dict[str, Any]:
        """
        Record a sale of one product and take it off the shelf.

        The selling and cost prices are captured on the sale row so later
        price edits do not rewrite history. When `on_credit` is set the
        total is booked against the customer's deni in the same transaction.

        Args:
            shop_id: Shop the sale belongs to
            product_id: Product being sold
            quantity: Units sold, must not exceed stock
            recorded_by: Profile ID of the cashier
            customer_id: Customer taking the goods on credit
            on_credit: Whether the sale is unpaid

        Returns:
            Dict containing the created sale (and credit sale, if any)
        """
        if quantity is None or quantity <= 0:
            raise ValueError("Quantity must be greater than zero")
        if on_credit and not customer_id:
            raise ValueError("A customer is required for a credit sale")

        try:
            with get_db_context() as db:
                product = db.query(Product).filter(
                    Product.id == product_id,
                    Product.shop_id == shop_id
                ).with_for_update().first()
                if not product:
                    raise LookupError(f"Product {product_id} not found")

                if product.quantity < quantity:
                    raise ValueError(
                        f"Insufficient stock for {product.name}: {product.quantity} available"
                    )

                customer = None
                if on_credit:
                    customer = db.query(Customer).filter(
                        Customer.id == customer_id,
                        Customer.shop_id == shop_id
                    ).first()
                    if not customer:
                        raise LookupError(f"Customer {customer_id} not found")

                total_amount = round(product.selling_price * quantity, 2)
                if on_credit and total_amount <= 0:
                    raise ValueError("A credit sale must be worth more than zero")

                sale = Sale(
                    shop_id=shop_id,
                    product_id=product.id,
                    product_name=product.name,
                    quantity=quantity,
                    unit_price=product.selling_price,
                    cost_price_at_sale=product.cost_price or 0.0,
                    total_amount=total_amount,
                    recorded_by=recorded_by
                )
                db.add(sale)
                product.quantity -= quantity
                db.flush()

                credit_sale = None
                if customer is not None:
                    credit_sale = CreditSale(
                        shop_id=shop_id,
                        customer_id=customer.id,
                        sale_id=sale.id,
                        product_name=product.name,
                        quantity=quantity,
                        amount=sale.total_amount,
                        amount_paid=0.0,
                        status=credit_status(sale.total_amount, 0.0)
                    )
                    db.add(credit_sale)

                db.commit()

                invalidate_shop_stats(shop_id)
                logger.info(f"Sale recorded: {quantity}x {product.name} for {sale.total_amount}")

                result = serialize_sale(sale)
                result["remaining_stock"] = product.quantity
                result["credit_sale_id"] = credit_sale.id if credit_sale is not None else None
                return result

        except (ValueError, LookupError) as e:
            logger.warning(f"Sale rejected for product {product_id}: {e}")
            raise
        except Exception as e:
            logger.error(f"Failed to record sale: {e}")
            raise

    async def list_sales(
        self,
        shop_id: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """Sales in [start_date, end_date), newest first."""
        with get_db_context() as db:
            query = self._sales_query(db, shop_id, start_date, end_date)
            query = query.order_by(Sale.created_at.desc(), Sale.id.desc())
            if limit:
                query = query.limit(limit)
            return [serialize_sale(s) for s in query.all()]

    async def get_recent_sales(self, shop_id: int, limit: int = 50) -> List[Dict[str, Any]]:
        """Get recent sales for real-time display."""
        return await self.list_sales(shop_id, limit=limit)

    async def get_sales_total(
        self,
        shop_id: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None
    ) -> float:
        """Sum of sale totals in [start_date, end_date)."""
        with get_db_context() as db:
            filters = [Sale.shop_id == shop_id]
            if start_date:
                filters.append(Sale.created_at >= start_date)
            if end_date:
                filters.append(Sale.created_at < end_date)

            total = db.query(func.sum(Sale.total_amount)).filter(and_(*filters)).scalar()
            return round(total or 0.0, 2)

    async def get_sales_summary(
        self,
        shop_id: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """Revenue, profit, items and transaction count for a window."""
        with get_db_context() as db:
            sales = self._sales_query(db, shop_id, start_date, end_date).all()
            return self._totals(sales)

    async def get_sales_history(self, shop_id: int) -> Dict[str, Any]:
        """
        Sales grouped by shop-local calendar date, newest date first.

        Each group carries its own revenue and profit; the overall profit is
        returned alongside.
        """
        with get_db_context() as db:
            sales = self._sales_query(db, shop_id).order_by(
                Sale.created_at.desc(), Sale.id.desc()
            ).all()

            days: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
            for sale in sales:
                key = to_local_date(sale.created_at).isoformat()
                if key not in days:
                    days[key] = {"date": key, "sales": [], "revenue": 0.0, "profit": 0.0}
                day = days[key]
                day["sales"].append(serialize_sale(sale))
                day["revenue"] += sale.total_amount
                day["profit"] += sale.profit

            for day in days.values():
                day["revenue"] = round(day["revenue"], 2)
                day["profit"] = round(day["profit"], 2)

            return {
                "days": list(days.values()),
                "total_profit": round(sum(s.profit for s in sales), 2),
                "count": len(sales)
            }

    async def get_sales_report(
        self,
        shop_id: int,
        time_range: str = "7d",
        today: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Build the sales report for a time range.

        Args:
            shop_id: Shop to report on
            time_range: One of "7d", "30d" or "all"
            today: Override for the current UTC time; 7d and 30d reach back
                that many days from it

        Returns:
            Dict with totals, daily buckets (oldest first, last 7 with sales)
            and the top products by revenue
        """
        if time_range not in REPORT_RANGES:
            raise ValueError(f"Unknown report range: {time_range}")

        start_date = None
        days = REPORT_RANGES[time_range]
        if days is not None:
            start_date = (today or utcnow()) - timedelta(days=days)

        with get_db_context() as db:
            sales = self._sales_query(db, shop_id, start_date).order_by(
                Sale.created_at.asc(), Sale.id.asc()
            ).all()

            return {
                "range": time_range,
                "start_date": start_date.isoformat() if start_date else None,
                "totals": self._totals(sales),
                "daily": self._daily_buckets(sales),
                "top_products": self._top_products(sales)
            }

    @staticmethod
    def _sales_query(db, shop_id: int, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None):
        query = db.query(Sale).filter(Sale.shop_id == shop_id)
        if start_date:
            query = query.filter(Sale.created_at >= start_date)
        if end_date:
            query = query.filter(Sale.created_at < end_date)
        return query

    @staticmethod
    def _totals(sales: List[Sale]) -> Dict[str, Any]:
        return {
            "revenue": round(sum(s.total_amount for s in sales), 2),
            "profit": round(sum(s.profit for s in sales), 2),
            "items": sum(s.quantity for s in sales),
            "transactions": len(sales)
        }

    @staticmethod
    def _daily_buckets(sales: List[Sale]) -> List[Dict[str, Any]]:
        """Per-date sales and profit; expects sales in chronological order."""
        buckets: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
        for sale in sales:
            key = to_local_date(sale.created_at).isoformat()
            bucket = buckets.setdefault(key, {"date": key, "sales": 0.0, "profit": 0.0})
            bucket["sales"] += sale.total_amount
            bucket["profit"] += sale.profit

        daily = list(buckets.values())[-DAILY_BUCKETS:]
        for bucket in daily:
            bucket["sales"] = round(bucket["sales"], 2)
            bucket["profit"] = round(bucket["profit"], 2)
        return daily

    @staticmethod
    def _top_products(sales: List[Sale]) -> List[Dict[str, Any]]:
        grouped: Dict[Any, Dict[str, Any]] = {}
        for sale in sales:
            # Deleted products fall back to grouping by captured name
            key = sale.product_id if sale.product_id is not None else f"name:{sale.product_name}"
            entry = grouped.setdefault(key, {"name": sale.product_name, "quantity": 0, "revenue": 0.0})
            entry["quantity"] += sale.quantity
            entry["revenue"] += sale.total_amount

        top = sorted(grouped.values(), key=lambda p: p["revenue"], reverse=True)[:TOP_PRODUCTS]
        for entry in top:
            entry["revenue"] = round(entry["revenue"], 2)
        return top
