"""
Dashboard Stats service aggregating the shop's headline numbers.
"""
import logging
from typing import Dict, Any, Optional
from datetime import date, datetime

from duka.core.clock import local_today, local_day_bounds
from duka.core.config import settings
from duka.core.database import get_db_context
from duka.core.redis_client import cache_manager
from duka.models.inventory import Product
from duka.models.sales import Sale
from duka.models.shops import MemberRole
from duka.services.credit_ledger import CreditLedger

logger = logging.getLogger(__name__)

ATTENDANT_FIELDS = ("date", "total_products", "low_stock_count", "today_sales_count")


class DashboardStats:
    """Service computing dashboard statistics for owners and attendants."""

    async def get_stats(
        self,
        shop_id: int,
        role: str = MemberRole.OWNER.value,
        day: Optional[date] = None
    ) -> Dict[str, Any]:
        """
        Headline stats for a shop.

        Product count, low-stock count and stock value always reflect the
        current shelves; sales, profit and sales count are for the requested
        shop-local date (default today). Attendants only see counts.
        """
        day = day or local_today()
        stats = self._cached(shop_id, day)
        if stats is None:
            stats = self._compute(shop_id, day)
            cache_manager.set(self._cache_key(shop_id, day), stats, ttl=settings.stats_cache_ttl)

        if role != MemberRole.OWNER.value:
            return {k: stats[k] for k in ATTENDANT_FIELDS}
        return stats

    def _compute(self, shop_id: int, day: date) -> Dict[str, Any]:
        start, end = local_day_bounds(day)

        with get_db_context() as db:
            products = db.query(Product).filter(Product.shop_id == shop_id).all()
            day_sales = db.query(Sale).filter(
                Sale.shop_id == shop_id,
                Sale.created_at >= start,
                Sale.created_at < end
            ).all()

            stats = {
                "date": day.isoformat(),
                "total_products": len(products),
                "low_stock_count": sum(1 for p in products if p.is_low_stock),
                "total_stock_value": round(sum(p.selling_price * p.quantity for p in products), 2),
                "today_sales": round(sum(s.total_amount for s in day_sales), 2),
                "today_profit": round(sum(s.profit for s in day_sales), 2),
                "today_sales_count": len(day_sales),
                "total_credit_owed": CreditLedger.total_owed(db, shop_id),
                "generated_at": datetime.utcnow().isoformat()
            }

        logger.info(f"Dashboard stats computed for shop {shop_id} on {day.isoformat()}")
        return stats

    def _cached(self, shop_id: int, day: date) -> Optional[Dict[str, Any]]:
        cached = cache_manager.get(self._cache_key(shop_id, day))
        if isinstance(cached, dict):
            return cached
        return None

    @staticmethod
    def _cache_key(shop_id: int, day: date) -> str:
        return f"stats:{shop_id}:{day.isoformat()}"
