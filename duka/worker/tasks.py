"""
Celery background tasks for Duka Manager.
"""
import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from duka.core.clock import local_today
from duka.core.database import get_db_context
from duka.core.redis_client import cache_manager
from duka.models.shops import Shop
from duka.services.dashboard_stats import DashboardStats
from duka.services.expense_tracker import ExpenseTracker
from duka.services.inventory_monitor import InventoryMonitor
from duka.worker.celery import celery

logger = logging.getLogger(__name__)

REPORT_TTL = 7 * 86400


def _shop_ids() -> List[int]:
    with get_db_context() as db:
        return [shop_id for (shop_id,) in db.query(Shop.id).order_by(Shop.id).all()]


async def build_daily_report(shop_id: int, day) -> Dict[str, Any]:
    """Stats and expenses for one shop on one shop-local date."""
    stats = await DashboardStats().get_stats(shop_id, day=day)
    expenses = await ExpenseTracker().get_total_expenses(shop_id, start_date=day, end_date=day)
    return {
        "shop_id": shop_id,
        "date": day.isoformat(),
        "sales": stats["today_sales"],
        "profit": stats["today_profit"],
        "sales_count": stats["today_sales_count"],
        "expenses": expenses,
        "net_profit": round(stats["today_profit"] - expenses, 2),
        "low_stock_count": stats["low_stock_count"],
        "total_credit_owed": stats["total_credit_owed"],
        "generated_at": datetime.utcnow().isoformat()
    }


@celery.task(bind=True)
def generate_daily_report(self, report_date: Optional[str] = None):
    """Generate yesterday's report for every shop and cache it."""
    try:
        logger.info("Starting daily report generation task")

        if report_date:
            day = datetime.strptime(report_date, "%Y-%m-%d").date()
        else:
            day = local_today() - timedelta(days=1)

        shop_ids = _shop_ids()
        for shop_id in shop_ids:
            report = asyncio.run(build_daily_report(shop_id, day))
            cache_manager.set(f"report:{shop_id}:{day.isoformat()}", report, ttl=REPORT_TTL)

        logger.info(f"Daily reports generated for {len(shop_ids)} shops")
        return {
            "status": "success",
            "report_date": day.isoformat(),
            "shops": len(shop_ids),
            "timestamp": datetime.utcnow().isoformat()
        }

    except Exception as e:
        logger.error(f"Failed to generate daily report: {e}")
        raise self.retry(countdown=1800, max_retries=2)  # Retry in 30 minutes


@celery.task(bind=True)
def check_low_stock(self):
    """Log the products every shop needs to restock."""
    try:
        logger.info("Starting low stock check task")

        inventory_monitor = InventoryMonitor()
        flagged = 0
        for shop_id in _shop_ids():
            products = asyncio.run(inventory_monitor.get_low_stock_products(shop_id))
            if products:
                flagged += len(products)
                names = ", ".join(f"{p['name']} ({p['quantity']})" for p in products)
                logger.warning(f"Shop {shop_id} low on stock: {names}")

        logger.info(f"Low stock check flagged {flagged} products")
        return {
            "status": "success",
            "low_stock_count": flagged,
            "timestamp": datetime.utcnow().isoformat()
        }

    except Exception as e:
        logger.error(f"Failed to check low stock: {e}")
        raise self.retry(countdown=900, max_retries=2)  # Retry in 15 minutes
