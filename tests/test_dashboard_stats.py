"""
Tests for Dashboard Stats service.
"""
import pytest
from datetime import datetime

from duka.core.clock import local_today
from duka.services.credit_ledger import CreditLedger
from duka.services.dashboard_stats import ATTENDANT_FIELDS, DashboardStats
from duka.services.sales_logger import SalesLogger


@pytest.fixture
def dashboard_stats():
    return DashboardStats()


class TestDashboardStats:
    """Test cases for DashboardStats service."""

    @pytest.mark.asyncio
    async def test_owner_stats(self, dashboard_stats, owner, unga, soda):
        await SalesLogger().record_sale(owner["shop_id"], unga["id"], 2)
        ledger = CreditLedger()
        customer = await ledger.add_customer(owner["shop_id"], "Wanjiku")
        await ledger.add_credit_sale(owner["shop_id"], customer["id"], "Soda", 2, 120)

        stats = await dashboard_stats.get_stats(owner["shop_id"])

        assert stats["date"] == local_today().isoformat()
        assert stats["total_products"] == 2
        assert stats["low_stock_count"] == 1
        assert stats["total_stock_value"] == 18 * 180 + 3 * 60
        assert stats["today_sales"] == 360.0
        assert stats["today_profit"] == 60.0
        assert stats["today_sales_count"] == 1
        assert stats["total_credit_owed"] == 120.0

    @pytest.mark.asyncio
    async def test_attendant_sees_counts_only(self, dashboard_stats, owner, unga):
        await SalesLogger().record_sale(owner["shop_id"], unga["id"], 1)

        stats = await dashboard_stats.get_stats(owner["shop_id"], role="attendant")

        assert set(stats) == set(ATTENDANT_FIELDS)
        assert stats["today_sales_count"] == 1
        assert "today_profit" not in stats

    @pytest.mark.asyncio
    async def test_stats_for_past_date(self, dashboard_stats, owner, unga, backdate):
        sale = await SalesLogger().record_sale(owner["shop_id"], unga["id"], 1)
        backdate(sale["id"], datetime(2024, 3, 1, 22, 0))

        on_day = await dashboard_stats.get_stats(owner["shop_id"], day=datetime(2024, 3, 2).date())
        day_before = await dashboard_stats.get_stats(owner["shop_id"], day=datetime(2024, 3, 1).date())

        assert on_day["today_sales_count"] == 1
        assert day_before["today_sales_count"] == 0

    @pytest.mark.asyncio
    async def test_stats_are_cached(self, dashboard_stats, owner, fake_redis):
        stats = await dashboard_stats.get_stats(owner["shop_id"])

        key = f"stats:{owner['shop_id']}:{stats['date']}"
        assert key in fake_redis.store

        with pytest.MonkeyPatch.context() as mp:
            mp.setattr(dashboard_stats, "_compute", lambda *args: pytest.fail("stats recomputed"))
            assert await dashboard_stats.get_stats(owner["shop_id"]) == stats

    @pytest.mark.asyncio
    async def test_writes_invalidate_cache(self, dashboard_stats, owner, unga):
        before = await dashboard_stats.get_stats(owner["shop_id"])
        await SalesLogger().record_sale(owner["shop_id"], unga["id"], 1)

        after = await dashboard_stats.get_stats(owner["shop_id"])

        assert before["today_sales_count"] == 0
        assert after["today_sales_count"] == 1
