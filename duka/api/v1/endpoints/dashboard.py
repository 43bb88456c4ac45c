"""
Dashboard API endpoints for aggregated dashboard data.
"""
from typing import Dict, Any, Optional
from datetime import date
from fastapi import APIRouter, Depends, Query

from duka.api.deps import get_current_member, service_error
from duka.services.dashboard_stats import DashboardStats

router = APIRouter()
dashboard_stats = DashboardStats()


@router.get("/stats")
async def get_dashboard_stats(
    day: Optional[date] = Query(None, alias="date", description="Shop-local date, defaults to today"),
    member: Dict[str, Any] = Depends(get_current_member)
):
    """
    Get the dashboard's headline numbers.

    Owners see products, low stock, stock value, the day's sales and
    profit and total credit owed. Attendants see product and low-stock
    counts and the number of sales made.
    """
    try:
        return await dashboard_stats.get_stats(member["shop_id"], role=member["role"], day=day)
    except Exception as e:
        raise service_error("get dashboard stats", e)
