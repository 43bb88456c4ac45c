"""
Sales API endpoints for recording sales and retrieving sales data.
"""
from typing import Dict, Any, Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field, model_validator

from duka.api.deps import get_current_member, service_error
from duka.services.sales_logger import SalesLogger

router = APIRouter()
sales_logger = SalesLogger()


class SaleRequest(BaseModel):
    """Request model for recording a sale."""
    product_id: int = Field(..., description="Product ID")
    quantity: int = Field(..., gt=0, description="Quantity sold")
    on_credit: bool = Field(False, description="Sell on credit (deni)")
    customer_id: Optional[int] = Field(None, description="Customer taking the goods on credit")

    @model_validator(mode="after")
    def check_credit_customer(self):
        if self.on_credit and self.customer_id is None:
            raise ValueError("customer_id is required for a credit sale")
        return self


@router.post("/", status_code=201)
async def record_sale(
    sale: SaleRequest,
    member: Dict[str, Any] = Depends(get_current_member)
):
    """
    Record a sale.

    Takes the units off the shelf at the product's current selling price
    and, for credit sales, books the total against the customer.
    """
    try:
        return await sales_logger.record_sale(
            shop_id=member["shop_id"],
            product_id=sale.product_id,
            quantity=sale.quantity,
            recorded_by=member["user_id"],
            customer_id=sale.customer_id,
            on_credit=sale.on_credit
        )
    except Exception as e:
        raise service_error("record sale", e)


@router.get("/recent")
async def get_recent_sales(
    limit: int = 50,
    member: Dict[str, Any] = Depends(get_current_member)
):
    """Get the most recent sales, newest first."""
    try:
        if limit > 100:
            limit = 100  # Cap at 100 for performance

        recent_sales = await sales_logger.get_recent_sales(member["shop_id"], limit)
        return {"sales": recent_sales, "count": len(recent_sales)}
    except Exception as e:
        raise service_error("get recent sales", e)


@router.get("/history")
async def get_sales_history(member: Dict[str, Any] = Depends(get_current_member)):
    """Sales grouped by day, newest day first."""
    try:
        history = await sales_logger.get_sales_history(member["shop_id"])
        if member["role"] != "owner":
            history.pop("total_profit", None)
            for day in history["days"]:
                day.pop("profit", None)
                for sale in day["sales"]:
                    sale.pop("profit", None)
        return history
    except Exception as e:
        raise service_error("get sales history", e)


@router.get("/report")
async def get_sales_report(
    time_range: str = Query("7d", alias="range", pattern="^(7d|30d|all)$"),
    member: Dict[str, Any] = Depends(get_current_member)
):
    """
    Sales report for the last 7 days, 30 days or all time.

    Returns revenue, profit and item totals, daily buckets and the top
    selling products.
    """
    try:
        if member["role"] != "owner":
            raise PermissionError("Only shop owners can view sales reports")
        return await sales_logger.get_sales_report(member["shop_id"], time_range)
    except Exception as e:
        raise service_error("get sales report", e)
