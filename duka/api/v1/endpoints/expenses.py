"""
Expense API endpoints for running costs and Turnover Tax.
"""
from typing import Dict, Any, Optional
from datetime import date
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from duka.api.deps import get_current_member, service_error
from duka.models.expenses import ExpenseCategory
from duka.services.expense_tracker import ExpenseTracker

router = APIRouter()
expense_tracker = ExpenseTracker()


class ExpenseRequest(BaseModel):
    """Request model for recording an expense."""
    description: str = Field(..., min_length=1, description="What the money was spent on")
    amount: float = Field(..., gt=0, description="Amount spent")
    category: ExpenseCategory = Field(ExpenseCategory.OTHER, description="Expense category")
    expense_date: Optional[date] = Field(None, alias="date", description="Date of the expense, defaults to today")

    model_config = ConfigDict(populate_by_name=True)


@router.get("/")
async def list_expenses(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    member: Dict[str, Any] = Depends(get_current_member)
):
    """List expenses, newest first, with their total (owners only)."""
    try:
        if member["role"] != "owner":
            raise PermissionError("Only shop owners can view expenses")
        expenses = await expense_tracker.list_expenses(member["shop_id"], start_date, end_date)
        total = await expense_tracker.get_total_expenses(member["shop_id"], start_date, end_date)
        return {"expenses": expenses, "count": len(expenses), "total": total}
    except Exception as e:
        raise service_error("list expenses", e)


@router.post("/", status_code=201)
async def add_expense(request: ExpenseRequest, member: Dict[str, Any] = Depends(get_current_member)):
    try:
        return await expense_tracker.add_expense(
            member,
            description=request.description,
            amount=request.amount,
            category=request.category.value,
            expense_date=request.expense_date
        )
    except Exception as e:
        raise service_error("add expense", e)


@router.delete("/{expense_id}")
async def delete_expense(expense_id: int, member: Dict[str, Any] = Depends(get_current_member)):
    try:
        await expense_tracker.delete_expense(member, expense_id)
        return {"status": "deleted", "id": expense_id}
    except Exception as e:
        raise service_error("delete expense", e)


@router.get("/tot")
async def estimate_tot(member: Dict[str, Any] = Depends(get_current_member)):
    """Estimated Turnover Tax on this month's sales (owners only)."""
    try:
        if member["role"] != "owner":
            raise PermissionError("Only shop owners can view Turnover Tax")
        return await expense_tracker.estimate_tot(member["shop_id"])
    except Exception as e:
        raise service_error("estimate TOT", e)


@router.post("/tot", status_code=201)
async def quick_add_tot(member: Dict[str, Any] = Depends(get_current_member)):
    """Record this month's Turnover Tax as a Tax expense."""
    try:
        return await expense_tracker.quick_add_tot(member)
    except Exception as e:
        raise service_error("record TOT", e)


@router.get("/profit-and-loss")
async def get_profit_and_loss(
    month: Optional[date] = None,
    member: Dict[str, Any] = Depends(get_current_member)
):
    """Month sales, gross profit, expenses and net profit (owners only)."""
    try:
        if member["role"] != "owner":
            raise PermissionError("Only shop owners can view profit and loss")
        return await expense_tracker.get_profit_and_loss(member["shop_id"], month)
    except Exception as e:
        raise service_error("get profit and loss", e)
