"""
Expense Tracker service for running costs, Turnover Tax and profit & loss.
"""
import calendar
import logging
from typing import List, Dict, Any, Optional
from datetime import date
from sqlalchemy import func

from duka.core.clock import local_today, local_month_bounds
from duka.core.config import settings
from duka.core.database import get_db_context
from duka.core.redis_client import invalidate_shop_stats
from duka.models.expenses import Expense, ExpenseCategory
from duka.services.sales_logger import SalesLogger
from duka.services.shop_accounts import ensure_owner

logger = logging.getLogger(__name__)


def serialize_expense(expense: Expense) -> Dict[str, Any]:
    return {
        "id": expense.id,
        "category": expense.category.value,
        "description": expense.description,
        "amount": expense.amount,
        "date": expense.date.isoformat(),
        "created_at": expense.created_at.isoformat()
    }


class ExpenseTracker:
    """Service for recording expenses and estimating TOT."""

    def __init__(self):
        self.sales_logger = SalesLogger()

    async def add_expense(
        self,
        member: Dict[str, Any],
        description: str,
        amount: float,
        category: str = ExpenseCategory.OTHER.value,
        expense_date: Optional[date] = None
    ) -> Dict[str, Any]:
        """Record an expense in the owner's shop."""
        ensure_owner(member)
        shop_id = member["shop_id"]
        description = (description or "").strip()
        if not description:
            raise ValueError("Expense description is required")
        amount = round(amount or 0.0, 2)
        if amount <= 0:
            raise ValueError("Expense amount must be greater than zero")
        try:
            category_value = ExpenseCategory(category or ExpenseCategory.OTHER.value)
        except ValueError:
            raise ValueError(f"Invalid expense category: {category}")

        with get_db_context() as db:
            expense = Expense(
                shop_id=shop_id,
                category=category_value,
                description=description,
                amount=amount,
                date=expense_date or local_today()
            )
            db.add(expense)
            db.commit()

            invalidate_shop_stats(shop_id)
            logger.info(f"Expense recorded for shop {shop_id}: {expense.category.value} {expense.amount}")
            return serialize_expense(expense)

    async def delete_expense(self, member: Dict[str, Any], expense_id: int) -> bool:
        ensure_owner(member)
        shop_id = member["shop_id"]
        with get_db_context() as db:
            expense = db.query(Expense).filter(
                Expense.id == expense_id,
                Expense.shop_id == shop_id
            ).first()
            if not expense:
                raise LookupError(f"Expense {expense_id} not found")

            db.delete(expense)
            db.commit()

            invalidate_shop_stats(shop_id)
            logger.info(f"Expense {expense_id} deleted from shop {shop_id}")
            return True

    async def list_expenses(
        self,
        shop_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[Dict[str, Any]]:
        """Expenses newest date first; both date bounds inclusive."""
        with get_db_context() as db:
            query = self._expense_query(db, shop_id, start_date, end_date)
            expenses = query.order_by(Expense.date.desc(), Expense.id.desc()).all()
            return [serialize_expense(e) for e in expenses]

    async def get_total_expenses(
        self,
        shop_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> float:
        with get_db_context() as db:
            query = self._expense_query(db, shop_id, start_date, end_date)
            total = query.with_entities(func.sum(Expense.amount)).scalar()
            return round(total or 0.0, 2)

    async def get_monthly_sales(self, shop_id: int, day: Optional[date] = None) -> float:
        """Sales total for the shop-local month containing `day`."""
        start, end = local_month_bounds(day or local_today())
        return await self.sales_logger.get_sales_total(shop_id, start, end)

    async def estimate_tot(self, shop_id: int, day: Optional[date] = None) -> Dict[str, Any]:
        """Turnover Tax due on this month's sales."""
        monthly_sales = await self.get_monthly_sales(shop_id, day)
        return {
            "monthly_sales": monthly_sales,
            "rate": settings.tot_rate,
            "amount": round(monthly_sales * settings.tot_rate, 2)
        }

    async def quick_add_tot(self, member: Dict[str, Any], day: Optional[date] = None) -> Dict[str, Any]:
        """Record this month's Turnover Tax as a Tax expense."""
        ensure_owner(member)
        estimate = await self.estimate_tot(member["shop_id"], day)
        if estimate["amount"] <= 0:
            raise ValueError(
                f"No sales yet. TOT is calculated as {settings.tot_rate:.0%} of your recorded sales."
            )

        return await self.add_expense(
            member,
            description=f"Turnover Tax ({settings.tot_rate:.0%})",
            amount=estimate["amount"],
            category=ExpenseCategory.TAX.value,
            expense_date=day or local_today()
        )

    async def get_profit_and_loss(self, shop_id: int, day: Optional[date] = None) -> Dict[str, Any]:
        """Month-to-date sales, gross profit, expenses and net profit."""
        day = day or local_today()
        start, end = local_month_bounds(day)
        summary = await self.sales_logger.get_sales_summary(shop_id, start, end)

        first = day.replace(day=1)
        last = first.replace(day=calendar.monthrange(first.year, first.month)[1])
        expenses = await self.get_total_expenses(shop_id, start_date=first, end_date=last)

        return {
            "month": first.strftime("%Y-%m"),
            "sales": summary["revenue"],
            "gross_profit": summary["profit"],
            "expenses": expenses,
            "net_profit": round(summary["profit"] - expenses, 2)
        }

    @staticmethod
    def _expense_query(db, shop_id: int, start_date: Optional[date], end_date: Optional[date]):
        query = db.query(Expense).filter(Expense.shop_id == shop_id)
        if start_date:
            query = query.filter(Expense.date >= start_date)
        if end_date:
            query = query.filter(Expense.date <= end_date)
        return query
