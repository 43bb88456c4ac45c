"""
Tests for Expense Tracker service.
"""
import pytest
from datetime import timedelta

from duka.core.clock import local_today
from duka.services.expense_tracker import ExpenseTracker
from duka.services.sales_logger import SalesLogger


@pytest.fixture
def tracker():
    return ExpenseTracker()


class TestExpenses:

    @pytest.mark.asyncio
    async def test_add_expense_defaults(self, tracker, owner):
        expense = await tracker.add_expense(owner, " Boda boda ", 200)

        assert expense["description"] == "Boda boda"
        assert expense["category"] == "Other"
        assert expense["amount"] == 200.0
        assert expense["date"] == local_today().isoformat()

    @pytest.mark.asyncio
    async def test_add_expense_validation(self, tracker, owner):
        with pytest.raises(ValueError, match="Invalid expense category"):
            await tracker.add_expense(owner, "Bribe", 100, category="Entertainment")
        with pytest.raises(ValueError, match="greater than zero"):
            await tracker.add_expense(owner, "Rent", 0, category="Rent")
        with pytest.raises(ValueError, match="description is required"):
            await tracker.add_expense(owner, "", 100)

    @pytest.mark.asyncio
    async def test_amount_that_rounds_to_zero(self, tracker, owner):
        with pytest.raises(ValueError, match="greater than zero"):
            await tracker.add_expense(owner, "Rubber band", 0.001)

        assert await tracker.list_expenses(owner["shop_id"]) == []

    @pytest.mark.asyncio
    async def test_attendant_cannot_manage_expenses(self, tracker, owner, attendant, unga):
        expense = await tracker.add_expense(owner, "Rent", 5000, category="Rent")
        await SalesLogger().record_sale(owner["shop_id"], unga["id"], 5)

        with pytest.raises(PermissionError):
            await tracker.add_expense(attendant, "Lunch", 150)
        with pytest.raises(PermissionError):
            await tracker.delete_expense(attendant, expense["id"])
        with pytest.raises(PermissionError):
            await tracker.quick_add_tot(attendant)

        assert [e["id"] for e in await tracker.list_expenses(owner["shop_id"])] == [expense["id"]]

    @pytest.mark.asyncio
    async def test_list_and_total_with_inclusive_dates(self, tracker, owner):
        today = local_today()
        yesterday = today - timedelta(days=1)
        await tracker.add_expense(owner, "Rent", 5000, category="Rent", expense_date=yesterday)
        await tracker.add_expense(owner, "Tokens", 800, category="Utilities", expense_date=today)
        await tracker.add_expense(
            owner, "Old stock", 1200, category="Stock", expense_date=today - timedelta(days=10)
        )

        expenses = await tracker.list_expenses(owner["shop_id"], start_date=yesterday, end_date=today)

        assert [e["description"] for e in expenses] == ["Tokens", "Rent"]
        assert await tracker.get_total_expenses(owner["shop_id"], yesterday, today) == 5800.0
        assert await tracker.get_total_expenses(owner["shop_id"]) == 7000.0

    @pytest.mark.asyncio
    async def test_delete_expense(self, tracker, owner, other_owner):
        expense = await tracker.add_expense(owner, "Rent", 5000, category="Rent")

        with pytest.raises(LookupError):
            await tracker.delete_expense(other_owner, expense["id"])

        assert await tracker.delete_expense(owner, expense["id"]) is True
        assert await tracker.list_expenses(owner["shop_id"]) == []

        with pytest.raises(LookupError):
            await tracker.delete_expense(owner, expense["id"])


class TestTurnoverTax:

    @pytest.mark.asyncio
    async def test_estimate_is_three_percent_of_month_sales(self, tracker, owner, unga):
        await SalesLogger().record_sale(owner["shop_id"], unga["id"], 5)

        estimate = await tracker.estimate_tot(owner["shop_id"])

        assert estimate == {"monthly_sales": 900.0, "rate": 0.03, "amount": 27.0}

    @pytest.mark.asyncio
    async def test_quick_add_without_sales(self, tracker, owner):
        with pytest.raises(ValueError, match="No sales yet. TOT is calculated as 3% of your recorded sales."):
            await tracker.quick_add_tot(owner)

        assert await tracker.list_expenses(owner["shop_id"]) == []

    @pytest.mark.asyncio
    async def test_quick_add_records_tax_expense(self, tracker, owner, unga):
        await SalesLogger().record_sale(owner["shop_id"], unga["id"], 10)

        expense = await tracker.quick_add_tot(owner)

        assert expense["category"] == "Tax"
        assert expense["description"] == "Turnover Tax (3%)"
        assert expense["amount"] == 54.0
        assert expense["date"] == local_today().isoformat()


class TestProfitAndLoss:

    @pytest.mark.asyncio
    async def test_month_profit_and_loss(self, tracker, owner, unga):
        await SalesLogger().record_sale(owner["shop_id"], unga["id"], 4)
        today = local_today()
        await tracker.add_expense(owner, "Tokens", 50, category="Utilities", expense_date=today)
        await tracker.add_expense(
            owner, "Last month's rent", 5000, category="Rent",
            expense_date=today.replace(day=1) - timedelta(days=1)
        )

        pnl = await tracker.get_profit_and_loss(owner["shop_id"], today)

        assert pnl == {
            "month": today.strftime("%Y-%m"),
            "sales": 720.0,
            "gross_profit": 120.0,
            "expenses": 50.0,
            "net_profit": 70.0
        }

    @pytest.mark.asyncio
    async def test_net_profit_can_be_negative(self, tracker, owner):
        await tracker.add_expense(owner, "Rent", 3000, category="Rent")

        pnl = await tracker.get_profit_and_loss(owner["shop_id"])

        assert pnl["sales"] == 0
        assert pnl["net_profit"] == -3000.0
