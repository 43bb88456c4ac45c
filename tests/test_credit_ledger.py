"""
Tests for Credit Ledger service.
"""
import pytest
import pytest_asyncio

from duka.models.credit import CreditStatus
from duka.services.credit_ledger import CreditLedger, credit_status


@pytest.fixture
def ledger():
    return CreditLedger()


@pytest_asyncio.fixture
async def customer(ledger, owner):
    return await ledger.add_customer(owner["shop_id"], "Wanjiku Kamau", phone=" 0712345678 ")


@pytest_asyncio.fixture
async def credit(ledger, owner, customer):
    return await ledger.add_credit_sale(owner["shop_id"], customer["id"], "Unga 2kg", 2, 360)


def test_credit_status():
    assert credit_status(100, 0) == CreditStatus.PENDING
    assert credit_status(100, 40) == CreditStatus.PARTIAL
    assert credit_status(100, 100) == CreditStatus.PAID
    assert credit_status(0.3, 0.1 + 0.2) == CreditStatus.PAID


class TestCustomers:

    @pytest.mark.asyncio
    async def test_add_customer(self, customer):
        assert customer["name"] == "Wanjiku Kamau"
        assert customer["phone"] == "0712345678"
        assert customer["email"] is None
        assert customer["total_owed"] == 0.0

    @pytest.mark.asyncio
    async def test_customer_name_required(self, ledger, owner):
        with pytest.raises(ValueError, match="name is required"):
            await ledger.add_customer(owner["shop_id"], "  ")

    @pytest.mark.asyncio
    async def test_list_customers_with_total_owed(self, ledger, owner, customer, credit):
        other = await ledger.add_customer(owner["shop_id"], "Baraka")

        customers = await ledger.list_customers(owner["shop_id"])

        assert [(c["name"], c["total_owed"]) for c in customers] == [
            ("Baraka", 0.0),
            ("Wanjiku Kamau", 360.0),
        ]
        assert customers[0]["id"] == other["id"]

    @pytest.mark.asyncio
    async def test_get_customer_outstanding_credits(self, ledger, owner, customer, credit):
        paid = await ledger.add_credit_sale(owner["shop_id"], customer["id"], "Sukari", 1, 170)
        await ledger.settle_credit(owner["shop_id"], paid["id"])

        result = await ledger.get_customer(owner["shop_id"], customer["id"])

        assert [c["id"] for c in result["outstanding_credits"]] == [credit["id"]]
        assert result["total_owed"] == 360.0

    @pytest.mark.asyncio
    async def test_customer_from_other_shop(self, ledger, other_owner, customer):
        with pytest.raises(LookupError):
            await ledger.get_customer(other_owner["shop_id"], customer["id"])


class TestCreditLedger:
    """Test cases for CreditLedger service."""

    @pytest.mark.asyncio
    async def test_new_credit_is_pending(self, credit):
        assert credit["status"] == "pending"
        assert credit["balance"] == 360.0
        assert credit["amount_paid"] == 0.0

    @pytest.mark.asyncio
    async def test_credit_amount_must_be_positive(self, ledger, owner, customer):
        with pytest.raises(ValueError):
            await ledger.add_credit_sale(owner["shop_id"], customer["id"], "Unga", 1, 0)

    @pytest.mark.asyncio
    async def test_credit_amount_that_rounds_to_zero(self, ledger, owner, customer):
        with pytest.raises(ValueError, match="greater than zero"):
            await ledger.add_credit_sale(owner["shop_id"], customer["id"], "Pipi", 1, 0.004)

        assert await ledger.list_credit_sales(owner["shop_id"]) == []

    @pytest.mark.asyncio
    async def test_credit_for_unknown_customer(self, ledger, owner):
        with pytest.raises(LookupError):
            await ledger.add_credit_sale(owner["shop_id"], 999, "Unga", 1, 100)

    @pytest.mark.asyncio
    async def test_partial_then_full_payment(self, ledger, owner, credit):
        partial = await ledger.record_payment(owner["shop_id"], credit["id"], 100)

        assert partial["status"] == "partial"
        assert partial["amount_paid"] == 100.0
        assert partial["balance"] == 260.0
        assert partial["payment"]["amount"] == 100.0

        paid = await ledger.record_payment(owner["shop_id"], credit["id"], 260)

        assert paid["status"] == "paid"
        assert paid["balance"] == 0.0
        assert await ledger.get_total_owed(owner["shop_id"]) == 0.0

    @pytest.mark.asyncio
    async def test_overpayment_is_rejected(self, ledger, owner, credit):
        with pytest.raises(ValueError, match="exceeds outstanding balance"):
            await ledger.record_payment(owner["shop_id"], credit["id"], 500)

        unchanged = (await ledger.list_credit_sales(owner["shop_id"]))[0]
        assert unchanged["amount_paid"] == 0.0
        assert unchanged["status"] == "pending"
        assert await ledger.list_payments(owner["shop_id"], credit["id"]) == []

    @pytest.mark.asyncio
    async def test_payment_must_be_positive(self, ledger, owner, credit):
        with pytest.raises(ValueError, match="greater than zero"):
            await ledger.record_payment(owner["shop_id"], credit["id"], 0)

    @pytest.mark.asyncio
    async def test_payment_that_rounds_to_zero(self, ledger, owner, credit):
        with pytest.raises(ValueError, match="greater than zero"):
            await ledger.record_payment(owner["shop_id"], credit["id"], 0.004)

        assert await ledger.list_payments(owner["shop_id"], credit["id"]) == []

    @pytest.mark.asyncio
    async def test_paid_credit_accepts_no_more_payments(self, ledger, owner, credit):
        await ledger.settle_credit(owner["shop_id"], credit["id"])

        with pytest.raises(ValueError, match="already fully paid"):
            await ledger.record_payment(owner["shop_id"], credit["id"], 1)
        with pytest.raises(ValueError, match="already fully paid"):
            await ledger.settle_credit(owner["shop_id"], credit["id"])

    @pytest.mark.asyncio
    async def test_settle_pays_remaining_balance(self, ledger, owner, credit):
        await ledger.record_payment(owner["shop_id"], credit["id"], 60.5)

        settled = await ledger.settle_credit(owner["shop_id"], credit["id"])

        assert settled["status"] == "paid"
        assert settled["payment"]["amount"] == 299.5
        payments = await ledger.list_payments(owner["shop_id"], credit["id"])
        assert [p["amount"] for p in payments] == [60.5, 299.5]

    @pytest.mark.asyncio
    async def test_list_outstanding_only(self, ledger, owner, customer, credit):
        paid = await ledger.add_credit_sale(owner["shop_id"], customer["id"], "Sukari", 1, 170)
        await ledger.settle_credit(owner["shop_id"], paid["id"])

        everything = await ledger.list_credit_sales(owner["shop_id"])
        outstanding = await ledger.list_credit_sales(owner["shop_id"], outstanding_only=True)

        assert len(everything) == 2
        assert [c["id"] for c in outstanding] == [credit["id"]]

    @pytest.mark.asyncio
    async def test_total_owed_across_customers(self, ledger, owner, credit):
        baraka = await ledger.add_customer(owner["shop_id"], "Baraka")
        await ledger.add_credit_sale(owner["shop_id"], baraka["id"], "Airtime", 1, 100)
        await ledger.record_payment(owner["shop_id"], credit["id"], 60)

        assert await ledger.get_total_owed(owner["shop_id"]) == 400.0
        assert await ledger.get_customer_total_owed(owner["shop_id"], baraka["id"]) == 100.0

    @pytest.mark.asyncio
    async def test_payment_on_other_shops_credit(self, ledger, other_owner, credit):
        with pytest.raises(LookupError):
            await ledger.record_payment(other_owner["shop_id"], credit["id"], 10)
