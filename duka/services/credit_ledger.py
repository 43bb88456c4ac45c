"""
Credit Ledger service for customer deni: credit sales and repayments.
"""
import logging
from typing import List, Dict, Any, Optional
from sqlalchemy.orm import Session

from duka.core.database import get_db_context
from duka.core.redis_client import invalidate_shop_stats
from duka.models.credit import Customer, CreditSale, CreditPayment, CreditStatus

logger = logging.getLogger(__name__)


def credit_status(amount: float, amount_paid: float) -> CreditStatus:
    """Status implied by how much of a credit has been repaid."""
    if round(amount - amount_paid, 2) <= 0:
        return CreditStatus.PAID
    if amount_paid > 0:
        return CreditStatus.PARTIAL
    return CreditStatus.PENDING


def serialize_credit_sale(credit: CreditSale) -> Dict[str, Any]:
    return {
        "id": credit.id,
        "customer_id": credit.customer_id,
        "sale_id": credit.sale_id,
        "product_name": credit.product_name,
        "quantity": credit.quantity,
        "amount": credit.amount,
        "amount_paid": credit.amount_paid,
        "balance": credit.balance,
        "status": credit.status.value,
        "created_at": credit.created_at.isoformat()
    }


class CreditLedger:
    """Service tracking what customers owe the shop."""

    async def add_customer(
        self,
        shop_id: int,
        name: str,
        phone: Optional[str] = None,
        email: Optional[str] = None
    ) -> Dict[str, Any]:
        name = (name or "").strip()
        if not name:
            raise ValueError("Customer name is required")

        with get_db_context() as db:
            customer = Customer(
                shop_id=shop_id,
                name=name,
                phone=(phone or "").strip() or None,
                email=(email or "").strip() or None
            )
            db.add(customer)
            db.commit()

            logger.info(f"Customer added to shop {shop_id}: {customer.name}")
            return self._serialize_customer(customer, total_owed=0.0)

    async def list_customers(self, shop_id: int) -> List[Dict[str, Any]]:
        """Customers ordered by name, each with what they still owe."""
        with get_db_context() as db:
            customers = db.query(Customer).filter(
                Customer.shop_id == shop_id
            ).order_by(Customer.name.asc()).all()

            return [
                self._serialize_customer(c, total_owed=self._owed(c.credit_sales))
                for c in customers
            ]

    async def get_customer(self, shop_id: int, customer_id: int) -> Dict[str, Any]:
        """A customer with their outstanding credits."""
        with get_db_context() as db:
            customer = self._get_customer(db, shop_id, customer_id)
            outstanding = [c for c in customer.credit_sales if c.status != CreditStatus.PAID]
            outstanding.sort(key=lambda c: (c.created_at, c.id))

            result = self._serialize_customer(customer, total_owed=self._owed(customer.credit_sales))
            result["outstanding_credits"] = [serialize_credit_sale(c) for c in outstanding]
            return result

    async def add_credit_sale(
        self,
        shop_id: int,
        customer_id: int,
        product_name: str,
        quantity: int,
        amount: float,
        sale_id: Optional[int] = None
    ) -> Dict[str, Any]:
        """Book goods taken on credit against a customer."""
        amount = round(amount or 0.0, 2)
        if amount <= 0:
            raise ValueError("Credit amount must be greater than zero")
        if quantity is None or quantity <= 0:
            raise ValueError("Quantity must be greater than zero")
        if not (product_name or "").strip():
            raise ValueError("Product name is required")

        with get_db_context() as db:
            customer = self._get_customer(db, shop_id, customer_id)
            credit = CreditSale(
                shop_id=shop_id,
                customer_id=customer.id,
                sale_id=sale_id,
                product_name=product_name.strip(),
                quantity=quantity,
                amount=amount,
                amount_paid=0.0,
                status=credit_status(amount, 0.0)
            )
            db.add(credit)
            db.commit()

            invalidate_shop_stats(shop_id)
            logger.info(f"Credit of {credit.amount} booked for customer {customer.id}")
            return serialize_credit_sale(credit)

    async def record_payment(
        self,
        shop_id: int,
        credit_id: int,
        amount: float,
        recorded_by: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Apply a repayment to a credit sale.

        The payment may be partial but never larger than the outstanding
        balance. Status moves forward only: pending -> partial -> paid.

        Returns:
            Dict containing the updated credit sale and the payment
        """
        amount = round(amount or 0.0, 2)
        if amount <= 0:
            raise ValueError("Payment amount must be greater than zero")

        with get_db_context() as db:
            credit = self._get_credit(db, shop_id, credit_id)
            return self._apply_payment(db, shop_id, credit, amount, recorded_by)

    async def settle_credit(self, shop_id: int, credit_id: int, recorded_by: Optional[int] = None) -> Dict[str, Any]:
        """Pay off the full outstanding balance of a credit."""
        with get_db_context() as db:
            credit = self._get_credit(db, shop_id, credit_id)
            return self._apply_payment(db, shop_id, credit, credit.balance, recorded_by)

    @staticmethod
    def _apply_payment(
        db: Session,
        shop_id: int,
        credit: CreditSale,
        amount: float,
        recorded_by: Optional[int]
    ) -> Dict[str, Any]:
        """Write a payment against a credit locked in the caller's session."""
        if credit.status == CreditStatus.PAID:
            raise ValueError("This credit is already fully paid")

        balance = credit.balance
        if amount > balance:
            raise ValueError(f"Payment of {amount} exceeds outstanding balance of {balance}")

        credit.amount_paid = round((credit.amount_paid or 0.0) + amount, 2)
        credit.status = credit_status(credit.amount, credit.amount_paid)

        payment = CreditPayment(credit_sale_id=credit.id, amount=amount, recorded_by=recorded_by)
        db.add(payment)
        db.commit()

        invalidate_shop_stats(shop_id)
        logger.info(f"Payment of {amount} recorded on credit {credit.id}; balance {credit.balance}")

        result = serialize_credit_sale(credit)
        result["payment"] = {
            "id": payment.id,
            "amount": payment.amount,
            "created_at": payment.created_at.isoformat()
        }
        return result

    async def list_credit_sales(
        self,
        shop_id: int,
        customer_id: Optional[int] = None,
        outstanding_only: bool = False
    ) -> List[Dict[str, Any]]:
        with get_db_context() as db:
            query = db.query(CreditSale).filter(CreditSale.shop_id == shop_id)
            if customer_id is not None:
                query = query.filter(CreditSale.customer_id == customer_id)
            if outstanding_only:
                query = query.filter(CreditSale.status != CreditStatus.PAID)

            credits = query.order_by(CreditSale.created_at.desc(), CreditSale.id.desc()).all()
            return [serialize_credit_sale(c) for c in credits]

    async def list_payments(self, shop_id: int, credit_id: int) -> List[Dict[str, Any]]:
        with get_db_context() as db:
            credit = self._get_credit(db, shop_id, credit_id)
            return [
                {"id": p.id, "amount": p.amount, "recorded_by": p.recorded_by, "created_at": p.created_at.isoformat()}
                for p in sorted(credit.payments, key=lambda p: (p.created_at, p.id))
            ]

    async def get_total_owed(self, shop_id: int) -> float:
        """Sum of balances over every unpaid credit in the shop."""
        with get_db_context() as db:
            return self.total_owed(db, shop_id)

    async def get_customer_total_owed(self, shop_id: int, customer_id: int) -> float:
        with get_db_context() as db:
            customer = self._get_customer(db, shop_id, customer_id)
            return self._owed(customer.credit_sales)

    @classmethod
    def total_owed(cls, db: Session, shop_id: int) -> float:
        credits = db.query(CreditSale).filter(
            CreditSale.shop_id == shop_id,
            CreditSale.status != CreditStatus.PAID
        ).all()
        return cls._owed(credits)

    @staticmethod
    def _owed(credits: List[CreditSale]) -> float:
        return round(sum(c.balance for c in credits if c.status != CreditStatus.PAID), 2)

    @staticmethod
    def _get_customer(db: Session, shop_id: int, customer_id: int) -> Customer:
        customer = db.query(Customer).filter(
            Customer.id == customer_id,
            Customer.shop_id == shop_id
        ).first()
        if not customer:
            raise LookupError(f"Customer {customer_id} not found")
        return customer

    @staticmethod
    def _get_credit(db: Session, shop_id: int, credit_id: int) -> CreditSale:
        credit = db.query(CreditSale).filter(
            CreditSale.id == credit_id,
            CreditSale.shop_id == shop_id
        ).with_for_update().first()
        if not credit:
            raise LookupError(f"Credit sale {credit_id} not found")
        return credit

    @staticmethod
    def _serialize_customer(customer: Customer, total_owed: float) -> Dict[str, Any]:
        return {
            "id": customer.id,
            "name": customer.name,
            "phone": customer.phone,
            "email": customer.email,
            "total_owed": total_owed,
            "created_at": customer.created_at.isoformat()
        }
