"""
Credit API endpoints for customers and their deni.
"""
from typing import Dict, Any, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from duka.api.deps import get_current_member, service_error
from duka.services.credit_ledger import CreditLedger

router = APIRouter()
credit_ledger = CreditLedger()


class CustomerRequest(BaseModel):
    """Request model for adding a customer."""
    name: str = Field(..., min_length=1, description="Customer name")
    phone: Optional[str] = Field(None, description="Phone number")
    email: Optional[str] = Field(None, description="Email address")


class CreditSaleRequest(BaseModel):
    """Request model for booking goods taken on credit."""
    customer_id: int = Field(..., description="Customer ID")
    product_name: str = Field(..., min_length=1, description="What was taken")
    quantity: int = Field(1, gt=0, description="Units taken")
    amount: float = Field(..., gt=0, description="Amount owed")
    sale_id: Optional[int] = Field(None, description="Related sale, if any")


class PaymentRequest(BaseModel):
    """Request model for a repayment."""
    amount: float = Field(..., gt=0, description="Amount paid")


@router.get("/customers")
async def list_customers(member: Dict[str, Any] = Depends(get_current_member)):
    """List customers with what each still owes."""
    try:
        customers = await credit_ledger.list_customers(member["shop_id"])
        return {"customers": customers, "count": len(customers)}
    except Exception as e:
        raise service_error("list customers", e)


@router.post("/customers", status_code=201)
async def add_customer(request: CustomerRequest, member: Dict[str, Any] = Depends(get_current_member)):
    try:
        return await credit_ledger.add_customer(
            member["shop_id"], request.name, phone=request.phone, email=request.email
        )
    except Exception as e:
        raise service_error("add customer", e)


@router.get("/customers/{customer_id}")
async def get_customer(customer_id: int, member: Dict[str, Any] = Depends(get_current_member)):
    """A customer with their outstanding credits."""
    try:
        return await credit_ledger.get_customer(member["shop_id"], customer_id)
    except Exception as e:
        raise service_error("get customer", e)


@router.get("/total-owed")
async def get_total_owed(member: Dict[str, Any] = Depends(get_current_member)):
    """Total deni owed to the shop."""
    try:
        return {"total_owed": await credit_ledger.get_total_owed(member["shop_id"])}
    except Exception as e:
        raise service_error("get total owed", e)


@router.get("/")
async def list_credit_sales(
    customer_id: Optional[int] = None,
    outstanding: bool = False,
    member: Dict[str, Any] = Depends(get_current_member)
):
    try:
        credits = await credit_ledger.list_credit_sales(
            member["shop_id"], customer_id=customer_id, outstanding_only=outstanding
        )
        return {"credit_sales": credits, "count": len(credits)}
    except Exception as e:
        raise service_error("list credit sales", e)


@router.post("/", status_code=201)
async def add_credit_sale(request: CreditSaleRequest, member: Dict[str, Any] = Depends(get_current_member)):
    """Book goods taken on credit against a customer."""
    try:
        return await credit_ledger.add_credit_sale(
            member["shop_id"],
            customer_id=request.customer_id,
            product_name=request.product_name,
            quantity=request.quantity,
            amount=request.amount,
            sale_id=request.sale_id
        )
    except Exception as e:
        raise service_error("add credit sale", e)


@router.get("/{credit_id}/payments")
async def list_payments(credit_id: int, member: Dict[str, Any] = Depends(get_current_member)):
    try:
        payments = await credit_ledger.list_payments(member["shop_id"], credit_id)
        return {"payments": payments, "count": len(payments)}
    except Exception as e:
        raise service_error("list payments", e)


@router.post("/{credit_id}/payments")
async def record_payment(
    credit_id: int,
    request: PaymentRequest,
    member: Dict[str, Any] = Depends(get_current_member)
):
    """
    Record a full or partial repayment.

    Payments larger than the outstanding balance are rejected.
    """
    try:
        return await credit_ledger.record_payment(
            member["shop_id"], credit_id, request.amount, recorded_by=member["user_id"]
        )
    except Exception as e:
        raise service_error("record payment", e)


@router.post("/{credit_id}/settle")
async def settle_credit(credit_id: int, member: Dict[str, Any] = Depends(get_current_member)):
    """Pay off the whole outstanding balance."""
    try:
        return await credit_ledger.settle_credit(member["shop_id"], credit_id, recorded_by=member["user_id"])
    except Exception as e:
        raise service_error("settle credit", e)
