"""
Employee API endpoints for owners managing shop attendants.
"""
from typing import Dict, Any
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from duka.api.deps import get_current_member, service_error, shop_accounts

router = APIRouter()


class EmployeeRequest(BaseModel):
    """Request model for creating an attendant account."""
    email: str = Field(..., description="Login email")
    password: str = Field(..., min_length=6, description="Initial password")
    full_name: str = Field(..., min_length=1, description="Full name")


@router.get("/")
async def list_employees(member: Dict[str, Any] = Depends(get_current_member)):
    """List the shop's attendants."""
    try:
        employees = await shop_accounts.list_employees(member)
        return {"employees": employees, "count": len(employees)}
    except Exception as e:
        raise service_error("list employees", e)


@router.post("/", status_code=201)
async def create_employee(
    request: EmployeeRequest,
    member: Dict[str, Any] = Depends(get_current_member)
):
    """Create an attendant account in the owner's shop."""
    try:
        return await shop_accounts.create_employee(
            member,
            email=request.email,
            password=request.password,
            full_name=request.full_name
        )
    except Exception as e:
        raise service_error("create employee", e)


@router.delete("/{member_id}")
async def remove_employee(member_id: int, member: Dict[str, Any] = Depends(get_current_member)):
    """Remove an attendant from the shop."""
    try:
        await shop_accounts.remove_employee(member, member_id)
        return {"status": "removed", "id": member_id}
    except Exception as e:
        raise service_error("remove employee", e)
