"""
Authentication API endpoints: sign-up, sign-in and sessions.
"""
from typing import Dict, Any, Optional
from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel, Field

from duka.api.deps import get_current_member, get_session_token, service_error, shop_accounts

router = APIRouter()


class SignUpRequest(BaseModel):
    """Request model for registering a shop owner."""
    email: str = Field(..., description="Login email")
    password: str = Field(..., min_length=6, description="Password")
    full_name: str = Field(..., min_length=1, description="Owner's full name")
    shop_name: Optional[str] = Field(None, description="Shop name")


class SignInRequest(BaseModel):
    """Request model for signing in."""
    email: str
    password: str


@router.post("/signup", status_code=201)
async def sign_up(request: SignUpRequest):
    """
    Register a new owner together with their shop.

    Sign in afterwards to obtain a session token.
    """
    try:
        return await shop_accounts.sign_up(
            email=request.email,
            password=request.password,
            full_name=request.full_name,
            shop_name=request.shop_name
        )
    except Exception as e:
        raise service_error("sign up", e)


@router.post("/signin")
async def sign_in(request: SignInRequest):
    """Sign in and receive a session token."""
    try:
        return await shop_accounts.sign_in(request.email, request.password)
    except ValueError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except Exception as e:
        raise service_error("sign in", e)


@router.post("/signout")
async def sign_out(authorization: Optional[str] = Header(None)):
    """Close the current session."""
    token = get_session_token(authorization)
    await shop_accounts.sign_out(token)
    return {"status": "signed_out"}


@router.get("/me")
async def get_me(member: Dict[str, Any] = Depends(get_current_member)):
    """Return the signed-in user, their shop and role."""
    return {
        "user": {
            "id": member["user_id"],
            "email": member["email"],
            "full_name": member["full_name"]
        },
        "shop": {"id": member["shop_id"], "name": member["shop_name"]},
        "role": member["role"],
        "is_owner": member["role"] == "owner"
    }
