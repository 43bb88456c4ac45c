"""
Shared API dependencies.
"""
from typing import Any, Dict, Optional
from fastapi import Header, HTTPException

from duka.services.shop_accounts import ShopAccounts

shop_accounts = ShopAccounts()


def get_session_token(authorization: Optional[str] = Header(None)) -> str:
    """Extract the bearer session token from the Authorization header."""
    if not authorization:
        raise HTTPException(status_code=401, detail="Not authenticated")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Invalid authorization header")
    return token.strip()


async def get_current_member(authorization: Optional[str] = Header(None)) -> Dict[str, Any]:
    """Resolve the caller's shop membership from their session."""
    token = get_session_token(authorization)
    member = await shop_accounts.get_member(token)
    if not member:
        raise HTTPException(status_code=401, detail="Session expired or invalid")
    return member


def service_error(action: str, exc: Exception) -> HTTPException:
    """Map a service exception to the HTTP error shown to the user."""
    if isinstance(exc, HTTPException):
        return exc
    if isinstance(exc, PermissionError):
        return HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, LookupError):
        return HTTPException(status_code=404, detail=str(exc).strip("'\""))
    if isinstance(exc, ValueError):
        return HTTPException(status_code=400, detail=str(exc))
    return HTTPException(status_code=500, detail=f"Failed to {action}: {str(exc)}")
