"""
Shop Accounts service for sign-up, sign-in, sessions and employees.
"""
import logging
from typing import List, Dict, Any, Optional
from sqlalchemy.orm import Session

from duka.core.config import settings
from duka.core.database import get_db_context
from duka.core.redis_client import session_manager
from duka.core.security import hash_password, verify_password
from duka.models.shops import Shop, ShopMember, Profile, MemberRole

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def ensure_owner(member: Dict[str, Any]) -> None:
    """Raise PermissionError unless the session belongs to a shop owner."""
    if member.get("role") != MemberRole.OWNER.value:
        raise PermissionError("Only shop owners can perform this action")


class ShopAccounts:
    """Service for shop accounts and staff membership."""

    def __init__(self):
        self.sessions = session_manager

    async def sign_up(
        self,
        email: str,
        password: str,
        full_name: str,
        shop_name: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Register a new shop owner.

        Creates the profile, the shop and the owner membership in a single
        transaction.

        Args:
            email: Login email, stored lowercased
            password: Plain-text password, at least 6 characters
            full_name: Owner's name
            shop_name: Optional shop name, defaults to "<full_name>'s Shop"

        Returns:
            Dict with the new user and shop
        """
        with get_db_context() as db:
            profile = self._create_profile(db, email, password, full_name)

            shop = Shop(name=(shop_name or "").strip() or f"{full_name}'s Shop")
            db.add(shop)
            db.flush()

            member = ShopMember(shop_id=shop.id, user_id=profile.id, role=MemberRole.OWNER)
            db.add(member)
            db.commit()

            logger.info(f"Shop {shop.id} registered by user {profile.id}")
            return {
                "user": self._serialize_profile(profile),
                "shop": self._serialize_shop(shop),
                "role": member.role.value
            }

    async def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        """Verify credentials and open a session."""
        with get_db_context() as db:
            profile = db.query(Profile).filter(Profile.email == self._normalize_email(email)).first()
            if not profile or not verify_password(password, profile.password_hash):
                logger.warning(f"Failed sign-in attempt for {email}")
                raise ValueError("Invalid email or password")

            member = profile.membership
            if not member:
                raise ValueError("This account is not linked to any shop")

            session_token = self.sessions.create_session(profile.id, {
                "shop_id": member.shop_id,
                "role": member.role.value
            })

            logger.info(f"User {profile.id} signed in to shop {member.shop_id}")
            return {
                "session_token": session_token,
                "user": self._serialize_profile(profile),
                "shop": self._serialize_shop(member.shop),
                "role": member.role.value
            }

    async def sign_out(self, session_token: str) -> bool:
        """Close a session."""
        return self.sessions.delete_session(session_token)

    async def get_member(self, session_token: str) -> Optional[Dict[str, Any]]:
        """
        Resolve a session token to the caller's membership.

        The session payload is re-checked against the database so that a
        removed employee loses access immediately.
        """
        session = self.sessions.get_session(session_token)
        if not session:
            return None

        with get_db_context() as db:
            member = db.query(ShopMember).filter(ShopMember.user_id == session.get("user_id")).first()
            if not member:
                self.sessions.delete_session(session_token)
                return None

            self.sessions.extend_session(session_token)
            return {
                "user_id": member.user_id,
                "shop_id": member.shop_id,
                "role": member.role.value,
                "member_id": member.id,
                "full_name": member.profile.full_name,
                "email": member.profile.email,
                "shop_name": member.shop.name
            }

    async def create_employee(
        self,
        member: Dict[str, Any],
        email: str,
        password: str,
        full_name: str
    ) -> Dict[str, Any]:
        """Create an attendant account in the owner's shop."""
        ensure_owner(member)

        with get_db_context() as db:
            profile = self._create_profile(db, email, password, full_name)
            employee = ShopMember(
                shop_id=member["shop_id"],
                user_id=profile.id,
                role=MemberRole(settings.default_employee_role)
            )
            db.add(employee)
            db.commit()

            logger.info(f"Employee {profile.id} added to shop {member['shop_id']}")
            return self._serialize_employee(employee, profile)

    async def list_employees(self, member: Dict[str, Any]) -> List[Dict[str, Any]]:
        """List attendants of the owner's shop."""
        ensure_owner(member)

        with get_db_context() as db:
            employees = db.query(ShopMember).filter(
                ShopMember.shop_id == member["shop_id"],
                ShopMember.role == MemberRole.ATTENDANT
            ).order_by(ShopMember.created_at).all()

            return [self._serialize_employee(e, e.profile) for e in employees]

    async def remove_employee(self, member: Dict[str, Any], member_id: int) -> bool:
        """Remove an attendant from the owner's shop."""
        ensure_owner(member)

        with get_db_context() as db:
            employee = db.query(ShopMember).filter(
                ShopMember.id == member_id,
                ShopMember.shop_id == member["shop_id"]
            ).first()
            if not employee:
                raise LookupError(f"Employee {member_id} not found")
            if employee.role == MemberRole.OWNER:
                raise ValueError("The shop owner cannot be removed")

            db.delete(employee)
            db.commit()
            logger.info(f"Employee membership {member_id} removed from shop {member['shop_id']}")
            return True

    def _create_profile(self, db: Session, email: str, password: str, full_name: str) -> Profile:
        email = self._normalize_email(email)
        if not email or "@" not in email:
            raise ValueError("A valid email address is required")
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if db.query(Profile).filter(Profile.email == email).first():
            raise ValueError(f"An account with email {email} already exists")

        profile = Profile(
            email=email,
            full_name=(full_name or "").strip() or None,
            password_hash=hash_password(password)
        )
        db.add(profile)
        db.flush()
        return profile

    @staticmethod
    def _normalize_email(email: str) -> str:
        return (email or "").strip().lower()

    @staticmethod
    def _serialize_profile(profile: Profile) -> Dict[str, Any]:
        return {"id": profile.id, "email": profile.email, "full_name": profile.full_name}

    @staticmethod
    def _serialize_shop(shop: Shop) -> Dict[str, Any]:
        return {"id": shop.id, "name": shop.name, "created_at": shop.created_at.isoformat()}

    @staticmethod
    def _serialize_employee(member: ShopMember, profile: Optional[Profile]) -> Dict[str, Any]:
        return {
            "id": member.id,
            "user_id": member.user_id,
            "role": member.role.value,
            "email": profile.email if profile else "Unknown",
            "full_name": (profile.full_name if profile else None) or "Unknown"
        }
