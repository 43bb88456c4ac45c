"""
Shop, membership and profile models.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from duka.core.database import Base


class MemberRole(enum.Enum):
    """Role of a user inside a shop."""
    OWNER = "owner"
    ATTENDANT = "attendant"


class Shop(Base):
    """Model for a kiosk / duka."""
    __tablename__ = "shops"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    members = relationship("ShopMember", back_populates="shop", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Shop(id={self.id}, name='{self.name}')>"


class Profile(Base):
    """Model for a user account."""
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(200), nullable=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    membership = relationship("ShopMember", back_populates="profile", uselist=False)

    def __repr__(self):
        return f"<Profile(id={self.id}, email='{self.email}')>"


class ShopMember(Base):
    """Model linking a profile to the shop it works in."""
    __tablename__ = "shop_members"

    id = Column(Integer, primary_key=True, index=True)
    shop_id = Column(Integer, ForeignKey("shops.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id"), unique=True, nullable=False)
    role = Column(Enum(MemberRole), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    shop = relationship("Shop", back_populates="members")
    profile = relationship("Profile", back_populates="membership")

    def __repr__(self):
        return f"<ShopMember(shop_id={self.shop_id}, user_id={self.user_id}, role={self.role})>"

    @property
    def is_owner(self) -> bool:
        return self.role == MemberRole.OWNER
