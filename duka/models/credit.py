"""
Customer credit (deni) models.
"""
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from duka.core.database import Base


class CreditStatus(enum.Enum):
    """Credit sale status enumeration."""
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"


class Customer(Base):
    """Model for customers who buy on credit."""
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    shop_id = Column(Integer, ForeignKey("shops.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    phone = Column(String(30), nullable=True)
    email = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    credit_sales = relationship("CreditSale", back_populates="customer", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Customer(id={self.id}, name='{self.name}')>"


class CreditSale(Base):
    """Model for goods taken on credit."""
    __tablename__ = "credit_sales"

    id = Column(Integer, primary_key=True, index=True)
    shop_id = Column(Integer, ForeignKey("shops.id"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id", ondelete="SET NULL"), nullable=True)

    product_name = Column(String(200), nullable=False)
    quantity = Column(Integer, default=1, nullable=False)
    amount = Column(Float, nullable=False)
    amount_paid = Column(Float, default=0.0, nullable=False)
    status = Column(Enum(CreditStatus), default=CreditStatus.PENDING, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    customer = relationship("Customer", back_populates="credit_sales")
    payments = relationship("CreditPayment", back_populates="credit_sale", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<CreditSale(id={self.id}, amount={self.amount}, paid={self.amount_paid}, status={self.status})>"

    @property
    def balance(self) -> float:
        return max(round(self.amount - (self.amount_paid or 0.0), 2), 0.0)


class CreditPayment(Base):
    """Model for a payment made against a credit sale."""
    __tablename__ = "credit_payments"

    id = Column(Integer, primary_key=True, index=True)
    credit_sale_id = Column(Integer, ForeignKey("credit_sales.id"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    recorded_by = Column(Integer, ForeignKey("profiles.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    credit_sale = relationship("CreditSale", back_populates="payments")

    def __repr__(self):
        return f"<CreditPayment(id={self.id}, credit_sale_id={self.credit_sale_id}, amount={self.amount})>"
