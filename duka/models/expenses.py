"""
Expense models.
"""
from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, Enum
from datetime import datetime
import enum

from duka.core.database import Base


class ExpenseCategory(enum.Enum):
    """Expense category enumeration."""
    TAX = "Tax"
    RENT = "Rent"
    STOCK = "Stock"
    UTILITIES = "Utilities"
    TRANSPORT = "Transport"
    SALARIES = "Salaries"
    OTHER = "Other"


class Expense(Base):
    """Model for shop running costs."""
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    shop_id = Column(Integer, ForeignKey("shops.id"), nullable=False, index=True)
    category = Column(Enum(ExpenseCategory), default=ExpenseCategory.OTHER, nullable=False)
    description = Column(String(255), nullable=False)
    amount = Column(Float, nullable=False)
    date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Expense(id={self.id}, category={self.category}, amount={self.amount})>"
