"""
Sales models for tracking POS transactions.
"""
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from duka.core.database import Base


class Sale(Base):
    """Model for a single-product sale."""
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    shop_id = Column(Integer, ForeignKey("shops.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)

    # Captured at sale time so history survives product edits
    product_name = Column(String(200), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    cost_price_at_sale = Column(Float, default=0.0, nullable=False)
    total_amount = Column(Float, nullable=False)

    recorded_by = Column(Integer, ForeignKey("profiles.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True, nullable=False)

    product = relationship("Product", back_populates="sales")

    def __repr__(self):
        return f"<Sale(id={self.id}, product='{self.product_name}', total={self.total_amount})>"

    @property
    def profit(self) -> float:
        return round(self.total_amount - self.cost_price_at_sale * self.quantity, 2)
