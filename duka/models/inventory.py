"""
Inventory models for tracking products and stock levels.
"""
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from duka.core.database import Base


class Product(Base):
    """Model for products on the shop's shelves."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    shop_id = Column(Integer, ForeignKey("shops.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    category = Column(String(100), default="General", nullable=False)
    unit = Column(String(20), default="pcs", nullable=False)

    # Pricing
    cost_price = Column(Float, default=0.0, nullable=False)
    selling_price = Column(Float, nullable=False)

    # Stock
    quantity = Column(Integer, default=0, nullable=False)
    low_stock_threshold = Column(Integer, default=5, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Past sales keep their captured name once the product is gone
    sales = relationship("Sale", back_populates="product")

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', quantity={self.quantity})>"

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.low_stock_threshold

    @property
    def stock_value(self) -> float:
        return round(self.selling_price * self.quantity, 2)

    @property
    def unit_profit(self) -> float:
        return round(self.selling_price - self.cost_price, 2)
