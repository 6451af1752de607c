"""Product model"""
import uuid
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Float, Integer, JSON, String, Text

from storefront.database import Base


class Product(Base):
    """Catalog item. ``images`` keeps the upload order of the image URLs."""

    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("price > 0", name="ck_products_price_positive"),
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    category = Column(String(20), nullable=False, index=True)  # see models.enums.Category
    material = Column(String(255), nullable=True)
    weight = Column(Float, nullable=True)
    dimensions = Column(String(255), nullable=True)
    gemstone = Column(String(255), nullable=True)
    images = Column(JSON, default=list, nullable=False)
    stock = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
