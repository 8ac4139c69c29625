"""
Product Catalog Models
"""
from sqlalchemy import Column, Integer, String, Numeric, Boolean, Text
from sqlalchemy.orm import relationship
from polleria.core import Base
from .base import TimestampMixin

UNITS = ("unidad", "kg", "g", "litro", "ml", "m", "cm", "caja", "paquete")

class Product(Base, TimestampMixin):
    """Product Master"""
    __tablename__ = "product"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    description = Column(Text)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    unit = Column(String(50), nullable=False, default="unidad")  # see UNITS
    image_url = Column(String(500))
    is_active = Column(Boolean, default=True)
    
    # Relationships
    order_items = relationship("OrderItem", back_populates="product")
