"""
Order Models
"""
from sqlalchemy import Column, String, Numeric, Integer, ForeignKey, Text
from sqlalchemy.orm import relationship
from polleria.core import Base
from .base import TimestampMixin

class OrderHeader(Base, TimestampMixin):
    """Order Header"""
    __tablename__ = "order_header"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    order_number = Column(String(50), unique=True, index=True)  # PED-YYYYMMDD-NNNN
    channel = Column(String(20), default="whatsapp")
    
    customer_id = Column(Integer, ForeignKey("customer.id"), nullable=False, index=True)
    location_id = Column(Integer, ForeignKey("location.id"))
    
    # Payment
    payment_method = Column(String(20))  # cash, card, transfer
    
    # Amounts (paid + outstanding == total at creation)
    total_amount = Column(Numeric(12, 2), default=0, nullable=False)
    paid_amount = Column(Numeric(12, 2), default=0, nullable=False)
    outstanding_amount = Column(Numeric(12, 2), default=0, nullable=False)
    
    delivery_address = Column(Text)
    notes = Column(Text)
    source_message = Column(Text)  # Raw inbound text
    
    # Relationships
    customer = relationship("Customer", back_populates="orders")
    location = relationship("Location", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")

class OrderItem(Base):
    """Order Item/Line"""
    __tablename__ = "order_item"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("order_header.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("product.id"), nullable=False)
    
    product_name = Column(String(200))
    quantity = Column(Numeric(10, 3), default=1, nullable=False)
    unit_price = Column(Numeric(12, 2), default=0)
    
    # Relationships
    order = relationship("OrderHeader", back_populates="items")
    product = relationship("Product", back_populates="order_items")
