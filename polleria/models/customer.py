"""
Customer Models
"""
from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.orm import relationship
from polleria.core import Base
from .base import TimestampMixin

class Customer(Base, TimestampMixin):
    """Customer, keyed by normalized phone (+52...)"""
    __tablename__ = "customer"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100))  # Placeholder "Cliente 1234" until the customer tells us
    store_name = Column(String(100))
    phone = Column(String(20), unique=True, index=True, nullable=False)
    address = Column(Text)
    
    # Relationships
    orders = relationship("OrderHeader", back_populates="customer")
