"""
Fulfillment Location (branch) Model
"""
from sqlalchemy import Column, Integer, String, Boolean
from sqlalchemy.orm import relationship
from polleria.core import Base

class Location(Base):
    """Branch that prepares and/or delivers orders"""
    __tablename__ = "location"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, index=True)  # used by keyword routing
    manager_name = Column(String(100), nullable=False)
    address = Column(String(255))
    is_active = Column(Boolean, default=True)
    
    # Relationships
    orders = relationship("OrderHeader", back_populates="location")
