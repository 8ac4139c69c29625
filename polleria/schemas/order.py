"""
Order Schemas
"""
from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

class OrderItemResponse(BaseModel):
    id: int
    product_id: int
    product_name: Optional[str]
    quantity: Decimal
    unit_price: Decimal

    class Config:
        from_attributes = True

class OrderResponse(BaseModel):
    id: int
    order_number: Optional[str]
    channel: Optional[str]
    customer_id: int
    location_id: Optional[int]
    payment_method: Optional[str]
    total_amount: Decimal
    paid_amount: Decimal
    outstanding_amount: Decimal
    delivery_address: Optional[str]
    notes: Optional[str]
    created_at: datetime
    items: List[OrderItemResponse] = []

    class Config:
        from_attributes = True

class CustomerResponse(BaseModel):
    id: int
    name: Optional[str]
    store_name: Optional[str]
    phone: str
    address: Optional[str]

    class Config:
        from_attributes = True

class ProductResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    price: Decimal
    unit: str
    image_url: Optional[str]
    is_active: bool

    class Config:
        from_attributes = True

class LocationResponse(BaseModel):
    id: int
    name: str
    manager_name: str
    address: Optional[str]

    class Config:
        from_attributes = True
