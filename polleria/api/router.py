"""
API Router - JSON Endpoints
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from polleria.core import get_db
from polleria.schemas.order import CustomerResponse, LocationResponse, OrderResponse, ProductResponse
from polleria.services import OrderService, customer_service, list_locations, list_products

# Import sub-routers
from polleria.api.whatsapp import whatsapp_router

api_router = APIRouter(tags=["API"])

# Include sub-routers
api_router.include_router(whatsapp_router)

# ===================== HEALTH & STATUS =====================

@api_router.get("/status")
async def api_status():
    return {"status": "ok", "version": "1.0.0", "timestamp": datetime.now().isoformat()}

# ===================== ORDERS =====================

@api_router.get("/orders")
def list_orders(
    phone: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db)
):
    try:
        orders, total = OrderService.get_orders(db, phone, page, per_page)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "orders": [OrderResponse.model_validate(o) for o in orders],
        "total": total,
        "page": page,
        "per_page": per_page,
    }

@api_router.get("/orders/{order_id}", response_model=OrderResponse)
def get_order(order_id: int, db: Session = Depends(get_db)):
    order = OrderService.get_order_by_id(db, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order

# ===================== CATALOG =====================

@api_router.get("/products", response_model=List[ProductResponse])
def get_products(include_inactive: bool = Query(False), db: Session = Depends(get_db)):
    return list_products(db, active_only=not include_inactive)

@api_router.get("/locations", response_model=List[LocationResponse])
def get_locations(db: Session = Depends(get_db)):
    return list_locations(db)

# ===================== CUSTOMERS =====================

@api_router.get("/customers/by-phone/{phone}", response_model=CustomerResponse)
def get_customer_by_phone(phone: str, db: Session = Depends(get_db)):
    try:
        customer = customer_service.resolve(db, phone)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer
