"""
Catalog Service - product and location snapshots read per message
"""
from typing import List

from sqlalchemy.orm import Session

from polleria.models import Location, Product
from polleria.schemas.intake import CatalogEntry


def list_products(db: Session, active_only: bool = True) -> List[Product]:
    """Get products ordered by name"""
    query = db.query(Product)
    if active_only:
        query = query.filter(Product.is_active.is_(True))
    return query.order_by(Product.name).all()


def list_catalog(db: Session) -> List[CatalogEntry]:
    """Snapshot of the active catalog (id, name, price) handed to the interpreter"""
    return [
        CatalogEntry(id=p.id, name=p.name or "Producto", price=p.price or 0)
        for p in list_products(db)
    ]


def list_locations(db: Session, active_only: bool = True) -> List[Location]:
    query = db.query(Location)
    if active_only:
        query = query.filter(Location.is_active.is_(True))
    return query.order_by(Location.id).all()
