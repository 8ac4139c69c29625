"""
Fulfillment Router - pick the branch that prepares an order
"""
import logging
from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from polleria.core.config import Settings
from polleria.models import Location
from .product_resolver import ResolvedLineItem

logger = logging.getLogger(__name__)

FRIED_KEYWORDS = ("pollo frito", "pollo frito entero", "pollo frito por piezas")
BULK_KEYWORDS = (
    "alitas", "alita", "pollo a granel", "pollo normal",
    "muslo", "pierna", "pechuga", "mollejas", "molleja",
)


def classify(message: str, item_names: Iterable[str], settings: Settings) -> str:
    """Location name for the order; fried wins, bulk is the default"""
    text = (message or "").lower()
    names = [n.lower() for n in item_names]
    
    def mentioned(keyword: str) -> bool:
        return keyword in text or any(keyword in name for name in names)
    
    if any(mentioned(k) for k in FRIED_KEYWORDS):
        return settings.FRIED_LOCATION_NAME
    if not any(mentioned(k) for k in BULK_KEYWORDS):
        logger.info("No routing keyword matched, defaulting to the bulk branch")
    return settings.BULK_LOCATION_NAME


def find_location_id(db: Session, name: str) -> Optional[int]:
    location = db.query(Location).filter(
        func.lower(Location.name) == name.lower(),
        Location.is_active.is_(True),
    ).first()
    return location.id if location else None


def route_order(db: Session, items: Iterable[ResolvedLineItem], message: str, settings: Settings) -> int:
    """Location id for the order; falls back to DEFAULT_LOCATION_ID when the branch is missing"""
    name = classify(message, [item.name for item in items], settings)
    location_id = find_location_id(db, name)
    if location_id is None:
        logger.warning(f"Location '{name}' not found, using default location {settings.DEFAULT_LOCATION_ID}")
        return settings.DEFAULT_LOCATION_ID
    
    logger.info(f"Order routed to {name} (location {location_id})")
    return location_id
