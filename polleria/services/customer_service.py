"""
Customer Directory - find customers by phone, create them on first order
"""
import logging
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from polleria.core.phone import DEFAULT_COUNTRY_CODE, last_four, normalize_phone
from polleria.models import Customer

logger = logging.getLogger(__name__)


def placeholder_name(phone: str) -> str:
    return f"Cliente {last_four(phone)}"


def resolve(db: Session, phone: str, country_code: str = DEFAULT_COUNTRY_CODE) -> Optional[Customer]:
    """Get customer by normalized phone"""
    normalized = normalize_phone(phone, country_code)
    return db.query(Customer).filter(Customer.phone == normalized).first()


def get_or_create(
    db: Session,
    phone: str,
    name_hint: Optional[str] = None,
    address: Optional[str] = None,
    country_code: str = DEFAULT_COUNTRY_CODE,
) -> Tuple[Customer, bool]:
    """
    Return (customer, created).
    
    An existing customer is returned unchanged. A new one is named after
    name_hint, or "Cliente NNNN" (last four digits) when no name is known.
    """
    customer = resolve(db, phone, country_code)
    if customer:
        return customer, False
    
    normalized = normalize_phone(phone, country_code)
    customer = Customer(
        phone=normalized,
        name=(name_hint or "").strip() or placeholder_name(normalized),
        address=address,
    )
    db.add(customer)
    try:
        db.commit()
    except IntegrityError:
        # Another message from the same phone created it first
        db.rollback()
        existing = resolve(db, phone, country_code)
        if existing is None:
            raise
        return existing, False
    
    db.refresh(customer)
    logger.info(f"Created customer {customer.id} for {normalized}")
    return customer, True
