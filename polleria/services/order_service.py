"""
Order Service - Business Logic for Orders
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from polleria.core.exceptions import PersistenceFailure
from polleria.core.phone import DEFAULT_COUNTRY_CODE, normalize_phone
from polleria.models import Customer, OrderHeader, OrderItem
from polleria.schemas.intake import PaymentMethod
from .product_resolver import ResolvedLineItem

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
ORDER_NUMBER_ATTEMPTS = 3


@dataclass
class PersistedOrder:
    order_id: int
    order_number: str
    total: Decimal
    paid: Decimal
    outstanding: Decimal
    location_id: Optional[int]
    items_written: List[ResolvedLineItem] = field(default_factory=list)
    failed_items: List[ResolvedLineItem] = field(default_factory=list)
    skipped_items: List[ResolvedLineItem] = field(default_factory=list)


def split_payment(total: Decimal, payment_method: Optional[PaymentMethod]) -> Tuple[Decimal, Decimal]:
    """(paid, outstanding): cash is settled on delivery, card/transfer stay outstanding"""
    total = Decimal(total)
    if payment_method is None or payment_method == PaymentMethod.CASH:
        return total, ZERO
    return ZERO, total


class OrderService:
    """Order business logic"""
    
    @staticmethod
    def get_orders(
        db: Session,
        phone: Optional[str] = None,
        page: int = 1,
        per_page: int = 50,
    ) -> Tuple[List[OrderHeader], int]:
        """Get orders with filters and pagination"""
        query = db.query(OrderHeader)
        
        if phone:
            normalized = normalize_phone(phone, DEFAULT_COUNTRY_CODE)
            query = query.join(Customer).filter(Customer.phone == normalized)
        
        total = query.count()
        
        orders = query.options(joinedload(OrderHeader.items))\
            .order_by(OrderHeader.id.desc())\
            .offset((page - 1) * per_page)\
            .limit(per_page)\
            .all()
        
        return orders, total
    
    @staticmethod
    def get_order_by_id(db: Session, order_id: int) -> Optional[OrderHeader]:
        """Get order by ID"""
        return db.query(OrderHeader).filter(OrderHeader.id == order_id).first()
    
    @staticmethod
    def next_order_number(db: Session, today: Optional[date] = None) -> str:
        """PED-YYYYMMDD-NNNN, sequence restarts every day"""
        stamp = (today or date.today()).strftime("%Y%m%d")
        last = db.query(func.max(OrderHeader.order_number))\
            .filter(OrderHeader.order_number.like(f"PED-{stamp}-%"))\
            .scalar()
        sequence = int(last.rsplit("-", 1)[1]) + 1 if last else 1
        return f"PED-{stamp}-{sequence:04d}"
    
    @staticmethod
    def create_intake_order(
        db: Session,
        customer_id: int,
        location_id: Optional[int],
        total: Decimal,
        payment_method: Optional[PaymentMethod],
        items: List[ResolvedLineItem],
        delivery_address: Optional[str] = None,
        notes: Optional[str] = None,
        source_message: Optional[str] = None,
        atomic: bool = False,
    ) -> PersistedOrder:
        """
        Write the order header and one line per resolved item.
        
        Header failure raises PersistenceFailure. Line items are best-effort:
        a failing line is rolled back alone and reported in failed_items.
        With atomic=True header and lines commit together and any failure raises.
        """
        paid, outstanding = split_payment(total, payment_method)
        resolved = [item for item in items if item.resolved]
        skipped = [item for item in items if not item.resolved]
        for item in skipped:
            logger.warning(f"Skipping unresolved line item '{item.name}'")
        
        header_fields = dict(
            channel="whatsapp",
            customer_id=customer_id,
            location_id=location_id,
            payment_method=(payment_method or PaymentMethod.CASH).value,
            total_amount=total,
            paid_amount=paid,
            outstanding_amount=outstanding,
            delivery_address=delivery_address,
            notes=notes,
            source_message=source_message,
        )
        header = OrderService._flush_header(db, header_fields)
        
        if atomic:
            try:
                for item in resolved:
                    db.add(OrderService._line(header.id, item))
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                raise PersistenceFailure(f"Order could not be saved: {e}") from e
            db.refresh(header)
            logger.info(f"Created order {header.order_number} with {len(resolved)} items")
            return OrderService._persisted(header, resolved, [], skipped)
        
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceFailure(f"Order header could not be saved: {e}") from e
        db.refresh(header)
        
        written: List[ResolvedLineItem] = []
        failed: List[ResolvedLineItem] = []
        for item in resolved:
            try:
                db.add(OrderService._line(header.id, item))
                db.commit()
                written.append(item)
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Line item '{item.name}' of order {header.order_number} failed: {e}")
                failed.append(item)
        
        logger.info(f"Created order {header.order_number} with {len(written)} items ({len(failed)} failed)")
        return OrderService._persisted(header, written, failed, skipped)
    
    @staticmethod
    def _flush_header(db: Session, fields: dict) -> OrderHeader:
        """
        Add and flush a header under a fresh order number.
        
        A concurrent writer can take the same number between reading the
        sequence and flushing; that collision is retried with a new number.
        """
        for attempt in range(1, ORDER_NUMBER_ATTEMPTS + 1):
            number = OrderService.next_order_number(db)
            header = OrderHeader(order_number=number, **fields)
            try:
                db.add(header)
                db.flush()
                return header
            except IntegrityError as e:
                db.rollback()
                taken = db.query(OrderHeader.id).filter(OrderHeader.order_number == number).first()
                if taken is None or attempt == ORDER_NUMBER_ATTEMPTS:
                    raise PersistenceFailure(f"Order header could not be saved: {e}") from e
                logger.warning(f"Order number {number} already taken, retrying ({attempt}/{ORDER_NUMBER_ATTEMPTS})")
            except SQLAlchemyError as e:
                db.rollback()
                raise PersistenceFailure(f"Order header could not be saved: {e}") from e
    
    @staticmethod
    def _line(order_id: int, item: ResolvedLineItem) -> OrderItem:
        return OrderItem(
            order_id=order_id,
            product_id=item.catalog_id,
            product_name=item.name,
            quantity=item.quantity,
            unit_price=item.unit_price,
        )
    
    @staticmethod
    def _persisted(header: OrderHeader, written, failed, skipped) -> PersistedOrder:
        return PersistedOrder(
            order_id=header.id,
            order_number=header.order_number,
            total=Decimal(header.total_amount),
            paid=Decimal(header.paid_amount),
            outstanding=Decimal(header.outstanding_amount),
            location_id=header.location_id,
            items_written=written,
            failed_items=failed,
            skipped_items=skipped,
        )
