"""
Order Intake Service - WhatsApp message to persisted order

Pipeline per inbound message:
catalog -> interpret -> customer -> products -> routing -> persist -> notify

The customer gets at most one message per inbound message: a clarification,
a confirmation (with any follow-up questions folded in) or an apology.
"""
import enum
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, List, Optional

from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from polleria.core.config import Settings
from polleria.core.exceptions import NotAnOrder
from polleria.core.phone import normalize_phone
from polleria.integrations.base import BaseInterpreter
from polleria.schemas.intake import OrderIntent, PaymentMethod
from . import customer_service
from .catalog_service import list_catalog
from .notification_service import (
    Notifier,
    build_apology_message,
    build_clarification_message,
    build_confirmation_message,
    build_staff_alert,
)
from .order_service import OrderService
from .product_resolver import ResolvedLineItem, items_total, resolve_products
from .routing_service import route_order

logger = logging.getLogger(__name__)


class IntakeStage(str, enum.Enum):
    RECEIVED = "received"
    ACKNOWLEDGED = "acknowledged"
    INTERPRETING = "interpreting"
    NOT_AN_ORDER = "not_an_order"
    INTERPRETED = "interpreted"
    CUSTOMER_RESOLVING = "customer_resolving"
    PRODUCT_RESOLVING = "product_resolving"
    ROUTING = "routing"
    PERSISTING = "persisting"
    NOTIFYING = "notifying"
    DONE = "done"
    ERRORED = "errored"


class IntakeOutcome(str, enum.Enum):
    IGNORED = "ignored"
    CREATED = "created"
    ERRORED = "errored"


@dataclass
class IntakeResult:
    phone: str
    outcome: Optional[IntakeOutcome] = None
    stage: IntakeStage = IntakeStage.ACKNOWLEDGED
    failed_stage: Optional[IntakeStage] = None
    order_id: Optional[int] = None
    order_number: Optional[str] = None
    customer_id: Optional[int] = None
    customer_created: bool = False
    location_id: Optional[int] = None
    total: Optional[Decimal] = None
    items: List[ResolvedLineItem] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)
    message_sent: bool = False
    error: Optional[str] = None
    
    def to_dict(self) -> dict:
        return {
            "outcome": self.outcome.value if self.outcome else None,
            "stage": self.stage.value,
            "failed_stage": self.failed_stage.value if self.failed_stage else None,
            "phone": self.phone,
            "order_id": self.order_id,
            "order_number": self.order_number,
            "customer_id": self.customer_id,
            "customer_created": self.customer_created,
            "location_id": self.location_id,
            "total": float(self.total) if self.total is not None else None,
            "items": [
                {
                    "name": item.name,
                    "quantity": float(item.quantity),
                    "unit_price": float(item.unit_price),
                    "product_id": item.catalog_id,
                }
                for item in self.items
            ],
            "diagnostics": self.diagnostics,
            "message_sent": self.message_sent,
            "error": self.error,
        }


def compute_total(intent_total: Optional[Decimal], items: List[ResolvedLineItem]) -> Decimal:
    """Interpreter's total when positive, otherwise sum of price x quantity"""
    if intent_total is not None and intent_total > 0:
        return Decimal(intent_total)
    return items_total(items)


def build_order_notes(intent: OrderIntent, payment_method: PaymentMethod) -> Optional[str]:
    notes = []
    if intent.notes:
        notes.append(intent.notes)
    if intent.delivery_address:
        notes.append(f"Dirección: {intent.delivery_address}")
    notes.append(f"Método de pago: {payment_method.label}")
    return " | ".join(notes)


class OrderIntakeService:
    """
    Runs one inbound WhatsApp message through the intake pipeline
    """
    
    def __init__(
        self,
        settings: Settings,
        session_factory: Callable[[], Session],
        interpreter: BaseInterpreter,
        notifier: Notifier,
    ):
        self.settings = settings
        self.session_factory = session_factory
        self.interpreter = interpreter
        self.notifier = notifier
    
    async def process_message(self, text: str, phone: str) -> IntakeResult:
        """Never raises: failures end as IntakeOutcome.ERRORED with one apology sent"""
        try:
            phone = normalize_phone(phone, self.settings.DEFAULT_COUNTRY_CODE)
        except ValueError:
            logger.error("Inbound message without sender phone, dropping")
            return IntakeResult(phone="", outcome=IntakeOutcome.ERRORED, stage=IntakeStage.ERRORED,
                                failed_stage=IntakeStage.ACKNOWLEDGED, error="Empty phone number")
        
        result = IntakeResult(phone=phone)
        db = self.session_factory()
        try:
            await self._run(db, text, phone, result)
        except Exception as e:
            logger.exception(f"Error processing order from {phone} at stage {result.stage.value}: {e}")
            result.failed_stage = result.stage
            result.stage = IntakeStage.ERRORED
            result.outcome = IntakeOutcome.ERRORED
            result.error = str(e)
            result.message_sent = await self.notifier.send(phone, build_apology_message())
        finally:
            await run_in_threadpool(db.close)
        
        logger.info(f"Intake from {phone} finished: {result.outcome.value} (order={result.order_number})")
        return result
    
    async def _run(self, db: Session, text: str, phone: str, result: IntakeResult):
        settings = self.settings
        
        # 1. Catalog snapshot and interpretation
        result.stage = IntakeStage.INTERPRETING
        catalog = await run_in_threadpool(list_catalog, db)
        try:
            intent = await self.interpreter.interpret(text, phone, catalog)
        except NotAnOrder as e:
            logger.info(f"Message from {phone} is not an order: {e}")
            result.stage = IntakeStage.NOT_AN_ORDER
            result.outcome = IntakeOutcome.IGNORED
            result.message_sent = await self.notifier.send(phone, build_clarification_message())
            return
        result.stage = IntakeStage.INTERPRETED
        
        # 2. Customer (created on first order, never blocks the order)
        result.stage = IntakeStage.CUSTOMER_RESOLVING
        customer, created = await run_in_threadpool(
            customer_service.get_or_create,
            db,
            phone,
            intent.customer_name,
            intent.delivery_address,
            settings.DEFAULT_COUNTRY_CODE,
        )
        result.customer_id = customer.id
        customer_name = customer.name
        customer_address = customer.address
        result.customer_created = created
        ask_name = created and not intent.customer_name
        ask_address = created and not intent.delivery_address
        if ask_name or ask_address:
            result.diagnostics.append("Cliente nuevo sin nombre o dirección")
        
        payment_method = intent.payment_method
        ask_payment = payment_method is None
        if ask_payment:
            result.diagnostics.append("Método de pago no indicado, se asume efectivo")
            payment_method = PaymentMethod.CASH
        
        # 3. Products
        result.stage = IntakeStage.PRODUCT_RESOLVING
        items, diagnostics = resolve_products(intent.products, catalog)
        result.items = items
        result.diagnostics.extend(diagnostics)
        if not any(item.resolved for item in items):
            logger.warning(f"No products resolved for message from {phone}, saving order without items")
        
        # 4. Routing
        result.stage = IntakeStage.ROUTING
        result.location_id = await run_in_threadpool(route_order, db, items, text, settings)
        
        # 5. Persist
        result.stage = IntakeStage.PERSISTING
        total = compute_total(intent.total, items)
        delivery_address = intent.delivery_address or customer_address
        notes = build_order_notes(intent, payment_method)
        order = await run_in_threadpool(
            OrderService.create_intake_order,
            db,
            result.customer_id,
            result.location_id,
            total,
            payment_method,
            items,
            delivery_address,
            notes,
            text,
            settings.ATOMIC_ORDER_WRITES,
        )
        result.order_id = order.order_id
        result.order_number = order.order_number
        result.total = order.total
        for item in order.failed_items:
            result.diagnostics.append(f"No se pudo guardar la partida: {item.name}")
        
        # 6. Notify customer, then staff
        result.stage = IntakeStage.NOTIFYING
        confirmation = build_confirmation_message(
            customer_name,
            order.order_number,
            items,
            total,
            payment_method,
            delivery_address,
            ask_name=ask_name,
            ask_address=ask_address,
            ask_payment=ask_payment,
        )
        result.message_sent = await self.notifier.send(phone, confirmation)
        
        alert = build_staff_alert(order.order_number, customer_name, phone, items, total, delivery_address, notes)
        await self.notifier.notify_staff(settings.staff_numbers, alert)
        
        result.stage = IntakeStage.DONE
        result.outcome = IntakeOutcome.CREATED
