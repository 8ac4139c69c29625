from . import customer_service
from .catalog_service import list_catalog, list_locations, list_products
from .intake_service import IntakeOutcome, IntakeResult, IntakeStage, OrderIntakeService
from .notification_service import Notifier
from .order_service import OrderService, PersistedOrder, split_payment
from .product_resolver import ResolvedLineItem, resolve_products
from .routing_service import route_order
