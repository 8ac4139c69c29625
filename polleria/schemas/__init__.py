# Pydantic Schemas Package
from .intake import PaymentMethod, CatalogEntry, ProductMention, OrderIntent
from .order import OrderResponse, OrderItemResponse, CustomerResponse, ProductResponse, LocationResponse
from .whatsapp import TestMessageRequest, InfoResponse

__all__ = [
    "PaymentMethod", "CatalogEntry", "ProductMention", "OrderIntent",
    "OrderResponse", "OrderItemResponse", "CustomerResponse", "ProductResponse", "LocationResponse",
    "TestMessageRequest", "InfoResponse",
]
