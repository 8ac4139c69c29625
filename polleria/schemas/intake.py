"""
Order Intake Schemas - catalog snapshot and interpreted order intent
"""
import enum
import re
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"

    @classmethod
    def from_text(cls, value: Optional[str]) -> Optional["PaymentMethod"]:
        """Map free text (Spanish or English) to a payment method, None if unknown"""
        if not value:
            return None
        text = value.strip().lower()
        for method in cls:
            if text == method.value:
                return method
        named = [method for method, keywords in PAYMENT_KEYWORDS.items() if any(k in text for k in keywords)]
        # "tarjeta o efectivo" is a question to ask, not an answer
        return named[0] if len(named) == 1 else None

    @property
    def label(self) -> str:
        return PAYMENT_LABELS[self]


PAYMENT_KEYWORDS = {
    PaymentMethod.CASH: ("efectivo", "cash", "contado"),
    PaymentMethod.CARD: ("tarjeta", "card", "credito", "crédito", "debito", "débito", "terminal"),
    PaymentMethod.TRANSFER: ("transferencia", "transfer", "spei", "deposito", "depósito"),
}

PAYMENT_LABELS = {
    PaymentMethod.CASH: "Efectivo",
    PaymentMethod.CARD: "Tarjeta",
    PaymentMethod.TRANSFER: "Transferencia",
}


_NUMBER = re.compile(r"-?\d+(?:[.,]\d+)?")


def parse_decimal(value) -> Optional[Decimal]:
    """Lenient number parsing for interpreter answers: 2, "1.5", "1,5 kg", "$120". None when unreadable"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        text = str(value)
    else:
        match = _NUMBER.search(str(value).replace("$", ""))
        if not match:
            return None
        text = match.group(0).replace(",", ".")
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


class CatalogEntry(BaseModel):
    """One product of the catalog snapshot handed to the interpreter"""
    id: int
    name: str
    price: Decimal = Decimal("0")


class ProductMention(BaseModel):
    name: str
    quantity: Decimal = Decimal("1")
    product_id: Optional[int] = None

    @field_validator("quantity", mode="before")
    @classmethod
    def default_quantity(cls, v):
        quantity = parse_decimal(v)
        if quantity is None or quantity <= 0:
            return Decimal("1")
        return quantity


class OrderIntent(BaseModel):
    """Structured order extracted from one inbound message (never persisted)"""
    products: List[ProductMention] = Field(default_factory=list)
    payment_method: Optional[PaymentMethod] = None
    notes: Optional[str] = None
    delivery_address: Optional[str] = None
    customer_name: Optional[str] = None
    total: Optional[Decimal] = None

    @field_validator("payment_method", mode="before")
    @classmethod
    def parse_payment(cls, v):
        if v is None or isinstance(v, PaymentMethod):
            return v
        return PaymentMethod.from_text(str(v))

    @field_validator("total", mode="before")
    @classmethod
    def lenient_total(cls, v):
        # commas in a total are thousands separators ("$1,250.00")
        if isinstance(v, str):
            v = v.replace(",", "")
        return parse_decimal(v)

    @field_validator("notes", "delivery_address", "customer_name", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v
