import os

# Settings are read at import time; point everything at an in-memory database first
os.environ["DATABASE_URL_OVERRIDE"] = "sqlite://"
os.environ["WHATSAPP_APP_SECRET"] = ""
os.environ["GEMINI_API_KEY"] = ""

from decimal import Decimal
from typing import List, Optional

import pytest

from polleria.core import Base, SessionLocal, Settings, engine
from polleria.core.exceptions import IntakeError
from polleria.integrations.base import BaseInterpreter
from polleria.integrations.keyword_interpreter import KeywordInterpreter
from polleria.models import Location, Product
from polleria.schemas.intake import CatalogEntry, OrderIntent
from polleria.services import Notifier, OrderIntakeService

STAFF_NUMBER = "5218110000000"


class FakeNotifier(Notifier):
    """Records every outbound message instead of calling Meta"""
    
    def __init__(self, delivered: bool = True):
        self.delivered = delivered
        self.sent = []
    
    async def send(self, phone: str, text: str) -> bool:
        self.sent.append((phone, text))
        return self.delivered
    
    def messages_to(self, phone: str) -> List[str]:
        return [text for to, text in self.sent if to == phone]


class FakeInterpreter(BaseInterpreter):
    NAME = "fake"
    
    def __init__(self, intent: Optional[OrderIntent] = None, error: Optional[IntakeError] = None):
        self.intent = intent
        self.error = error
        self.calls = []
    
    async def interpret(self, text: str, phone: str, catalog: List[CatalogEntry]) -> OrderIntent:
        self.calls.append((text, phone, catalog))
        if self.error:
            raise self.error
        return self.intent


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        DATABASE_URL_OVERRIDE="sqlite://",
        WHATSAPP_STAFF_NUMBERS=STAFF_NUMBER,
        WHATSAPP_APP_SECRET=None,
        GEMINI_API_KEY=None,
    )


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def seeded(db):
    """Two routing branches and a small catalog"""
    db.add_all([
        Location(id=1, name="Pollo a Granel", manager_name="Rosa"),
        Location(id=2, name="Pollo Frito", manager_name="Mario"),
    ])
    db.add_all([
        Product(id=1, name="Pollo Frito", price=Decimal("185.00")),
        Product(id=2, name="Pollo Frito por Piezas", price=Decimal("25.00")),
        Product(id=3, name="Alitas", price=Decimal("95.00"), unit="kg"),
        Product(id=4, name="Pechuga", price=Decimal("120.00"), unit="kg"),
        Product(id=5, name="Tamal de Elote", price=Decimal("20.00"), is_active=False),
    ])
    db.commit()
    return db


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def intake_service(settings, seeded, notifier):
    return OrderIntakeService(settings, SessionLocal, KeywordInterpreter(), notifier)
