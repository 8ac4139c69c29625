"""
Seed the two routing branches and a starter catalog.
Usage: python scripts/seed_demo.py
"""
import sys
import os
from decimal import Decimal

sys.path.append(os.getcwd())

from polleria.core import SessionLocal, engine, Base, settings
from polleria.models import Location, Product

LOCATIONS = [
    (settings.BULK_LOCATION_NAME, "Encargado Granel"),
    (settings.FRIED_LOCATION_NAME, "Encargado Frito"),
]

PRODUCTS = [
    ("Pollo Frito", "Pollo frito entero", "185.00", "unidad"),
    ("Pollo Frito por Piezas", "Pieza de pollo frito", "25.00", "unidad"),
    ("Alitas", "Alitas de pollo", "95.00", "kg"),
    ("Pechuga", "Pechuga de pollo", "120.00", "kg"),
    ("Pierna y Muslo", "Pierna con muslo", "75.00", "kg"),
    ("Mollejas", "Mollejas de pollo", "60.00", "kg"),
    ("Pollo a Granel", "Pollo entero crudo", "68.00", "kg"),
]


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        for name, manager in LOCATIONS:
            if not db.query(Location).filter(Location.name == name).first():
                db.add(Location(name=name, manager_name=manager, is_active=True))
                print(f"CREATED_LOCATION: {name}")
        
        for name, description, price, unit in PRODUCTS:
            if not db.query(Product).filter(Product.name == name).first():
                db.add(Product(name=name, description=description, price=Decimal(price), unit=unit, is_active=True))
                print(f"CREATED_PRODUCT: {name}")
        
        db.commit()
    except Exception as e:
        db.rollback()
        print(f"Error: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed()
