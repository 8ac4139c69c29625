from polleria.models import Customer
from polleria.services import customer_service


def test_get_or_create_then_resolve(db):
    customer, created = customer_service.get_or_create(db, "811 234 5678", name_hint="Lupita")
    
    assert created
    assert customer.phone == "+528112345678"
    assert customer.name == "Lupita"
    assert customer_service.resolve(db, "whatsapp:+528112345678").id == customer.id


def test_placeholder_name_uses_last_four_digits(db):
    customer, created = customer_service.get_or_create(db, "5213334445555")
    
    assert created
    assert customer.name == "Cliente 5555"
    assert customer.phone == "+5213334445555"


def test_existing_customer_is_returned_unchanged(db):
    db.add(Customer(name="Doña Lupe", phone="+528112345678", address="Calle Morelos 10"))
    db.commit()
    
    customer, created = customer_service.get_or_create(db, "8112345678", name_hint="Otro Nombre", address="Otra")
    
    assert not created
    assert customer.name == "Doña Lupe"
    assert customer.address == "Calle Morelos 10"
    assert db.query(Customer).count() == 1


def test_resolve_unknown_phone(db):
    assert customer_service.resolve(db, "8110000000") is None
