import pytest
from pydantic import ValidationError

from loadingkit.models import ContactForm, Product, User


def test_user_from_json_fills_defaults() -> None:
    u = User.from_json({"id": 5})
    assert u.id == "5"
    assert u.name == "Unknown User"
    assert u.email == "no-email@example.com"


def test_product_from_json_accepts_title() -> None:
    p = Product.from_json({"id": 9, "title": "Lamp", "price": "3.5"})
    assert p.name == "Lamp"
    assert p.price == pytest.approx(3.5)
    assert p.description == "No description"


def test_product_price_cannot_be_negative() -> None:
    with pytest.raises(ValidationError):
        Product(id="1", name="x", price=-1)


def test_product_matches_name_or_description() -> None:
    p = Product(id="1", name="AirPods Pro", description="Wireless earbuds")
    assert p.matches("airpods")
    assert p.matches("EARBUDS")
    assert not p.matches("watch")


def test_contact_form_field_errors() -> None:
    errors = ContactForm.validate_fields({"name": "", "email": "nope", "message": None})
    assert errors == {
        "name": "Please enter your name",
        "email": "Please enter a valid email",
        "message": "Please enter a message",
    }


def test_contact_form_valid() -> None:
    data = {"name": "Jane", "email": "jane@example.com", "message": "Hi"}
    assert ContactForm.validate_fields(data) == {}
    assert ContactForm.validate_fields({**data, "email": ""}) == {
        "email": "Please enter your email"
    }
