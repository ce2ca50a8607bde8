"""Unit tests for request validation."""

import pytest

from cart_db.core.errors import ValidationError
from cart_db.core.validation import (
    validate_add_item_request,
    validate_customer_request,
    validate_email,
    validate_quantity,
    validate_rehydration_request,
    validate_sku,
)


class TestFieldValidators:
    """Test single-field validators."""

    def test_valid_email(self):
        validate_email("user@example.com")

    @pytest.mark.parametrize("email", ["plain", "a@b", "a b@c.d", "@c.d"])
    def test_invalid_email(self, email):
        with pytest.raises(ValidationError, match="Invalid email format"):
            validate_email(email)

    @pytest.mark.parametrize("sku", ["", "   "])
    def test_blank_sku(self, sku):
        with pytest.raises(ValidationError):
            validate_sku(sku)

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, True])
    def test_bad_quantity(self, quantity):
        with pytest.raises(ValidationError, match="Quantity must be an integer >= 1"):
            validate_quantity(quantity)


class TestAddItemRequest:
    """Test add-item body validation."""

    def test_valid_body(self):
        assert validate_add_item_request({"sku": "A", "quantity": 2}) == ("A", 2)

    def test_body_must_be_object(self):
        with pytest.raises(ValidationError, match="Request body must be an object"):
            validate_add_item_request(["sku"])

    def test_sku_must_be_string(self):
        with pytest.raises(ValidationError, match="sku must be a string"):
            validate_add_item_request({"sku": 1, "quantity": 1})

    def test_quantity_must_be_number(self):
        with pytest.raises(ValidationError, match="quantity must be a number"):
            validate_add_item_request({"sku": "A", "quantity": "2"})

    def test_quantity_must_be_positive_integer(self):
        with pytest.raises(ValidationError):
            validate_add_item_request({"sku": "A", "quantity": 0})


class TestCustomerRequest:
    """Test customer body validation."""

    def test_maps_wire_names(self):
        body = {"email": "a@b.co", "firstName": "Ada", "lastName": "L"}
        assert validate_customer_request(body) == {"email": "a@b.co", "first_name": "Ada", "last_name": "L"}

    def test_partial_body(self):
        assert validate_customer_request({"lastName": "L"}) == {"last_name": "L"}

    def test_empty_body(self):
        assert validate_customer_request({}) == {}

    def test_rejects_non_string(self):
        with pytest.raises(ValidationError, match="firstName must be a string"):
            validate_customer_request({"firstName": 3})

    def test_rejects_bad_email(self):
        with pytest.raises(ValidationError):
            validate_customer_request({"email": "nope"})


class TestRehydrationRequest:
    """Test rehydration body validation."""

    def test_valid(self):
        assert validate_rehydration_request({"token": "a.b"}) == "a.b"

    @pytest.mark.parametrize("body", [{}, {"token": ""}, {"token": "  "}, {"token": 5}])
    def test_invalid(self, body):
        with pytest.raises(ValidationError, match="token must be a non-empty string"):
            validate_rehydration_request(body)
