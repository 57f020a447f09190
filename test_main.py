"""
Test suite for the HTTP surface of the SKU Specification Resolution Service.
"""

import pytest
from fastapi.testclient import TestClient

from main import app


client = TestClient(app)


def product_payload(**overrides):
    payload = {
        "name": "Tee",
        "price": 9,
        "stock": 8,
        "image": "default.png",
        "has_structured_variants": True,
        "price_range": {"min": 10, "max": 12},
        "dimensions": [
            {"id": 1, "name": "Color", "values": [{"id": 11, "value": "Red"}, {"id": 12, "value": "Blue"}]},
            {"id": 2, "name": "Size", "values": [{"id": 21, "value": "S"}, {"id": 22, "value": "L"}]},
        ],
        "variants": [
            {"id": 101, "variant_key": [11, 21], "price": 10, "stock": 5, "variant_label": "Red / S"},
            {"id": 102, "variant_key": "11,22", "price": 12, "stock": 0, "variant_label": "Red / L"},
            {"id": 103, "variant_key": [12, 21], "price": 11, "stock": 3, "variant_label": "Blue / S"},
        ],
    }
    payload.update(overrides)
    return payload


def legacy_payload():
    return product_payload(
        dimensions=[],
        variants=[],
        has_structured_variants=False,
        legacy_specs=[{"name": "Flavor", "values": ["Mint", "Lemon"]}],
    )


class TestHealthEndpoints:
    """Test health endpoints"""

    def test_root_endpoint(self):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_health_check_endpoint(self):
        response = client.get("/health")
        assert response.status_code == 200
        assert "components" in response.json()


class TestResolveView:
    """Test the derived view endpoint"""

    def test_partial_selection(self):
        response = client.post("/resolutions/view", json={"product": product_payload(), "selection": {"1": 11}})
        assert response.status_code == 200
        data = response.json()
        assert data["mode"] == "STRUCTURED"
        assert data["matched_variant_id"] is None
        assert data["price"]["text"] == "10-12"
        assert data["summary_text"] == "Red"
        assert data["purchase_status"] == "SELECT_SPECS"
        size_chips = {chip["label"]: chip["selectable"] for chip in data["dimensions"][1]["chips"]}
        assert size_chips == {"S": True, "L": False}

    def test_full_match(self):
        response = client.post(
            "/resolutions/view",
            json={"product": product_payload(), "selection": {"1": 11, "2": 21}, "quantity": 9},
        )
        data = response.json()
        assert data["matched_variant_id"] == 101
        assert data["price"]["amount"] == 10
        assert data["stock"] == 5
        assert data["quantity"] == 5
        assert data["can_buy"] is True

    def test_out_of_stock_combination(self):
        response = client.post(
            "/resolutions/view",
            json={"product": product_payload(), "selection": {"1": 11, "2": 22}},
        )
        data = response.json()
        assert data["matched_variant_id"] is None
        assert data["purchase_status"] == "SPEC_UNAVAILABLE"

    def test_invalid_value_rejected(self):
        response = client.post("/resolutions/view", json={"product": product_payload(), "selection": {"1": 21}})
        assert response.status_code == 400
        assert "no value" in response.json()["detail"]

    def test_legacy_selection_on_structured_product(self):
        response = client.post(
            "/resolutions/view",
            json={"product": product_payload(), "legacy_selection": {"Flavor": "Mint"}},
        )
        assert response.status_code == 400

    def test_legacy_product(self):
        response = client.post(
            "/resolutions/view",
            json={"product": legacy_payload(), "legacy_selection": {"Flavor": "Lemon"}},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["mode"] == "LEGACY"
        assert data["price"]["text"] == "9"
        assert data["summary_map"] == {"Flavor": "Lemon"}
        assert data["can_buy"] is True
        assert data["is_free"] is False

    def test_add_on_amounts_passed_through(self):
        response = client.post(
            "/resolutions/view",
            json={"product": product_payload(green_power_amount=3, balance_amount=1.5)},
        )
        data = response.json()
        assert data["green_power_amount"] == 3
        assert data["balance_amount"] == 1.5

    def test_empty_dimension_values_invalid(self):
        product = product_payload()
        product["dimensions"][0]["values"] = []
        response = client.post("/resolutions/view", json={"product": product})
        assert response.status_code == 422


class TestSelectable:
    """Test the single-pair selectability endpoint"""

    @pytest.mark.parametrize("value_id,expected", [(21, True), (22, False)])
    def test_size_under_red(self, value_id, expected):
        response = client.post(
            "/resolutions/selectable",
            json={"product": product_payload(), "selection": {"1": 11}, "dimension_id": 2, "value_id": value_id},
        )
        assert response.status_code == 200
        assert response.json() == {"selectable": expected}

    def test_unknown_dimension(self):
        response = client.post(
            "/resolutions/selectable",
            json={"product": product_payload(), "dimension_id": 99, "value_id": 11},
        )
        assert response.json() == {"selectable": False}

    def test_legacy_product_rejected(self):
        """A product with dimensions but no variants resolves in legacy mode"""
        response = client.post(
            "/resolutions/selectable",
            json={"product": product_payload(variants=[]), "dimension_id": 1, "value_id": 11},
        )
        assert response.status_code == 400

    def test_invalid_selection_rejected(self):
        response = client.post(
            "/resolutions/selectable",
            json={"product": product_payload(), "selection": {"1": 21}, "dimension_id": 2, "value_id": 21},
        )
        assert response.status_code == 400


class TestConfirm:
    """Test order payload emission"""

    def test_confirm_full_match(self):
        response = client.post(
            "/resolutions/confirm",
            json={"product": product_payload(), "selection": {"1": 12, "2": 21}, "quantity": 2},
        )
        assert response.status_code == 200
        assert response.json() == {
            "quantity": 2,
            "spec_summary_map": {"Color": "Blue", "Size": "S"},
            "variant_id": 103,
        }

    def test_confirm_incomplete_rejected(self):
        response = client.post("/resolutions/confirm", json={"product": product_payload(), "selection": {"1": 11}})
        assert response.status_code == 409
        assert "SELECT_SPECS" in response.json()["detail"]

    def test_confirm_zero_stock_rejected(self):
        response = client.post(
            "/resolutions/confirm",
            json={"product": product_payload(), "selection": {"1": 11, "2": 22}},
        )
        assert response.status_code == 409

    def test_confirm_legacy(self):
        response = client.post(
            "/resolutions/confirm",
            json={"product": legacy_payload(), "legacy_selection": {"Flavor": "Mint"}},
        )
        assert response.status_code == 200
        assert response.json() == {"quantity": 1, "spec_summary_map": {"Flavor": "Mint"}, "variant_id": None}
