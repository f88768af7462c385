"""
Single-default rule for pricing configurations and tax regions, promo-code
uniqueness and promo-code validation.
"""
from datetime import datetime, timedelta

import pytest

from fencemark.models.pricing import PricingConfig, TaxRegion
from fencemark.utils.clock import utcnow


def defaults(db_session, model, organization_id):
    return (
        db_session.query(model)
        .filter(model.organization_id == organization_id, model.is_default.is_(True))
        .all()
    )


def test_second_default_pricing_config_replaces_first(client, org_a, headers_a, db_session):
    first = client.post(
        "/api/pricing-configs",
        json={"name": "Residential", "labor_rate_per_hour": 50, "is_default": True},
        headers=headers_a,
    )
    second = client.post(
        "/api/pricing-configs",
        json={"name": "Residential 2025", "labor_rate_per_hour": 55, "is_default": True},
        headers=headers_a,
    )
    assert first.status_code == second.status_code == 201

    stored = defaults(db_session, PricingConfig, org_a["organization_id"])
    assert [config.id for config in stored] == [second.json()["id"]]

    listed = client.get("/api/pricing-configs", headers=headers_a).json()
    assert listed[0]["id"] == second.json()["id"]
    assert [config["is_default"] for config in listed] == [True, False]


def test_updating_to_default_clears_previous_default(client, org_a, headers_a, db_session):
    client.post("/api/tax-regions", json={"name": "California", "code": "CA", "tax_rate": 0.0875, "is_default": True}, headers=headers_a)
    texas = client.post("/api/tax-regions", json={"name": "Texas", "code": "TX", "tax_rate": 0.0625}, headers=headers_a).json()

    response = client.put(f"/api/tax-regions/{texas['id']}", json={"is_default": True}, headers=headers_a)
    assert response.status_code == 200
    assert response.json()["is_default"] is True

    stored = defaults(db_session, TaxRegion, org_a["organization_id"])
    assert [region.code for region in stored] == ["TX"]


def test_default_rule_is_per_organization(client, org_a, org_b, headers_a, headers_b, db_session):
    client.post("/api/tax-regions", json={"name": "California", "code": "CA", "is_default": True}, headers=headers_a)
    client.post("/api/tax-regions", json={"name": "Oregon", "code": "OR", "is_default": True}, headers=headers_b)

    assert len(defaults(db_session, TaxRegion, org_a["organization_id"])) == 1
    assert len(defaults(db_session, TaxRegion, org_b["organization_id"])) == 1


def test_pricing_config_update_replaces_height_tiers(client, headers_a):
    config = client.post(
        "/api/pricing-configs",
        json={
            "name": "Residential",
            "height_tiers": [
                {"min_height_in_meters": 0, "max_height_in_meters": 1.83, "multiplier": 1.0},
                {"min_height_in_meters": 1.83, "multiplier": 1.25},
            ],
        },
        headers=headers_a,
    ).json()
    assert len(config["height_tiers"]) == 2

    response = client.put(
        f"/api/pricing-configs/{config['id']}",
        json={"height_tiers": [{"min_height_in_meters": 0, "multiplier": 1.1}]},
        headers=headers_a,
    )
    assert response.status_code == 200
    assert [tier["multiplier"] for tier in response.json()["height_tiers"]] == [1.1]


def test_duplicate_promo_code_is_rejected(client, headers_a, headers_b):
    rule = {"name": "Early Bird", "discount_type": "FixedAmount", "discount_value": 500, "promo_code": "EARLY2024"}
    assert client.post("/api/discounts", json=rule, headers=headers_a).status_code == 201

    duplicate = client.post("/api/discounts", json={**rule, "name": "Copy"}, headers=headers_a)
    assert duplicate.status_code == 400
    assert duplicate.json() == {"error": "Promo code already exists"}

    # Codes are unique per organization only
    assert client.post("/api/discounts", json=rule, headers=headers_b).status_code == 201


def test_update_promo_code_to_existing_is_rejected(client, headers_a):
    client.post("/api/discounts", json={"name": "A", "promo_code": "SPRING"}, headers=headers_a)
    other = client.post("/api/discounts", json={"name": "B", "promo_code": "FALL"}, headers=headers_a).json()

    response = client.put(f"/api/discounts/{other['id']}", json={"promo_code": "SPRING"}, headers=headers_a)
    assert response.status_code == 400
    assert response.json()["error"] == "Promo code already exists"

    # Keeping its own code is fine
    response = client.put(f"/api/discounts/{other['id']}", json={"promo_code": "FALL", "name": "B2"}, headers=headers_a)
    assert response.status_code == 200


def test_rules_without_promo_codes_do_not_collide(client, headers_a):
    for name in ("Volume Discount", "Loyalty"):
        response = client.post("/api/discounts", json={"name": name, "promo_code": "  "}, headers=headers_a)
        assert response.status_code == 201
        assert response.json()["promo_code"] is None


def iso(moment: datetime) -> str:
    return moment.replace(microsecond=0).isoformat()


@pytest.fixture
def promo(client, headers_a):
    def create(**fields):
        rule = {"name": "Promo", "discount_type": "Percentage", "discount_value": 0.1, **fields}
        response = client.post("/api/discounts", json=rule, headers=headers_a)
        assert response.status_code == 201, response.text
        return response.json()
    return create


def validate(client, headers, **body):
    return client.post("/api/discounts/validate-promo", json=body, headers=headers)


def test_validate_unknown_promo_code(client, headers_a):
    response = validate(client, headers_a, promo_code="NOPE")
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid promo code"}


def test_validate_inactive_promo_code(client, headers_a, promo):
    promo(promo_code="OFF", is_active=False)
    assert validate(client, headers_a, promo_code="OFF").json()["error"] == "Invalid promo code"


def test_validate_promo_code_not_yet_active(client, headers_a, promo):
    promo(promo_code="SOON", valid_from=iso(utcnow() + timedelta(days=5)))
    response = validate(client, headers_a, promo_code="SOON")
    assert response.status_code == 400
    assert response.json()["error"] == "Promo code is not yet active"


def test_validate_expired_promo_code(client, headers_a, promo):
    promo(promo_code="OLD", valid_until=iso(utcnow() - timedelta(days=1)))
    response = validate(client, headers_a, promo_code="OLD")
    assert response.status_code == 400
    assert response.json()["error"] == "Promo code has expired"


def test_validate_minimum_order_value(client, headers_a, promo):
    promo(promo_code="EARLY2024", minimum_order_value=3000)

    response = validate(client, headers_a, promo_code="EARLY2024", order_value=2500)
    assert response.status_code == 400
    assert response.json()["error"] == "Minimum order value of $3000.00 required"

    # A missing order value counts as zero
    assert validate(client, headers_a, promo_code="EARLY2024").status_code == 400


def test_validate_minimum_linear_feet(client, headers_a, promo):
    promo(promo_code="VOLUME", minimum_linear_feet=500)
    response = validate(client, headers_a, promo_code="VOLUME", linear_feet=499.5)
    assert response.status_code == 400
    assert response.json()["error"] == "Minimum 500.00 linear feet required"


def test_validate_matching_promo_code(client, headers_a, promo):
    rule = promo(
        promo_code="EARLY2024",
        minimum_order_value=3000,
        minimum_linear_feet=100,
        valid_from=iso(utcnow() - timedelta(days=1)),
        valid_until=iso(utcnow() + timedelta(days=30)),
    )
    response = validate(client, headers_a, promo_code="EARLY2024", order_value=4200, linear_feet=180)
    assert response.status_code == 200
    assert response.json()["id"] == rule["id"]
    assert response.json()["discount_value"] == 0.1


def test_validate_does_not_see_other_organizations_codes(client, headers_a, headers_b, promo):
    promo(promo_code="ACMEONLY")
    assert validate(client, headers_b, promo_code="ACMEONLY").json()["error"] == "Invalid promo code"
