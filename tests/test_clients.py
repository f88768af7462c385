"""
HTTP client tests.

The API clients run against the real app through TestClient (an
httpx.Client), and against httpx.MockTransport for transport failures.
"""
from decimal import Decimal

import httpx
import pytest
from fastapi.testclient import TestClient

from fencemark.clients.auth import AuthClient, OrganizationClient
from fencemark.clients.base import build_http_client
from fencemark.clients.resources import DiscountClient, JobClient, QuoteClient
from fencemark.main import app
from fencemark.schemas.job import JobCreate, JobUpdate

from conftest import PASSWORD


@pytest.fixture
def http():
    return TestClient(app)


@pytest.fixture
def signed_in(http):
    auth = AuthClient(http)
    assert auth.register("estimator@cedarline.com", PASSWORD, "Cedarline Fence") is not None
    return http


def test_register_sets_bearer_header(http):
    auth = AuthClient(http)
    result = auth.register("estimator@cedarline.com", PASSWORD, "Cedarline Fence")

    assert result.email == "estimator@cedarline.com"
    assert http.headers["Authorization"] == f"Bearer {result.access_token}"
    assert auth.me().organization_id == result.organization_id


def test_bad_login_keeps_server_message(http):
    auth = AuthClient(http)
    assert auth.login("nobody@cedarline.com", PASSWORD) is None
    assert auth.last_error == "Invalid email or password"
    assert "Authorization" not in http.headers


def test_logout_forgets_credentials(signed_in):
    auth = AuthClient(signed_in)
    assert auth.logout() is True
    assert auth.me() is None
    assert "Authorization" not in signed_in.headers


def test_job_crud(signed_in):
    jobs = JobClient(signed_in)

    created = jobs.create(JobCreate(name="Pool enclosure", customer_name="Riley Chen", total_linear_feet=Decimal("85")))
    assert created.total_linear_feet == Decimal("85")
    assert [job.id for job in jobs.get_all()] == [created.id]

    updated = jobs.update(created.id, JobUpdate(notes="Self-closing gate required"))
    assert updated.notes == "Self-closing gate required"
    assert updated.name == "Pool enclosure"

    assert jobs.delete(created.id) is True
    assert jobs.get_by_id(created.id) is None
    assert jobs.last_error.startswith("Job not found")
    assert jobs.delete(created.id) is False


def test_validation_error_surfaces_message(signed_in):
    jobs = JobClient(signed_in)
    assert jobs.create({"name": "", "customer_name": "Riley Chen"}) is None
    assert jobs.last_error == "Validation failed"


def test_promo_code_and_quote_flow(signed_in):
    assert OrganizationClient(signed_in).seed_sample_data() is True

    discounts = DiscountClient(signed_in)
    assert discounts.validate_promo_code("EARLY2024", order_value=Decimal("500")) is None
    assert discounts.last_error == "Minimum order value of $3000.00 required"
    assert discounts.validate_promo_code("EARLY2024", order_value=Decimal("3500")).promo_code == "EARLY2024"

    job = JobClient(signed_in).create({"name": "Side yard", "customer_name": "Riley Chen", "total_linear_feet": 40})
    quotes = QuoteClient(signed_in)
    quote = quotes.generate(job.id)
    assert quote.current_version == 1
    assert [summary.quote_number for summary in quotes.get_all()] == [quote.quote_number]
    assert quotes.recalculate(quote.id, "Rechecked").current_version == 2
    assert quotes.export_csv(quote.id).startswith("Category,Description")


def test_transport_errors_are_reported():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    http = build_http_client("http://api.invalid", token="abc", transport=httpx.MockTransport(refuse))
    jobs = JobClient(http)

    assert jobs.get_all() is None
    assert "connection refused" in jobs.last_error
    assert jobs.delete("job-1") is False


def test_unparseable_response():
    def garbage(request):
        return httpx.Response(200, json={"unexpected": True})

    http = build_http_client("http://api.invalid", transport=httpx.MockTransport(garbage))
    jobs = JobClient(http)
    assert jobs.get_by_id("job-1") is None
    assert jobs.last_error


def test_bearer_token_is_sent():
    seen = {}

    def record(request):
        seen["authorization"] = request.headers.get("authorization")
        seen["path"] = request.url.path
        return httpx.Response(200, json=[])

    http = build_http_client("http://api.invalid", token="abc", transport=httpx.MockTransport(record))
    assert JobClient(http).get_all() == []
    assert seen == {"authorization": "Bearer abc", "path": "/api/jobs"}
