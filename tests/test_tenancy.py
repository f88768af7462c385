"""
Session context tests: the organization id reaches the database connection
on every transaction, and failures are never swallowed.
"""
import inspect

import pytest
from fastapi.routing import APIRoute
from sqlalchemy import text

from fencemark.api import deps
from fencemark.core.exceptions import SessionContextError
from fencemark.core.tenancy import (
    SessionContextAdapter,
    SqlServerSessionContext,
    PostgresSessionContext,
    bind_session_to_organization,
    get_session_context_adapter,
    session_organization_id,
)
from fencemark.main import app


class RecordingConnection:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def execute(self, statement, params):
        if self.error:
            raise self.error
        self.calls.append((str(statement), params))


class RecordingAdapter(SessionContextAdapter):
    """Runs a harmless statement and remembers which organizations it saw."""

    mode = "recording"
    statement = text("SELECT :organization_id")

    def __init__(self):
        self.organizations = []

    def apply(self, connection, organization_id):
        super().apply(connection, organization_id)
        self.organizations.append(organization_id)


def test_adapter_selection():
    assert isinstance(get_session_context_adapter("none"), SessionContextAdapter)
    assert isinstance(get_session_context_adapter("sqlserver"), SqlServerSessionContext)
    assert isinstance(get_session_context_adapter("postgresql"), PostgresSessionContext)


def test_unknown_mode_is_rejected():
    with pytest.raises(ValueError):
        get_session_context_adapter("oracle")


def test_none_mode_does_not_touch_the_connection():
    connection = RecordingConnection()
    SessionContextAdapter().apply(connection, "org-1")
    assert connection.calls == []


@pytest.mark.parametrize("adapter, fragment", [
    (SqlServerSessionContext(), "sp_set_session_context"),
    (PostgresSessionContext(), "set_config('app.organization_id'"),
])
def test_adapters_send_the_organization(adapter, fragment):
    connection = RecordingConnection()
    adapter.apply(connection, "org-1")

    [(statement, params)] = connection.calls
    assert fragment in statement
    assert params == {"organization_id": "org-1"}


def test_postgres_setting_is_transaction_local():
    assert "true)" in str(PostgresSessionContext.statement)


def test_failure_raises_session_context_error():
    connection = RecordingConnection(error=RuntimeError("permission denied"))
    with pytest.raises(SessionContextError):
        SqlServerSessionContext().apply(connection, "org-1")


def test_bound_session_applies_context_on_each_transaction(db_session):
    adapter = RecordingAdapter()
    bind_session_to_organization(db_session, "org-1", adapter)
    assert session_organization_id(db_session) == "org-1"
    assert adapter.organizations == []

    db_session.execute(text("SELECT 1"))
    db_session.commit()
    db_session.execute(text("SELECT 1"))

    assert adapter.organizations == ["org-1", "org-1"]


def test_binding_inside_open_transaction_applies_immediately(db_session):
    db_session.execute(text("SELECT 1"))

    adapter = RecordingAdapter()
    bind_session_to_organization(db_session, "org-2", adapter)
    assert adapter.organizations == ["org-2"]


def test_unbound_session_sets_nothing(db_session):
    assert session_organization_id(db_session) is None
    db_session.execute(text("SELECT 1"))


def test_unsupported_statement_fails_the_query(db_session):
    # SQLite has no set_config(); the query must not run unscoped
    bind_session_to_organization(db_session, "org-1", PostgresSessionContext())
    with pytest.raises(SessionContextError):
        db_session.execute(text("SELECT 1"))


def test_database_handlers_run_in_the_threadpool():
    # Blocking SQLAlchemy calls must not run on the event loop
    for dependency in (
        deps.get_current_user_context,
        deps.require_user,
        deps.require_organization,
        deps.get_tenant_db,
    ):
        assert not inspect.iscoroutinefunction(dependency), dependency.__name__

    api_routes = [route for route in app.routes if isinstance(route, APIRoute) and route.path.startswith("/api")]
    assert api_routes
    for route in api_routes:
        assert not inspect.iscoroutinefunction(route.endpoint), route.path
