"""
Row-Level Isolation Enforcer

Pushes the resolved organization id into the database session so that
server-side row-level security policies (when the database has them) see
the same tenant the application filters on.

The adapter is chosen by configuration (SESSION_CONTEXT_MODE), not by
inspecting the driver:

- none:       application-level filtering only (SQLite, local development)
- sqlserver:  sp_set_session_context N'OrganizationId'
- postgresql: set_config('app.organization_id', ..., is_local => true)

The statement runs at the start of every transaction a bound session
opens (after_begin), so it is re-applied on each pooled connection the
session checks out. Failures raise SessionContextError and are never
swallowed: a connection that cannot be tenant-scoped must not be used.
"""
from typing import Optional
from sqlalchemy import event, text
from sqlalchemy.orm import Session

from fencemark.config import get_settings
from fencemark.core.exceptions import SessionContextError
from fencemark.database import SessionLocal
from fencemark.utils.logging import get_logger

logger = get_logger(__name__)

ORGANIZATION_KEY = "organization_id"
ADAPTER_KEY = "session_context_adapter"


class SessionContextAdapter:
    """No-op adapter for databases without session context support."""

    mode = "none"
    statement = None

    def apply(self, connection, organization_id: str) -> None:
        if self.statement is None:
            return
        try:
            connection.execute(self.statement, {"organization_id": organization_id})
        except Exception as e:
            logger.error(
                f"Failed to set session context ({self.mode}): {e}",
                extra={"organization_id": organization_id}
            )
            raise SessionContextError(
                f"Could not set organization session context: {e}"
            ) from e


class SqlServerSessionContext(SessionContextAdapter):
    mode = "sqlserver"
    statement = text(
        "EXEC sp_set_session_context @key = N'OrganizationId', @value = :organization_id"
    )


class PostgresSessionContext(SessionContextAdapter):
    mode = "postgresql"
    # is_local=true scopes the setting to the current transaction, so a
    # pooled connection never carries a previous request's organization
    statement = text("SELECT set_config('app.organization_id', :organization_id, true)")


ADAPTERS = {
    adapter.mode: adapter
    for adapter in (SessionContextAdapter, SqlServerSessionContext, PostgresSessionContext)
}


def get_session_context_adapter(mode: Optional[str] = None) -> SessionContextAdapter:
    mode = mode or get_settings().SESSION_CONTEXT_MODE
    try:
        return ADAPTERS[mode]()
    except KeyError:
        raise ValueError(f"Unknown SESSION_CONTEXT_MODE: {mode}") from None


def bind_session_to_organization(
    session: Session,
    organization_id: str,
    adapter: Optional[SessionContextAdapter] = None
) -> Session:
    """
    Scope a session to an organization.

    Stores the id in session.info and, when a transaction is already open,
    applies the session context on its connection immediately. Transactions
    opened later pick it up through the after_begin listener.
    """
    adapter = adapter or get_session_context_adapter()
    session.info[ORGANIZATION_KEY] = organization_id
    session.info[ADAPTER_KEY] = adapter

    if session.in_transaction():
        adapter.apply(session.connection(), organization_id)

    return session


def session_organization_id(session: Session) -> Optional[str]:
    return session.info.get(ORGANIZATION_KEY)


@event.listens_for(SessionLocal, "after_begin")
def apply_session_context(session, transaction, connection):
    """Apply the bound organization on every new transaction."""
    organization_id = session.info.get(ORGANIZATION_KEY)
    if not organization_id:
        return
    adapter = session.info.get(ADAPTER_KEY) or get_session_context_adapter()
    adapter.apply(connection, organization_id)
