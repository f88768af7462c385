"""
API Dependencies

Reusable FastAPI dependencies for authentication and tenant scoping.

The caller's identity and organization are resolved ONCE per request into
an immutable CurrentUserContext. FastAPI caches a dependency's return value
for the lifetime of a request, so every endpoint layer that depends on it
shares the same value and the membership lookup runs exactly once. The
context is passed explicitly to services; it is never stored on shared
objects.
"""
from dataclasses import dataclass
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from fencemark.config import get_settings
from fencemark.database import get_db
from fencemark.models.organization import MemberRole, OrganizationMember
from fencemark.models.user import User
from fencemark.core.security import decode_access_token
from fencemark.core.exceptions import AuthenticationError, TenantIsolationError
from fencemark.core.tenancy import bind_session_to_organization
from fencemark.core.token_store import get_revocation_store
from fencemark.utils.logging import get_logger, log_security_event

logger = get_logger(__name__)
settings = get_settings()

# auto_error=False: browser clients authenticate with the cookie instead
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUserContext:
    """Who is calling and which organization their request is scoped to."""
    user_id: Optional[str] = None
    email: Optional[str] = None
    is_authenticated: bool = False
    organization_id: Optional[str] = None
    role: Optional[MemberRole] = None
    token_jti: Optional[str] = None
    token_exp: Optional[int] = None


ANONYMOUS = CurrentUserContext()


def extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    """Bearer header first, then the auth cookie."""
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.AUTH_COOKIE_NAME)


def resolve_membership(
    db: Session,
    user_id: str,
    preferred_organization_id: Optional[str] = None
) -> Optional[OrganizationMember]:
    """
    Pick the membership that scopes this request.

    One query over the user's accepted memberships in a stable order
    (joined_at, id). The organization named in the token wins when the
    user still belongs to it; otherwise the earliest membership is used.
    Pending invitations never grant access.
    """
    memberships = (
        db.query(OrganizationMember)
        .filter(
            OrganizationMember.user_id == user_id,
            OrganizationMember.is_accepted.is_(True)
        )
        .order_by(OrganizationMember.joined_at, OrganizationMember.id)
        .all()
    )
    if not memberships:
        return None

    if preferred_organization_id:
        for membership in memberships:
            if membership.organization_id == preferred_organization_id:
                return membership

    return memberships[0]


def get_current_user_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> CurrentUserContext:
    """
    Resolve the caller. Never raises: anonymous callers get ANONYMOUS.

    Endpoints enforce authentication through require_user or
    require_organization.
    """
    token = extract_token(request, credentials)
    if not token:
        return ANONYMOUS

    payload = decode_access_token(token)
    if not payload or not payload.get("sub"):
        return ANONYMOUS

    jti = payload.get("jti")
    if get_revocation_store().is_revoked(jti):
        log_security_event("token_revoked", {"user_id": payload.get("sub")}, logger)
        return ANONYMOUS

    user = db.query(User).filter(User.id == payload["sub"]).first()
    if not user:
        return ANONYMOUS

    membership = resolve_membership(db, user.id, payload.get("organization_id"))

    context = CurrentUserContext(
        user_id=user.id,
        email=user.email,
        is_authenticated=True,
        organization_id=membership.organization_id if membership else None,
        role=membership.role if membership else None,
        token_jti=jti,
        token_exp=payload.get("exp"),
    )

    request.state.user_id = context.user_id
    request.state.organization_id = context.organization_id
    return context


def require_user(
    context: CurrentUserContext = Depends(get_current_user_context)
) -> CurrentUserContext:
    """Require an authenticated caller (organization optional)."""
    if not context.is_authenticated:
        raise AuthenticationError("Not authenticated")
    return context


def require_organization(
    context: CurrentUserContext = Depends(require_user)
) -> CurrentUserContext:
    """
    Require an authenticated caller with an active organization.

    A signed-in user without an accepted membership has no tenant to
    read from, which is treated the same as being unauthenticated.
    """
    if not context.organization_id:
        raise AuthenticationError("No organization associated with this account")
    return context


def get_tenant_db(
    context: CurrentUserContext = Depends(require_organization),
    db: Session = Depends(get_db)
) -> Session:
    """
    Request session bound to the caller's organization.

    CRITICAL: Binding pushes the organization id into the database session
    context on every transaction (see fencemark.core.tenancy). Endpoints
    must still filter every query by organization_id.
    """
    return bind_session_to_organization(db, context.organization_id)


def ensure_same_organization(context: CurrentUserContext, organization_id: str) -> None:
    """Organization-management paths must target the caller's organization."""
    if context.organization_id != organization_id:
        log_security_event(
            "cross_organization_access",
            {
                "user_id": context.user_id,
                "organization_id": context.organization_id,
                "target_organization_id": organization_id,
            },
            logger
        )
        raise TenantIsolationError()
