"""
Authentication Endpoints

Registration, login, logout and the current-user probe.

Registration creates the user together with their organization; the
registering user becomes its Owner. Tokens are returned in the body for API
clients and set as an http-only cookie for browser clients.
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from datetime import timedelta

from fencemark.database import get_db
from fencemark.models.user import User
from fencemark.schemas.auth import LoginRequest, RegisterRequest, AuthResponse, CurrentUserResponse
from fencemark.schemas.common import SuccessResponse
from fencemark.api.deps import CurrentUserContext, require_user, resolve_membership
from fencemark.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    token_seconds_remaining,
)
from fencemark.core.exceptions import AuthenticationError, InvalidInputError
from fencemark.core.token_store import get_revocation_store
from fencemark.services.organizations import OrganizationService
from fencemark.services.sample_data import seed_sample_data
from fencemark.config import get_settings
from fencemark.utils.clock import utcnow
from fencemark.utils.logging import log_security_event, get_logger

logger = get_logger(__name__)
settings = get_settings()

router = APIRouter(prefix="/auth", tags=["authentication"])


def issue_token(user: User, organization_id) -> str:
    token_data = {
        "sub": user.id,
        "email": user.email,
        "organization_id": organization_id,
    }
    return create_access_token(
        token_data,
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )


def set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite="lax",
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.AUTH_COOKIE_NAME,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite="lax",
    )


def auth_response(response: Response, user: User, organization_id, message: str) -> AuthResponse:
    """Issue a token for user, set the cookie and build the response body."""
    token = issue_token(user, organization_id)
    set_auth_cookie(response, token)
    return AuthResponse(
        message=message,
        user_id=user.id,
        organization_id=organization_id,
        email=user.email,
        is_guest=user.is_guest,
        access_token=token,
    )


@router.post("/register", response_model=AuthResponse)
def register(
    registration: RegisterRequest,
    response: Response,
    db: Session = Depends(get_db)
):
    """
    Create a user and their organization.

    NOTE: New accounts are guests until their email is verified. Sample
    catalog data is added unless SEED_SAMPLE_DATA_ON_REGISTER is off.
    """
    email = registration.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise InvalidInputError("User already exists with this email")

    user = User(
        email=email,
        hashed_password=get_password_hash(registration.password),
        is_guest=True,
        is_email_verified=False,
        last_login_at=utcnow(),
    )
    db.add(user)

    organization = OrganizationService(db).create_organization(user, registration.organization_name)
    if settings.SEED_SAMPLE_DATA_ON_REGISTER:
        seed_sample_data(db, organization.id)

    db.commit()

    logger.info(
        f"New user registered: {user.id}",
        extra={"user_id": user.id, "organization_id": organization.id}
    )
    return auth_response(response, user, organization.id, "Registration successful")


@router.post("/login", response_model=AuthResponse)
def login(
    credentials: LoginRequest,
    response: Response,
    db: Session = Depends(get_db)
):
    """
    Authenticate with email and password.

    SECURITY: Unknown email and wrong password produce the same error to
    prevent account enumeration.
    """
    email = credentials.email.lower()
    user = db.query(User).filter(User.email == email).first()

    if not user:
        log_security_event("failed_login", {"reason": "user_not_found", "email": email}, logger)
        raise AuthenticationError("Invalid email or password")

    if not verify_password(credentials.password, user.hashed_password):
        log_security_event("failed_login", {"reason": "invalid_password", "user_id": user.id}, logger)
        raise AuthenticationError("Invalid email or password")

    membership = resolve_membership(db, user.id)
    organization_id = membership.organization_id if membership else None

    user.last_login_at = utcnow()
    db.commit()

    logger.info(f"Successful login: user={user.id}, organization={organization_id}")
    return auth_response(response, user, organization_id, "Login successful")


@router.post("/logout", response_model=SuccessResponse)
def logout(
    response: Response,
    context: CurrentUserContext = Depends(require_user)
):
    """Revoke the current token until it expires and clear the cookie."""
    if context.token_jti:
        ttl = token_seconds_remaining({"exp": context.token_exp})
        get_revocation_store().revoke(context.token_jti, ttl)

    clear_auth_cookie(response)
    logger.info(f"User logged out: {context.user_id}")
    return SuccessResponse()


@router.get("/me", response_model=CurrentUserResponse)
def get_me(context: CurrentUserContext = Depends(require_user)):
    return CurrentUserResponse(
        user_id=context.user_id,
        email=context.email,
        organization_id=context.organization_id,
        role=context.role,
    )


@router.delete("/account", response_model=SuccessResponse)
def delete_account(
    response: Response,
    context: CurrentUserContext = Depends(require_user),
    db: Session = Depends(get_db)
):
    """
    Delete the caller's account. Memberships go with it; organizations
    and their data stay.
    """
    user = db.query(User).filter(User.id == context.user_id).first()
    if user is not None:
        db.delete(user)
        db.commit()

    if context.token_jti:
        get_revocation_store().revoke(
            context.token_jti, token_seconds_remaining({"exp": context.token_exp})
        )
    clear_auth_cookie(response)

    log_security_event("account_deleted", {"user_id": context.user_id}, logger)
    return SuccessResponse(message="Account deleted")
