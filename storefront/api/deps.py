"""API dependencies for authentication and authorization.

Two gates, applied in order on protected routes:

1. :func:`get_current_user` — the authentication gate. Pulls the token from
   ``Authorization: Bearer <token>``, rejects it if it has been revoked,
   verifies it with the :class:`TokenCodec` and stores the resolved
   :class:`CurrentUser` on ``request.state.user``.
2. :func:`require_role` — the authorization gate. Reads the identity left by
   the first gate and checks the caller's role.

Usage::

    @router.post("", dependencies=[Depends(get_current_user), Depends(require_role([Role.ADMIN]))])
    def endpoint(...):
        ...

Failures raise :mod:`storefront.errors` exceptions; the handlers in
``main.py`` turn them into 401/403 envelopes, so the request never reaches
the endpoint.
"""
from typing import Callable, Iterable, NamedTuple, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.errors import (
    ExpiredTokenError,
    ForbiddenError,
    InvalidTokenError,
    MissingTokenError,
    RevokedTokenError,
    UnauthenticatedError,
)
from storefront.middleware.monitoring import record_auth_failure
from storefront.models.enums import Role
from storefront.services.accounts import AccountService
from storefront.services.products import ProductService
from storefront.utils.jwt_utils import TokenCodec
from storefront.utils.revocation import TokenRevocationRegistry

_bearer_scheme = HTTPBearer(auto_error=False)


class CurrentUser(NamedTuple):
    """Resolved caller identity, populated by :func:`get_current_user`."""
    id: str
    email: str
    username: str
    role: str
    token: str                # raw bearer token, needed for logout


# ---------------------------------------------------------------------------
# Process-wide collaborators (created in the app lifespan)
# ---------------------------------------------------------------------------

def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


def get_revocation_registry(request: Request) -> TokenRevocationRegistry:
    return request.app.state.revocation_registry


def get_account_service(
    db: Session = Depends(get_db),
    codec: TokenCodec = Depends(get_token_codec),
    registry: TokenRevocationRegistry = Depends(get_revocation_registry),
) -> AccountService:
    return AccountService(db, codec, registry)


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    return ProductService(db)


# ---------------------------------------------------------------------------
# Authentication gate
# ---------------------------------------------------------------------------

def authenticate(token: Optional[str], codec: TokenCodec, registry: TokenRevocationRegistry) -> CurrentUser:
    """Validate a raw bearer token and return the caller identity.

    Raises:
        MissingTokenError (401):  no token supplied.
        RevokedTokenError (401):  token was logged out; checked before decoding.
        ExpiredTokenError (401):  token is past its 'exp'.
        InvalidTokenError (403):  bad signature or unparseable token.
    """
    if not token:
        record_auth_failure(MissingTokenError.error_code)
        raise MissingTokenError()

    if registry.is_revoked(token):
        record_auth_failure(RevokedTokenError.error_code)
        raise RevokedTokenError()

    try:
        claims = codec.decode(token)
    except (ExpiredTokenError, InvalidTokenError) as exc:
        record_auth_failure(exc.error_code)
        raise

    return CurrentUser(
        id=claims.sub,
        email=claims.email,
        username=claims.username,
        role=claims.role,
        token=token,
    )


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    codec: TokenCodec = Depends(get_token_codec),
    registry: TokenRevocationRegistry = Depends(get_revocation_registry),
) -> CurrentUser:
    """Require a valid, unrevoked ``Authorization: Bearer <token>`` header."""
    token = credentials.credentials if credentials else None
    user = authenticate(token, codec, registry)
    request.state.user = user
    return user


# ---------------------------------------------------------------------------
# Authorization gate
# ---------------------------------------------------------------------------

def check_role(user: Optional[CurrentUser], allowed_roles: Iterable[str]) -> CurrentUser:
    """Return ``user`` if its role is one of ``allowed_roles``.

    Raises:
        UnauthenticatedError (401): no identity was resolved for the request.
        ForbiddenError (403):       identity present but role not allowed.
    """
    if user is None:
        record_auth_failure(UnauthenticatedError.error_code)
        raise UnauthenticatedError()

    allowed = {getattr(role, "value", role) for role in allowed_roles}
    if user.role not in allowed:
        record_auth_failure(ForbiddenError.error_code)
        raise ForbiddenError()
    return user


def require_role(allowed_roles: Iterable[str]) -> Callable:
    """Return a FastAPI dependency that enforces role membership.

    Must run after :func:`get_current_user`; it only reads the identity that
    gate stored on ``request.state``.

    Args:
        allowed_roles: Roles (``Role`` members or their string values) allowed through.

    Returns:
        A FastAPI-injectable callable that resolves to :class:`CurrentUser`.
    """
    allowed = tuple(allowed_roles)

    def _role_dep(request: Request) -> CurrentUser:
        return check_role(getattr(request.state, "user", None), allowed)

    # Give FastAPI a unique name so it doesn't collapse distinct dependencies
    names = "_".join(str(getattr(role, "value", role)).lower() for role in allowed)
    _role_dep.__name__ = f"require_role_{names}"
    return _role_dep


require_product_manager = require_role([Role.ADMIN, Role.SUPER_ADMIN])
