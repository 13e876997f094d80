"""
Request gates.

authenticate() turns a bearer token into Claims or raises
AuthenticationError (401 when no token, 403 when revoked / invalid /
expired). authorize() is a pure role check. jwt_required() and
roles_required() wrap views with them and expose the principal as
g.principal.
"""
from __future__ import annotations

import logging
from functools import wraps
from typing import Iterable, Optional

from flask import request, g

from models.exceptions import AuthenticationError, AuthorizationError
from models.role import Role
from utils.services import get_revocation_registry, get_token_service
from utils.tokens import ACCESS, Claims, InvalidTokenError, TokenExpiredError

logger = logging.getLogger(__name__)


def get_bearer_token() -> Optional[str]:
    """Token from 'Authorization: Bearer <token>', or None."""
    auth = request.headers.get("Authorization", "")
    scheme, _, token = auth.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def authenticate(token: Optional[str]) -> Claims:
    if not token:
        raise AuthenticationError()

    if get_revocation_registry().is_revoked(token):
        logger.info("Rejected revoked token")
        raise AuthenticationError.forbidden()

    try:
        return get_token_service().verify(token, expected_type=ACCESS)
    except TokenExpiredError:
        logger.info("Rejected expired token")
        raise AuthenticationError.forbidden()
    except InvalidTokenError as exc:
        logger.info("Rejected invalid token: %s", exc)
        raise AuthenticationError.forbidden()


def authorize(principal: Optional[Claims], allowed_roles: Iterable[Role]) -> bool:
    if principal is None or principal.role is None:
        return False
    return principal.role in frozenset(allowed_roles)


def jwt_required():
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            g.principal = authenticate(get_bearer_token())
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def roles_required(required_roles: Iterable[Role]):
    """
    Allow access if the authenticated principal's role is one of
    required_roles; otherwise 403.
    """
    allowed = frozenset(Role(r) for r in required_roles)

    def decorator(fn):
        @wraps(fn)
        @jwt_required()
        def wrapper(*args, **kwargs):
            principal = g.principal
            if not authorize(principal, allowed):
                logger.warning("Denied user id=%s role=%s", principal.id,
                               principal.role.value if principal.role else None)
                raise AuthorizationError()
            return fn(*args, **kwargs)

        return wrapper

    return decorator
