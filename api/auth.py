"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/logout
- POST /auth/refresh

The implementation:
- Uses argon2 for password hashing (via the CredentialStore)
- Issues short-lived access tokens and longer-lived refresh tokens (JWTs signed with HS256)
- Keeps the user's current refresh token on the user record so logout can clear it
- Revokes presented tokens in the RevokedTokenRegistry
"""
from __future__ import annotations

import logging

from flask import Blueprint, jsonify, abort

from api.utils.request_body import read_json_body
from models.exceptions import AuthenticationError
from models.schemas.user import CredentialsSchema, RefreshSchema, UserOutSchema
from utils.decorators import get_bearer_token
from utils.services import get_credential_store, get_revocation_registry, get_token_service
from utils.tokens import REFRESH, InvalidTokenError

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__, url_prefix="/auth")

credentials_schema = CredentialsSchema()
refresh_schema = RefreshSchema()
user_out_schema = UserOutSchema()


def _token_pair(user):
    tokens = get_token_service()
    return {
        "accessToken": tokens.issue_access_token(user),
        "refreshToken": tokens.issue_refresh_token(user.id),
        "tokenType": "bearer",
        "expiresIn": int(tokens.access_ttl.total_seconds()),
    }


@bp.post("/register")
def register():
    """
    Register a new user.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            email: { type: string }
            password: { type: string }
    responses:
      201:
        description: Created
      400:
        description: Validation error
      409:
        description: Email already registered
    """
    data = credentials_schema.load(read_json_body())
    user = get_credential_store().create_user(data["email"], data["password"])
    return jsonify(user_out_schema.dump(user)), 201


@bp.post("/login")
def login():
    """
    Login: return accessToken and refreshToken
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      400:
        description: Validation error
      401:
        description: Invalid email or password
    """
    data = credentials_schema.load(read_json_body())

    user = get_credential_store().check_credentials(data["email"], data["password"])
    if user is None:
        logger.info("Failed login attempt")
        raise AuthenticationError("Invalid email or password")

    logger.info("User id=%s logged in", user.id)
    pair = _token_pair(user)
    get_credential_store().set_refresh_token(user.email, pair["refreshToken"])
    return jsonify(pair), 200


@bp.post("/logout")
def logout():
    """
    Logout: revokes the bearer token and clears the stored refresh token
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logged out
      403:
        description: Token owner no longer exists
      404:
        description: No token presented
    """
    token = get_bearer_token()
    if not token:
        abort(404)

    # tokens we never signed are already rejected by the gate, so they are
    # not worth a revocation entry
    try:
        claims = get_token_service().verify(token, allow_expired=True)
    except InvalidTokenError:
        logger.info("Logout with an unverifiable token")
        return jsonify({"message": "Logged out"}), 200

    get_revocation_registry().revoke(token, expires_at=claims.expires_at)

    store = get_credential_store()
    email = claims.email
    if email is None:
        user = store.find_user_by_id(claims.id)
        email = user.email if user else None
    if email is None or not store.revoke_user_session(email):
        raise AuthenticationError.forbidden()
    logger.info("User id=%s logged out", claims.id)

    return jsonify({"message": "Logged out"}), 200


@bp.post("/refresh")
def refresh():
    """
    Use a refresh token to obtain a new token pair (rotation)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      400:
        description: Validation error
      403:
        description: Invalid, revoked or superseded refresh token
    """
    token = refresh_schema.load(read_json_body())["refresh_token"]

    registry = get_revocation_registry()
    tokens = get_token_service()
    if registry.is_revoked(token):
        raise AuthenticationError.forbidden()
    try:
        claims = tokens.verify(token, expected_type=REFRESH)
    except InvalidTokenError as exc:
        logger.info("Rejected refresh token: %s", exc)
        raise AuthenticationError.forbidden()

    store = get_credential_store()
    user = store.find_user_by_id(claims.id)
    if user is None:
        raise AuthenticationError.forbidden()

    pair = _token_pair(user)
    # compare-and-set: a concurrent rotation or logout makes this fail
    if not store.rotate_refresh_token(user.id, expected=token, new=pair["refreshToken"]):
        logger.info("Refresh token for user id=%s already rotated or logged out", user.id)
        raise AuthenticationError.forbidden()

    registry.revoke(token, expires_at=claims.expires_at)
    return jsonify(pair), 200
