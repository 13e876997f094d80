"""
Per-application service objects.

create_app() builds one of each and hangs them on app.extensions; request
handlers fetch them through the accessors below.
"""
from __future__ import annotations

from flask import Flask, current_app

from models.credential_store import CredentialStore
from models.db_storage import DBStorage
from models.revoked_token import RevokedTokenRegistry
from utils.tokens import TokenService

CREDENTIAL_STORE = "credential_store"
REVOCATION_REGISTRY = "revocation_registry"
TOKEN_SERVICE = "token_service"
STORAGE = "storage"


def init_services(app: Flask) -> None:
    tokens = TokenService.from_config(app.config)
    app.extensions[TOKEN_SERVICE] = tokens
    app.extensions[CREDENTIAL_STORE] = CredentialStore()
    app.extensions[REVOCATION_REGISTRY] = RevokedTokenRegistry(retention=tokens.max_ttl)

    storage = DBStorage(app.config["DATABASE_URL"], echo=app.config.get("SQLALCHEMY_ECHO", False))
    storage.reload()
    app.extensions[STORAGE] = storage


def get_credential_store() -> CredentialStore:
    return current_app.extensions[CREDENTIAL_STORE]


def get_revocation_registry() -> RevokedTokenRegistry:
    return current_app.extensions[REVOCATION_REGISTRY]


def get_token_service() -> TokenService:
    return current_app.extensions[TOKEN_SERVICE]


def get_storage() -> DBStorage:
    return current_app.extensions[STORAGE]
