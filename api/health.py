from flask import Blueprint

from utils.services import get_credential_store, get_revocation_registry, get_storage

VERSION = "1.0.0"

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    """
    Health check: character database reachable, in-process store sizes
    ---
    tags:
      - Health
    responses:
      200:
        description: API is up
        schema:
          type: object
          properties:
            status: { type: string, example: ok }
            version: { type: string, example: 1.0.0 }
            database: { type: string, example: ok }
            users: { type: integer }
            revokedTokens: { type: integer }
      503:
        description: Character database unreachable
    """
    db_ok = get_storage().ping()
    body = {
        "status": "ok" if db_ok else "degraded",
        "version": VERSION,
        "database": "ok" if db_ok else "unreachable",
        "users": len(get_credential_store()),
        "revokedTokens": len(get_revocation_registry()),
    }
    return body, 200 if db_ok else 503
