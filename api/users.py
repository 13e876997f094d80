from __future__ import annotations

from typing import Tuple

from flask import Blueprint, request, jsonify, g, abort

from api.utils.request_body import read_json_body
from models.exceptions import NotFoundError
from models.role import Role
from models.schemas.user import RoleUpdateSchema, UserOutSchema
from utils.decorators import jwt_required, roles_required
from utils.services import get_credential_store

MAX_LIMIT = 100

bp = Blueprint("users", __name__)

role_update_schema = RoleUpdateSchema()
user_out_schema = UserOutSchema()
user_list_out_schema = UserOutSchema(many=True)


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", "20"))
        page = max(page, 1)
        limit = max(1, min(limit, MAX_LIMIT))
        return page, limit
    except ValueError:
        abort(400, description="page and limit must be integers")


@bp.get("/users")
@roles_required([Role.ADMIN])
def list_users():
    """
    List all users - admin
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200: { description: OK }
      403: { description: Forbidden }
    """
    page, limit = parse_pagination()
    users = get_credential_store().list_users()
    rows = users[(page - 1) * limit: page * limit]
    return jsonify(
        {
            "data": user_list_out_schema.dump(rows),
            "meta": {"page": page, "limit": limit, "total": len(users)}
        }
    )


@bp.get("/me")
@jwt_required()
def me():
    """
    Get current user info.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    user = get_credential_store().find_user_by_id(g.principal.id)
    if not user:
        raise NotFoundError("User not found")
    return jsonify(user_out_schema.dump(user)), 200


@bp.put("/users/<int:user_id>/role")
@roles_required([Role.ADMIN])
def set_role(user_id: int):
    """
    Admin-only: set the role of a user.
    Body: { "role": "admin" | "user" }
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: path
         name: user_id
         type: integer
         required: true
      -  in: body
         name: body
         schema:
           type: object
           properties:
             role: { type: string, enum: [admin, user] }
    responses:
      200: { description: OK }
      400: { description: Validation error }
      404: { description: User not found }
    """
    role = role_update_schema.load(read_json_body())["role"]
    user = get_credential_store().set_role(user_id, role)
    return jsonify(user_out_schema.dump(user)), 200
