from __future__ import annotations

from typing import Tuple

from flask import Blueprint, request, jsonify, abort

from api.utils.request_body import read_json_body
from models.character import Character
from models.exceptions import NotFoundError
from models.role import Role
from models.schemas.character import CharacterCreateSchema, CharacterUpdateSchema, CharacterOutSchema
from utils.decorators import jwt_required, roles_required
from utils.services import get_storage

bp = Blueprint("characters", __name__, url_prefix="/characters")

# Schemas
character_create_schema = CharacterCreateSchema()
character_update_schema = CharacterUpdateSchema()
character_out_schema = CharacterOutSchema()
characters_out_schema = CharacterOutSchema(many=True)

MAX_LIMIT = 100


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", "20"))
        if page < 1:
            page = 1
        if limit < 1:
            limit = 1
        if limit > MAX_LIMIT:
            limit = MAX_LIMIT
        return page, limit
    except ValueError:
        abort(400, description="page and limit must be integers")


def get_character_or_404(character_id: str) -> Character:
    character = get_storage().get(Character, character_id)
    if not character:
        raise NotFoundError("Character not found")
    return character


@bp.get("")
@jwt_required()
def list_characters():
    """
    List characters (paginated)
    ---
    tags:
      - Characters
    security:
      - Bearer: []
    parameters:
      - in: query
        name: page
        type: integer
      - in: query
        name: limit
        type: integer
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
    """
    page, limit = parse_pagination()
    session = get_storage().get_session()
    query = session.query(Character)
    total = query.count()
    rows = (
        query.order_by(Character.created_at.asc(), Character.id.asc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return jsonify(
        {
            "data": characters_out_schema.dump(rows),
            "meta": {"page": page, "limit": limit, "total": total},
        }
    ), 200


@bp.get("/<character_id>")
@jwt_required()
def get_character(character_id: str):
    """
    Get a character by id
    ---
    tags:
      - Characters
    security:
      - Bearer: []
    parameters:
      - in: path
        name: character_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Character not found }
    """
    character = get_character_or_404(character_id)
    return jsonify({"data": character_out_schema.dump(character)}), 200


@bp.post("")
@roles_required([Role.ADMIN, Role.USER])
def create_character():
    """
    Create a character - admin or user
    ---
    tags:
      - Characters
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            name: { type: string }
            lastName: { type: string }
    responses:
      201: { description: Created }
      400: { description: Validation error }
      403: { description: Forbidden }
    """
    data = character_create_schema.load(read_json_body())
    storage = get_storage()
    character = Character(**data)
    storage.new(character)
    storage.save()
    return jsonify({"data": character_out_schema.dump(character)}), 201


@bp.patch("/<character_id>")
@roles_required([Role.ADMIN])
def update_character(character_id: str):
    """
    Update a character - admin
    ---
    tags:
      - Characters
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: character_id
        type: string
        required: true
      - in: body
        name: body
        schema:
          type: object
          properties:
            name: { type: string }
            lastName: { type: string }
    responses:
      200: { description: OK }
      400: { description: Validation error }
      404: { description: Character not found }
    """
    data = character_update_schema.load(read_json_body())
    storage = get_storage()
    character = get_character_or_404(character_id)
    for key, value in data.items():
        setattr(character, key, value)
    storage.new(character)
    storage.save()
    return jsonify({"data": character_out_schema.dump(character)}), 200


@bp.delete("/<character_id>")
@roles_required([Role.ADMIN])
def delete_character(character_id: str):
    """
    Delete a character - admin
    ---
    tags:
      - Characters
    security:
      - Bearer: []
    parameters:
      - in: path
        name: character_id
        type: string
        required: true
    responses:
      204: { description: Deleted }
      404: { description: Character not found }
    """
    storage = get_storage()
    character = get_character_or_404(character_id)
    storage.delete(character)
    storage.save()
    return ("", 204)
