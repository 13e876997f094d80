from flask import request
from marshmallow import ValidationError


def read_json_body() -> dict:
    """
    Read the request body as a JSON object.
    Size is bounded by MAX_CONTENT_LENGTH (werkzeug raises 413 past it);
    a missing, malformed or non-object body raises ValidationError (400).
    """
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object.")
    return payload
