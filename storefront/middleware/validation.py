from functools import wraps

from flask import jsonify, request
from marshmallow import ValidationError


def flatten_errors(messages, path=()):
    """Turn marshmallow's nested error dict into a flat list of messages.

    Field messages are prefixed with their dotted path (``items.0.quantity: ...``),
    schema-level messages are returned as-is.
    """
    if isinstance(messages, dict):
        flat = []
        for key, value in messages.items():
            sub_path = path if key == "_schema" else path + (str(key),)
            flat.extend(flatten_errors(value, sub_path))
        return flat
    if isinstance(messages, (list, tuple)):
        flat = []
        for message in messages:
            flat.extend(flatten_errors(message, path))
        return flat
    return [f"{'.'.join(path)}: {messages}" if path else str(messages)]


def validate_body(schema_cls):
    """Middleware to validate the JSON body and pass the result as ``data``."""
    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            payload = request.get_json(silent=True)
            try:
                data = schema_cls().load({} if payload is None else payload)
            except ValidationError as e:
                return jsonify({
                    "error": "Validation failed",
                    "details": flatten_errors(e.messages),
                }), 400
            return f(*args, data=data, **kwargs)
        return decorated
    return decorator
