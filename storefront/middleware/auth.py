import logging
from dataclasses import dataclass
from functools import wraps
from typing import Optional

import jwt
from flask import current_app, g, jsonify, request

from storefront.models.database import MAX_INTEGER, Role
from storefront.services.auth_service import AuthService

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "

PUBLIC_ROUTES = {
    ("GET", "/"),
    ("POST", "/auth/signup"),
    ("POST", "/auth/login"),
}
PUBLIC_PREFIXES = ("/ui",)


@dataclass(frozen=True)
class Identity:
    """Claims of the verified token for the current request."""

    id: int
    email: Optional[str]
    role: Optional[Role]

    @classmethod
    def from_claims(cls, claims: dict) -> "Identity":
        user_id = int(claims["sub"])
        if not 0 < user_id <= MAX_INTEGER:
            raise ValueError(f"subject out of range: {user_id}")
        return cls(
            id=user_id,
            email=claims.get("email"),
            role=Role.parse(claims.get("role")),
        )


def is_public(method: str, path: str) -> bool:
    if method == "OPTIONS":
        return True
    if any(path == p or path.startswith(p + "/") for p in PUBLIC_PREFIXES):
        return True
    return (method, path) in PUBLIC_ROUTES


def authenticate():
    """``before_request`` hook: verify the bearer token on every non-public route."""
    if is_public(request.method, request.path):
        return None

    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return jsonify({"error": "Missing Authorization Header"}), 401

    if not auth_header.startswith(BEARER_PREFIX):
        return jsonify({"error": "Missing Bearer. wrong format"}), 400

    secret = current_app.config.get("JWT_SECRET")
    if not secret:
        logger.error("JWT_SECRET is not set")
        return jsonify({"error": "Server misconfiguration"}), 500

    token = auth_header[len(BEARER_PREFIX):].strip().strip('"')
    if not token or any(ch.isspace() for ch in token):
        logger.warning("Rejected empty or whitespace-containing token")
        return jsonify({"error": "Missing or empty token"}), 400

    try:
        claims = AuthService.decode_token(token, secret)
        identity = Identity.from_claims(claims)
    except jwt.InvalidTokenError as e:
        logger.warning("JWT verify failed: %s", e)
        return jsonify({"error": f"token is invalid: {e}"}), 401
    except (KeyError, TypeError, ValueError):
        logger.warning("JWT carries no usable subject")
        return jsonify({"error": "token is invalid: missing or malformed subject"}), 401

    g.current_user = identity
    return None


def require_roles(*allowed_roles: Role):
    """Middleware to restrict a view to the given roles."""
    allowed = frozenset(allowed_roles)

    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            identity = g.get("current_user")
            if identity is None:
                return jsonify({"error": "Unauthorized"}), 401
            if identity.role not in allowed:
                return jsonify({"error": "Forbidden: insufficient role"}), 403
            return f(*args, **kwargs)
        return decorated
    return decorator
