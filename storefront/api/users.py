from flask import Blueprint, jsonify

from storefront.api.common import parse_id, timestamp
from storefront.middleware.auth import require_roles
from storefront.models.database import Role, User, db

users_bp = Blueprint("users", __name__, url_prefix="/users")


def serialize_user(user: User) -> dict:
    """Public view of a user; the password hash never leaves the server."""
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "role": user.role.value,
        "createdAt": timestamp(user.created_at),
    }


@users_bp.route("/<user_id>", methods=["GET"])
@require_roles(Role.CUSTOMER, Role.ADMIN)
def get_user(user_id):
    """Get a user by id."""
    user_id = parse_id(user_id)
    if user_id is None:
        return jsonify({"error": "User id must be a number"}), 400

    user = db.session.get(User, user_id)
    if not user:
        return jsonify({"error": "User not found"}), 404

    return jsonify(serialize_user(user))
