from flask import Blueprint, current_app, jsonify
from marshmallow import Schema, fields, validate

from storefront.api.users import serialize_user
from storefront.middleware.validation import validate_body
from storefront.models.database import Role, db
from storefront.services.auth_service import AuthService
from storefront.services.exceptions import ServiceError

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")

PASSWORD_PATTERN = r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}$"


class SignupSchema(Schema):
    username = fields.String(
        required=True,
        validate=validate.Length(min=3, max=30, error="Username must be between 3 and 30 characters"),
        error_messages={"required": "Username is required"},
    )
    email = fields.Email(
        required=True,
        error_messages={"required": "Email is required", "invalid": "Please provide a valid email address"},
    )
    # bcrypt only looks at the first 72 bytes.
    password = fields.String(
        required=True,
        validate=[
            validate.Length(min=8, error="Password must be at least 8 characters"),
            validate.Length(max=72, error="Password must be at most 72 characters"),
            validate.Regexp(
                PASSWORD_PATTERN,
                error="Password must contain at least one uppercase letter, one lowercase letter, "
                      "one number, and one special character (@$!%*?&)",
            ),
        ],
        error_messages={"required": "Password is required"},
    )
    role = fields.String(
        load_default=Role.CUSTOMER.value,
        validate=validate.OneOf([r.value for r in Role], error="Role must be either CUSTOMER or ADMIN"),
    )


class LoginSchema(Schema):
    email = fields.Email(
        required=True,
        error_messages={"required": "Email is required", "invalid": "Please provide a valid email address"},
    )
    password = fields.String(required=True, error_messages={"required": "Password is required"})


def _auth_service() -> AuthService:
    config = current_app.config
    return AuthService(
        db.session,
        secret=config.get("JWT_SECRET"),
        expiry_minutes=config["JWT_EXPIRY_MINUTES"],
        rounds=config["BCRYPT_ROUNDS"],
    )


@auth_bp.route("/signup", methods=["POST"])
@validate_body(SignupSchema)
def signup(data):
    """Register a new user account."""
    try:
        user = _auth_service().register_user(
            data["username"], data["email"], data["password"], Role(data["role"])
        )
    except ServiceError as e:
        return jsonify({"error": str(e)}), e.status_code

    return jsonify(serialize_user(user)), 201


@auth_bp.route("/login", methods=["POST"])
@validate_body(LoginSchema)
def login(data):
    """Authenticate and receive a JWT token."""
    try:
        token, user = _auth_service().authenticate(data["email"], data["password"])
    except ValueError:
        return jsonify({"error": "Invalid email or password"}), 401
    except ServiceError as e:
        return jsonify({"error": str(e)}), e.status_code

    return jsonify({
        "message": "Login successful",
        "token": token,
        "user": {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "role": user.role.value,
        },
    }), 200
