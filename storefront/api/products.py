from decimal import Decimal

from flask import Blueprint, jsonify
from marshmallow import Schema, ValidationError, fields, validate, validates_schema

from storefront.api.common import money, parse_id, timestamp
from storefront.middleware.auth import require_roles
from storefront.middleware.validation import validate_body
from storefront.models.database import MAX_INTEGER, Product, Role, db
from storefront.services.exceptions import NotFoundError
from storefront.services.product_service import ProductService
from storefront.utils.activity_log import log_activity

products_bp = Blueprint("products", __name__, url_prefix="/products")

# Numeric(10, 2)
MAX_PRICE = Decimal("99999999.99")


def _name(required):
    return fields.String(
        required=required,
        validate=validate.Length(min=1, max=255, error="Product name must be between 1 and 255 characters"),
        error_messages={"required": "Product name is required"},
    )


def _description():
    return fields.String(
        allow_none=True,
        validate=validate.Length(max=1000, error="Description must be at most 1000 characters"),
    )


def _price(required):
    return fields.Decimal(
        required=required,
        places=2,
        validate=[
            validate.Range(min=0, min_inclusive=False, error="Price must be a positive number"),
            validate.Range(max=MAX_PRICE, error=f"Price must be at most {MAX_PRICE}"),
        ],
        error_messages={"required": "Price is required", "invalid": "Price must be a number"},
    )


def _stock(**kwargs):
    return fields.Integer(
        strict=True,
        validate=[
            validate.Range(min=0, error="Stock cannot be negative"),
            validate.Range(max=MAX_INTEGER, error=f"Stock must be at most {MAX_INTEGER}"),
        ],
        error_messages={"invalid": "Stock must be an integer"},
        **kwargs,
    )


class CreateProductSchema(Schema):
    name = _name(required=True)
    description = _description()
    price = _price(required=True)
    stock = _stock(load_default=0)


class UpdateProductSchema(Schema):
    name = _name(required=False)
    description = _description()
    price = _price(required=False)
    stock = _stock()

    @validates_schema
    def validate_not_empty(self, data, **kwargs):
        if not data:
            raise ValidationError("At least one field must be provided for update")


def serialize_product(product: Product) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "price": money(product.price),
        "stock": product.stock,
        "createdAt": timestamp(product.created_at),
        "updatedAt": timestamp(product.updated_at),
    }


def _invalid_id():
    return jsonify({"error": "Product id must be a number"}), 400


@products_bp.route("", methods=["GET"])
@require_roles(Role.CUSTOMER, Role.ADMIN)
def list_products():
    """List all products, newest first."""
    products = ProductService(db.session).list_products()
    return jsonify([serialize_product(p) for p in products])


@products_bp.route("/<product_id>", methods=["GET"])
@require_roles(Role.CUSTOMER, Role.ADMIN)
def get_product(product_id):
    """Get a single product."""
    product_id = parse_id(product_id)
    if product_id is None:
        return _invalid_id()

    try:
        product = ProductService(db.session).get_product(product_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify(serialize_product(product))


@products_bp.route("", methods=["POST"])
@require_roles(Role.ADMIN)
@validate_body(CreateProductSchema)
def create_product(data):
    """Create a product (admin only)."""
    product = ProductService(db.session).create_product(
        name=data["name"],
        description=data.get("description"),
        price=data["price"],
        stock=data["stock"],
    )
    log_activity(f"Product created (id={product.id}, name={product.name})")
    return jsonify(serialize_product(product)), 201


@products_bp.route("/<product_id>", methods=["PATCH"])
@require_roles(Role.ADMIN)
@validate_body(UpdateProductSchema)
def update_product(product_id, data):
    """Partially update a product (admin only)."""
    product_id = parse_id(product_id)
    if product_id is None:
        return _invalid_id()

    try:
        product = ProductService(db.session).update_product(product_id, data)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify(serialize_product(product))


@products_bp.route("/<product_id>", methods=["DELETE"])
@require_roles(Role.ADMIN)
def delete_product(product_id):
    """Delete a product (admin only)."""
    product_id = parse_id(product_id)
    if product_id is None:
        return _invalid_id()

    try:
        name = ProductService(db.session).delete_product(product_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    log_activity(f"Product deleted (id={product_id}, name={name})")
    return jsonify({"message": "Product deleted successfully"})
