from flask import Blueprint, g, jsonify
from marshmallow import Schema, fields, validate

from storefront.api.common import money, parse_id, timestamp
from storefront.middleware.auth import require_roles
from storefront.middleware.validation import validate_body
from storefront.models.database import MAX_INTEGER, Order, Role, db
from storefront.services.exceptions import NotFoundError, OrderValidationError
from storefront.services.order_service import OrderService
from storefront.utils.activity_log import log_activity

orders_bp = Blueprint("orders", __name__, url_prefix="/orders")


class OrderItemSchema(Schema):
    product_id = fields.Integer(
        data_key="productId",
        required=True,
        strict=True,
        validate=[
            validate.Range(min=1, error="Product ID must be a positive number"),
            validate.Range(max=MAX_INTEGER, error=f"Product ID must be at most {MAX_INTEGER}"),
        ],
        error_messages={"required": "Product ID is required", "invalid": "Product ID must be an integer"},
    )
    quantity = fields.Integer(
        required=True,
        strict=True,
        validate=[
            validate.Range(min=1, error="Quantity must be at least 1"),
            validate.Range(max=MAX_INTEGER, error=f"Quantity must be at most {MAX_INTEGER}"),
        ],
        error_messages={"required": "Quantity is required", "invalid": "Quantity must be an integer"},
    )


class CreateOrderSchema(Schema):
    items = fields.List(
        fields.Nested(OrderItemSchema),
        required=True,
        validate=validate.Length(min=1, error="Order must contain at least one item"),
        error_messages={"required": "Order items are required"},
    )


def serialize_order(order: Order) -> dict:
    return {
        "id": order.id,
        "userId": order.user_id,
        "totalPrice": money(order.total_price),
        "createdAt": timestamp(order.created_at),
        "updatedAt": timestamp(order.updated_at),
        "user": {
            "id": order.user.id,
            "username": order.user.username,
            "email": order.user.email,
        },
        "orderItems": [{
            "id": item.id,
            "productId": item.product_id,
            "quantity": item.quantity,
            "price": money(item.price),
            "product": {
                "id": item.product.id,
                "name": item.product.name,
                "price": money(item.product.price),
            } if item.product is not None else None,
        } for item in order.items],
    }


@orders_bp.route("", methods=["POST"])
@require_roles(Role.CUSTOMER, Role.ADMIN)
@validate_body(CreateOrderSchema)
def create_order(data):
    """Create a new order."""
    user_id = g.current_user.id
    try:
        order = OrderService(db.session).create_order(user_id=user_id, items=data["items"])
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except OrderValidationError as e:
        return jsonify({"error": str(e), "details": e.details}), 400

    log_activity(f"Order created (id={order.id}, userId={user_id}, totalPrice={order.total_price})")
    return jsonify(serialize_order(order)), 201


@orders_bp.route("", methods=["GET"])
@require_roles(Role.CUSTOMER, Role.ADMIN)
def list_orders():
    """List the caller's orders; admins see every order."""
    service = OrderService(db.session)
    if g.current_user.role is Role.ADMIN:
        orders = service.get_all_orders()
    else:
        orders = service.get_user_orders(g.current_user.id)
    return jsonify([serialize_order(o) for o in orders])


@orders_bp.route("/<order_id>", methods=["GET"])
@require_roles(Role.CUSTOMER, Role.ADMIN)
def get_order(order_id):
    """Get a specific order. Only its owner or an admin may see it."""
    order_id = parse_id(order_id)
    if order_id is None:
        return jsonify({"error": "Order id must be a number"}), 400

    try:
        order = OrderService(db.session).get_order(order_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    if order.user_id != g.current_user.id and g.current_user.role is not Role.ADMIN:
        return jsonify({"error": "You can only view your own orders"}), 403

    return jsonify(serialize_order(order))
