from collections import defaultdict
from decimal import Decimal
from sqlalchemy import select, update

from storefront.models.database import Order, OrderItem, Product, User
from storefront.services.exceptions import NotFoundError, OrderValidationError


class OrderService:
    """Handles order business logic."""

    def __init__(self, session):
        self.session = session

    def create_order(self, user_id: int, items: list) -> Order:
        """Create an order and deduct stock for every item, all or nothing.

        Every item is checked before anything is written so the caller gets
        the complete list of problems in one response.
        """
        if self.session.get(User, user_id) is None:
            raise NotFoundError("User not found")

        product_ids = {item["product_id"] for item in items}
        products = {
            p.id: p
            for p in self.session.scalars(select(Product).where(Product.id.in_(product_ids)))
        }

        errors = []
        total = Decimal("0")
        # Lines repeating a product draw on the same stock.
        reserved = defaultdict(int)
        for item in items:
            product = products.get(item["product_id"])
            if product is None:
                errors.append(f"Product with ID {item['product_id']} not found")
                continue
            requested = reserved[product.id] + item["quantity"]
            if product.stock < requested:
                errors.append(
                    f'Insufficient stock for "{product.name}". '
                    f"Available: {product.stock}, Requested: {requested}"
                )
                continue
            reserved[product.id] = requested
            total += product.price * item["quantity"]

        if errors:
            raise OrderValidationError(errors)

        order = Order(
            user_id=user_id,
            total_price=total,
            items=[
                OrderItem(
                    product_id=item["product_id"],
                    quantity=item["quantity"],
                    price=products[item["product_id"]].price,
                )
                for item in items
            ],
        )

        try:
            self.session.add(order)
            deducted = defaultdict(int)
            for item in items:
                product = products[item["product_id"]]
                self._deduct_stock(product, item["quantity"], deducted[product.id])
                deducted[product.id] += item["quantity"]
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        return order

    def _deduct_stock(self, product: Product, quantity: int, already_deducted: int = 0):
        # Guarded decrement: never lets stock drop below zero, even if another
        # transaction consumed it after the validation read.
        result = self.session.execute(
            update(Product)
            .where(Product.id == product.id, Product.stock >= quantity)
            .values(stock=Product.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            return

        current = self.session.scalar(select(Product.stock).where(Product.id == product.id))
        if current is None:
            raise OrderValidationError([f"Product with ID {product.id} not found"])
        # Report stock as it stood before this order, not mid-transaction.
        raise OrderValidationError([
            f'Insufficient stock for "{product.name}". '
            f"Available: {current + already_deducted}, Requested: {already_deducted + quantity}"
        ])

    def get_order(self, order_id: int) -> Order:
        order = self.session.get(Order, order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def get_user_orders(self, user_id: int) -> list:
        """Get all orders for a specific user, newest first."""
        return list(self.session.scalars(
            select(Order)
            .filter_by(user_id=user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        ).unique())

    def get_all_orders(self) -> list:
        return list(self.session.scalars(
            select(Order).order_by(Order.created_at.desc(), Order.id.desc())
        ).unique())
