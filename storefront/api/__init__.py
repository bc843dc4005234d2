from storefront.api.auth import auth_bp
from storefront.api.orders import orders_bp
from storefront.api.products import products_bp
from storefront.api.users import users_bp

__all__ = ["auth_bp", "orders_bp", "products_bp", "users_bp"]
