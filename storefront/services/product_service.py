from sqlalchemy import select

from storefront.models.database import Product
from storefront.services.exceptions import NotFoundError

UPDATABLE_FIELDS = ("name", "description", "price", "stock")


class ProductService:
    """Catalog CRUD over a SQLAlchemy session."""

    def __init__(self, session):
        self.session = session

    def list_products(self) -> list:
        return list(self.session.scalars(
            select(Product).order_by(Product.created_at.desc(), Product.id.desc())
        ))

    def get_product(self, product_id: int) -> Product:
        product = self.session.get(Product, product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    def create_product(self, name, price, description=None, stock=0) -> Product:
        product = Product(
            name=name,
            description=description or None,
            price=price,
            stock=stock or 0,
        )
        self.session.add(product)
        self.session.commit()
        return product

    def update_product(self, product_id: int, changes: dict) -> Product:
        """Apply only the fields present in ``changes``."""
        product = self.get_product(product_id)
        for field in UPDATABLE_FIELDS:
            if field in changes:
                setattr(product, field, changes[field])
        self.session.commit()
        return product

    def delete_product(self, product_id: int) -> str:
        """Delete a product and return its name."""
        product = self.get_product(product_id)
        name = product.name
        self.session.delete(product)
        self.session.commit()
        return name
