"""Product service — catalog CRUD with filtering, sorting and pagination"""
import math
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from storefront.errors import NotFoundError, ValidationError
from storefront.models.enums import Category
from storefront.models.product import Product
from storefront.schemas.product import Pagination, ProductCreate, ProductQuery, ProductUpdate
from storefront.utils.logger import logger

_SORT_COLUMNS = {
    "createdAt": Product.created_at,
    "updatedAt": Product.updated_at,
    "name": Product.name,
    "price": Product.price,
    "stock": Product.stock,
}

_SEARCH_COLUMNS = (Product.name, Product.description, Product.material, Product.gemstone)

# Columns a partial update may not null out
_REQUIRED_FIELDS = {"name", "price", "category", "stock", "is_active"}


def escape_like(term: str) -> str:
    """Make ``%`` and ``_`` in a search term match literally (escape char ``\\``)."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_pagination(total: int, page: int, limit: int) -> Pagination:
    return Pagination(
        current_page=page,
        total_pages=math.ceil(total / limit) if limit else 0,
        total=total,
        limit=limit,
    )


class ProductService:
    def __init__(self, db: Session):
        self.db = db

    def _paginate(self, query: Query, page: int, limit: int) -> Tuple[List[Product], int]:
        total = query.order_by(None).count()
        products = query.offset((page - 1) * limit).limit(limit).all()
        return products, total

    def create(self, data: ProductCreate, image_urls: Optional[List[str]] = None) -> Product:
        product = Product(
            name=data.name,
            description=data.description,
            price=data.price,
            category=data.category.value,
            material=data.material,
            weight=data.weight,
            dimensions=data.dimensions,
            gemstone=data.gemstone,
            images=list(data.images) + list(image_urls or []),
            stock=data.stock,
            is_active=data.is_active,
        )
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)

        logger.info(f"Created product: {product.id}", extra={"product_id": product.id, "action": "create_product"})
        return product

    def list(self, params: ProductQuery) -> Tuple[List[Product], int]:
        """Filtered, sorted page of products plus the total match count.

        An unknown ``category`` filter matches nothing rather than failing.
        """
        query = self.db.query(Product)

        if params.category:
            category = Category.parse(params.category)
            if category is None:
                return [], 0
            query = query.filter(Product.category == category.value)

        if params.is_active is not None:
            query = query.filter(Product.is_active == params.is_active)

        if params.search:
            pattern = f"%{escape_like(params.search)}%"
            query = query.filter(or_(*(column.ilike(pattern, escape="\\") for column in _SEARCH_COLUMNS)))

        column = _SORT_COLUMNS[params.sort_by]
        ordering = column.asc() if params.sort_order == "asc" else column.desc()
        query = query.order_by(ordering, Product.id)

        return self._paginate(query, params.page, params.limit)

    def list_by_category(self, category: str, page: int = 1, limit: int = 10) -> Tuple[List[Product], int]:
        """Active products of one category, newest first.

        TODO: decide whether an unknown category should be a 400 instead of an empty page.
        """
        parsed = Category.parse(category)
        if parsed is None:
            return [], 0

        query = (
            self.db.query(Product)
            .filter(Product.category == parsed.value, Product.is_active == True)
            .order_by(Product.created_at.desc(), Product.id)
        )
        return self._paginate(query, page, limit)

    def get(self, product_id: str) -> Product:
        product = self.db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise NotFoundError("Product not found")
        return product

    def update(
        self,
        product_id: str,
        data: ProductUpdate,
        new_image_urls: Optional[List[str]] = None,
        replace_images: bool = False,
    ) -> Product:
        """Apply the fields present in ``data``.

        Newly uploaded images are appended to the existing list, or replace
        it entirely when ``replace_images`` is set.
        """
        product = self.get(product_id)

        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None and field in _REQUIRED_FIELDS:
                raise ValidationError(f"{field} cannot be null")
            if field == "category":
                value = Category(value).value
            setattr(product, field, value)

        if new_image_urls:
            if replace_images:
                product.images = list(new_image_urls)
            else:
                product.images = list(product.images or []) + list(new_image_urls)

        self.db.commit()
        self.db.refresh(product)

        logger.info(f"Updated product: {product_id}", extra={"product_id": product_id, "action": "update_product"})
        return product

    def delete(self, product_id: str) -> None:
        product = self.get(product_id)
        self.db.delete(product)
        self.db.commit()

        logger.info(f"Deleted product: {product_id}", extra={"product_id": product_id, "action": "delete_product"})
