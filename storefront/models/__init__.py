"""Database models"""
from storefront.models.enums import Category, Role
from storefront.models.product import Product
from storefront.models.user import User

__all__ = ["Category", "Product", "Role", "User"]
