"""Pydantic schemas for request/response validation"""
from storefront.schemas.auth import AuthData, LoginRequest, ProfileData, SignupRequest, UserResponse
from storefront.schemas.common import ApiResponse, format_response
from storefront.schemas.product import (
    Pagination,
    ProductCreate,
    ProductPage,
    ProductQuery,
    ProductResponse,
    ProductUpdate,
)

__all__ = [
    "ApiResponse",
    "format_response",
    "SignupRequest",
    "LoginRequest",
    "UserResponse",
    "AuthData",
    "ProfileData",
    "ProductCreate",
    "ProductUpdate",
    "ProductResponse",
    "ProductQuery",
    "Pagination",
    "ProductPage",
]
