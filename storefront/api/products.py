"""Product catalog endpoints"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from storefront.api.deps import get_current_user, get_product_service, require_product_manager
from storefront.schemas.common import ApiResponse, format_response, parse_json_field
from storefront.schemas.product import (
    ProductCreate,
    ProductPage,
    ProductQuery,
    ProductResponse,
    ProductUpdate,
    SortField,
    SortOrder,
)
from storefront.services.products import ProductService, build_pagination
from storefront.utils.uploads import save_images

router = APIRouter(prefix="/api/products", tags=["products"])

# Authentication gate first, then the role gate reading its result
_product_managers_only = [Depends(get_current_user), Depends(require_product_manager)]


def product_query(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: SortField = Query("createdAt", alias="sortBy"),
    sort_order: SortOrder = Query("desc", alias="sortOrder"),
    category: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    search: Optional[str] = Query(None),
) -> ProductQuery:
    return ProductQuery(
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        category=category,
        is_active=is_active,
        search=search,
    )


def _page(products, total: int, page: int, limit: int) -> ProductPage:
    return ProductPage(
        products=[ProductResponse.model_validate(p) for p in products],
        pagination=build_pagination(total, page, limit),
    )


# ---------------------------------------------------------------------------
# Public reads. /category/{category} must be registered before /{product_id}
# ---------------------------------------------------------------------------

@router.get("", response_model=ApiResponse[ProductPage], response_model_exclude_unset=True)
def list_products(
    params: ProductQuery = Depends(product_query),
    products: ProductService = Depends(get_product_service),
):
    """
    List products

    Query parameters:
    - page / limit: pagination (limit capped at 100)
    - sortBy: createdAt | updatedAt | name | price | stock
    - sortOrder: asc | desc
    - category, isActive: exact filters
    - search: case-insensitive match on name, description, material or gemstone
    """
    items, total = products.list(params)
    return format_response(True, "Products retrieved successfully", _page(items, total, params.page, params.limit))


@router.get("/category/{category}", response_model=ApiResponse[ProductPage], response_model_exclude_unset=True)
def list_products_by_category(
    category: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    products: ProductService = Depends(get_product_service),
):
    """Active products in one category, newest first. Unknown categories give an empty page."""
    items, total = products.list_by_category(category, page, limit)
    return format_response(True, "Products retrieved successfully", _page(items, total, page, limit))


@router.get("/{product_id}", response_model=ApiResponse[ProductResponse], response_model_exclude_unset=True)
def get_product(
    product_id: str,
    products: ProductService = Depends(get_product_service),
):
    """Get product by ID"""
    product = products.get(product_id)
    return format_response(True, "Product retrieved successfully", ProductResponse.model_validate(product))


# ---------------------------------------------------------------------------
# Writes (ADMIN / SUPER_ADMIN)
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=ApiResponse[ProductResponse],
    response_model_exclude_unset=True,
    status_code=status.HTTP_201_CREATED,
    dependencies=_product_managers_only,
)
def create_product(
    data: str = Form(..., description="Product fields as a JSON object"),
    images: Optional[List[UploadFile]] = File(None, description="Up to 5 image files"),
    products: ProductService = Depends(get_product_service),
):
    """
    Create a product (multipart/form-data)

    - data: JSON object with name, price, category and optional fields
    - images: image files; their URLs are appended after any URLs given in ``data.images``
    """
    payload = parse_json_field(ProductCreate, data)
    image_urls = save_images(images)
    product = products.create(payload, image_urls)
    return format_response(True, "Product created successfully", ProductResponse.model_validate(product))


@router.put(
    "/{product_id}",
    response_model=ApiResponse[ProductResponse],
    response_model_exclude_unset=True,
    dependencies=_product_managers_only,
)
def update_product(
    product_id: str,
    data: Optional[str] = Form(None, description="Fields to change as a JSON object"),
    images: Optional[List[UploadFile]] = File(None),
    replace_images: bool = Form(False, alias="replaceImages"),
    products: ProductService = Depends(get_product_service),
):
    """
    Update a product (multipart/form-data)

    New images are appended to the existing ones unless ``replaceImages`` is true.
    """
    payload = parse_json_field(ProductUpdate, data)
    products.get(product_id)
    image_urls = save_images(images)
    product = products.update(product_id, payload, image_urls, replace_images)
    return format_response(True, "Product updated successfully", ProductResponse.model_validate(product))


@router.delete(
    "/{product_id}",
    response_model=ApiResponse[None],
    response_model_exclude_unset=True,
    dependencies=_product_managers_only,
)
def delete_product(
    product_id: str,
    products: ProductService = Depends(get_product_service),
):
    """Delete a product permanently"""
    products.delete(product_id)
    return format_response(True, "Product deleted successfully")
