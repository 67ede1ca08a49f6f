"""
Product routes

Public catalog reads; writes require an admin.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from storefront.api.deps import get_repositories, require_admin
from storefront.core.exceptions import ValidationError
from storefront.repository import Repositories
from storefront.schemas.product import Product, ProductCreate, ProductList, ProductUpdate
from storefront.schemas.user import User

logger = logging.getLogger(__name__)

router = APIRouter()


async def _check_category(repos: Repositories, category_id: Optional[int]) -> None:
    if category_id is not None and await repos.category.get_by_id(category_id, depth=0) is None:
        message = "Category does not exist"
        raise ValidationError(message, field_errors={"category": [message]})


@router.get("", response_model=ProductList)
async def list_products(
    category: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(24, ge=1, le=100),
    repos: Repositories = Depends(get_repositories),
):
    """List products, optionally by category slug and/or search text"""
    category_id = None
    if category:
        category_id = (await repos.category.get_by_slug_or_fail(category, depth=0)).id

    products, result = await repos.product.search(
        category_id=category_id,
        search=search,
        limit=limit,
        page=page,
    )
    return ProductList(
        products=products,
        total=result.total_docs,
        page=result.page,
        total_pages=result.total_pages,
    )


@router.get("/{slug}", response_model=Product)
async def get_product(slug: str, repos: Repositories = Depends(get_repositories)):
    return await repos.product.get_by_slug_or_fail(slug)


@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED)
async def create_product(
    data: ProductCreate,
    admin: User = Depends(require_admin),
    repos: Repositories = Depends(get_repositories),
):
    await _check_category(repos, data.category)
    product = await repos.product.create(data.model_dump(exclude_none=True))
    logger.info(f"Admin {admin.id} created product {product.id} ({product.slug})")
    return product


@router.patch("/{product_id}", response_model=Product)
async def update_product(
    product_id: int,
    data: ProductUpdate,
    admin: User = Depends(require_admin),
    repos: Repositories = Depends(get_repositories),
):
    changes = data.model_dump(exclude_unset=True)
    await _check_category(repos, changes.get("category"))
    product = await repos.product.update(product_id, changes)
    logger.info(f"Admin {admin.id} updated product {product_id}: {sorted(changes)}")
    return product


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    admin: User = Depends(require_admin),
    repos: Repositories = Depends(get_repositories),
):
    await repos.product.delete(product_id)
    logger.info(f"Admin {admin.id} deleted product {product_id}")
    return {"deleted": product_id}
