from typing import List

from fastapi import APIRouter, Depends

from storefront.api.deps import get_repositories
from storefront.repository import Repositories
from storefront.schemas.product import Category

router = APIRouter()


@router.get("", response_model=List[Category])
async def list_categories(repos: Repositories = Depends(get_repositories)):
    return await repos.category.get_all(depth=0)


@router.get("/{slug}", response_model=Category)
async def get_category(slug: str, repos: Repositories = Depends(get_repositories)):
    """Category with its products"""
    return await repos.category.get_by_slug_or_fail(slug)
