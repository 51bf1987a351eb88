"""
Product API router
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from backshop.core.database import get_db
from backshop.schemas.product import ProductCreate, ProductResponse
from backshop.services.product_service import ProductService

router = APIRouter()


@router.post(
    "/",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create product"
)
async def create_product(product_data: ProductCreate, db: AsyncSession = Depends(get_db)):
    """Create product with a slug generated from its name"""
    return await ProductService(db).create(product_data.model_dump())


@router.get("/", response_model=List[ProductResponse], summary="List products")
async def list_products(
    include_inactive: bool = Query(False),
    db: AsyncSession = Depends(get_db)
):
    return await ProductService(db).list_products(include_inactive=include_inactive)


@router.get("/slug/{slug}", response_model=ProductResponse, summary="Get product by slug")
async def get_product_by_slug(slug: str, db: AsyncSession = Depends(get_db)):
    """Get product by slug and count the view"""
    return await ProductService(db).find_by_slug(slug)


@router.get("/{product_id}", response_model=ProductResponse, summary="Get product")
async def get_product(product_id: str, db: AsyncSession = Depends(get_db)):
    return await ProductService(db).get_product(product_id)
