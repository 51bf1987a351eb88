"""Product catalog service"""

from typing import List, Dict, Any, Iterable, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
import logging
import uuid

from backshop.core.config import settings
from backshop.core.exceptions import NotFoundException, BadRequestException, ConflictException, parse_uuid
from backshop.models.product import Product, ProductImage
from backshop.utils.slug import generate_slug, unique_slug

logger = logging.getLogger(__name__)

class ProductService:
    """Product lookups used by carts and orders, plus catalog creation"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, product_data: Dict[str, Any]) -> Product:
        """
        Create product with a unique slug derived from its name

        Args:
            product_data: Validated product fields, ``images`` as list of dicts

        Returns:
            Created product
        """
        data = dict(product_data)
        images = data.pop("images", None) or []

        base = generate_slug(data["name"])
        if not base:
            raise BadRequestException("Product name does not produce a valid slug")
        slug = await unique_slug(base, self._slug_exists)

        if not data.get("currency"):
            data["currency"] = settings.DEFAULT_CURRENCY

        product = Product(
            **data,
            slug=slug,
            images=[
                ProductImage(url=image["url"], alt=image.get("alt"), order=image.get("order", position))
                for position, image in enumerate(images)
            ],
        )
        self.db.add(product)
        try:
            await self.db.commit()
        except IntegrityError:
            # Slug taken between the existence check and the write
            await self.db.rollback()
            logger.warning(f"Product slug collision on write: {slug}")
            raise ConflictException(f"Product with slug '{slug}' already exists", error_code="SLUG_EXISTS")

        logger.info(f"Product created: {product.slug}")
        return product

    async def get_product(self, product_id: Any) -> Product:
        """Get product by ID or raise NotFound"""
        product = await self.db.get(Product, parse_uuid(product_id, "product id"))
        if not product:
            raise NotFoundException(f"Product with ID {product_id} not found")
        return product

    async def get_by_ids(self, product_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, Product]:
        """
        Batch lookup of products

        Args:
            product_ids: Product IDs, duplicates allowed

        Returns:
            Mapping of ID to product for every ID that exists
        """
        ids = set(product_ids)
        if not ids:
            return {}

        result = await self.db.execute(select(Product).where(Product.id.in_(ids)))
        return {product.id: product for product in result.scalars().all()}

    async def find_by_slug(self, slug: str) -> Product:
        """Get product by slug and count the view"""
        result = await self.db.execute(select(Product).where(Product.slug == slug))
        product = result.scalar_one_or_none()
        if not product:
            raise NotFoundException(f"Product with slug {slug} not found")

        product.views = (product.views or 0) + 1
        await self.db.commit()
        return product

    async def list_products(self, include_inactive: bool = False) -> List[Product]:
        """List products, newest first"""
        stmt = select(Product)
        if not include_inactive:
            stmt = stmt.where(Product.is_active.is_(True))
        stmt = stmt.order_by(Product.created_at.desc())

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def _slug_exists(self, slug: str) -> bool:
        result = await self.db.execute(
            select(func.count()).select_from(Product).where(Product.slug == slug)
        )
        return (result.scalar() or 0) > 0
