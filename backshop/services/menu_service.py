"""
Menu service layer
Handles navigation menu CRUD and tree building
"""

from typing import List, Dict, Any, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
import logging
import uuid

from backshop.core.exceptions import (
    NotFoundException,
    BadRequestException,
    ConflictException,
    HasChildrenException,
    CyclicReferenceException,
    SelfParentException,
    parse_uuid,
)
from backshop.models.menu import Menu
from backshop.utils.menu_tree import MenuTreeItem, build_menu_tree, would_create_cycle
from backshop.utils.slug import generate_slug, is_valid_slug, unique_slug

logger = logging.getLogger(__name__)

# Fields an update may explicitly clear
NULLABLE_FIELDS = {"parent_id", "url", "icon", "description"}

class MenuService:
    """Navigation menu service"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: Dict[str, Any]) -> Menu:
        """
        Create menu item

        An explicit slug must be free; a slug generated from the name is
        disambiguated with a numeric suffix.

        Args:
            data: Menu fields (``slug`` optional)

        Returns:
            Created menu item

        Raises:
            ConflictException: If the explicit slug is taken
            BadRequestException: If the slug format is invalid
            NotFoundException: If the parent does not exist
        """
        data = dict(data)
        slug = data.pop("slug", None)

        if slug:
            if await self._slug_exists(slug):
                raise ConflictException(f"Menu with slug '{slug}' already exists", error_code="SLUG_EXISTS")
        else:
            slug = generate_slug(data["name"])
            if slug:
                slug = await unique_slug(slug, self._slug_exists)

        if not is_valid_slug(slug):
            raise BadRequestException("Invalid slug format", error_code="INVALID_SLUG")

        parent_id = data.get("parent_id")
        if parent_id is not None:
            await self._get_parent(parent_id)

        menu = Menu(**data, slug=slug)
        self.db.add(menu)
        await self._commit_slug(slug)

        logger.info(f"Menu item created: {menu.slug}")
        return menu

    async def find_all(self, include_inactive: bool = False) -> List[Menu]:
        """Get menu items sorted by order, then creation time"""
        stmt = select(Menu)
        if not include_inactive:
            stmt = stmt.where(Menu.is_active.is_(True))
        stmt = stmt.order_by(Menu.order, Menu.created_at)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def find_one(self, menu_id: Any) -> Menu:
        """Get menu item by ID"""
        menu = await self.db.get(Menu, parse_uuid(menu_id, "menu id"))
        if not menu:
            raise NotFoundException(f"Menu with ID {menu_id} not found")
        return menu

    async def find_by_slug(self, slug: str) -> Menu:
        """Get menu item by slug"""
        result = await self.db.execute(select(Menu).where(Menu.slug == slug))
        menu = result.scalar_one_or_none()
        if not menu:
            raise NotFoundException(f"Menu with slug {slug} not found")
        return menu

    async def update(self, menu_id: Any, data: Dict[str, Any]) -> Menu:
        """
        Partially update menu item

        Args:
            menu_id: Menu item to update
            data: Fields to change; ``parent_id=None`` moves the item to the root

        Returns:
            Updated menu item

        Raises:
            ConflictException: If the new slug is taken
            BadRequestException: If the new slug format is invalid
            SelfParentException: If the item is made its own parent
            CyclicReferenceException: If the new parent is a descendant
            NotFoundException: If the item or the new parent does not exist
        """
        menu = await self.find_one(menu_id)
        data = {
            key: value for key, value in data.items()
            if value is not None or key in NULLABLE_FIELDS
        }

        slug = data.get("slug")
        if slug and slug != menu.slug:
            if await self._slug_exists(slug):
                raise ConflictException(f"Menu with slug '{slug}' already exists", error_code="SLUG_EXISTS")
            if not is_valid_slug(slug):
                raise BadRequestException("Invalid slug format", error_code="INVALID_SLUG")
        elif not slug:
            data.pop("slug", None)
            if data.get("name"):
                new_slug = generate_slug(data["name"])
                if new_slug and new_slug != menu.slug and not await self._slug_exists(new_slug):
                    data["slug"] = new_slug

        if data.get("parent_id") is not None:
            parent_id = parse_uuid(data["parent_id"], "parent id")
            if parent_id == menu.id:
                raise SelfParentException()

            parents = await self._parent_map()
            if would_create_cycle(menu.id, parent_id, parents):
                raise CyclicReferenceException()

            await self._get_parent(parent_id)
            data["parent_id"] = parent_id

        menu.update_from_dict(data, exclude=["id", "created_at", "updated_at"])
        await self._commit_slug(data.get("slug"))
        return menu

    async def remove(self, menu_id: Any) -> Menu:
        """
        Delete menu item

        Raises:
            HasChildrenException: If any item still references it as parent
        """
        menu = await self.find_one(menu_id)

        result = await self.db.execute(
            select(func.count()).select_from(Menu).where(Menu.parent_id == menu.id)
        )
        if (result.scalar() or 0) > 0:
            raise HasChildrenException()

        await self.db.delete(menu)
        await self.db.commit()

        logger.info(f"Menu item deleted: {menu.slug}")
        return menu

    async def get_tree(self, include_inactive: bool = False) -> List[MenuTreeItem]:
        """
        Get nested menu tree

        Inactive items hide their whole branch unless ``include_inactive`` is set.
        """
        tree = build_menu_tree(await self.find_all(include_inactive=True))
        if include_inactive:
            return tree
        return self._prune_inactive(tree)

    def _prune_inactive(self, nodes: List[MenuTreeItem]) -> List[MenuTreeItem]:
        kept = []
        for node in nodes:
            if node.menu.is_active:
                node.children = self._prune_inactive(node.children)
                kept.append(node)
        return kept

    async def _commit_slug(self, slug: Optional[str]) -> None:
        try:
            await self.db.commit()
        except IntegrityError:
            # Slug taken between the existence check and the write
            await self.db.rollback()
            logger.warning(f"Menu slug collision on write: {slug}")
            raise ConflictException(f"Menu with slug '{slug}' already exists", error_code="SLUG_EXISTS")

    async def _get_parent(self, parent_id: Any) -> Menu:
        parent = await self.db.get(Menu, parse_uuid(parent_id, "parent id"))
        if not parent:
            raise NotFoundException(f"Parent menu with ID {parent_id} not found")
        return parent

    async def _parent_map(self) -> Dict[uuid.UUID, Optional[uuid.UUID]]:
        result = await self.db.execute(select(Menu.id, Menu.parent_id))
        return {row.id: row.parent_id for row in result.all()}

    async def _slug_exists(self, slug: str) -> bool:
        result = await self.db.execute(
            select(func.count()).select_from(Menu).where(Menu.slug == slug)
        )
        return (result.scalar() or 0) > 0
