"""
Menu API router
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from backshop.core.database import get_db
from backshop.schemas.menu import MenuCreate, MenuUpdate, MenuResponse, MenuTreeResponse
from backshop.services.menu_service import MenuService
from backshop.utils.menu_tree import MenuTreeItem

router = APIRouter()


def _tree_to_response(node: MenuTreeItem) -> MenuTreeResponse:
    """Convert tree node to response with nested children"""
    return MenuTreeResponse(
        **MenuResponse.model_validate(node.menu).model_dump(),
        children=[_tree_to_response(child) for child in node.children]
    )


@router.post(
    "/",
    response_model=MenuResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create menu item"
)
async def create_menu(
    menu_data: MenuCreate,
    db: AsyncSession = Depends(get_db)
):
    """Create menu item; slug is generated from the name when omitted"""
    return await MenuService(db).create(menu_data.model_dump())


@router.get("/", response_model=List[MenuResponse], summary="List menu items")
async def list_menus(
    include_inactive: bool = Query(False, description="Include hidden items"),
    db: AsyncSession = Depends(get_db)
):
    return await MenuService(db).find_all(include_inactive=include_inactive)


@router.get("/tree", response_model=List[MenuTreeResponse], summary="Get menu tree")
async def get_menu_tree(
    include_inactive: bool = Query(False, description="Include hidden branches"),
    db: AsyncSession = Depends(get_db)
):
    """Get nested menu structure"""
    tree = await MenuService(db).get_tree(include_inactive=include_inactive)
    return [_tree_to_response(node) for node in tree]


@router.get("/slug/{slug}", response_model=MenuResponse, summary="Get menu item by slug")
async def get_menu_by_slug(slug: str, db: AsyncSession = Depends(get_db)):
    return await MenuService(db).find_by_slug(slug)


@router.get("/{menu_id}", response_model=MenuResponse, summary="Get menu item")
async def get_menu(menu_id: str, db: AsyncSession = Depends(get_db)):
    return await MenuService(db).find_one(menu_id)


@router.patch("/{menu_id}", response_model=MenuResponse, summary="Update menu item")
async def update_menu(
    menu_id: str,
    menu_data: MenuUpdate,
    db: AsyncSession = Depends(get_db)
):
    """Partially update menu item; send parent_id null to move it to the root"""
    return await MenuService(db).update(menu_id, menu_data.model_dump(exclude_unset=True))


@router.delete("/{menu_id}", response_model=MenuResponse, summary="Delete menu item")
async def delete_menu(menu_id: str, db: AsyncSession = Depends(get_db)):
    """Delete menu item without children"""
    return await MenuService(db).remove(menu_id)
