"""Utilities package"""

from .slug import generate_slug, is_valid_slug, unique_slug
from .menu_tree import MenuTreeItem, build_menu_tree, would_create_cycle

__all__ = [
    "generate_slug",
    "is_valid_slug",
    "unique_slug",
    "MenuTreeItem",
    "build_menu_tree",
    "would_create_cycle"
]
