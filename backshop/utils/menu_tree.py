"""
Menu tree helpers
Pure functions over flat menu records
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

@dataclass
class MenuTreeItem:
    """Menu record with its nested children"""
    menu: Any
    children: List["MenuTreeItem"] = field(default_factory=list)

    @property
    def id(self):
        return self.menu.id

    @property
    def order(self) -> int:
        return self.menu.order or 0

def _sort_by_order(nodes: List[MenuTreeItem]) -> None:
    """Sort siblings by order at every level (stable, so ties keep input order)"""
    stack = [nodes]
    while stack:
        level = stack.pop()
        level.sort(key=lambda node: node.order)
        for node in level:
            if node.children:
                stack.append(node.children)

def build_menu_tree(menus: Iterable[Any]) -> List[MenuTreeItem]:
    """
    Build a forest from flat menu records

    Records whose parent is absent from the input become roots. Records
    caught in a parent cycle are unreachable from any root and are left out.

    Args:
        menus: Records with ``id``, ``parent_id`` and ``order`` attributes

    Returns:
        Root nodes sorted by order, children sorted recursively
    """
    nodes: Dict[Any, MenuTreeItem] = {}
    for menu in menus:
        nodes[menu.id] = MenuTreeItem(menu=menu)

    roots: List[MenuTreeItem] = []
    for node in nodes.values():
        parent_id = node.menu.parent_id
        if parent_id is not None and parent_id in nodes:
            nodes[parent_id].children.append(node)
        else:
            roots.append(node)

    _sort_by_order(roots)
    return roots

def would_create_cycle(
    menu_id: Any,
    new_parent_id: Optional[Any],
    parents: Mapping[Any, Optional[Any]],
) -> bool:
    """
    Check whether re-parenting ``menu_id`` under ``new_parent_id`` forms a cycle

    Walks up from the proposed parent. The walk is capped at the number of
    known nodes; a chain longer than that already loops and is rejected.

    Args:
        menu_id: Item being moved
        new_parent_id: Proposed parent (None detaches to root)
        parents: Mapping of item id to its current parent id

    Returns:
        True if the move must be rejected
    """
    if new_parent_id is None:
        return False

    current = new_parent_id
    steps = 0
    limit = len(parents) + 1

    while current is not None:
        if current == menu_id:
            return True
        steps += 1
        if steps > limit:
            return True
        current = parents.get(current)

    return False
