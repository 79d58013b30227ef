"""Category hierarchy algorithms.

Everything here works on plain objects exposing ``id``, ``parent_id``,
``level``, ``path``, ``name``, ``sort`` and ``created_at``; nothing touches
the database. ``category_service`` loads the rows and applies the results.

A node's ``path`` is the chain of its ancestor ids, root first, each preceded
by a slash (``"/1/4"``); roots have an empty path and level 0.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from mall_admin.core.exceptions import CategoryHierarchyError

MAX_LEVEL = 4  # 0-based, so five levels in total
OPTION_INDENT = "　"  # full-width space


@dataclass(frozen=True)
class Placement:
    parent_id: Optional[int]
    level: int
    path: str


@dataclass
class TreeNode:
    item: Any
    depth: int = 0
    children: List["TreeNode"] = field(default_factory=list)


ROOT = Placement(parent_id=None, level=0, path="")


def child_path(parent) -> str:
    if parent.path:
        return f"{parent.path}/{parent.id}"
    return f"/{parent.id}"


def placement_under(parent) -> Placement:
    """Level and path a direct child of ``parent`` gets; ``None`` means root."""
    if parent is None:
        return ROOT
    return Placement(parent_id=parent.id, level=parent.level + 1, path=child_path(parent))


def ancestor_ids(path: Optional[str]) -> List[int]:
    return [int(part) for part in (path or "").split("/") if part]


def path_contains(path: Optional[str], node_id: int) -> bool:
    """True when ``node_id`` appears in ``path`` as a whole segment."""
    path = path or ""
    marker = f"/{node_id}"
    return f"{marker}/" in path or path.endswith(marker)


def check_parent(node_id: Optional[int], parent, subtree_height: int = 0) -> Placement:
    """
    Validate ``parent`` as the parent of ``node_id`` and return the placement.

    ``node_id`` is None for a node that does not exist yet. ``subtree_height``
    is how many levels hang below the node (0 for a leaf); the deepest
    descendant must still fit under MAX_LEVEL after the move.
    """
    if parent is None:
        if subtree_height > MAX_LEVEL:
            raise CategoryHierarchyError("Category tree cannot exceed 5 levels")
        return ROOT

    if node_id is not None:
        if parent.id == node_id:
            raise CategoryHierarchyError("A category cannot be its own parent")
        if path_contains(parent.path, node_id):
            raise CategoryHierarchyError("A category cannot be moved under one of its descendants")

    if parent.level >= MAX_LEVEL or parent.level + 1 + subtree_height > MAX_LEVEL:
        raise CategoryHierarchyError("Category tree cannot exceed 5 levels")

    return placement_under(parent)


def descendant_prefix(node) -> str:
    """Path prefix shared by every descendant of ``node``."""
    return child_path(node)


def rebase_path(path: str, old_prefix: str, new_prefix: str) -> str:
    """Swap the leading ``old_prefix`` of a descendant path for ``new_prefix``."""
    if path == old_prefix:
        return new_prefix
    if not path.startswith(old_prefix + "/"):
        raise ValueError(f"{path!r} is not below {old_prefix!r}")
    return new_prefix + path[len(old_prefix):]


def subtree_height(node, descendants: Iterable) -> int:
    levels = [d.level for d in descendants]
    if not levels:
        return 0
    return max(levels) - node.level


def _sort_key(item):
    created = getattr(item, "created_at", None) or datetime.min
    return (getattr(item, "sort", 0) or 0, created, item.id)


def build_tree(items: Iterable, sort_key: Callable = _sort_key) -> List[TreeNode]:
    """
    Nest a flat collection into a forest.

    Children are grouped by parent id in one pass, then materialized from the
    roots (``parent_id is None``). Items whose parent is not in ``items`` are
    unreachable and left out.
    """
    children_of: Dict[Optional[int], list] = defaultdict(list)
    for item in items:
        children_of[item.parent_id].append(item)
    for siblings in children_of.values():
        siblings.sort(key=sort_key)

    def materialize(item, depth: int) -> TreeNode:
        node = TreeNode(item=item, depth=depth)
        node.children = [materialize(child, depth + 1) for child in children_of.get(item.id, [])]
        return node

    return [materialize(root, 0) for root in children_of.get(None, [])]


def walk(roots: Iterable[TreeNode]):
    """Depth-first, parents before children."""
    for node in roots:
        yield node
        yield from walk(node.children)


def flatten_options(roots: Iterable[TreeNode], indent: str = OPTION_INDENT) -> List[dict]:
    """Dropdown entries in tree order, labels indented by depth."""
    return [
        {
            "value": node.item.id,
            "label": f"{indent * node.depth}{node.item.name}",
            "level": node.item.level,
        }
        for node in walk(roots)
    ]
