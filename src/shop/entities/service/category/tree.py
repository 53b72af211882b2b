"""Assemble category trees from a flat list of rows.

Nodes are kept in an arena keyed by id and linked through a parent→children
index built in a single pass. Assembly walks breadth-first from the roots,
so deep trees never hit the recursion limit, and every node is attached at
most once: a node that would close a cycle is skipped.
"""

from collections import defaultdict, deque
from collections.abc import Iterable

from .entity import Category


def _index(categories: Iterable[Category]) -> tuple[dict[int, Category], dict[int | None, list[int]]]:
    arena: dict[int, Category] = {}
    child_index: dict[int | None, list[int]] = defaultdict(list)
    for category in categories:
        arena[category.id] = category.model_copy(update={"children": []})
    for node in arena.values():
        # children of an unknown parent are treated as roots
        parent_id = node.parent_id if node.parent_id in arena else None
        child_index[parent_id].append(node.id)
    return arena, child_index


def _link(root_ids: list[int], arena: dict[int, Category], child_index: dict[int | None, list[int]]) -> None:
    seen: set[int] = set(root_ids)
    queue = deque(root_ids)
    while queue:
        node = arena[queue.popleft()]
        for child_id in sorted(child_index.get(node.id, ())):
            if child_id in seen:
                continue
            seen.add(child_id)
            node.children.append(arena[child_id])
            queue.append(child_id)


def build_forest(categories: Iterable[Category]) -> list[Category]:
    """Return the root categories with their descendants attached."""
    arena, child_index = _index(categories)
    root_ids = sorted(child_index.get(None, ()))
    _link(root_ids, arena, child_index)
    return [arena[root_id] for root_id in root_ids]


def build_subtree(categories: Iterable[Category], category_id: int) -> Category | None:
    """Return ``category_id`` with its descendants attached, or None."""
    arena, child_index = _index(categories)
    if category_id not in arena:
        return None
    _link([category_id], arena, child_index)
    return arena[category_id]
