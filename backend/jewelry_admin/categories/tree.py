"""Category tree construction and search filtering.

The API returns categories as a flat list where each record may point at
its parent. build_category_tree() turns that list into a forest in a single
linking pass; filter_category_tree() prunes a forest down to the branches
that match a search term.
"""

from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import structlog
from pydantic import ValidationError

from jewelry_admin.core.exceptions import CategoryCycleError
from jewelry_admin.schemas import CategoryNode, CategoryRecord

logger = structlog.get_logger(__name__)

_UNVISITED, _ON_PATH, _DONE = 0, 1, 2


def _to_node(record: Any) -> Optional[CategoryNode]:
    if isinstance(record, CategoryRecord):
        data = record.model_dump(exclude={"children", "orphaned"})
    elif isinstance(record, dict):
        data = record
    else:
        logger.warning("category_record_skipped", record_type=type(record).__name__)
        return None

    try:
        node = CategoryNode.model_validate(data)
    except ValidationError as e:
        logger.warning("category_record_skipped", error=str(e))
        return None
    # children are always rebuilt, never taken from the input
    node.children = []
    node.orphaned = False
    return node


def find_cycles(nodes: Dict[str, CategoryNode]) -> List[List[str]]:
    """Return every parent-pointer cycle among the given nodes.

    Each node has at most one parent, so walking parent pointers from every
    unvisited node and watching for a node already on the current path finds
    each cycle exactly once. A category that is its own parent is a cycle of one.
    """
    state = {node_id: _UNVISITED for node_id in nodes}
    cycles: List[List[str]] = []

    for start in nodes:
        path: List[str] = []
        current: Optional[str] = start
        while current in nodes and state[current] == _UNVISITED:
            state[current] = _ON_PATH
            path.append(current)
            current = nodes[current].parent_id

        if current in nodes and state[current] == _ON_PATH:
            cycles.append(path[path.index(current):])

        for node_id in path:
            state[node_id] = _DONE

    return cycles


def build_category_tree(records: Any) -> List[CategoryNode]:
    """Build a forest of CategoryNode from a flat list of records.

    Roots are records without a parent, plus records whose parent is not in
    the list (marked orphaned). Siblings keep input order.

    Args:
        records: Sequence of CategoryRecord or raw dicts. Anything that is not
            a list or tuple yields an empty tree.

    Returns:
        Root nodes in input order

    Raises:
        CategoryCycleError: If parent pointers loop back on themselves
    """
    if not isinstance(records, (list, tuple)):
        logger.warning("category_tree_input_invalid", input_type=type(records).__name__)
        return []

    nodes: Dict[str, CategoryNode] = {}
    for record in records:
        node = _to_node(record)
        if node is not None:
            nodes[node.id] = node

    cycles = find_cycles(nodes)
    if cycles:
        logger.error("category_cycle_detected", cycles=cycles)
        raise CategoryCycleError(cycles)

    roots: List[CategoryNode] = []
    for node in nodes.values():
        if not node.parent_id:
            roots.append(node)
            continue

        parent = nodes.get(node.parent_id)
        if parent is not None:
            parent.children.append(node)
        else:
            node.orphaned = True
            roots.append(node)
            logger.warning(
                "category_orphan_promoted",
                category_id=node.id,
                missing_parent_id=node.parent_id,
            )

    logger.debug("category_tree_built", total=len(nodes), roots=len(roots))
    return roots


def filter_category_tree(nodes: Sequence[CategoryNode], term: str) -> List[CategoryNode]:
    """Keep nodes whose name contains term, plus the ancestors of such nodes.

    A matching node keeps all of its original children. A node kept only
    because a descendant matched carries just the surviving descendants.
    An empty term returns the input unchanged.
    """
    if not term:
        return nodes if isinstance(nodes, list) else list(nodes)

    needle = term.lower()
    result: List[CategoryNode] = []
    for node in nodes:
        if needle in node.name.lower():
            result.append(node)
            continue

        surviving = filter_category_tree(node.children, term)
        if surviving:
            result.append(node.model_copy(update={"children": surviving}))

    return result


def iter_nodes(nodes: Sequence[CategoryNode], level: int = 0) -> Iterator[Tuple[CategoryNode, int]]:
    """Depth-first walk yielding (node, depth)."""
    for node in nodes:
        yield node, level
        yield from iter_nodes(node.children, level + 1)


def find_node(nodes: Sequence[CategoryNode], node_id: str) -> Optional[CategoryNode]:
    for node, _ in iter_nodes(nodes):
        if node.id == node_id:
            return node
    return None


def count_nodes(nodes: Sequence[CategoryNode]) -> int:
    return sum(1 for _ in iter_nodes(nodes))
