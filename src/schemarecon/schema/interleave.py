"""
Interleave topology over target tables.

Target tables form a forest through their ``parent_id`` pointers. These
helpers walk that forest defensively: a parent id that names no table is
treated as no parent, and a cycle ends the walk at the first revisited table.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from ..store.snapshot import SchemaSnapshot


logger = logging.getLogger(__name__)


def get_parent_id(target: SchemaSnapshot, table_id: str) -> Optional[str]:
    """Parent of a table, or None when it has none or the parent is unknown."""
    table = target.get(table_id)
    if table is None or table.parent_id is None:
        return None
    if table.parent_id not in target:
        logger.warning(
            f"Table {table.name} ({table_id}) references unknown parent {table.parent_id}"
        )
        return None
    return table.parent_id


def ancestors(target: SchemaSnapshot, table_id: str) -> List[str]:
    """Ancestor chain of a table, nearest parent first."""
    chain: List[str] = []
    visited: Set[str] = {table_id}
    current = get_parent_id(target, table_id)
    while current is not None:
        if current in visited:
            logger.warning(f"Interleave cycle detected at table {current}")
            break
        visited.add(current)
        chain.append(current)
        current = get_parent_id(target, current)
    return chain


def children(target: SchemaSnapshot, table_id: str) -> List[str]:
    """Tables directly interleaved under a table, in declaration order."""
    return [
        table.id
        for table in target
        if table.parent_id == table_id and table.id != table_id
    ]


def is_parent(target: SchemaSnapshot, table_id: str) -> bool:
    return any(table.parent_id == table_id for table in target if table.id != table_id)


def interleave_peers(target: SchemaSnapshot, table_id: str) -> List[str]:
    """
    Tables whose key layout constrains this table's primary key.

    The peers are the full ancestor chain plus the direct children;
    grandchildren are not included. An empty list means the table takes part
    in no interleaving.
    """
    peers = ancestors(target, table_id)
    for child_id in children(target, table_id):
        if child_id not in peers:
            peers.append(child_id)
    return peers


# ============================================================================
# Interleave feasibility
# ============================================================================


@dataclass(frozen=True)
class InterleaveStatus:
    """Whether a table is, or can be, interleaved under a parent."""

    possible: bool
    parent_id: Optional[str] = None
    comment: str = ""


def _prefix_condition(target: SchemaSnapshot, table_id: str, parent_id: str) -> str:
    """Reason the child's key does not start with the parent's key, or ''."""
    child = target.get(table_id)
    parent = target.get(parent_id)
    child_pks = sorted(child.primary_key, key=lambda k: k.order)
    parent_pks = sorted(parent.primary_key, key=lambda k: k.order)

    if not parent_pks or not child_pks:
        return (
            f"Both parent table '{parent.name}' and child table '{child.name}' "
            f"must have primary keys."
        )
    if len(child_pks) < len(parent_pks):
        return (
            f"The child table '{child.name}' has '{len(child_pks)}' primary keys, "
            f"which is less than the parent table '{parent.name}' primary keys "
            f"count of '{len(parent_pks)}'."
        )

    for parent_key in parent_pks:
        parent_col = parent.get_column(parent_key.column_id)
        match = None
        for child_key in child_pks:
            child_col = child.get_column(child_key.column_id)
            if (
                parent_col is not None
                and child_col is not None
                and parent_col.name == child_col.name
                and parent_col.type.name == child_col.type.name
                and parent_col.type.length == child_col.type.length
            ):
                match = child_key
                break
        parent_col_name = parent_col.name if parent_col else parent_key.column_id
        if match is None:
            return (
                f"The child table '{child.name}' does not have primary key "
                f"'{parent_col_name}' of parent table '{parent.name}'."
            )
        if match.order != parent_key.order:
            return (
                f"The primary key '{parent_col_name}' of parent table '{parent.name}' "
                f"is at order '{parent_key.order}', but in child table '{child.name}' "
                f"it is at order '{match.order}'."
            )
    return ""


def _creates_cycle(target: SchemaSnapshot, table_id: str, parent_id: str) -> bool:
    graph: Dict[str, List[str]] = {}

    def connect(a: str, b: str) -> None:
        graph.setdefault(a, []).append(b)
        graph.setdefault(b, []).append(a)

    for table in target:
        if table.parent_id and table.id != table_id:
            connect(table.id, table.parent_id)
    connect(table_id, parent_id)

    # Iterative DFS over the undirected graph, skipping the edge we came from.
    visited: Set[str] = set()
    stack = [(table_id, None)]
    while stack:
        node, came_from = stack.pop()
        if node in visited:
            return True
        visited.add(node)
        skipped = False
        for neighbor in graph.get(node, []):
            if neighbor == came_from and not skipped:
                skipped = True
                continue
            stack.append((neighbor, node))
    return False


def check_interleave(
    target: SchemaSnapshot, table_id: str, parent_id: str
) -> InterleaveStatus:
    """
    Check whether a table can be interleaved under a parent table.

    Args:
        target: Target snapshot
        table_id: Prospective child table
        parent_id: Prospective parent table

    Returns:
        InterleaveStatus with the reason in ``comment`` when not possible
    """
    child = target.get(table_id)
    parent = target.get(parent_id)
    if child is None or parent is None:
        missing = table_id if child is None else parent_id
        return InterleaveStatus(False, parent_id, f"Table '{missing}' does not exist.")
    if table_id == parent_id:
        return InterleaveStatus(
            False, parent_id, f"Table '{child.name}' cannot be interleaved in itself."
        )

    reason = _prefix_condition(target, table_id, parent_id)
    if reason:
        return InterleaveStatus(False, parent_id, reason)

    if _creates_cycle(target, table_id, parent_id):
        return InterleaveStatus(
            False,
            parent_id,
            f"Interleaving table '{child.name}' in parent table '{parent.name}' "
            f"will create a cycle.",
        )
    return InterleaveStatus(True, parent_id, "")


def interleave_status(target: SchemaSnapshot, table_id: str) -> InterleaveStatus:
    """Current interleave status of a table."""
    parent_id = get_parent_id(target, table_id)
    if parent_id is None:
        return InterleaveStatus(False, None, "Table is not interleaved.")
    return InterleaveStatus(True, parent_id, "")
