"""
Object-explorer tree construction.

Builds the searchable, sortable hierarchy shown for either side of a
conversion. The builder is a pure function of the store and its arguments;
callers rebuild the tree whenever the snapshots change.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, Optional, Sequence, Tuple, Union

from ..store.entities import Index, Table
from ..store.snapshot import ConversionStore, SchemaSide
from .diff import get_deleted_indexes, get_deleted_tables


logger = logging.getLogger(__name__)

DELETED_STATUS = "DELETED"


class NodeType(str, Enum):
    """Kinds of explorer nodes."""

    DATABASE = "database"
    TABLES = "tables"
    TABLE = "table"
    INDEXES = "indexes"
    INDEX = "index"
    SEQUENCES = "sequences"
    SEQUENCE = "sequence"


class SortOrder(str, Enum):
    """Sibling ordering."""

    NONE = ""
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: Union[str, "SortOrder", None]) -> "SortOrder":
        if value is None:
            return cls.NONE
        return cls(str(value.value if isinstance(value, SortOrder) else value).lower())


@dataclass(frozen=True)
class TreeNode:
    """A node of the explorer tree."""

    name: str
    node_type: NodeType
    id: str = ""
    parent_id: str = ""
    status: Optional[str] = None
    is_deleted: bool = False
    is_target: bool = False
    children: Tuple["TreeNode", ...] = ()

    @property
    def is_expandable(self) -> bool:
        return len(self.children) > 0

    def walk(self) -> Iterator["TreeNode"]:
        """Depth-first iteration over this node and its descendants."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, object_id: str, node_type: Optional[NodeType] = None) -> Optional["TreeNode"]:
        for node in self.walk():
            if node.id == object_id and (node_type is None or node.node_type == node_type):
                return node
        return None

    def child(self, node_type: NodeType) -> Optional["TreeNode"]:
        """First direct child of the given type."""
        for node in self.children:
            if node.node_type == node_type:
                return node
        return None


def _matches(name: str, search_text: str) -> bool:
    return not search_text or search_text.lower() in name.lower()


def _sorted(nodes: Sequence[TreeNode], sort_order: SortOrder) -> Tuple[TreeNode, ...]:
    if sort_order == SortOrder.NONE:
        return tuple(nodes)
    # sorted() is stable, so equal names keep declaration order.
    ascending = sorted(nodes, key=lambda n: (n.name.casefold(), n.name))
    if sort_order == SortOrder.DESC:
        ascending.reverse()
    return tuple(ascending)


def _index_node(table_id: str, index: Index, is_target: bool, deleted: bool) -> TreeNode:
    return TreeNode(
        name=index.name,
        node_type=NodeType.INDEX,
        id=index.id,
        parent_id=table_id,
        status=DELETED_STATUS if deleted else None,
        is_deleted=deleted,
        is_target=is_target,
    )


def _table_node(
    table: Table,
    status: str,
    is_target: bool,
    deleted: bool,
    deleted_indexes: Sequence[Index],
    search_text: str,
    sort_order: SortOrder,
) -> Optional[TreeNode]:
    live_indexes = () if deleted else table.indexes
    surviving = [
        _index_node(table.id, index, is_target, False)
        for index in live_indexes
        if _matches(index.name, search_text)
    ]
    dropped = [
        _index_node(table.id, index, is_target, True)
        for index in deleted_indexes
        if _matches(index.name, search_text)
    ]

    table_matches = _matches(table.name, search_text)
    index_nodes = surviving + dropped
    if not table_matches and not index_nodes:
        return None

    children: Tuple[TreeNode, ...] = ()
    if index_nodes or not search_text:
        children = (
            TreeNode(
                name=f"Indexes ({len(surviving)})",
                node_type=NodeType.INDEXES,
                id="",
                parent_id=table.id,
                is_target=is_target,
                children=_sorted(index_nodes, sort_order),
            ),
        )

    return TreeNode(
        name=table.name,
        node_type=NodeType.TABLE,
        id=table.id,
        status=status,
        is_deleted=deleted,
        is_target=is_target,
        children=children,
    )


def build_tree(
    store: ConversionStore,
    side: Union[SchemaSide, str],
    search_text: str = "",
    sort_order: Union[SortOrder, str, None] = SortOrder.NONE,
) -> TreeNode:
    """
    Build the explorer tree for one side of the conversion.

    The target tree also lists source tables and indexes that were dropped
    during conversion, flagged with ``is_deleted`` and the DELETED status.

    Args:
        store: Current conversion snapshots and ratings
        side: Which schema to show
        search_text: Case-insensitive substring filter on object names
        sort_order: "asc", "desc" or "" for declaration order

    Returns:
        Root TreeNode for the database
    """
    side = SchemaSide(side)
    order = SortOrder.parse(sort_order)
    search_text = search_text or ""
    is_target = side == SchemaSide.TARGET
    snapshot = store.side(side)

    deleted_indexes = get_deleted_indexes(store) if is_target else {}

    table_nodes: List[TreeNode] = []
    for table in snapshot:
        node = _table_node(
            table,
            store.rating(table.id).value,
            is_target,
            False,
            deleted_indexes.get(table.id, ()),
            search_text,
            order,
        )
        if node is not None:
            table_nodes.append(node)
    surviving_count = len(table_nodes)

    if is_target:
        for table in get_deleted_tables(store):
            node = _table_node(
                table, DELETED_STATUS, True, True, table.indexes, search_text, order
            )
            if node is not None:
                table_nodes.append(node)

    children = []
    if table_nodes or not search_text:
        children.append(
            TreeNode(
                name=f"Tables ({surviving_count})",
                node_type=NodeType.TABLES,
                is_target=is_target,
                children=_sorted(table_nodes, order),
            )
        )

    if is_target:
        sequence_nodes = [
            TreeNode(
                name=sequence.name,
                node_type=NodeType.SEQUENCE,
                id=sequence.id,
                status=sequence.kind or None,
                is_target=True,
            )
            for sequence in snapshot.sequences.values()
            if _matches(sequence.name, search_text)
        ]
        if sequence_nodes or not search_text:
            children.append(
                TreeNode(
                    name=f"Sequences ({len(sequence_nodes)})",
                    node_type=NodeType.SEQUENCES,
                    is_target=True,
                    children=_sorted(sequence_nodes, order),
                )
            )

    logger.debug(
        f"Built {side.value} tree: {surviving_count} tables, "
        f"{len(table_nodes) - surviving_count} deleted, search={search_text!r}"
    )
    return TreeNode(
        name=store.database_name,
        node_type=NodeType.DATABASE,
        is_target=is_target,
        children=tuple(children),
    )


def flatten(
    tree: TreeNode,
    is_expanded: Optional[Callable[[TreeNode], bool]] = None,
) -> List[Tuple[int, TreeNode]]:
    """
    Flatten a tree into (depth, node) pairs for list-style explorers.

    Children of a node are skipped when ``is_expanded`` returns False for it.
    """
    rows: List[Tuple[int, TreeNode]] = []

    def visit(node: TreeNode, depth: int) -> None:
        rows.append((depth, node))
        if is_expanded is not None and not is_expanded(node):
            return
        for child in node.children:
            visit(child, depth + 1)

    visit(tree, 0)
    return rows
