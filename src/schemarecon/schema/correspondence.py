"""
Correspondence resolution between source and target schema objects.

Objects correspond when they share a stable id. Absence on either side is
represented by ``None`` in the result, never by an exception.
"""

import logging
from dataclasses import dataclass
from typing import Generic, List, Mapping, Optional, Tuple, TypeVar

from ..store.entities import ForeignKey, Index, Table
from ..store.snapshot import ConversionStore, SchemaSnapshot
from ..store.dialect import translate_type


logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Correspondence(Generic[T]):
    """The source and target object sharing one id."""

    source: Optional[T] = None
    target: Optional[T] = None

    @property
    def is_matched(self) -> bool:
        return self.source is not None and self.target is not None

    @property
    def is_source_only(self) -> bool:
        """Present in the source only, i.e. deleted during conversion."""
        return self.source is not None and self.target is None

    @property
    def is_target_only(self) -> bool:
        """Present in the target only, i.e. added during conversion."""
        return self.source is None and self.target is not None


def resolve(
    object_id: str,
    source_items: Optional[Mapping[str, T]],
    target_items: Optional[Mapping[str, T]],
) -> Correspondence[T]:
    """Look an id up independently on both sides."""
    return Correspondence(
        source=source_items.get(object_id) if source_items else None,
        target=target_items.get(object_id) if target_items else None,
    )


def resolve_table(store: ConversionStore, table_id: str) -> Correspondence[Table]:
    return resolve(table_id, store.source.tables, store.target.tables)


# ============================================================================
# Columns
# ============================================================================


@dataclass(frozen=True)
class ColumnSide:
    """One side of a column mapping row."""

    order: int
    column_id: str
    name: str
    data_type: str
    is_pk: bool
    not_null: bool
    max_length: str
    auto_gen: str


@dataclass(frozen=True)
class ColumnMappingRow:
    """A source column next to its target counterpart."""

    source: Optional[ColumnSide] = None
    target: Optional[ColumnSide] = None

    @property
    def column_id(self) -> str:
        side = self.source or self.target
        return side.column_id if side else ""

    @property
    def is_renamed(self) -> bool:
        return (
            self.source is not None
            and self.target is not None
            and self.source.name != self.target.name
        )


def _column_side(
    table: Table,
    column_id: str,
    order: int,
    type_name: Optional[str] = None,
) -> Optional[ColumnSide]:
    column = table.get_column(column_id)
    if column is None:
        return None
    return ColumnSide(
        order=order,
        column_id=column_id,
        name=column.name,
        data_type=type_name if type_name is not None else column.type.name,
        is_pk=table.is_pk_column(column_id),
        not_null=column.not_null,
        max_length=column.type.display_length,
        auto_gen=column.auto_gen_label,
    )


def get_column_mapping(
    store: ConversionStore,
    table_id: str,
    type_map: Optional[Mapping[str, str]] = None,
) -> List[ColumnMappingRow]:
    """
    Side-by-side column rows for one table.

    Source columns come first in source declaration order. Target columns
    without a source counterpart follow, numbered by their target position.

    Args:
        store: Current conversion snapshots
        table_id: Table id
        type_map: Standard-SQL to dialect type map for target types

    Returns:
        List of ColumnMappingRow
    """
    pair = resolve_table(store, table_id)
    source_table, target_table = pair.source, pair.target

    def target_side(column_id: str) -> Optional[ColumnSide]:
        if target_table is None:
            return None
        column = target_table.get_column(column_id)
        if column is None:
            return None
        return _column_side(
            target_table,
            column_id,
            target_table.column_position(column_id) or 0,
            translate_type(column.type.name, store.dialect, type_map),
        )

    rows = []
    source_ids = set()
    if source_table is not None:
        for position, column_id in enumerate(source_table.column_ids, start=1):
            source_ids.add(column_id)
            rows.append(
                ColumnMappingRow(
                    source=_column_side(source_table, column_id, position),
                    target=target_side(column_id),
                )
            )

    if target_table is not None:
        for column_id in target_table.column_ids:
            if column_id in source_ids:
                continue
            rows.append(ColumnMappingRow(source=None, target=target_side(column_id)))

    logger.debug(f"Column mapping for {table_id}: {len(rows)} rows")
    return rows


# ============================================================================
# Foreign keys
# ============================================================================


@dataclass(frozen=True)
class ForeignKeySide:
    """One side of a foreign key mapping row."""

    fk_id: str
    name: str
    column_names: Tuple[str, ...]
    refer_table_name: str
    refer_column_names: Tuple[str, ...]
    on_delete: str = ""
    on_update: str = ""


@dataclass(frozen=True)
class ForeignKeyMappingRow:
    """A source foreign key next to its target counterpart."""

    source: Optional[ForeignKeySide] = None
    target: Optional[ForeignKeySide] = None

    @property
    def is_deleted(self) -> bool:
        return self.source is not None and self.target is None


def _fk_side(
    snapshot: SchemaSnapshot, table: Table, fk: Optional[ForeignKey]
) -> Optional[ForeignKeySide]:
    if fk is None:
        return None
    refer_table = snapshot.get(fk.refer_table_id)
    return ForeignKeySide(
        fk_id=fk.id,
        name=fk.name,
        column_names=tuple(table.column_name(c) for c in fk.column_ids),
        refer_table_name=refer_table.name if refer_table else "",
        refer_column_names=tuple(
            refer_table.column_name(c) if refer_table else "" for c in fk.refer_column_ids
        ),
        on_delete=fk.on_delete,
        on_update=fk.on_update,
    )


def get_fk_mapping(store: ConversionStore, table_id: str) -> List[ForeignKeyMappingRow]:
    """
    Side-by-side foreign key rows for one table.

    A source foreign key with no target counterpart has an empty target side.
    Target-only foreign keys are appended after the source-ordered rows.
    """
    pair = resolve_table(store, table_id)
    source_table, target_table = pair.source, pair.target
    target_fks = target_table.foreign_key_map if target_table else None

    rows = []
    seen = set()
    if source_table is not None:
        for fk in source_table.foreign_keys:
            seen.add(fk.id)
            match = resolve(fk.id, source_table.foreign_key_map, target_fks)
            rows.append(
                ForeignKeyMappingRow(
                    source=_fk_side(store.source, source_table, match.source),
                    target=_fk_side(store.target, target_table, match.target)
                    if target_table
                    else None,
                )
            )

    if target_table is not None:
        for fk in target_table.foreign_keys:
            if fk.id not in seen:
                rows.append(
                    ForeignKeyMappingRow(target=_fk_side(store.target, target_table, fk))
                )
    return rows


# ============================================================================
# Index keys
# ============================================================================


@dataclass(frozen=True)
class IndexKeySide:
    """One side of an index key row."""

    column_id: str
    name: str
    order: int
    desc: bool


@dataclass(frozen=True)
class IndexKeyMappingRow:
    """An index key column on both sides."""

    source: Optional[IndexKeySide] = None
    target: Optional[IndexKeySide] = None


def _index_key_sides(table: Optional[Table], index: Optional[Index]) -> Mapping[str, IndexKeySide]:
    if table is None or index is None:
        return {}
    return {
        key.column_id: IndexKeySide(
            column_id=key.column_id,
            name=table.column_name(key.column_id),
            order=key.order,
            desc=key.desc,
        )
        for key in index.keys
    }


def get_index_mapping(
    store: ConversionStore, table_id: str, index_id: str
) -> List[IndexKeyMappingRow]:
    """
    Key columns of one index on both sides.

    Source key columns come first in source key order, then key columns that
    only the target index has.
    """
    pair = resolve_table(store, table_id)
    source_index = pair.source.get_index(index_id) if pair.source else None
    target_index = pair.target.get_index(index_id) if pair.target else None

    source_keys = _index_key_sides(pair.source, source_index)
    target_keys = _index_key_sides(pair.target, target_index)

    rows = [
        IndexKeyMappingRow(source=side, target=target_keys.get(column_id))
        for column_id, side in source_keys.items()
    ]
    rows.extend(
        IndexKeyMappingRow(source=None, target=side)
        for column_id, side in target_keys.items()
        if column_id not in source_keys
    )
    return rows
