"""
Conversion document loading for schemarecon.

Turns the JSON conversion document produced by the migration tool (``SrcSchema``
and ``SpSchema`` keyed by table id) into immutable snapshots.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from .dialect import Dialect
from .entities import (
    AutoGen,
    CheckConstraint,
    Column,
    ColumnType,
    ForeignKey,
    Index,
    KeyPart,
    Sequence,
    Table,
)
from .snapshot import ConversionStore, SchemaSnapshot
from ..exceptions import SnapshotLoadError


logger = logging.getLogger(__name__)


def _require_id(record: Mapping[str, Any], kind: str, fallback: Optional[str] = None) -> str:
    object_id = record.get("Id") or fallback
    if not object_id:
        raise SnapshotLoadError(f"{kind} without Id: {record.get('Name', '<unnamed>')}")
    return str(object_id)


def _as_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise SnapshotLoadError(f"{what} must be an object keyed by id")
    return value


def _keys(records: Optional[List[Mapping[str, Any]]]) -> List[KeyPart]:
    parts = []
    for position, record in enumerate(records or [], start=1):
        column_id = record.get("ColId") or record.get("Col") or record.get("Column")
        if not column_id:
            raise SnapshotLoadError("Key part without ColId")
        parts.append(
            KeyPart(
                column_id=str(column_id),
                order=int(record.get("Order") or position),
                desc=bool(record.get("Desc", False)),
            )
        )
    return parts


def _source_type(record: Mapping[str, Any]) -> ColumnType:
    mods = record.get("Mods") or []
    return ColumnType(
        name=record.get("Name", ""),
        length=int(mods[0]) if mods else None,
        is_array=bool(record.get("ArrayBounds")),
    )


def _target_type(record: Mapping[str, Any]) -> ColumnType:
    length = record.get("Len")
    return ColumnType(
        name=record.get("Name", ""),
        length=int(length) if length else None,
        is_array=bool(record.get("IsArray", False)),
    )


def _column(column_id: str, record: Mapping[str, Any], is_target: bool) -> Column:
    if is_target:
        column_type = _target_type(record.get("T") or {})
    else:
        column_type = _source_type(record.get("Type") or {})

    auto_gen = None
    raw_auto_gen = record.get("AutoGen")
    if raw_auto_gen:
        auto_gen = AutoGen(
            name=raw_auto_gen.get("Name", ""),
            generation_type=raw_auto_gen.get("GenerationType", ""),
        )

    default_value = record.get("DefaultValue")
    if isinstance(default_value, Mapping):
        default_value = (default_value.get("Value") or {}).get("Statement") or None

    return Column(
        id=_require_id(record, "Column", column_id),
        name=record.get("Name", ""),
        type=column_type,
        not_null=bool(record.get("NotNull", False)),
        auto_gen=auto_gen,
        default_value=default_value,
    )


def _parent_id(record: Mapping[str, Any]) -> Optional[str]:
    parent = record.get("ParentTable")
    if isinstance(parent, Mapping):
        return parent.get("Id") or None
    return record.get("ParentId") or None


def _table(table_id: str, record: Mapping[str, Any], is_target: bool) -> Table:
    table_id = _require_id(record, "Table", table_id)
    raw_columns = _as_mapping(record.get("ColDefs"), f"ColDefs of table {table_id}")
    columns = {
        str(col_id): _column(str(col_id), col, is_target)
        for col_id, col in raw_columns.items()
    }
    column_ids = [str(c) for c in (record.get("ColIds") or list(columns.keys()))]

    indexes = [
        Index(
            id=_require_id(index, "Index"),
            name=index.get("Name", ""),
            keys=tuple(_keys(index.get("Keys"))),
            unique=bool(index.get("Unique", False)),
        )
        for index in record.get("Indexes") or []
    ]
    foreign_keys = [
        ForeignKey(
            id=_require_id(fk, "Foreign key"),
            name=fk.get("Name", ""),
            column_ids=tuple(fk.get("ColIds") or []),
            refer_table_id=fk.get("ReferTableId", ""),
            refer_column_ids=tuple(fk.get("ReferColumnIds") or []),
            on_delete=fk.get("OnDelete", ""),
            on_update=fk.get("OnUpdate", ""),
        )
        for fk in record.get("ForeignKeys") or []
    ]
    check_constraints = [
        CheckConstraint(
            id=_require_id(cc, "Check constraint"),
            name=cc.get("Name", ""),
            expression=cc.get("Expr", cc.get("Expression", "")),
        )
        for cc in record.get("CheckConstraints") or []
    ]

    parent = record.get("ParentTable")
    return Table(
        id=table_id,
        name=record.get("Name", ""),
        column_ids=tuple(column_ids),
        columns=columns,
        primary_key=tuple(_keys(record.get("PrimaryKeys"))),
        foreign_keys=tuple(foreign_keys),
        indexes=tuple(indexes),
        check_constraints=tuple(check_constraints),
        parent_id=_parent_id(record) if is_target else None,
        on_delete=parent.get("OnDelete", "") if isinstance(parent, Mapping) else "",
        schema=record.get("Schema", ""),
    )


def _sequence(sequence_id: str, record: Mapping[str, Any]) -> Sequence:
    return Sequence(
        id=_require_id(record, "Sequence", sequence_id),
        name=record.get("Name", ""),
        kind=record.get("SequenceKind", ""),
        skip_range_min=record.get("SkipRangeMin") or None,
        skip_range_max=record.get("SkipRangeMax") or None,
        start_with_counter=record.get("StartWithCounter") or None,
    )


def load_snapshot(
    tables: Mapping[str, Any],
    is_target: bool,
    sequences: Optional[Mapping[str, Any]] = None,
) -> SchemaSnapshot:
    """Build one snapshot from an id-keyed table section."""
    section = "SpSchema" if is_target else "SrcSchema"
    loaded = {}
    for table_id, record in _as_mapping(tables, section).items():
        table = _table(str(table_id), record, is_target)
        loaded[table.id] = table
    loaded_sequences = {
        str(seq_id): _sequence(str(seq_id), record)
        for seq_id, record in _as_mapping(sequences, "SpSequences").items()
    }
    return SchemaSnapshot(tables=loaded, sequences=loaded_sequences)


def load_conversion(
    document: Mapping[str, Any],
    rates: Optional[Mapping[str, str]] = None,
) -> ConversionStore:
    """
    Build a ConversionStore from a conversion document.

    Args:
        document: Parsed conversion document
        rates: Table id to rating; overrides a ``Rates`` key in the document

    Returns:
        ConversionStore with both snapshots
    """
    if not isinstance(document, Mapping):
        raise SnapshotLoadError("Conversion document must be a JSON object")

    try:
        dialect = Dialect.parse(document.get("SpDialect"))
    except ValueError as e:
        raise SnapshotLoadError(f"Invalid conversion document: {e}", cause=e) from e

    try:
        source = load_snapshot(document.get("SrcSchema"), is_target=False)
        target = load_snapshot(
            document.get("SpSchema"), is_target=True, sequences=document.get("SpSequences")
        )
    except (AttributeError, TypeError, ValueError) as e:
        raise SnapshotLoadError(f"Malformed conversion document: {e}", cause=e) from e
    rate_map = rates if rates is not None else _as_mapping(document.get("Rates"), "Rates")

    logger.debug(
        f"Loaded conversion {document.get('DatabaseName', '')!r}: "
        f"{len(source)} source tables, {len(target)} target tables"
    )
    return ConversionStore(
        source=source,
        target=target,
        rates=dict(rate_map),
        database_name=document.get("DatabaseName", ""),
        dialect=dialect,
    )


def _read_json(path: Union[str, Path]) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise SnapshotLoadError("Conversion file not found", path=str(path), cause=e) from e
    except json.JSONDecodeError as e:
        raise SnapshotLoadError("Invalid JSON", path=str(path), cause=e) from e


def load_conversion_file(
    path: Union[str, Path],
    rates_path: Optional[Union[str, Path]] = None,
) -> ConversionStore:
    """Load a conversion document (and optionally a rate map) from JSON files."""
    document = _read_json(path)
    rates = _read_json(rates_path) if rates_path else None
    if rates is not None and not isinstance(rates, Mapping):
        raise SnapshotLoadError("Rate map must be a JSON object", path=str(rates_path))
    return load_conversion(document, rates)
