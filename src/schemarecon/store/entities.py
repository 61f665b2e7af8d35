"""
Schema object records for schemarecon.

Every record is frozen. Collections are tuples or read-only mapping views so
that a snapshot handed to the engine cannot change while it is being read.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple


MAX_LENGTH = 9223372036854775807


class Rating(str, Enum):
    """Conversion-quality rating of a table."""

    NONE = "NONE"
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    OK = "OK"
    BAD = "BAD"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Rating":
        """Parse a rating value; POOR is read as BAD, unknown values as NONE."""
        if value is None:
            return cls.NONE
        if isinstance(value, Rating):
            return value
        normalized = str(value).strip().upper()
        if normalized == "POOR":
            return cls.BAD
        try:
            return cls(normalized)
        except ValueError:
            return cls.NONE


@dataclass(frozen=True)
class ColumnType:
    """Column data type."""

    name: str
    length: Optional[int] = None
    is_array: bool = False

    @property
    def display_length(self) -> str:
        """Length as shown in mapping rows."""
        if not self.length:
            return ""
        if self.length == MAX_LENGTH:
            return "MAX"
        return str(self.length)


@dataclass(frozen=True)
class AutoGen:
    """Auto-generation setting of a column (sequence, UUID, ...)."""

    name: str = ""
    generation_type: str = ""

    @property
    def is_set(self) -> bool:
        return bool(self.name or self.generation_type)


@dataclass(frozen=True)
class Column:
    """A table column."""

    id: str
    name: str
    type: ColumnType
    not_null: bool = False
    auto_gen: Optional[AutoGen] = None
    default_value: Optional[str] = None

    @property
    def auto_gen_label(self) -> str:
        if self.auto_gen is None or not self.auto_gen.is_set:
            return ""
        return self.auto_gen.name or self.auto_gen.generation_type


@dataclass(frozen=True)
class KeyPart:
    """One column of a primary key or index key."""

    column_id: str
    order: int
    desc: bool = False


@dataclass(frozen=True)
class Index:
    """A secondary index."""

    id: str
    name: str
    keys: Tuple[KeyPart, ...] = ()
    unique: bool = False

    @property
    def column_ids(self) -> Tuple[str, ...]:
        return tuple(key.column_id for key in self.keys)


@dataclass(frozen=True)
class ForeignKey:
    """A foreign key constraint."""

    id: str
    name: str
    column_ids: Tuple[str, ...] = ()
    refer_table_id: str = ""
    refer_column_ids: Tuple[str, ...] = ()
    on_delete: str = ""
    on_update: str = ""


@dataclass(frozen=True)
class CheckConstraint:
    """A check constraint."""

    id: str
    name: str
    expression: str


@dataclass(frozen=True)
class Sequence:
    """A target-side sequence."""

    id: str
    name: str
    kind: str = ""
    skip_range_min: Optional[str] = None
    skip_range_max: Optional[str] = None
    start_with_counter: Optional[str] = None


def _freeze_map(items: Mapping) -> Mapping:
    return MappingProxyType(dict(items))


@dataclass(frozen=True)
class Table:
    """
    A table on one side of the conversion.

    ``parent_id`` is only ever set on target tables and names the table whose
    rows this table's rows are interleaved under.
    """

    id: str
    name: str
    column_ids: Tuple[str, ...] = ()
    columns: Mapping[str, Column] = field(default_factory=dict)
    primary_key: Tuple[KeyPart, ...] = ()
    foreign_keys: Tuple[ForeignKey, ...] = ()
    indexes: Tuple[Index, ...] = ()
    check_constraints: Tuple[CheckConstraint, ...] = ()
    parent_id: Optional[str] = None
    on_delete: str = ""
    schema: str = ""

    index_map: Mapping[str, Index] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )
    foreign_key_map: Mapping[str, ForeignKey] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )
    check_constraint_map: Mapping[str, CheckConstraint] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        # Freeze the inputs and build id lookups once per table.
        object.__setattr__(self, "column_ids", tuple(self.column_ids))
        object.__setattr__(self, "columns", _freeze_map(self.columns))
        object.__setattr__(self, "primary_key", tuple(self.primary_key))
        object.__setattr__(self, "foreign_keys", tuple(self.foreign_keys))
        object.__setattr__(self, "indexes", tuple(self.indexes))
        object.__setattr__(self, "check_constraints", tuple(self.check_constraints))
        object.__setattr__(self, "parent_id", self.parent_id or None)
        object.__setattr__(
            self, "index_map", _freeze_map({i.id: i for i in self.indexes})
        )
        object.__setattr__(
            self, "foreign_key_map", _freeze_map({fk.id: fk for fk in self.foreign_keys})
        )
        object.__setattr__(
            self,
            "check_constraint_map",
            _freeze_map({cc.id: cc for cc in self.check_constraints}),
        )

    def get_column(self, column_id: str) -> Optional[Column]:
        return self.columns.get(column_id)

    def column_name(self, column_id: str) -> str:
        """Name of a column, or an empty string when it is unknown."""
        column = self.columns.get(column_id)
        return column.name if column else ""

    def column_position(self, column_id: str) -> Optional[int]:
        """1-based declaration position of a column."""
        try:
            return self.column_ids.index(column_id) + 1
        except ValueError:
            return None

    @property
    def pk_column_ids(self) -> Tuple[str, ...]:
        """Primary key column ids in key order."""
        return tuple(
            key.column_id for key in sorted(self.primary_key, key=lambda k: k.order)
        )

    def pk_order(self, column_id: str) -> Optional[int]:
        for key in self.primary_key:
            if key.column_id == column_id:
                return key.order
        return None

    def is_pk_column(self, column_id: str) -> bool:
        return self.pk_order(column_id) is not None

    def get_index(self, index_id: str) -> Optional[Index]:
        return self.index_map.get(index_id)

    @property
    def is_interleaved(self) -> bool:
        return self.parent_id is not None


def column_map(columns) -> Dict[str, Column]:
    """Build an id-keyed column map preserving the given order."""
    return {column.id: column for column in columns}
