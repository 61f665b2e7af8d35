"""
Immutable schema snapshots.

A ``ConversionStore`` pairs the source snapshot with the target snapshot it
was converted into, together with the externally computed table ratings.
Stores are replaced wholesale by the caller whenever the schemas change.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Tuple

from .dialect import Dialect
from .entities import Rating, Sequence, Table


class SchemaSide(str, Enum):
    """The two sides of a conversion."""

    SOURCE = "source"
    TARGET = "target"


@dataclass(frozen=True)
class SchemaSnapshot:
    """All tables (and sequences, target side only) of one schema."""

    tables: Mapping[str, Table] = field(default_factory=dict)
    sequences: Mapping[str, Sequence] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tables", MappingProxyType(dict(self.tables)))
        object.__setattr__(self, "sequences", MappingProxyType(dict(self.sequences)))

    @classmethod
    def of(cls, *tables: Table, sequences: Tuple[Sequence, ...] = ()) -> "SchemaSnapshot":
        """Build a snapshot from tables in declaration order."""
        return cls(
            tables={t.id: t for t in tables},
            sequences={s.id: s for s in sequences},
        )

    def get(self, table_id: str) -> Optional[Table]:
        return self.tables.get(table_id)

    def __contains__(self, table_id: object) -> bool:
        return table_id in self.tables

    def __iter__(self) -> Iterator[Table]:
        return iter(self.tables.values())

    def __len__(self) -> int:
        return len(self.tables)

    def table_name(self, table_id: str) -> str:
        """Name of a table, or an empty string when it is unknown."""
        table = self.tables.get(table_id)
        return table.name if table else ""

    def find_by_name(self, name: str) -> Optional[Table]:
        """Case-insensitive lookup by table name."""
        wanted = name.lower()
        for table in self.tables.values():
            if table.name.lower() == wanted:
                return table
        return None


@dataclass(frozen=True)
class ConversionStore:
    """Source and target snapshots plus the rating of every target table."""

    source: SchemaSnapshot = field(default_factory=SchemaSnapshot)
    target: SchemaSnapshot = field(default_factory=SchemaSnapshot)
    rates: Mapping[str, Rating] = field(default_factory=dict)
    database_name: str = ""
    dialect: Dialect = Dialect.GOOGLE_STANDARD_SQL

    def __post_init__(self) -> None:
        frozen_rates = {k: Rating.parse(v) for k, v in dict(self.rates).items()}
        object.__setattr__(self, "rates", MappingProxyType(frozen_rates))

    def side(self, side: SchemaSide) -> SchemaSnapshot:
        return self.source if SchemaSide(side) == SchemaSide.SOURCE else self.target

    def rating(self, table_id: str) -> Rating:
        """Rating of a table, NONE when no rating is known yet."""
        return self.rates.get(table_id, Rating.NONE)

    def resolve_table_ref(self, ref: str) -> Optional[str]:
        """Resolve a table id or name (target first, then source) to an id."""
        if ref in self.target or ref in self.source:
            return ref
        for snapshot in (self.target, self.source):
            table = snapshot.find_by_name(ref)
            if table is not None:
                return table.id
        return None
