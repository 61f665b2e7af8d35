"""
Schema store package for schemarecon.

This package provides:
- Frozen records for tables, columns, keys, indexes and constraints
- Immutable source/target snapshots
- Conversion document loading
- Target dialects and type maps
"""

from .dialect import Dialect, translate_type
from .entities import (
    MAX_LENGTH,
    AutoGen,
    CheckConstraint,
    Column,
    ColumnType,
    ForeignKey,
    Index,
    KeyPart,
    Rating,
    Sequence,
    Table,
)
from .loader import load_conversion, load_conversion_file
from .snapshot import ConversionStore, SchemaSide, SchemaSnapshot

__all__ = [
    "MAX_LENGTH",
    "AutoGen",
    "CheckConstraint",
    "Column",
    "ColumnType",
    "ConversionStore",
    "Dialect",
    "ForeignKey",
    "Index",
    "KeyPart",
    "Rating",
    "SchemaSide",
    "SchemaSnapshot",
    "Sequence",
    "Table",
    "load_conversion",
    "load_conversion_file",
    "translate_type",
]
