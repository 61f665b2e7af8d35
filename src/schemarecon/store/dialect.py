"""
Target dialects and the type maps used to present target column types.
"""

from enum import Enum
from typing import Dict, Mapping, Optional


class Dialect(str, Enum):
    """Target schema dialects."""

    GOOGLE_STANDARD_SQL = "googlestandardsql"
    POSTGRESQL = "postgresql"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Dialect":
        """Parse a dialect name, defaulting to GoogleSQL for empty values."""
        if not value:
            return cls.GOOGLE_STANDARD_SQL
        normalized = value.strip().lower().replace("_", "").replace("-", "")
        for dialect in cls:
            if dialect.value == normalized:
                return dialect
        if normalized in ("pg", "postgres"):
            return cls.POSTGRESQL
        raise ValueError(f"Unknown dialect: {value}")

    @property
    def translates_types(self) -> bool:
        """Whether target type names are shown through a dialect type map."""
        return self == Dialect.POSTGRESQL


STANDARD_TO_PGSQL: Dict[str, str] = {
    "BOOL": "BOOL",
    "BYTES": "BYTEA",
    "DATE": "DATE",
    "FLOAT32": "FLOAT4",
    "FLOAT64": "FLOAT8",
    "INT64": "INT8",
    "JSON": "JSONB",
    "NUMERIC": "NUMERIC",
    "STRING": "VARCHAR",
    "TIMESTAMP": "TIMESTAMPTZ",
}


def translate_type(
    type_name: str,
    dialect: Dialect,
    type_map: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Express a Standard-SQL type name in the given dialect.

    Falls back to the untranslated name when the dialect does not translate
    types or the map has no entry for it.
    """
    if not dialect.translates_types:
        return type_name
    mapping = STANDARD_TO_PGSQL if type_map is None else type_map
    return mapping.get(type_name, type_name)
