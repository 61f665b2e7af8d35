"""
Pytest configuration and shared fixtures for schemarecon tests.

This module provides a realistic conversion document plus small table
factories for the topology and validation tests.
"""

import json
from typing import Any, Callable, Dict, Iterable, Optional, Sequence

import pytest
import yaml

from schemarecon.store.entities import (
    MAX_LENGTH,
    CheckConstraint,
    Column,
    ColumnType,
    Index,
    KeyPart,
    Table,
)
from schemarecon.store.loader import load_conversion
from schemarecon.store.snapshot import ConversionStore, SchemaSnapshot


# ============================================================================
# Conversion Document Fixtures
# ============================================================================

def _source_column(col_id: str, name: str, type_name: str, mods=None, not_null=False):
    return {
        "Id": col_id,
        "Name": name,
        "Type": {"Name": type_name, "Mods": mods or [], "ArrayBounds": None},
        "NotNull": not_null,
    }


def _target_column(col_id: str, name: str, type_name: str, length=0, not_null=False):
    return {
        "Id": col_id,
        "Name": name,
        "T": {"Name": type_name, "Len": length, "IsArray": False},
        "NotNull": not_null,
    }


@pytest.fixture
def conversion_document() -> Dict[str, Any]:
    """
    A small music catalogue after conversion.

    - Singers survives; index idx_last_name was dropped; FullName was added.
    - Albums survives interleaved in Singers; fk_albums_singer was dropped and
      Title was renamed to AlbumTitle.
    - Legacy was dropped entirely.
    """
    return {
        "DatabaseName": "music",
        "SpDialect": "google_standard_sql",
        "SrcSchema": {
            "t1": {
                "Id": "t1",
                "Name": "singers",
                "ColIds": ["c1", "c2", "c3"],
                "ColDefs": {
                    "c1": _source_column("c1", "singer_id", "bigint", not_null=True),
                    "c2": _source_column("c2", "first_name", "varchar", mods=[1024]),
                    "c3": _source_column("c3", "last_name", "text"),
                },
                "PrimaryKeys": [{"ColId": "c1", "Order": 1, "Desc": False}],
                "Indexes": [
                    {"Id": "i1", "Name": "idx_first_name", "Keys": [{"ColId": "c2", "Order": 1}]},
                    {"Id": "i2", "Name": "idx_last_name", "Keys": [{"ColId": "c3", "Order": 1}]},
                ],
                "CheckConstraints": [
                    {"Id": "ck1", "Name": "chk_first_name", "Expr": "length(first_name) > 0"},
                ],
            },
            "t2": {
                "Id": "t2",
                "Name": "albums",
                "ColIds": ["c4", "c5", "c6"],
                "ColDefs": {
                    "c4": _source_column("c4", "singer_id", "bigint", not_null=True),
                    "c5": _source_column("c5", "album_id", "bigint", not_null=True),
                    "c6": _source_column("c6", "title", "varchar", mods=[255]),
                },
                "PrimaryKeys": [
                    {"ColId": "c4", "Order": 1},
                    {"ColId": "c5", "Order": 2},
                ],
                "ForeignKeys": [
                    {
                        "Id": "f1",
                        "Name": "fk_albums_singer",
                        "ColIds": ["c4"],
                        "ReferTableId": "t1",
                        "ReferColumnIds": ["c1"],
                    },
                ],
                "Indexes": [
                    {"Id": "i3", "Name": "idx_title", "Keys": [{"ColId": "c6", "Order": 1, "Desc": True}]},
                ],
            },
            "t3": {
                "Id": "t3",
                "Name": "legacy",
                "ColIds": ["c7"],
                "ColDefs": {"c7": _source_column("c7", "id", "int")},
                "PrimaryKeys": [{"ColId": "c7", "Order": 1}],
            },
        },
        "SpSchema": {
            "t1": {
                "Id": "t1",
                "Name": "Singers",
                "ColIds": ["c1", "c2", "c3", "c8"],
                "ColDefs": {
                    "c1": _target_column("c1", "SingerId", "INT64", not_null=True),
                    "c2": _target_column("c2", "FirstName", "STRING", 1024),
                    "c3": _target_column("c3", "LastName", "STRING", MAX_LENGTH),
                    "c8": _target_column("c8", "FullName", "STRING", MAX_LENGTH),
                },
                "PrimaryKeys": [{"ColId": "c1", "Order": 1, "Desc": False}],
                "Indexes": [
                    {"Id": "i1", "Name": "idx_first_name", "Keys": [{"ColId": "c2", "Order": 1}]},
                ],
                "CheckConstraints": [
                    {"Id": "ck1", "Name": "chk_first_name", "Expr": "LENGTH(FirstName) > 0"},
                ],
            },
            "t2": {
                "Id": "t2",
                "Name": "Albums",
                "ColIds": ["c4", "c5", "c6"],
                "ColDefs": {
                    "c4": _target_column("c4", "SingerId", "INT64", not_null=True),
                    "c5": _target_column("c5", "AlbumId", "INT64", not_null=True),
                    "c6": _target_column("c6", "AlbumTitle", "STRING", 255),
                },
                "PrimaryKeys": [
                    {"ColId": "c4", "Order": 1},
                    {"ColId": "c5", "Order": 2},
                ],
                "ParentTable": {"Id": "t1", "OnDelete": "CASCADE"},
                "Indexes": [
                    {"Id": "i3", "Name": "idx_title", "Keys": [{"ColId": "c6", "Order": 1, "Desc": True}]},
                ],
            },
        },
        "SpSequences": {
            "s1": {"Id": "s1", "Name": "seq_orders", "SequenceKind": "BIT REVERSED POSITIVE"},
        },
        "Rates": {"t1": "EXCELLENT", "t2": "POOR"},
    }


@pytest.fixture
def store(conversion_document) -> ConversionStore:
    """Loaded store for the sample conversion document."""
    return load_conversion(conversion_document)


@pytest.fixture
def conversion_file(tmp_path, conversion_document) -> str:
    """Sample conversion document written to disk."""
    path = tmp_path / "conversion.json"
    path.write_text(json.dumps(conversion_document), encoding="utf-8")
    return str(path)


@pytest.fixture
def config_file(tmp_path) -> str:
    """Minimal configuration file."""
    path = tmp_path / "schemarecon.yaml"
    path.write_text(
        yaml.dump(
            {
                "explorer": {"sort_order": "asc", "expand_depth": 4},
                "logging": {"level": "WARNING"},
            }
        ),
        encoding="utf-8",
    )
    return str(path)


# ============================================================================
# Table Factories
# ============================================================================

@pytest.fixture
def make_table() -> Callable[..., Table]:
    """
    Factory for target tables.

    Columns are generated from the key and ``extra_columns`` ids, named after
    their ids and typed INT64.
    """

    def factory(
        table_id: str,
        pk: Sequence[str] = (),
        parent_id: Optional[str] = None,
        extra_columns: Iterable[str] = (),
        name: Optional[str] = None,
        indexes: Iterable[Index] = (),
        check_constraints: Iterable[CheckConstraint] = (),
    ) -> Table:
        column_ids = list(pk) + [c for c in extra_columns if c not in pk]
        return Table(
            id=table_id,
            name=name or table_id,
            column_ids=tuple(column_ids),
            columns={
                c: Column(id=c, name=c, type=ColumnType("INT64")) for c in column_ids
            },
            primary_key=tuple(
                KeyPart(column_id=c, order=i) for i, c in enumerate(pk, start=1)
            ),
            indexes=tuple(indexes),
            check_constraints=tuple(check_constraints),
            parent_id=parent_id,
        )

    return factory


@pytest.fixture
def make_store() -> Callable[..., ConversionStore]:
    """Factory for stores whose target holds the given tables."""

    def factory(*tables: Table, source: Iterable[Table] = ()) -> ConversionStore:
        return ConversionStore(
            source=SchemaSnapshot.of(*source),
            target=SchemaSnapshot.of(*tables),
            database_name="db",
        )

    return factory
