"""
Unit tests for source/target correspondence.
"""

from dataclasses import replace

import pytest

from schemarecon.schema.correspondence import (
    get_column_mapping,
    get_fk_mapping,
    get_index_mapping,
    resolve,
    resolve_table,
)
from schemarecon.store.dialect import Dialect
from schemarecon.store.loader import load_conversion


class TestResolve:
    """Test the id lookup primitive."""

    def test_matched(self):
        """Test an id present on both sides."""
        pair = resolve("a", {"a": 1}, {"a": 2})
        assert (pair.source, pair.target) == (1, 2)
        assert pair.is_matched

    def test_one_sided(self):
        """Test misses are encoded as None, not raised."""
        assert resolve("a", {"a": 1}, {}).is_source_only
        assert resolve("a", {}, {"a": 2}).is_target_only
        missing = resolve("a", None, None)
        assert missing.source is None and missing.target is None
        assert not missing.is_matched

    def test_resolve_deleted_table(self, store):
        """Test a dropped table resolves to its source side only."""
        pair = resolve_table(store, "t3")
        assert pair.source.name == "legacy"
        assert pair.target is None


class TestColumnMapping:
    """Test side-by-side column rows."""

    def test_row_count_and_source_order(self, store):
        """Test source columns come first, then target-only ones."""
        rows = get_column_mapping(store, "t1")
        source_table = store.source.get("t1")
        target_only = [c for c in store.target.get("t1").column_ids if c not in source_table.column_ids]

        assert len(rows) == len(source_table.column_ids) + len(target_only)
        assert [r.column_id for r in rows[: len(source_table.column_ids)]] == list(source_table.column_ids)

    def test_row_contents(self, store):
        """Test per-side metadata."""
        rows = get_column_mapping(store, "t1")
        first = rows[0]
        assert first.source.name == "singer_id"
        assert first.source.data_type == "bigint"
        assert first.source.is_pk
        assert first.target.name == "SingerId"
        assert first.target.data_type == "INT64"
        assert first.target.not_null
        assert rows[1].target.max_length == "1024"
        assert rows[2].target.max_length == "MAX"

    def test_target_only_column_numbered_by_target_position(self, store):
        """Test added columns carry their target position."""
        added = get_column_mapping(store, "t1")[-1]
        assert added.source is None
        assert added.target.name == "FullName"
        assert added.target.order == 4

    def test_renamed_column(self, store):
        """Test renames are visible."""
        rows = get_column_mapping(store, "t2")
        assert rows[2].is_renamed
        assert not get_column_mapping(store, "t1")[-1].is_renamed

    def test_deleted_table_has_source_side_only(self, store):
        """Test a dropped table reports only source data."""
        rows = get_column_mapping(store, "t3")
        assert len(rows) == 1
        assert rows[0].source.name == "id"
        assert rows[0].target is None

    def test_unknown_table(self, store):
        """Test an unknown table yields no rows."""
        assert get_column_mapping(store, "nope") == []

    def test_postgresql_type_names(self, store):
        """Test target types are shown in the PostgreSQL dialect."""
        pg_store = replace(store, dialect=Dialect.POSTGRESQL)
        rows = get_column_mapping(pg_store, "t1")
        assert rows[0].target.data_type == "INT8"
        assert rows[1].target.data_type == "VARCHAR"
        # Source types are never translated.
        assert rows[0].source.data_type == "bigint"

    def test_custom_type_map(self, store):
        """Test a configured type map falls back to the untranslated name."""
        pg_store = replace(store, dialect=Dialect.POSTGRESQL)
        rows = get_column_mapping(pg_store, "t1", type_map={"INT64": "BIGINT"})
        assert rows[0].target.data_type == "BIGINT"
        assert rows[1].target.data_type == "STRING"

    def test_idempotent(self, store):
        """Test equal inputs give equal rows."""
        assert get_column_mapping(store, "t1") == get_column_mapping(store, "t1")


class TestForeignKeyMapping:
    """Test side-by-side foreign key rows."""

    def test_deleted_foreign_key(self, store):
        """Test a dropped foreign key renders an empty target side."""
        rows = get_fk_mapping(store, "t2")
        assert len(rows) == 1
        row = rows[0]
        assert row.is_deleted
        assert row.source.name == "fk_albums_singer"
        assert row.source.column_names == ("singer_id",)
        assert row.source.refer_table_name == "singers"
        assert row.source.refer_column_names == ("singer_id",)
        assert row.target is None

    def test_matched_foreign_key_uses_each_side_names(self, conversion_document):
        """Test column and table names come from each side's own maps."""
        conversion_document["SpSchema"]["t2"]["ForeignKeys"] = [
            {
                "Id": "f1",
                "Name": "FK_Albums_Singer",
                "ColIds": ["c4"],
                "ReferTableId": "t1",
                "ReferColumnIds": ["c1"],
            },
        ]
        row = get_fk_mapping(load_conversion(conversion_document), "t2")[0]
        assert not row.is_deleted
        assert row.target.name == "FK_Albums_Singer"
        assert row.target.column_names == ("SingerId",)
        assert row.target.refer_table_name == "Singers"

    def test_target_only_foreign_key_appended(self, conversion_document):
        """Test foreign keys added on the target follow the source rows."""
        conversion_document["SpSchema"]["t2"]["ForeignKeys"] = [
            {"Id": "f9", "Name": "FK_New", "ColIds": ["c4"], "ReferTableId": "t1", "ReferColumnIds": ["c1"]},
        ]
        rows = get_fk_mapping(load_conversion(conversion_document), "t2")
        assert [r.source.name if r.source else None for r in rows] == ["fk_albums_singer", None]
        assert rows[1].target.name == "FK_New"

    def test_table_without_foreign_keys(self, store):
        """Test tables with no foreign keys yield no rows."""
        assert get_fk_mapping(store, "t1") == []
        assert get_fk_mapping(store, "nope") == []


class TestIndexMapping:
    """Test index key rows."""

    def test_matched_index(self, store):
        """Test key columns of an index on both sides."""
        rows = get_index_mapping(store, "t2", "i3")
        assert len(rows) == 1
        assert rows[0].source.name == "title"
        assert rows[0].target.name == "AlbumTitle"
        assert rows[0].target.desc is True

    def test_deleted_index(self, store):
        """Test a dropped index has no target key columns."""
        rows = get_index_mapping(store, "t1", "i2")
        assert [r.source.name for r in rows] == ["last_name"]
        assert all(r.target is None for r in rows)

    def test_target_only_key_columns_appended(self, conversion_document):
        """Test key columns only the target index has follow the source ones."""
        conversion_document["SpSchema"]["t1"]["Indexes"][0]["Keys"].append(
            {"ColId": "c8", "Order": 2}
        )
        rows = get_index_mapping(load_conversion(conversion_document), "t1", "i1")
        assert [r.source.name if r.source else None for r in rows] == ["first_name", None]
        assert rows[1].target.name == "FullName"
        assert rows[1].target.order == 2

    @pytest.mark.parametrize("table_id,index_id", [("t1", "nope"), ("nope", "i1")])
    def test_unknown_index(self, store, table_id, index_id):
        """Test unknown ids yield no rows."""
        assert get_index_mapping(store, table_id, index_id) == []
