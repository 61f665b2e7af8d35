"""
Unit tests for the schemarecon exception hierarchy.
"""

from schemarecon.exceptions import (
    ConfigurationError,
    SchemaReconError,
    SnapshotError,
    SnapshotLoadError,
    ValidationError,
)


class TestSchemaReconError:
    """Test the base exception."""

    def test_message_only(self):
        """Test plain messages."""
        assert str(SchemaReconError("boom")) == "boom"

    def test_details_and_cause(self):
        """Test details and cause are rendered."""
        error = SchemaReconError("boom", {"table": "t1"}, ValueError("bad"))
        assert str(error) == "boom [table=t1] (caused by: bad)"

    def test_hierarchy(self):
        """Test every error derives from the base class."""
        for cls in (ConfigurationError, SnapshotError, SnapshotLoadError, ValidationError):
            assert issubclass(cls, SchemaReconError)
        assert issubclass(SnapshotLoadError, SnapshotError)


class TestSubclasses:
    """Test specialized exceptions."""

    def test_snapshot_load_error_path(self):
        """Test the path is kept and rendered."""
        error = SnapshotLoadError("Invalid JSON", path="conv.json")
        assert error.path == "conv.json"
        assert str(error) == "Invalid JSON [path=conv.json]"

    def test_validation_error(self):
        """Test the rule and tables are exposed."""
        error = ValidationError("InterleavePrefixViolation", "broken", ["Singers", "Albums"])
        assert error.rule == "InterleavePrefixViolation"
        assert error.tables == ["Singers", "Albums"]
        assert "tables=Singers, Albums" in str(error)
