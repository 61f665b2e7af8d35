"""
schemarecon: Schema correspondence and object-tree reconciliation engine.

schemarecon compares a source relational schema with the target schema that
was converted from it, builds explorer trees for both sides and validates
structural edits against interleaving constraints before they are applied.
"""

__version__ = "0.1.0"
__author__ = "schemarecon Contributors"

from .config import ReconConfig
from .exceptions import (
    SchemaReconError,
    ConfigurationError,
    SnapshotError,
    SnapshotLoadError,
    ValidationError,
)

__all__ = [
    "__version__",
    "ReconConfig",
    "SchemaReconError",
    "ConfigurationError",
    "SnapshotError",
    "SnapshotLoadError",
    "ValidationError",
]
