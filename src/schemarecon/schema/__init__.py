"""
Schema correspondence and reconciliation package for schemarecon.

This package provides:
- Id-based correspondence between source and target objects
- Deleted table, index and foreign key detection
- Searchable, sortable explorer trees for both schema sides
- Interleave topology and feasibility checks
- Primary key, column, check constraint and rename validation
"""

from .constraints import (
    CheckConstraintRow,
    find_duplicate_check_constraints,
    get_check_constraints,
    normalize_check_expression,
    remove_check_constraint,
    validate_check_constraints,
)
from .correspondence import (
    ColumnMappingRow,
    Correspondence,
    ForeignKeyMappingRow,
    IndexKeyMappingRow,
    get_column_mapping,
    get_fk_mapping,
    get_index_mapping,
    resolve,
)
from .diff import get_deleted_foreign_keys, get_deleted_indexes, get_deleted_tables
from .interleave import (
    InterleaveStatus,
    ancestors,
    check_interleave,
    children,
    interleave_peers,
    interleave_status,
)
from .keys import validate_column_edit, validate_pk_edit
from .names import validate_foreign_key_names, validate_index_names
from .tree import NodeType, SortOrder, TreeNode, build_tree, flatten
from .validation import ValidationResult, ValidationRule

__all__ = [
    "CheckConstraintRow",
    "ColumnMappingRow",
    "Correspondence",
    "ForeignKeyMappingRow",
    "IndexKeyMappingRow",
    "InterleaveStatus",
    "NodeType",
    "SortOrder",
    "TreeNode",
    "ValidationResult",
    "ValidationRule",
    "ancestors",
    "build_tree",
    "check_interleave",
    "children",
    "find_duplicate_check_constraints",
    "flatten",
    "get_check_constraints",
    "get_column_mapping",
    "get_deleted_foreign_keys",
    "get_deleted_indexes",
    "get_deleted_tables",
    "get_fk_mapping",
    "get_index_mapping",
    "interleave_peers",
    "interleave_status",
    "normalize_check_expression",
    "remove_check_constraint",
    "resolve",
    "validate_check_constraints",
    "validate_column_edit",
    "validate_foreign_key_names",
    "validate_index_names",
    "validate_pk_edit",
]
