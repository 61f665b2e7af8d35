"""
Primary key edit validation against interleave constraints.

An interleaved child's primary key must begin with its parent's full primary
key, compared column id by column id in key order.
"""

import logging
from typing import List, Sequence

from ..store.snapshot import ConversionStore
from .interleave import ancestors, children, get_parent_id, interleave_peers
from .validation import ValidationResult, ValidationRule


logger = logging.getLogger(__name__)


def is_key_prefix(prefix: Sequence[str], key: Sequence[str]) -> bool:
    """Whether ``prefix`` equals the leading columns of ``key``, in order."""
    return len(prefix) <= len(key) and list(key[: len(prefix)]) == list(prefix)


def validate_pk_edit(
    store: ConversionStore,
    table_id: str,
    proposed: Sequence[str],
) -> ValidationResult:
    """
    Validate replacing a target table's primary key.

    Every ancestor's key must stay a prefix of the proposed key, and the
    proposed key must stay a prefix of every direct child's current key.
    Nothing is modified; the result only reports pass or fail.

    Args:
        store: Current conversion snapshots
        table_id: Target table being edited
        proposed: Proposed primary key column ids, in key order

    Returns:
        ValidationResult naming every offending peer table
    """
    target = store.target
    table = target.get(table_id)
    proposed = list(proposed)

    if not proposed:
        return ValidationResult.failure(
            ValidationRule.EMPTY_PRIMARY_KEY,
            "Add columns to the primary key for saving",
        )
    if table is None:
        return ValidationResult.failure(
            ValidationRule.UNKNOWN_TABLE,
            f"Table '{table_id}' does not exist in the target schema",
        )

    if len(set(proposed)) != len(proposed):
        return ValidationResult.failure(
            ValidationRule.DUPLICATE_KEY_COLUMN,
            "Two primary key columns can not have the same position",
        )

    peers = interleave_peers(target, table_id)
    if not peers:
        return ValidationResult.success()

    offending: List[str] = []
    for ancestor_id in ancestors(target, table_id):
        if not is_key_prefix(target.get(ancestor_id).pk_column_ids, proposed):
            offending.append(ancestor_id)
    for child_id in children(target, table_id):
        if child_id in offending:
            continue
        if not is_key_prefix(proposed, target.get(child_id).pk_column_ids):
            offending.append(child_id)

    if not offending:
        return ValidationResult.success()

    names = [target.table_name(t) for t in offending]
    logger.debug(f"Primary key edit of {table.name} breaks interleaving with {names}")
    return ValidationResult.failure(
        ValidationRule.INTERLEAVE_PREFIX_VIOLATION,
        f"Proceeding the update will break interleaving between {table.name} "
        f"and {', '.join(names)}",
        tables=names,
        table_ids=offending,
    )


def validate_column_edit(
    store: ConversionStore, table_id: str, column_id: str
) -> ValidationResult:
    """
    Check whether a column may be renamed, retyped, resized or removed.

    A primary key column of a parent table is locked, and so is a key column
    a child table inherits from its parent.
    """
    target = store.target
    table = target.get(table_id)
    if table is None:
        return ValidationResult.failure(
            ValidationRule.UNKNOWN_TABLE,
            f"Table '{table_id}' does not exist in the target schema",
        )
    if column_id not in table.columns:
        return ValidationResult.failure(
            ValidationRule.UNKNOWN_COLUMN,
            f"Table '{table.name}' has no column '{column_id}'",
        )

    pk_order = table.pk_order(column_id)
    if pk_order is None:
        return ValidationResult.success()

    column_name = table.column_name(column_id)
    child_ids = children(target, table_id)
    if child_ids:
        return ValidationResult.failure(
            ValidationRule.INTERLEAVE_COLUMN_LOCKED,
            f"Modifying primary key column '{column_name}' is not allowed because "
            f"table '{table.name}' is a parent in an interleave relationship. "
            f"Please remove the interleave relationship first.",
            tables=[target.table_name(c) for c in child_ids],
        )

    parent_id = get_parent_id(target, table_id)
    if parent_id is not None:
        parent = target.get(parent_id)
        if pk_order <= len(parent.primary_key):
            return ValidationResult.failure(
                ValidationRule.INTERLEAVE_COLUMN_LOCKED,
                f"Modifying column '{column_name}' is not allowed because it is part "
                f"of the interleaved primary key from parent table '{parent.name}'. "
                f"Please remove the interleave relationship first.",
                tables=[parent.name],
            )
    return ValidationResult.success()
