"""
Name validation for index and foreign key renames.
"""

import logging
import re
from typing import Iterable, List, Mapping, Set

from ..store.snapshot import ConversionStore
from .validation import ValidationResult, ValidationRule


logger = logging.getLogger(__name__)

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]{0,127}$")


def invalid_identifiers(names: Iterable[str]) -> List[str]:
    return [name for name in names if not IDENTIFIER_PATTERN.match(name)]


def _used_names(store: ConversionStore, exclude_ids: Set[str]) -> Set[str]:
    """Lower-cased names of target tables, indexes and foreign keys."""
    used = set()
    for table in store.target:
        used.add(table.name.lower())
        for index in table.indexes:
            if index.id not in exclude_ids:
                used.add(index.name.lower())
        for fk in table.foreign_keys:
            if fk.id not in exclude_ids:
                used.add(fk.name.lower())
    return used


def _validate_renames(
    store: ConversionStore,
    table_id: str,
    renames: Mapping[str, str],
    current: Mapping[str, str],
    rule: ValidationRule,
    kind: str,
) -> ValidationResult:
    renames = {object_id: name for object_id, name in renames.items() if name}
    table_name = store.target.table_name(table_id)

    lowered = [name.lower() for name in renames.values()]
    repeated = sorted({name for name in lowered if lowered.count(name) > 1})
    if repeated:
        return ValidationResult.failure(
            rule,
            f"Found duplicate names in input : {', '.join(repeated)}",
            tables=[table_name] if table_name else [],
        )

    changed = {
        object_id: name
        for object_id, name in renames.items()
        if current.get(object_id) != name
    }
    invalid = invalid_identifiers(changed.values())
    if invalid:
        return ValidationResult.failure(
            ValidationRule.INVALID_IDENTIFIER,
            f"Following names are not valid identifiers: {', '.join(invalid)}",
            names=invalid,
        )

    used = _used_names(store, exclude_ids=set(renames))
    clashes = [name for name in changed.values() if name.lower() in used]
    if clashes:
        logger.debug(f"{kind} rename on {table_name} clashes with {clashes}")
        return ValidationResult.failure(
            rule,
            f"New name(s) already used by another table, index or foreign key: "
            f"{', '.join(clashes)}",
            tables=[table_name] if table_name else [],
            names=clashes,
        )
    return ValidationResult.success()


def validate_index_names(
    store: ConversionStore, table_id: str, renames: Mapping[str, str]
) -> ValidationResult:
    """
    Validate renaming target indexes of one table.

    Args:
        store: Current conversion snapshots
        table_id: Target table owning the indexes
        renames: Index id to proposed name

    Returns:
        ValidationResult
    """
    table = store.target.get(table_id)
    current = {i.id: i.name for i in table.indexes} if table else {}
    return _validate_renames(
        store, table_id, renames, current, ValidationRule.DUPLICATE_INDEX_NAME, "Index"
    )


def validate_foreign_key_names(
    store: ConversionStore, table_id: str, renames: Mapping[str, str]
) -> ValidationResult:
    """Validate renaming target foreign keys of one table."""
    table = store.target.get(table_id)
    current = {fk.id: fk.name for fk in table.foreign_keys} if table else {}
    return _validate_renames(
        store,
        table_id,
        renames,
        current,
        ValidationRule.DUPLICATE_FOREIGN_KEY_NAME,
        "Foreign key",
    )
