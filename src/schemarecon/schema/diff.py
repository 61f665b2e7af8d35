"""
Deletion detection between the source and target schemas.
"""

import logging
from typing import Dict, List

from ..store.entities import ForeignKey, Index, Table
from ..store.snapshot import ConversionStore


logger = logging.getLogger(__name__)


def get_deleted_tables(store: ConversionStore) -> List[Table]:
    """Source tables with no target counterpart, in source declaration order."""
    return [table for table in store.source if table.id not in store.target]


def get_deleted_indexes(store: ConversionStore) -> Dict[str, List[Index]]:
    """
    Indexes dropped from tables that exist on both sides.

    Tables missing from the target entirely are not reported here; see
    get_deleted_tables.

    Returns:
        Table id to deleted source indexes, only for tables with deletions
    """
    deleted = {}
    for source_table in store.source:
        target_table = store.target.get(source_table.id)
        if target_table is None:
            continue
        target_ids = set(target_table.index_map)
        dropped = [i for i in source_table.indexes if i.id not in target_ids]
        if dropped:
            deleted[source_table.id] = dropped

    if deleted:
        logger.debug(
            f"Deleted indexes in {len(deleted)} tables: "
            f"{sum(len(v) for v in deleted.values())} total"
        )
    return deleted


def get_deleted_foreign_keys(store: ConversionStore) -> Dict[str, List[ForeignKey]]:
    """Foreign keys dropped from tables that exist on both sides."""
    deleted = {}
    for source_table in store.source:
        target_table = store.target.get(source_table.id)
        if target_table is None:
            continue
        dropped = [
            fk for fk in source_table.foreign_keys
            if fk.id not in target_table.foreign_key_map
        ]
        if dropped:
            deleted[source_table.id] = dropped
    return deleted
