"""
Check constraint pairing and edit validation.

Check constraint ids are not guaranteed to line up between the source and
target schemas, so pairing falls back to declaration order for whatever the
id match leaves over.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from ..store.entities import CheckConstraint
from ..store.snapshot import ConversionStore
from .validation import ValidationResult, ValidationRule


logger = logging.getLogger(__name__)

DELETE_INDEX_PREFIX = "cc"


@dataclass(frozen=True)
class CheckConstraintRow:
    """A source check constraint next to its target counterpart."""

    source: Optional[CheckConstraint]
    target: Optional[CheckConstraint]
    delete_index: str

    @property
    def source_name(self) -> str:
        return self.source.name if self.source else ""

    @property
    def source_expression(self) -> str:
        return self.source.expression if self.source else ""

    @property
    def target_name(self) -> str:
        return self.target.name if self.target else ""

    @property
    def target_expression(self) -> str:
        return self.target.expression if self.target else ""


def pair_check_constraints(
    source: Sequence[CheckConstraint],
    target: Sequence[CheckConstraint],
) -> List[CheckConstraintRow]:
    """
    Pair check constraints by id, then by position.

    Source constraints keep their declaration order. Each one takes the target
    constraint with the same id, or else the next target constraint that no
    source constraint claimed by id. Target constraints still unpaired at the
    end get rows with an empty source side.
    """
    target_by_id = {cc.id: cc for cc in target}
    source_ids = {cc.id for cc in source}
    leftovers = [cc for cc in target if cc.id not in source_ids]

    pairs: List[Tuple[Optional[CheckConstraint], Optional[CheckConstraint]]] = []
    for cc in source:
        if cc.id in target_by_id:
            pairs.append((cc, target_by_id[cc.id]))
        elif leftovers:
            pairs.append((cc, leftovers.pop(0)))
        else:
            pairs.append((cc, None))
    pairs.extend((None, cc) for cc in leftovers)

    return [
        CheckConstraintRow(source=s, target=t, delete_index=f"{DELETE_INDEX_PREFIX}{i}")
        for i, (s, t) in enumerate(pairs, start=1)
    ]


def get_check_constraints(store: ConversionStore, table_id: str) -> List[CheckConstraintRow]:
    """Side-by-side check constraint rows for one table."""
    source_table = store.source.get(table_id)
    target_table = store.target.get(table_id)
    return pair_check_constraints(
        source_table.check_constraints if source_table else (),
        target_table.check_constraints if target_table else (),
    )


def remove_check_constraint(
    rows: Sequence[CheckConstraintRow], delete_index: str
) -> List[CheckConstraintRow]:
    """
    Drop the target side of the addressed row.

    A row that still has a source constraint keeps it with an empty target;
    a target-only row disappears. Remaining rows are renumbered.
    """
    kept: List[Tuple[Optional[CheckConstraint], Optional[CheckConstraint]]] = []
    for row in rows:
        if row.delete_index != delete_index:
            kept.append((row.source, row.target))
        elif row.source is not None:
            kept.append((row.source, None))
    return [
        CheckConstraintRow(source=s, target=t, delete_index=f"{DELETE_INDEX_PREFIX}{i}")
        for i, (s, t) in enumerate(kept, start=1)
    ]


def normalize_check_expression(expression: str) -> str:
    """Balance parentheses and wrap the expression in one outer pair."""
    trimmed = expression.strip()
    opened = trimmed.count("(")
    closed = trimmed.count(")")
    if opened > closed:
        trimmed += ")" * (opened - closed)
    elif closed > opened:
        trimmed = "(" * (closed - opened) + trimmed
    if not trimmed.startswith("(") or not trimmed.endswith(")"):
        trimmed = f"({trimmed})"
    return trimmed


def find_duplicate_check_constraints(
    constraints: Iterable[CheckConstraint],
) -> List[Tuple[str, str]]:
    """(name, expression) pairs that occur more than once, in first-seen order."""
    counts = Counter(
        (cc.name, normalize_check_expression(cc.expression)) for cc in constraints
    )
    return [key for key, count in counts.items() if count > 1]


def validate_check_constraints(constraints: Sequence[CheckConstraint]) -> ValidationResult:
    """
    Validate an edited set of target check constraints before it is applied.

    Fails when a constraint has no name or no expression, or when two
    constraints share the same name and condition.
    """
    incomplete = [
        cc for cc in constraints if not cc.name.strip() or not cc.expression.strip()
    ]
    if incomplete:
        return ValidationResult.failure(
            ValidationRule.INCOMPLETE_CHECK_CONSTRAINT,
            "Check constraint name and condition can not be empty",
            constraint_ids=[cc.id for cc in incomplete],
        )

    duplicates = find_duplicate_check_constraints(constraints)
    if duplicates:
        names = ", ".join(f"{name} {expr}" for name, expr in duplicates)
        logger.debug(f"Duplicate check constraints: {names}")
        return ValidationResult.failure(
            ValidationRule.DUPLICATE_CHECK_CONSTRAINT,
            f"Duplicate check constraint found: {names}",
            duplicates=duplicates,
        )
    return ValidationResult.success()
