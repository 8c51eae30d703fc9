"""Score rules and their registry.

A score rule is a declarative check: a predicate over a record, the attribute
path it blames, and the record kinds it applies to. Rule ids are stable and
dense (0..N-1) so that ``bad_reason_ids`` can be explained later.
"""

from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional

from ..exceptions import RuleRegistrationError
from .records import Record, RecordType


@dataclass(frozen=True)
class ScoreRule:
    """A best-practice check applied to records of the ``applicable`` kinds.

    Attributes:
        id:                 Stable integer id, dense across the registry.
        description:        Short title of the rule.
        formula:            Callable (record) -> bool. True means "bad".
        error_message:      Explanation shown to the user.
        bad_field:          Attribute path blamed when the rule triggers.
        applicable:         Record kinds the rule is evaluated on.
        uses_dependencies:  The formula reads ``record.dependencies``.
    """

    id: int
    description: str
    formula: Callable[[Record], bool]
    error_message: str
    bad_field: str
    applicable: frozenset[RecordType]
    uses_dependencies: bool = False

    def __post_init__(self) -> None:
        if self.id < 0:
            raise RuleRegistrationError("rule id must be non-negative", self.id)
        if not self.applicable:
            raise RuleRegistrationError("rule must apply to at least one record type", self.id)
        if not isinstance(self.applicable, frozenset):
            object.__setattr__(self, "applicable", frozenset(self.applicable))

    def explain(self) -> dict[str, str]:
        return {
            "description": self.description,
            "error_message": self.error_message,
            "bad_field": self.bad_field,
        }


class ScoreRuleRegistry:
    """Immutable rule table, indexed by record kind once at construction.

    Args:
        rules: Rules in registration order. Ids must be exactly 0..N-1.

    Raises:
        RuleRegistrationError: On duplicate or non-dense ids
    """

    def __init__(self, rules: Iterable[ScoreRule]):
        ordered = tuple(rules)
        seen: set[int] = set()
        for rule in ordered:
            if rule.id in seen:
                raise RuleRegistrationError(f"duplicate rule id {rule.id}", rule.id)
            seen.add(rule.id)
        if seen != set(range(len(ordered))):
            missing = sorted(set(range(len(ordered))) - seen)
            raise RuleRegistrationError(f"rule ids are not dense, missing {missing}")

        self._rules = ordered
        self._by_id = {rule.id: rule for rule in ordered}
        by_kind: dict[RecordType, list[ScoreRule]] = {}
        for rule in ordered:
            for kind in rule.applicable:
                by_kind.setdefault(kind, []).append(rule)
        self._by_kind: Mapping[RecordType, tuple[ScoreRule, ...]] = {
            kind: tuple(kind_rules) for kind, kind_rules in by_kind.items()
        }

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self):
        return iter(self._rules)

    @property
    def rules(self) -> tuple[ScoreRule, ...]:
        return self._rules

    def rules_for(self, kind: RecordType) -> tuple[ScoreRule, ...]:
        """Rules applicable to ``kind``, in registration order."""
        return self._by_kind.get(kind, ())

    def get_score_rule(self, rule_id: int) -> ScoreRule:
        """Look up a rule by id.

        Raises:
            KeyError: If the id is unknown
        """
        try:
            return self._by_id[rule_id]
        except KeyError:
            raise KeyError(
                f"Unknown score rule id {rule_id}. Valid ids are 0..{len(self._rules) - 1}"
            )

    def get_score_rule_description(self, rule_id: int) -> str:
        return self.get_score_rule(rule_id).description

    def as_matrix(self):
        """One row per rule, one column per applicable record display name, cells 'true'."""
        from .matrix import DataMatrixBuilder
        from .records import get_record_class

        builder = DataMatrixBuilder()
        for rule in self._rules:
            builder.set_row_header(str(rule.id), rule.explain() | {"id": rule.id})
            for kind in sorted(rule.applicable, key=lambda k: k.value):
                builder.add_value(str(rule.id), get_record_class(kind).display_name, "true")
        return builder.to_matrix()


# ---------------------------------------------------------------------------
# Helpers used by rule formulas
# ---------------------------------------------------------------------------


def is_empty(value: Any) -> bool:
    """None, empty sequences and blank strings are empty; numbers never are."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return False
    if not value:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def latest_api_version(today: Optional[_dt.date] = None) -> int:
    """Latest API version an org can handle, derived from the three yearly releases."""
    today = today or _dt.date.today()
    month = today.month
    if month <= 2:
        release = 0
    elif month <= 6:
        release = 1
    elif month <= 10:
        release = 2
    else:
        release = 3
    return 3 * (today.year - 2022) + 53 + release


def is_old_api_version(current: Optional[float], version: Optional[float], years: int = 3) -> bool:
    """True when ``version`` is at least ``years`` years older than ``current``."""
    if not current or not version or not years:
        return False
    return (current - version) / 3 >= years
