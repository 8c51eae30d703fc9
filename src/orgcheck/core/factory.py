"""Record factory and score engine.

``DataFactory.get_instance(RecordClass)`` hands out one per-type factory,
cached for the lifetime of the DataFactory. Each per-type factory knows the
rules applicable to its kind and whether the kind carries dependencies.
"""

from __future__ import annotations

from typing import Any, Generic, Iterable, Mapping, Optional, Sequence, Type, TypeVar

from ..exceptions import RuleRegistrationError, ScoringError
from ..logging_config import get_logger
from .dependencies import DependencyData, DependencyIndex
from .records import DEPENDENCY_SLOT, Record
from .rules import ScoreRule, ScoreRuleRegistry

logger = get_logger(__name__)

R = TypeVar("R", bound=Record)


class TypedDataFactory(Generic[R]):
    """Creates and scores records of a single class."""

    def __init__(
        self,
        record_class: Type[R],
        rules: Sequence[ScoreRule],
        dependency_index: DependencyIndex,
    ):
        self.record_class = record_class
        self.rules = tuple(rules)
        self.has_dependencies = record_class.has_dependencies
        self._index = dependency_index

    @property
    def is_scorable(self) -> bool:
        """True when at least one rule applies to the type."""
        return bool(self.rules)

    def create(
        self,
        properties: Mapping[str, Any],
        dependencies: Optional[DependencyData] = None,
        dependency_id_fields: Iterable[str] = ("id",),
    ) -> R:
        """Build a record from ``properties``.

        Only declared attributes are copied; anything else is dropped. The
        dependency view is never copied from ``properties``: when the type is
        dependency-aware and ``dependencies`` is given, it is computed from the
        values of ``dependency_id_fields``.

        Raises:
            TypeError: If properties is None
        """
        if properties is None:
            raise TypeError(f"{self.record_class.__name__}: properties must not be None")

        record = self.record_class()
        for name in record.schema():
            if name in properties and name != DEPENDENCY_SLOT:
                setattr(record, name, properties[name])

        if self.is_scorable:
            record.score = 0
            record.bad_fields = ()
            record.bad_reason_ids = ()

        if self.has_dependencies and dependencies is not None:
            focal_ids = [getattr(record, name, None) for name in dependency_id_fields]
            record.dependencies = self._index.build(dependencies, [i for i in focal_ids if i])

        return record

    def compute_score(self, record: R) -> R:
        """Evaluate every applicable rule and assign the result in one step.

        Scoring is recomputed from scratch, so calling it again after the
        record changed replaces the previous result. A type with no
        applicable rule has nothing to score and the record is returned as is.

        Raises:
            ScoringError: If the record was never scoring-initialized
        """
        if not self.is_scorable:
            return record
        if not hasattr(record, "score"):
            raise ScoringError(
                self.record_class.kind.value,
                "record was not created by a scoring factory",
            )

        triggered = [rule for rule in self.rules if rule.formula(record)]

        record.score = len(triggered)
        record.bad_fields = tuple(rule.bad_field for rule in triggered)
        record.bad_reason_ids = tuple(rule.id for rule in triggered)
        return record

    def create_with_score(
        self,
        properties: Mapping[str, Any],
        dependencies: Optional[DependencyData] = None,
        dependency_id_fields: Iterable[str] = ("id",),
    ) -> R:
        """``create`` then ``compute_score`` when the type has rules."""
        record = self.create(properties, dependencies, dependency_id_fields)
        if self.is_scorable:
            self.compute_score(record)
        return record


class DataFactory:
    """Hands out per-type factories bound to a rule registry.

    Args:
        registry: Rule table shared by every per-type factory
        dependency_error_ids: Ids always reported as dependency errors
    """

    def __init__(
        self,
        registry: Optional[ScoreRuleRegistry] = None,
        dependency_error_ids: Iterable[str] = (),
    ):
        if registry is None:
            from .catalog import default_registry

            registry = default_registry()
        self.registry = registry
        self._index = DependencyIndex(dependency_error_ids)
        self._instances: dict[type, TypedDataFactory] = {}

    def get_instance(self, record_class: Type[R]) -> TypedDataFactory[R]:
        """Per-type factory, created on first request and cached.

        Raises:
            RuleRegistrationError: If a rule that reads dependencies applies
                to a type that does not carry them
        """
        instance = self._instances.get(record_class)
        if instance is not None:
            return instance

        rules: tuple[ScoreRule, ...] = ()
        if record_class.scorable:
            rules = self.registry.rules_for(record_class.kind)
        for rule in rules:
            if rule.uses_dependencies and not record_class.has_dependencies:
                raise RuleRegistrationError(
                    f"rule reads dependencies but {record_class.__name__} does not carry them",
                    rule.id,
                )

        instance = TypedDataFactory(record_class, rules, self._index)
        self._instances[record_class] = instance
        logger.debug(
            f"Factory for {record_class.__name__}: {len(rules)} rules, "
            f"dependencies={record_class.has_dependencies}"
        )
        return instance
