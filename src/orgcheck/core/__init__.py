"""Core model: dependency index, records, score rules and the record factory."""

from .dependencies import DependencyData, DependencyIndex, DependencyView, Edge
from .factory import DataFactory, TypedDataFactory
from .records import Data, DataWithDependencies, DataWithoutScoring, Record, RecordType
from .rules import ScoreRule, ScoreRuleRegistry

__all__ = [
    "DependencyData",
    "DependencyIndex",
    "DependencyView",
    "Edge",
    "DataFactory",
    "TypedDataFactory",
    "Data",
    "DataWithDependencies",
    "DataWithoutScoring",
    "Record",
    "RecordType",
    "ScoreRule",
    "ScoreRuleRegistry",
]
