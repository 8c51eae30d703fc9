"""
Org Check - Salesforce org inspection and best-practice scoring

Reads the metadata of an org through a transport, turns it into typed records,
scores each record against a catalog of best-practice rules and shapes the
results through named recipes. Dataset results are cached between runs.
"""

__version__ = "0.1.0"

from .api import OrgCheckAPI
from .config import OrgCheckConfig, load_config
from .core.rules import ScoreRule, ScoreRuleRegistry
from .exceptions import OrgCheckError
from .transport import FixtureTransport, InMemoryTransport, Transport

__all__ = [
    "OrgCheckAPI",  # Main entry point
    "OrgCheckConfig",
    "load_config",
    "ScoreRule",
    "ScoreRuleRegistry",
    "OrgCheckError",
    "Transport",
    "InMemoryTransport",
    "FixtureTransport",
]
