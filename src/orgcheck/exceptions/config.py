"""Configuration and registration exceptions: settings, rules, aliases."""

from pathlib import Path
from typing import Any, Optional

from .base import OrgCheckError


class ConfigurationError(OrgCheckError):
    """Base class for configuration-related errors."""

    pass


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class ConfigFileError(ConfigurationError):
    """Raised when a configuration file cannot be read or parsed."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Invalid config file: {path}", details={"path": str(path), "reason": reason})
        self.path = path
        self.reason = reason


class RuleRegistrationError(ConfigurationError):
    """Raised when a score rule, dataset or recipe is registered inconsistently."""

    def __init__(self, reason: str, rule_id: Optional[int] = None):
        details = {"reason": reason}
        if rule_id is not None:
            details["rule_id"] = str(rule_id)
        super().__init__(f"Registration error: {reason}", details=details)
        self.reason = reason
        self.rule_id = rule_id


class UnknownAliasError(ConfigurationError):
    """Raised when a recipe or dataset alias is not registered."""

    def __init__(self, kind: str, alias: str):
        super().__init__(f"Unknown {kind} alias: {alias}", details={"kind": kind, "alias": alias})
        self.kind = kind
        self.alias = alias
