"""Typed, schema-sealed records.

Every record class declares its schema as ``__slots__``: only those attributes
can ever be set on an instance, so assigning an undeclared attribute raises
AttributeError. Schema attributes start at None. The scoring attributes
(``score``, ``bad_fields``, ``bad_reason_ids``) are slots left unset until the
factory initializes them, so a type with no applicable rule never carries them.

Three families mirror how records are used:
    Data                  -> scorable record
    DataWithDependencies  -> scorable record carrying a DependencyView
    DataWithoutScoring    -> plain value record (never scored)
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Type

from .dependencies import DependencyView


class RecordType(Enum):
    """Discriminant of every record kind."""

    APEX_CLASS = "ApexClass"
    APEX_TEST_METHOD_RESULT = "ApexTestMethodResult"
    APEX_TRIGGER = "ApexTrigger"
    APP_PERMISSION = "AppPermission"
    APPLICATION = "Application"
    COLLABORATION_GROUP = "CollaborationGroup"
    CUSTOM_LABEL = "CustomLabel"
    DOCUMENT = "Document"
    FIELD = "Field"
    FIELD_PERMISSION = "FieldPermission"
    FIELD_SET = "FieldSet"
    FLOW = "Flow"
    FLOW_VERSION = "FlowVersion"
    GROUP = "Group"
    HOME_PAGE_COMPONENT = "HomePageComponent"
    LIGHTNING_AURA_COMPONENT = "LightningAuraComponent"
    LIGHTNING_PAGE = "LightningPage"
    LIGHTNING_WEB_COMPONENT = "LightningWebComponent"
    LIMIT = "Limit"
    OBJECT = "Object"
    OBJECT_PERMISSION = "ObjectPermission"
    OBJECT_TYPE = "ObjectType"
    ORGANIZATION = "Organization"
    PACKAGE = "Package"
    PAGE_LAYOUT = "PageLayout"
    PERMISSION_SET = "PermissionSet"
    PERMISSION_SET_LICENSE = "PermissionSetLicense"
    PROFILE = "Profile"
    PROFILE_IP_RANGE = "ProfileIpRangeRestriction"
    PROFILE_LOGIN_HOUR = "ProfileLoginHourRestriction"
    PROFILE_PASSWORD_POLICY = "ProfilePasswordPolicy"
    PROFILE_RESTRICTIONS = "ProfileRestrictions"
    RECORD_TYPE = "RecordType"
    USER = "User"
    USER_ROLE = "UserRole"
    VALIDATION_RULE = "ValidationRule"
    VISUALFORCE_COMPONENT = "VisualForceComponent"
    VISUALFORCE_PAGE = "VisualForcePage"
    WEB_LINK = "WebLink"
    WORKFLOW = "Workflow"


SCORE_SLOTS = ("score", "bad_fields", "bad_reason_ids")
DEPENDENCY_SLOT = "dependencies"

# Cross-links set by recipes; never persisted
REF_SUFFIXES = ("_ref", "_refs")


class Record:
    """Base of every record. Subclasses list their schema in ``__slots__``."""

    __slots__ = ()

    kind: ClassVar[RecordType]
    display_name: ClassVar[str]
    scorable: ClassVar[bool] = False
    has_dependencies: ClassVar[bool] = False

    def __init__(self) -> None:
        for name in self.schema():
            object.__setattr__(self, name, None)

    @classmethod
    def schema(cls) -> tuple[str, ...]:
        """Declared attributes, parent classes first, scoring slots excluded."""
        cached = cls.__dict__.get("_schema_cache")
        if cached is not None:
            return cached
        names: list[str] = []
        for klass in reversed(cls.__mro__):
            for name in klass.__dict__.get("__slots__", ()):
                if name in SCORE_SLOTS or name in names:
                    continue
                names.append(name)
        schema = tuple(names)
        cls._schema_cache = schema
        return schema

    def __repr__(self) -> str:
        key = getattr(self, "id", None) or getattr(self, "name", None)
        return f"{type(self).__name__}({key!r})"

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    __hash__ = None  # type: ignore[assignment]

    def to_dict(self) -> dict[str, Any]:
        """Serializable form, tagged with the record kind. Cross-links are dropped."""
        out: dict[str, Any] = {"__record__": self.kind.value}
        for name in self.schema():
            if name.endswith(REF_SUFFIXES):
                continue
            out[name] = encode_value(getattr(self, name))
        if self.scorable and hasattr(self, "score"):
            out["score"] = self.score
            out["bad_fields"] = list(self.bad_fields)
            out["bad_reason_ids"] = list(self.bad_reason_ids)
        return out


class Data(Record):
    """Record that can be scored against the rule catalog."""

    __slots__ = SCORE_SLOTS
    scorable = True


class DataWithDependencies(Data):
    """Scorable record that also carries a DependencyView."""

    __slots__ = (DEPENDENCY_SLOT,)
    has_dependencies = True


class DataWithoutScoring(Record):
    """Plain value record; never receives score attributes."""

    __slots__ = ()


RECORD_CLASSES: Dict[RecordType, Type[Record]] = {}


def register_record(cls: Type[Record]) -> Type[Record]:
    """Class decorator adding a concrete record class to RECORD_CLASSES."""
    existing = RECORD_CLASSES.get(cls.kind)
    if existing is not None and existing is not cls:
        raise ValueError(
            f"Record kind '{cls.kind.value}' already registered by {existing.__name__}"
        )
    if "__slots__" not in cls.__dict__:
        raise TypeError(f"{cls.__name__} must declare __slots__")
    RECORD_CLASSES[cls.kind] = cls
    return cls


def get_record_class(kind: RecordType) -> Type[Record]:
    """Look up a record class by kind.

    Raises:
        KeyError: If the kind has no registered class
    """
    try:
        return RECORD_CLASSES[kind]
    except KeyError:
        raise KeyError(
            f"No record class registered for {kind.value}. "
            f"Did you import orgcheck.data?"
        )


def encode_value(value: Any) -> Any:
    """Turn records and dependency views nested in a value into JSON-ready data."""
    if isinstance(value, Record):
        return value.to_dict()
    if isinstance(value, DependencyView):
        out = value.to_dict()
        out["__dependencies__"] = True
        return out
    if isinstance(value, (list, tuple)):
        return [encode_value(v) for v in value]
    if isinstance(value, Mapping):
        return {k: encode_value(v) for k, v in value.items()}
    return value


def decode_value(value: Any) -> Any:
    """Inverse of encode_value."""
    if isinstance(value, list):
        return [decode_value(v) for v in value]
    if isinstance(value, dict):
        if "__record__" in value:
            return record_from_dict(value)
        if value.get("__dependencies__"):
            return DependencyView.from_dict(value)
        return {k: decode_value(v) for k, v in value.items()}
    return value


def record_from_dict(data: Mapping[str, Any]) -> Record:
    """Rebuild a record from ``Record.to_dict`` output."""
    cls = get_record_class(RecordType(data["__record__"]))
    record = cls()
    for name in cls.schema():
        if name in data:
            setattr(record, name, decode_value(data[name]))
    if cls.scorable and "score" in data:
        record.score = data["score"]
        record.bad_fields = tuple(data.get("bad_fields", ()))
        record.bad_reason_ids = tuple(data.get("bad_reason_ids", ()))
    return record
