"""Org-level records."""

from ..core.records import DataWithoutScoring, RecordType, register_record


@register_record
class Organization(DataWithoutScoring):
    kind = RecordType.ORGANIZATION
    display_name = "Organization"
    __slots__ = (
        "id",
        "name",
        "type",
        "is_developer_edition",
        "is_sandbox",
        "is_trial",
        "is_production",
        "local_namespace",
    )


@register_record
class Package(DataWithoutScoring):
    kind = RecordType.PACKAGE
    display_name = "Package"
    __slots__ = ("id", "name", "namespace", "type")
