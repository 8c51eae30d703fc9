"""Records about access: users, roles, groups, profiles and permission sets."""

from ..core.records import Data, DataWithoutScoring, RecordType, register_record


_PERMISSION_PARENT_SLOTS = (
    "id",
    "name",
    "url",
    "description",
    "license",
    "is_custom",
    "package",
    "member_counts",
    "type",
    "nb_field_permissions",
    "nb_object_permissions",
    "important_permissions",
    "created_date",
    "last_modified_date",
)


@register_record
class Profile(Data):
    kind = RecordType.PROFILE
    display_name = "Profile"
    __slots__ = _PERMISSION_PARENT_SLOTS


@register_record
class PermissionSet(Data):
    kind = RecordType.PERMISSION_SET
    display_name = "Permission Set or Permission Set Group"
    __slots__ = _PERMISSION_PARENT_SLOTS + ("is_group", "group_id")


@register_record
class PermissionSetLicense(Data):
    kind = RecordType.PERMISSION_SET_LICENSE
    display_name = "Permission Set License"
    __slots__ = (
        "id",
        "name",
        "url",
        "status",
        "total_count",
        "used_count",
        "used_percentage",
        "remaining_count",
        "distinct_active_assignee_count",
        "permission_set_ids",
        "permission_set_refs",
        "expiration_date",
        "is_available_for_integrations",
        "created_date",
        "last_modified_date",
    )


@register_record
class ObjectPermission(DataWithoutScoring):
    kind = RecordType.OBJECT_PERMISSION
    display_name = "Object Permission"
    __slots__ = (
        "parent_id",
        "parent_ref",
        "object_type",
        "is_read",
        "is_create",
        "is_edit",
        "is_delete",
        "is_view_all",
        "is_modify_all",
    )


@register_record
class FieldPermission(DataWithoutScoring):
    kind = RecordType.FIELD_PERMISSION
    display_name = "Field Permission"
    __slots__ = ("parent_id", "parent_ref", "field_api_name", "is_read", "is_edit")


@register_record
class Application(DataWithoutScoring):
    """A tab set app as listed in the app menu."""

    kind = RecordType.APPLICATION
    display_name = "Application"
    __slots__ = ("id", "name", "label", "package")


@register_record
class AppPermission(DataWithoutScoring):
    kind = RecordType.APP_PERMISSION
    display_name = "Application Permission"
    __slots__ = ("parent_id", "parent_ref", "app_id", "app_ref", "is_accessible", "is_visible")


@register_record
class ProfilePasswordPolicy(Data):
    kind = RecordType.PROFILE_PASSWORD_POLICY
    display_name = "Password Policy from a Profile"
    __slots__ = (
        "profile_name",
        "forgot_password_redirect",
        "lockout_interval",
        "max_login_attempts",
        "minimum_password_length",
        "minimum_password_lifetime",
        "obscure",
        "password_complexity",
        "password_expiration",
        "password_history",
        "password_question",
    )


@register_record
class ProfileIpRangeRestriction(DataWithoutScoring):
    kind = RecordType.PROFILE_IP_RANGE
    display_name = "IP Range Restriction from Profile"
    __slots__ = ("start_address", "end_address", "description", "difference")


@register_record
class ProfileLoginHourRestriction(DataWithoutScoring):
    kind = RecordType.PROFILE_LOGIN_HOUR
    display_name = "Login Hour Restriction from Profile"
    __slots__ = ("day", "from_time", "to_time", "difference")


@register_record
class ProfileRestrictions(Data):
    kind = RecordType.PROFILE_RESTRICTIONS
    display_name = "Restrictions from Profile"
    __slots__ = ("profile_id", "profile_ref", "ip_ranges", "login_hours")


@register_record
class User(Data):
    kind = RecordType.USER
    display_name = "User"
    __slots__ = (
        "id",
        "name",
        "url",
        "photo_url",
        "last_login",
        "number_failed_logins",
        "on_lightning_experience",
        "last_password_change",
        "profile_id",
        "profile_ref",
        "permission_set_ids",
        "permission_set_refs",
        "aggregate_important_permissions",
    )


@register_record
class UserRole(Data):
    kind = RecordType.USER_ROLE
    display_name = "Role"
    __slots__ = (
        "id",
        "name",
        "apiname",
        "url",
        "parent_id",
        "parent_ref",
        "level",
        "has_parent",
        "active_members_count",
        "active_member_ids",
        "active_member_refs",
        "has_active_members",
        "inactive_members_count",
        "has_inactive_members",
        "is_external",
    )


@register_record
class Group(Data):
    """Public group, queue, or role-based group."""

    kind = RecordType.GROUP
    display_name = "Public Group or Queue"
    __slots__ = (
        "id",
        "name",
        "developer_name",
        "url",
        "type",
        "is_public_group",
        "is_queue",
        "nb_direct_members",
        "direct_user_ids",
        "direct_user_refs",
        "direct_group_ids",
        "direct_group_refs",
        "include_bosses",
        "include_subordinates",
        "related_id",
    )


@register_record
class CollaborationGroup(Data):
    kind = RecordType.COLLABORATION_GROUP
    display_name = "Chatter Group"
    __slots__ = ("id", "name", "url", "description", "hard_coded_urls", "hard_coded_ids")
