"""Datasets about access: profiles, permission sets, users, roles, groups and apps."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Mapping, Optional

from ..core import codescanner
from ..core.factory import DataFactory
from ..data import (
    AppPermission,
    Application,
    CollaborationGroup,
    FieldPermission,
    Group,
    ObjectPermission,
    PermissionSet,
    PermissionSetLicense,
    Profile,
    ProfileIpRangeRestriction,
    ProfileLoginHourRestriction,
    ProfilePasswordPolicy,
    ProfileRestrictions,
    User,
    UserRole,
)
from ..transport import MetadataRequest, MetadataType, QuerySpec, Transport, case_safe_id, setup_url
from .base import Dataset, DatasetAliases, nested, package_of, record_ids

# Profiles own a permission set too, so every permission row has a 0PS parent
PERMISSION_SET_PREFIX = "0PS"

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

_IMPORTANT_PERMISSIONS = (
    "PermissionsApiEnabled, PermissionsViewSetup, PermissionsModifyAllData, PermissionsViewAllData"
)


def _important_permissions(row: Mapping[str, Any]) -> dict[str, bool]:
    return {
        "api_enabled": row.get("PermissionsApiEnabled") is True,
        "view_setup": row.get("PermissionsViewSetup") is True,
        "modify_all_data": row.get("PermissionsModifyAllData") is True,
        "view_all_data": row.get("PermissionsViewAllData") is True,
    }


def _subquery_size(row: Mapping[str, Any], name: str) -> int:
    return len(nested(row, name, "records") or [])


class ProfilesDataset(Dataset):
    alias = DatasetAliases.PROFILES
    description = "Profiles, read through the permission set each profile owns"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying PermissionSet with IsOwnedByProfile=true...")
        (rows,) = await transport.execute_queries(
            [
                QuerySpec(
                    "SELECT ProfileId, Profile.Name, Profile.Description, IsCustom, License.Name, "
                    f"NamespacePrefix, {_IMPORTANT_PERMISSIONS}, CreatedDate, LastModifiedDate, "
                    "(SELECT Id FROM FieldPerms LIMIT 51), "
                    "(SELECT Id FROM ObjectPerms LIMIT 51), "
                    "(SELECT Id FROM Assignments WHERE Assignee.IsActive = TRUE LIMIT 51) "
                    "FROM PermissionSet WHERE IsOwnedByProfile = TRUE",
                    "PermissionSet",
                    alias="ProfilePermissionSet",
                )
            ]
        )
        profile_factory = factory.get_instance(Profile)

        logger.info(f"Parsing {len(rows)} profiles...")
        profiles = {}
        for row in rows:
            id = case_safe_id(row.get("ProfileId"))
            profiles[id] = profile_factory.create_with_score(
                {
                    "id": id,
                    "name": nested(row, "Profile", "Name"),
                    "description": nested(row, "Profile", "Description"),
                    "license": nested(row, "License", "Name") or "",
                    "is_custom": row.get("IsCustom"),
                    "package": package_of(row),
                    "member_counts": _subquery_size(row, "Assignments"),
                    "nb_field_permissions": _subquery_size(row, "FieldPerms"),
                    "nb_object_permissions": _subquery_size(row, "ObjectPerms"),
                    "type": "Profile",
                    "important_permissions": _important_permissions(row),
                    "created_date": row.get("CreatedDate"),
                    "last_modified_date": row.get("LastModifiedDate"),
                    "url": setup_url(id, MetadataType.PROFILE),
                }
            )

        logger.info("Done")
        return profiles


class PermissionSetsDataset(Dataset):
    alias = DatasetAliases.PERMISSION_SETS
    description = "Permission sets and permission set groups with their counts"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying PermissionSet, PermissionSetGroup, ObjectPermissions, FieldPermissions and assignments...")
        (ps_rows, group_rows, object_rows, field_rows, assignment_rows) = await transport.execute_queries(
            [
                QuerySpec(
                    "SELECT Id, Name, Description, IsCustom, License.Name, NamespacePrefix, Type, "
                    f"{_IMPORTANT_PERMISSIONS}, CreatedDate, LastModifiedDate "
                    "FROM PermissionSet WHERE IsOwnedByProfile = FALSE ORDER BY Id LIMIT 2000",
                    "PermissionSet",
                ),
                QuerySpec(
                    "SELECT Id, PermissionSetGroupId, PermissionSetGroup.Description "
                    "FROM PermissionSet WHERE PermissionSetGroupId != null ORDER BY Id LIMIT 2000",
                    "PermissionSet",
                    alias="PermissionSetGroup",
                ),
                QuerySpec(
                    "SELECT ParentId, COUNT(SobjectType) CountObject FROM ObjectPermissions "
                    "WHERE Parent.IsOwnedByProfile = FALSE GROUP BY ParentId ORDER BY ParentId LIMIT 2000",
                    "ObjectPermissions",
                    alias="CountObjectPermissions",
                ),
                QuerySpec(
                    "SELECT ParentId, COUNT(Field) CountField FROM FieldPermissions "
                    "WHERE Parent.IsOwnedByProfile = FALSE GROUP BY ParentId ORDER BY ParentId LIMIT 2000",
                    "FieldPermissions",
                    alias="CountFieldPermissions",
                ),
                QuerySpec(
                    "SELECT PermissionSetId, COUNT(Id) CountAssignment FROM PermissionSetAssignment "
                    "WHERE PermissionSet.IsOwnedByProfile = FALSE GROUP BY PermissionSetId "
                    "ORDER BY PermissionSetId LIMIT 2000",
                    "PermissionSetAssignment",
                    alias="CountPermissionSetAssignment",
                ),
            ]
        )
        permission_set_factory = factory.get_instance(PermissionSet)

        logger.info(f"Parsing {len(ps_rows)} permission sets...")
        permission_sets: dict[str, PermissionSet] = {}
        for row in ps_rows:
            id = case_safe_id(row["Id"])
            is_group = row.get("Type") == "Group"
            permission_sets[id] = permission_set_factory.create(
                {
                    "id": id,
                    "name": row.get("Name"),
                    "description": row.get("Description"),
                    "license": nested(row, "License", "Name") or "",
                    "is_custom": row.get("IsCustom"),
                    "package": package_of(row),
                    "member_counts": 0,
                    "is_group": is_group,
                    "type": "Permission Set Group" if is_group else "Permission Set",
                    "nb_field_permissions": 0,
                    "nb_object_permissions": 0,
                    "important_permissions": _important_permissions(row),
                    "created_date": row.get("CreatedDate"),
                    "last_modified_date": row.get("LastModifiedDate"),
                    "url": "" if is_group else setup_url(id, MetadataType.PERMISSION_SET),
                }
            )

        logger.info(
            f"Parsing {len(group_rows)} permission set groups, {len(object_rows)} object permission "
            f"counts and {len(field_rows)} field permission counts..."
        )
        for row in group_rows:
            permission_set = permission_sets.get(case_safe_id(row.get("Id")))
            if permission_set is not None:
                group_id = case_safe_id(row.get("PermissionSetGroupId"))
                permission_set.is_group = True
                permission_set.group_id = group_id
                permission_set.url = setup_url(group_id, MetadataType.PERMISSION_SET_GROUP)
        for rows, key, attribute, count in (
            (object_rows, "ParentId", "nb_object_permissions", "CountObject"),
            (field_rows, "ParentId", "nb_field_permissions", "CountField"),
            (assignment_rows, "PermissionSetId", "member_counts", "CountAssignment"),
        ):
            for row in rows:
                permission_set = permission_sets.get(case_safe_id(row.get(key)))
                if permission_set is not None:
                    setattr(permission_set, attribute, row.get(count) or 0)

        logger.info(f"Computing the score for {len(permission_sets)} permission sets...")
        for permission_set in permission_sets.values():
            permission_set_factory.compute_score(permission_set)

        logger.info("Done")
        return permission_sets


class PermissionSetLicensesDataset(Dataset):
    alias = DatasetAliases.PERMISSION_SET_LICENSES
    description = "Permission set licenses with seat usage and active assignees"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying PermissionSetLicense, PermissionSet and PermissionSetAssignment...")
        (license_rows, ps_rows, assignment_rows) = await transport.execute_queries(
            [
                QuerySpec(
                    "SELECT Id, MasterLabel, CreatedDate, LastModifiedDate, TotalLicenses, Status, "
                    "ExpirationDate, UsedLicenses, IsAvailableForIntegrations FROM PermissionSetLicense",
                    "PermissionSetLicense",
                ),
                QuerySpec(
                    "SELECT Id, LicenseId FROM PermissionSet "
                    "WHERE IsOwnedByProfile = false AND LicenseId <> NULL",
                    "PermissionSet",
                    alias="PermissionSetWithLicense",
                ),
                QuerySpec(
                    "SELECT AssigneeId, PermissionSet.LicenseId FROM PermissionSetAssignment "
                    "WHERE Assignee.IsActive = TRUE AND PermissionSet.LicenseId <> NULL "
                    "AND PermissionSet.IsOwnedByProfile = FALSE ORDER BY PermissionSetId",
                    "PermissionSetAssignment",
                    alias="PermissionSetAssignmentWithLicense",
                ),
            ]
        )
        license_factory = factory.get_instance(PermissionSetLicense)

        logger.info(f"Parsing {len(license_rows)} permission set licenses...")
        licenses: dict[str, PermissionSetLicense] = {}
        for row in license_rows:
            id = case_safe_id(row["Id"])
            total = row.get("TotalLicenses") or 0
            used = row.get("UsedLicenses") or 0
            licenses[id] = license_factory.create(
                {
                    "id": id,
                    "name": row.get("MasterLabel"),
                    "status": row.get("Status"),
                    "total_count": total,
                    "used_count": used,
                    "used_percentage": used / total if total != 0 else None,
                    "remaining_count": total - used,
                    "distinct_active_assignee_count": 0,
                    "permission_set_ids": [],
                    "expiration_date": row.get("ExpirationDate"),
                    "is_available_for_integrations": row.get("IsAvailableForIntegrations"),
                    "created_date": row.get("CreatedDate"),
                    "last_modified_date": row.get("LastModifiedDate"),
                    "url": setup_url(id, MetadataType.PERMISSION_SET_LICENSE),
                }
            )

        logger.info(f"Parsing {len(assignment_rows)} assignments to licensed permission sets...")
        assignees: dict[str, set[str]] = defaultdict(set)
        for row in assignment_rows:
            license_id = nested(row, "PermissionSet", "LicenseId")
            # Only permission set licenses (0PL); user licenses share the field
            if not license_id or not license_id.startswith("0PL"):
                continue
            assignees[case_safe_id(license_id)].add(case_safe_id(row.get("AssigneeId")))
        for license_id, ids in assignees.items():
            if license_id in licenses:
                licenses[license_id].distinct_active_assignee_count = len(ids)

        logger.info(f"Parsing {len(ps_rows)} permission sets linked to a license...")
        for row in ps_rows:
            psl = licenses.get(case_safe_id(row.get("LicenseId")))
            if psl is not None:
                psl.permission_set_ids.append(case_safe_id(row["Id"]))

        logger.info(f"Computing the score for {len(licenses)} permission set licenses...")
        for psl in licenses.values():
            license_factory.compute_score(psl)

        logger.info("Done")
        return licenses


def _int(value: Any) -> Optional[int]:
    """Metadata numbers arrive as strings; missing or malformed reads as None."""
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _flag(value: Any, true_value: str = "true") -> bool:
    return value is True or str(value).lower() == true_value


class ProfilePasswordPoliciesDataset(Dataset):
    alias = DatasetAliases.PROFILE_PASSWORD_POLICIES
    description = "Password policies attached to profiles, keyed by profile name"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Reading ProfilePasswordPolicy metadata...")
        metadata = await transport.fetch_metadata([MetadataRequest(MetadataType.PROFILE_PASSWORD_POLICY)])
        rows = metadata.get(MetadataType.PROFILE_PASSWORD_POLICY) or []
        policy_factory = factory.get_instance(ProfilePasswordPolicy)

        logger.info(f"Parsing {len(rows)} profile password policies...")
        policies = {}
        for row in rows:
            profile_name = row.get("profile")
            # A policy without a profile name belongs to a deleted profile
            if not isinstance(profile_name, str) or not profile_name:
                continue
            policies[profile_name] = policy_factory.create_with_score(
                {
                    "profile_name": profile_name,
                    "forgot_password_redirect": _flag(row.get("forgotPasswordRedirect")),
                    "lockout_interval": _int(row.get("lockoutInterval")),
                    "max_login_attempts": _int(row.get("maxLoginAttempts")),
                    "minimum_password_length": _int(row.get("minimumPasswordLength")),
                    "minimum_password_lifetime": _flag(row.get("minimumPasswordLifetime")),
                    "obscure": _flag(row.get("obscure")),
                    "password_complexity": _int(row.get("passwordComplexity")),
                    "password_expiration": _int(row.get("passwordExpiration")),
                    "password_history": _int(row.get("passwordHistory")),
                    "password_question": _flag(row.get("passwordQuestion"), "1"),
                }
            )

        logger.info("Done")
        return policies


def ip_to_number(ip: Optional[str]) -> int:
    """Position of an IPv4 address on a base-255 scale, as the setup UI counts ranges."""
    if not ip:
        return 0
    octets = ip.split(".")
    return sum(int(octet) * 255 ** (len(octets) - 1 - i) for i, octet in enumerate(octets))


def _clock(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


class ProfileRestrictionsDataset(Dataset):
    alias = DatasetAliases.PROFILE_RESTRICTIONS
    description = "Login hours and login IP ranges set on profiles"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying Profile ids...")
        (rows,) = await transport.execute_queries([QuerySpec("SELECT Id FROM Profile", "Profile")])
        ids = record_ids(rows)

        logger.info(f"Reading metadata of {len(ids)} profiles...")
        metadata = await transport.fetch_metadata([MetadataRequest(MetadataType.PROFILE, tuple(ids))])
        records = metadata.get(MetadataType.PROFILE) or []

        restrictions_factory = factory.get_instance(ProfileRestrictions)
        ip_range_factory = factory.get_instance(ProfileIpRangeRestriction)
        login_hour_factory = factory.get_instance(ProfileLoginHourRestriction)

        logger.info(f"Parsing {len(records)} profile restrictions...")
        restrictions = {}
        for row in records:
            profile_id = case_safe_id(row["Id"])
            definition = row.get("Metadata") or {}

            login_hours = []
            hours = definition.get("loginHours")
            if hours:
                for day in WEEKDAYS:
                    start = _int(hours.get(f"{day}Start")) or 0
                    end = _int(hours.get(f"{day}End")) or 0
                    login_hours.append(
                        login_hour_factory.create(
                            {
                                "day": day,
                                "from_time": _clock(start),
                                "to_time": _clock(end),
                                "difference": end - start,
                            }
                        )
                    )

            ip_ranges = []
            for ip_range in definition.get("loginIpRanges") or []:
                start_address = ip_range.get("startAddress")
                end_address = ip_range.get("endAddress")
                ip_ranges.append(
                    ip_range_factory.create(
                        {
                            "start_address": start_address,
                            "end_address": end_address,
                            "description": ip_range.get("description") or "(empty)",
                            "difference": ip_to_number(end_address) - ip_to_number(start_address) + 1,
                        }
                    )
                )

            restrictions[profile_id] = restrictions_factory.create_with_score(
                {"profile_id": profile_id, "ip_ranges": ip_ranges, "login_hours": login_hours}
            )

        logger.info("Done")
        return restrictions


class ObjectPermissionsDataset(Dataset):
    alias = DatasetAliases.OBJECT_PERMISSIONS
    description = "CRUD permissions per profile or permission set and object"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying ObjectPermissions...")
        (rows,) = await transport.execute_queries(
            [
                QuerySpec(
                    "SELECT ParentId, Parent.IsOwnedByProfile, Parent.ProfileId, SobjectType, "
                    "CreatedDate, LastModifiedDate, PermissionsRead, PermissionsCreate, "
                    "PermissionsEdit, PermissionsDelete, PermissionsViewAllRecords, "
                    "PermissionsModifyAllRecords FROM ObjectPermissions",
                    "ObjectPermissions",
                )
            ]
        )
        permission_factory = factory.get_instance(ObjectPermission)

        logger.info(f"Parsing {len(rows)} object permissions...")
        permissions = {}
        for row in rows:
            parent = row.get("Parent")
            # ParentId can point to a parent the API no longer resolves
            if parent is None:
                continue
            parent_id = case_safe_id(parent.get("ProfileId") if parent.get("IsOwnedByProfile") is True else row.get("ParentId"))
            permission = permission_factory.create(
                {
                    "parent_id": parent_id,
                    "object_type": row.get("SobjectType"),
                    "is_read": row.get("PermissionsRead"),
                    "is_create": row.get("PermissionsCreate"),
                    "is_edit": row.get("PermissionsEdit"),
                    "is_delete": row.get("PermissionsDelete"),
                    "is_view_all": row.get("PermissionsViewAllRecords"),
                    "is_modify_all": row.get("PermissionsModifyAllRecords"),
                }
            )
            permissions[f"{parent_id}_{permission.object_type}"] = permission

        logger.info("Done")
        return permissions


class FieldPermissionsDataset(Dataset):
    """Read and edit permissions on the fields of one object, per permission parent."""

    alias = DatasetAliases.FIELD_PERMISSIONS
    description = "Field level security of one object per profile or permission set"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        api_name = parameters["object"]
        logger.info(f"Querying FieldPermissions of {api_name}...")
        (rows,) = await transport.execute_queries(
            [
                QuerySpec(
                    "SELECT Field, PermissionsRead, PermissionsEdit, ParentId, "
                    "Parent.IsOwnedByProfile, Parent.ProfileId FROM FieldPermissions "
                    f"WHERE SObjectType = '{api_name}'",
                    "FieldPermissions",
                )
            ]
        )
        permission_factory = factory.get_instance(FieldPermission)

        logger.info(f"Parsing {len(rows)} field permissions...")
        permissions = {}
        for row in rows:
            parent = row.get("Parent")
            raw_parent_id = row.get("ParentId")
            if parent is None or not raw_parent_id or not raw_parent_id.startswith(PERMISSION_SET_PREFIX):
                continue
            if not row.get("Field"):
                continue
            parent_id = case_safe_id(parent.get("ProfileId") if parent.get("IsOwnedByProfile") is True else raw_parent_id)
            # Field is "Account.Industry"
            field_api_name = row["Field"].split(".", 1)[-1]
            permissions[f"{row['Field']}-{parent_id}"] = permission_factory.create(
                {
                    "parent_id": parent_id,
                    "field_api_name": field_api_name,
                    "is_read": row.get("PermissionsRead"),
                    "is_edit": row.get("PermissionsEdit"),
                }
            )

        logger.info("Done")
        return permissions


_APP_MENU = (
    "SELECT ApplicationId, Name, Label, NamespacePrefix, IsAccessible, IsVisible "
    "FROM AppMenuItem WHERE Type = 'TabSet'"
)


class ApplicationsDataset(Dataset):
    alias = DatasetAliases.APPLICATIONS
    description = "Apps listed in the app menu"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying AppMenuItem...")
        (rows,) = await transport.execute_queries([QuerySpec(_APP_MENU, "AppMenuItem")])
        application_factory = factory.get_instance(Application)

        logger.info(f"Parsing {len(rows)} applications...")
        applications = {}
        for row in rows:
            id = case_safe_id(row["ApplicationId"])
            applications[id] = application_factory.create(
                {"id": id, "name": row.get("Name"), "label": row.get("Label"), "package": package_of(row)}
            )

        logger.info("Done")
        return applications


class AppPermissionsDataset(Dataset):
    """Which permission parents can see which app of the app menu."""

    alias = DatasetAliases.APP_PERMISSIONS
    description = "App access per profile or permission set"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying AppMenuItem and SetupEntityAccess...")
        (menu_rows, access_rows) = await transport.execute_queries(
            [
                QuerySpec(_APP_MENU, "AppMenuItem"),
                QuerySpec(
                    "SELECT SetupEntityId, ParentId, Parent.IsOwnedByProfile, Parent.ProfileId "
                    "FROM SetupEntityAccess WHERE SetupEntityType = 'TabSet'",
                    "SetupEntityAccess",
                ),
            ]
        )
        permission_factory = factory.get_instance(AppPermission)
        menu = {case_safe_id(row["ApplicationId"]): row for row in menu_rows}

        logger.info(f"Parsing {len(access_rows)} app permissions...")
        permissions = {}
        for row in access_rows:
            app_id = case_safe_id(row.get("SetupEntityId"))
            # Apps hidden from the menu are not reported
            if app_id not in menu:
                continue
            parent = row.get("Parent") or {}
            parent_id = case_safe_id(parent.get("ProfileId") if parent.get("IsOwnedByProfile") is True else row.get("ParentId"))
            if parent_id is None:
                continue
            permissions[f"{app_id}-{parent_id}"] = permission_factory.create(
                {
                    "parent_id": parent_id,
                    "app_id": app_id,
                    "is_accessible": menu[app_id].get("IsAccessible"),
                    "is_visible": menu[app_id].get("IsVisible"),
                }
            )

        logger.info("Done")
        return permissions


class UserRolesDataset(Dataset):
    alias = DatasetAliases.USER_ROLES
    description = "Roles with their members and their level in the hierarchy"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying UserRole...")
        (rows,) = await transport.execute_queries(
            [
                QuerySpec(
                    "SELECT Id, DeveloperName, Name, ParentRoleId, PortalType, "
                    "(SELECT Id, IsActive FROM Users) FROM UserRole",
                    "UserRole",
                )
            ]
        )
        role_factory = factory.get_instance(UserRole)

        logger.info(f"Parsing {len(rows)} user roles...")
        roles: dict[str, UserRole] = {}
        children: dict[str, list[UserRole]] = defaultdict(list)
        roots = []
        for row in rows:
            id = case_safe_id(row["Id"])
            parent_id = case_safe_id(row.get("ParentRoleId")) if row.get("ParentRoleId") else None
            active_ids = []
            inactive_count = 0
            for user in nested(row, "Users", "records") or []:
                if user.get("IsActive") is True:
                    active_ids.append(case_safe_id(user.get("Id")))
                else:
                    inactive_count += 1
            role = role_factory.create(
                {
                    "id": id,
                    "name": row.get("Name"),
                    "apiname": row.get("DeveloperName"),
                    "parent_id": parent_id,
                    "has_parent": parent_id is not None,
                    "active_member_ids": active_ids,
                    "active_members_count": len(active_ids),
                    "has_active_members": bool(active_ids),
                    "inactive_members_count": inactive_count,
                    "has_inactive_members": inactive_count > 0,
                    "is_external": row.get("PortalType") != "None",
                    "url": setup_url(id, MetadataType.ROLE),
                }
            )
            roles[id] = role
            if parent_id is None:
                roots.append(role)
            else:
                children[parent_id].append(role)

        # Breadth-first from the roots; roles under a missing parent keep level None
        for root in roots:
            root.level = 0
        queue = list(roots)
        while queue:
            parent = queue.pop(0)
            for child in children.get(parent.id, ()):
                if child.level is None:
                    child.level = parent.level + 1
                    queue.append(child)

        logger.info(f"Computing the score for {len(roles)} user roles...")
        for role in roles.values():
            role_factory.compute_score(role)

        logger.info("Done")
        return roles


class InternalActiveUsersDataset(Dataset):
    alias = DatasetAliases.INTERNAL_ACTIVE_USERS
    description = "Active internal users with their permission set assignments"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying active internal User and their PermissionSetAssignment...")
        (user_rows, assignment_rows) = await transport.execute_queries(
            [
                QuerySpec(
                    "SELECT Id, Name, SmallPhotoUrl, ProfileId, LastLoginDate, LastPasswordChangeDate, "
                    "NumberOfFailedLogins, UserPreferencesLightningExperiencePreferred FROM User "
                    "WHERE IsActive = true AND ContactId = NULL AND Profile.Id != NULL",
                    "User",
                ),
                QuerySpec(
                    "SELECT Id, AssigneeId, PermissionSetId FROM PermissionSetAssignment "
                    "WHERE Assignee.IsActive = true AND PermissionSet.IsOwnedByProfile = false "
                    "AND Assignee.ContactId = NULL AND Assignee.Profile.Id != NULL",
                    "PermissionSetAssignment",
                ),
            ]
        )
        user_factory = factory.get_instance(User)

        logger.info(f"Parsing {len(user_rows)} users...")
        users: dict[str, User] = {}
        for row in user_rows:
            id = case_safe_id(row["Id"])
            users[id] = user_factory.create(
                {
                    "id": id,
                    "name": row.get("Name"),
                    "photo_url": row.get("SmallPhotoUrl"),
                    "last_login": row.get("LastLoginDate"),
                    "number_failed_logins": row.get("NumberOfFailedLogins"),
                    "on_lightning_experience": row.get("UserPreferencesLightningExperiencePreferred"),
                    "last_password_change": row.get("LastPasswordChangeDate"),
                    "profile_id": case_safe_id(row.get("ProfileId")),
                    "permission_set_ids": [],
                    "url": setup_url(id, MetadataType.USER),
                }
            )

        logger.info(f"Parsing {len(assignment_rows)} permission set assignments...")
        for row in assignment_rows:
            user = users.get(case_safe_id(row.get("AssigneeId")))
            if user is not None:
                user.permission_set_ids.append(case_safe_id(row.get("PermissionSetId")))

        logger.info(f"Computing the score for {len(users)} users...")
        for user in users.values():
            user_factory.compute_score(user)

        logger.info("Done")
        return users


_ROLE_GROUP_TYPES = ("Role", "RoleAndSubordinates", "RoleAndSubordinatesInternal")


class GroupsDataset(Dataset):
    alias = DatasetAliases.GROUPS
    description = "Public groups, queues, role-based and technical groups with their direct members"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying Group...")
        (rows,) = await transport.execute_queries(
            [
                QuerySpec(
                    "SELECT Id, Name, DeveloperName, DoesIncludeBosses, Type, RelatedId, Related.Name, "
                    "(SELECT UserOrGroupId From GroupMembers) FROM Group",
                    "Group",
                )
            ]
        )
        group_factory = factory.get_instance(Group)

        logger.info(f"Parsing {len(rows)} groups...")
        groups = {}
        for row in rows:
            id = case_safe_id(row["Id"])
            kind = row.get("Type")
            developer_name = None
            related_id = None
            include_bosses = False
            include_subordinates = False
            if kind in ("Regular", "Queue"):
                group_type = MetadataType.PUBLIC_GROUP if kind == "Regular" else MetadataType.QUEUE
                name = row.get("Name")
                developer_name = row.get("DeveloperName")
                include_bosses = row.get("DoesIncludeBosses") is True
            elif kind in _ROLE_GROUP_TYPES:
                group_type = MetadataType.ROLE
                name = nested(row, "Related", "Name") or "(unknown)"
                include_subordinates = kind != "Role"
                related_id = case_safe_id(row.get("RelatedId"))
            else:
                group_type = MetadataType.TECHNICAL_GROUP
                name = kind

            user_ids, group_ids = [], []
            for member in nested(row, "GroupMembers", "records") or []:
                member_id = case_safe_id(member.get("UserOrGroupId"))
                (user_ids if member_id.startswith("005") else group_ids).append(member_id)

            groups[id] = group_factory.create_with_score(
                {
                    "id": id,
                    "name": name,
                    "developer_name": developer_name,
                    "type": group_type,
                    "is_public_group": kind == "Regular",
                    "is_queue": kind == "Queue",
                    "nb_direct_members": len(user_ids) + len(group_ids),
                    "direct_user_ids": user_ids,
                    "direct_group_ids": group_ids,
                    "include_bosses": include_bosses,
                    "include_subordinates": include_subordinates,
                    "related_id": related_id,
                    "url": setup_url(related_id or id, group_type),
                }
            )

        logger.info("Done")
        return groups


class CollaborationGroupsDataset(Dataset):
    alias = DatasetAliases.COLLABORATION_GROUPS
    description = "Chatter groups, information body scanned for hard-coded values"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying CollaborationGroup...")
        # Orgs without Chatter have no CollaborationGroup sobject
        (rows,) = await transport.execute_queries(
            [
                QuerySpec(
                    "SELECT Id, InformationBody, Description, Name, CreatedDate, LastModifiedDate "
                    "FROM CollaborationGroup",
                    "CollaborationGroup",
                    optional=True,
                )
            ]
        )
        group_factory = factory.get_instance(CollaborationGroup)

        logger.info(f"Parsing {len(rows)} chatter groups...")
        groups = {}
        for row in rows:
            id = case_safe_id(row["Id"])
            group = group_factory.create(
                {
                    "id": id,
                    "name": row.get("Name"),
                    "description": row.get("Description"),
                    "url": setup_url(id, MetadataType.COLLABORATION_GROUP),
                }
            )
            if row.get("InformationBody"):
                body = codescanner.remove_comments_from_xml(row["InformationBody"])
                group.hard_coded_urls = codescanner.find_hard_coded_urls(body)
                group.hard_coded_ids = codescanner.find_hard_coded_ids(body)
            group_factory.compute_score(group)
            groups[id] = group

        logger.info("Done")
        return groups
