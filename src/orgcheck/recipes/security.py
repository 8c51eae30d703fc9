"""Recipes over access: profiles, permission sets, users, roles and groups."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..core.matrix import DataMatrix, DataMatrixBuilder
from ..core.tree import TreeNode, build_tree
from ..datasets.base import DatasetAliases
from ..datasets.security import PERMISSION_SET_PREFIX
from ..exceptions import RecipeError
from .base import Recipe, RecipeAliases, lookup, matches, namespace_of, per_object
from .code import NamespaceListRecipe


class ProfilesRecipe(NamespaceListRecipe):
    alias = RecipeAliases.PROFILES
    dataset = DatasetAliases.PROFILES


class PermissionSetsRecipe(NamespaceListRecipe):
    alias = RecipeAliases.PERMISSION_SETS
    dataset = DatasetAliases.PERMISSION_SETS


class PermissionSetLicensesRecipe(Recipe):
    alias = RecipeAliases.PERMISSION_SET_LICENSES

    def extract(self, parameters: Mapping[str, Any]) -> list:
        return [DatasetAliases.PERMISSION_SET_LICENSES, DatasetAliases.PERMISSION_SETS]

    def transform(self, data: Mapping[str, Any], logger: logging.Logger, parameters: Mapping[str, Any]) -> list:
        (licenses, permission_sets) = self.require(
            data, DatasetAliases.PERMISSION_SET_LICENSES, DatasetAliases.PERMISSION_SETS
        )
        for psl in licenses.values():
            psl.permission_set_refs = lookup(psl.permission_set_ids, permission_sets)
        return list(licenses.values())


class ProfilePasswordPoliciesRecipe(Recipe):
    alias = RecipeAliases.PROFILE_PASSWORD_POLICIES

    def extract(self, parameters: Mapping[str, Any]) -> list:
        return [DatasetAliases.PROFILE_PASSWORD_POLICIES]

    def transform(self, data: Mapping[str, Any], logger: logging.Logger, parameters: Mapping[str, Any]) -> list:
        (policies,) = self.require(data, DatasetAliases.PROFILE_PASSWORD_POLICIES)
        return list(policies.values())


class ProfileRestrictionsRecipe(Recipe):
    alias = RecipeAliases.PROFILE_RESTRICTIONS

    def extract(self, parameters: Mapping[str, Any]) -> list:
        return [DatasetAliases.PROFILE_RESTRICTIONS, DatasetAliases.PROFILES]

    def transform(self, data: Mapping[str, Any], logger: logging.Logger, parameters: Mapping[str, Any]) -> list:
        (restrictions, profiles) = self.require(data, DatasetAliases.PROFILE_RESTRICTIONS, DatasetAliases.PROFILES)
        namespace = namespace_of(parameters)
        out = []
        for restriction in restrictions.values():
            restriction.profile_ref = profiles.get(restriction.profile_id)
            package = restriction.profile_ref.package if restriction.profile_ref is not None else None
            if matches(namespace, package):
                out.append(restriction)
        return out


class InternalActiveUsersRecipe(Recipe):
    """Active users with their profile, permission sets and the sources of each
    important permission they hold."""

    alias = RecipeAliases.INTERNAL_ACTIVE_USERS

    def extract(self, parameters: Mapping[str, Any]) -> list:
        return [DatasetAliases.INTERNAL_ACTIVE_USERS, DatasetAliases.PROFILES, DatasetAliases.PERMISSION_SETS]

    def transform(self, data: Mapping[str, Any], logger: logging.Logger, parameters: Mapping[str, Any]) -> list:
        (users, profiles, permission_sets) = self.require(
            data, DatasetAliases.INTERNAL_ACTIVE_USERS, DatasetAliases.PROFILES, DatasetAliases.PERMISSION_SETS
        )
        for user in users.values():
            user.profile_ref = profiles.get(user.profile_id)
            user.permission_set_refs = lookup(user.permission_set_ids, permission_sets)
            granted: dict[str, list[Any]] = {}
            for source in [user.profile_ref, *user.permission_set_refs]:
                if source is None:
                    continue
                for name, enabled in (source.important_permissions or {}).items():
                    if enabled is True:
                        granted.setdefault(name, []).append(source)
            user.aggregate_important_permissions = granted
        return list(users.values())


class UserRolesRecipe(Recipe):
    alias = RecipeAliases.USER_ROLES

    def extract(self, parameters: Mapping[str, Any]) -> list:
        return [DatasetAliases.USER_ROLES, DatasetAliases.INTERNAL_ACTIVE_USERS]

    def transform(self, data: Mapping[str, Any], logger: logging.Logger, parameters: Mapping[str, Any]) -> list:
        (roles, users) = self.require(data, DatasetAliases.USER_ROLES, DatasetAliases.INTERNAL_ACTIVE_USERS)
        for role in roles.values():
            if role.has_active_members:
                role.active_member_refs = lookup(role.active_member_ids, users)
            if role.has_parent:
                role.parent_ref = roles.get(role.parent_id)
        return list(roles.values())


class RoleTreeRecipe(Recipe):
    """The role hierarchy under an artificial root.

    A role whose parent is not in the org hangs off the root.
    """

    alias = RecipeAliases.ROLE_TREE

    def extract(self, parameters: Mapping[str, Any]) -> list:
        return [DatasetAliases.USER_ROLES]

    def transform(self, data: Mapping[str, Any], logger: logging.Logger, parameters: Mapping[str, Any]) -> TreeNode:
        (roles,) = self.require(data, DatasetAliases.USER_ROLES)
        return build_tree(
            roles.values(),
            get_id=lambda role: role.id,
            get_parent_id=lambda role: role.parent_id if role.parent_id in roles else None,
        )


class _GroupsRecipe(Recipe):
    def extract(self, parameters: Mapping[str, Any]) -> list:
        return [DatasetAliases.GROUPS, DatasetAliases.INTERNAL_ACTIVE_USERS]

    def keep(self, group: Any) -> bool:
        raise NotImplementedError

    def transform(self, data: Mapping[str, Any], logger: logging.Logger, parameters: Mapping[str, Any]) -> list:
        (groups, users) = self.require(data, DatasetAliases.GROUPS, DatasetAliases.INTERNAL_ACTIVE_USERS)
        out = []
        for group in groups.values():
            group.direct_user_refs = lookup(group.direct_user_ids, users)
            group.direct_group_refs = lookup(group.direct_group_ids, groups)
            if self.keep(group):
                out.append(group)
        return out


class PublicGroupsRecipe(_GroupsRecipe):
    alias = RecipeAliases.PUBLIC_GROUPS

    def keep(self, group: Any) -> bool:
        return group.is_public_group is True


class QueuesRecipe(_GroupsRecipe):
    alias = RecipeAliases.QUEUES

    def keep(self, group: Any) -> bool:
        return group.is_queue is True


def crud(permission: Any) -> str:
    """Compact form of an object permission: C R U D, then v(iew all) and m(odify all)."""
    flags = (
        ("C", permission.is_create),
        ("R", permission.is_read),
        ("U", permission.is_edit),
        ("D", permission.is_delete),
        ("v", permission.is_view_all),
        ("m", permission.is_modify_all),
    )
    return "".join(letter for letter, enabled in flags if enabled)


def _link_parent(permission: Any, profiles: Mapping[str, Any], permission_sets: Mapping[str, Any]) -> Any:
    parents = permission_sets if permission.parent_id.startswith(PERMISSION_SET_PREFIX) else profiles
    permission.parent_ref = parents.get(permission.parent_id)
    return permission.parent_ref


class ObjectPermissionsRecipe(Recipe):
    """Matrix of permission parents (profiles and permission sets) by object."""

    alias = RecipeAliases.OBJECT_PERMISSIONS

    def extract(self, parameters: Mapping[str, Any]) -> list:
        return [DatasetAliases.OBJECT_PERMISSIONS, DatasetAliases.PROFILES, DatasetAliases.PERMISSION_SETS]

    def transform(self, data: Mapping[str, Any], logger: logging.Logger, parameters: Mapping[str, Any]) -> DataMatrix:
        (permissions, profiles, permission_sets) = self.require(
            data, DatasetAliases.OBJECT_PERMISSIONS, DatasetAliases.PROFILES, DatasetAliases.PERMISSION_SETS
        )
        namespace = namespace_of(parameters)
        builder = DataMatrixBuilder()
        for permission in permissions.values():
            if _link_parent(permission, profiles, permission_sets) is None:
                logger.debug(f"Object permission on unknown parent {permission.parent_id}")
                continue
            if not matches(namespace, permission.parent_ref.package):
                continue
            if not builder.has_row_header(permission.parent_id):
                builder.set_row_header(permission.parent_id, permission.parent_ref)
            builder.add_value(permission.parent_id, permission.object_type, crud(permission))
        return builder.to_matrix()


class FieldPermissionsRecipe(Recipe):
    """Matrix of permission parents by field of one object.

    Requires the ``object`` parameter (API name). Cells read ``R`` or ``RU``.
    """

    alias = RecipeAliases.FIELD_PERMISSIONS

    def extract(self, parameters: Mapping[str, Any]) -> list:
        name = parameters.get("object")
        if not name:
            raise RecipeError(self.alias, "parameter 'object' is required")
        return [
            per_object(DatasetAliases.FIELD_PERMISSIONS, name),
            DatasetAliases.PROFILES,
            DatasetAliases.PERMISSION_SETS,
        ]

    def transform(self, data: Mapping[str, Any], logger: logging.Logger, parameters: Mapping[str, Any]) -> DataMatrix:
        (permissions, profiles, permission_sets) = self.require(
            data, DatasetAliases.FIELD_PERMISSIONS, DatasetAliases.PROFILES, DatasetAliases.PERMISSION_SETS
        )
        namespace = namespace_of(parameters)
        builder = DataMatrixBuilder()
        for permission in permissions.values():
            parent = _link_parent(permission, profiles, permission_sets)
            if parent is None:
                logger.debug(f"Field permission on unknown parent {permission.parent_id}")
                continue
            if not matches(namespace, parent.package):
                continue
            if not builder.has_row_header(permission.parent_id):
                builder.set_row_header(permission.parent_id, parent)
            value = ("R" if permission.is_read else "") + ("U" if permission.is_edit else "")
            builder.add_value(permission.parent_id, permission.field_api_name, value)
        return builder.to_matrix()


class AppPermissionsRecipe(Recipe):
    """Matrix of permission parents by app. Cells read ``A`` (accessible) and ``V`` (visible)."""

    alias = RecipeAliases.APP_PERMISSIONS

    def extract(self, parameters: Mapping[str, Any]) -> list:
        return [
            DatasetAliases.APPLICATIONS,
            DatasetAliases.APP_PERMISSIONS,
            DatasetAliases.PROFILES,
            DatasetAliases.PERMISSION_SETS,
        ]

    def transform(self, data: Mapping[str, Any], logger: logging.Logger, parameters: Mapping[str, Any]) -> DataMatrix:
        (applications, permissions, profiles, permission_sets) = self.require(
            data,
            DatasetAliases.APPLICATIONS,
            DatasetAliases.APP_PERMISSIONS,
            DatasetAliases.PROFILES,
            DatasetAliases.PERMISSION_SETS,
        )
        namespace = namespace_of(parameters)
        builder = DataMatrixBuilder()
        for permission in permissions.values():
            permission.app_ref = applications.get(permission.app_id)
            parent = _link_parent(permission, profiles, permission_sets)
            if parent is None or permission.app_ref is None:
                logger.debug(f"App permission on unknown parent {permission.parent_id} or app {permission.app_id}")
                continue
            if not (matches(namespace, parent.package) or matches(namespace, permission.app_ref.package)):
                continue
            if not builder.has_row_header(permission.parent_id):
                builder.set_row_header(permission.parent_id, parent)
            if not builder.has_column_header(permission.app_id):
                builder.set_column_header(permission.app_id, permission.app_ref)
            value = ("A" if permission.is_accessible else "") + ("V" if permission.is_visible else "")
            builder.add_value(permission.parent_id, permission.app_id, value)
        return builder.to_matrix()


class CollaborationGroupsRecipe(Recipe):
    alias = RecipeAliases.COLLABORATION_GROUPS

    def extract(self, parameters: Mapping[str, Any]) -> list:
        return [DatasetAliases.COLLABORATION_GROUPS]

    def transform(self, data: Mapping[str, Any], logger: logging.Logger, parameters: Mapping[str, Any]) -> list:
        (groups,) = self.require(data, DatasetAliases.COLLABORATION_GROUPS)
        return list(groups.values())
