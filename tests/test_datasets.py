"""Tests for the dataset implementations - rows in, typed records out."""

import logging

import pytest

from conftest import edge, run
from orgcheck.data import Field, Group, Organization, ProfileRestrictions
from orgcheck.datasets.code import CustomLabelsDataset, DocumentsDataset, HomePageComponentsDataset
from orgcheck.datasets.org import OrganizationDataset, PackagesDataset, organization_type
from orgcheck.datasets.schema import CustomFieldsDataset, ObjectDataset, ObjectTypesDataset
from orgcheck.datasets.security import (
    ApplicationsDataset,
    AppPermissionsDataset,
    CollaborationGroupsDataset,
    FieldPermissionsDataset,
    GroupsDataset,
    InternalActiveUsersDataset,
    ObjectPermissionsDataset,
    ProfilePasswordPoliciesDataset,
    ProfileRestrictionsDataset,
    UserRolesDataset,
    ip_to_number,
)
from orgcheck.exceptions import DataError
from orgcheck.transport import InMemoryTransport

logger = logging.getLogger("orgcheck.test")


def _run(dataset, factory, parameters=None, **transport_data):
    transport = InMemoryTransport(**transport_data)
    return run(dataset.run(transport, factory, logger, parameters or {}))


# ---------------------------------------------------------------------------
# Code
# ---------------------------------------------------------------------------


class TestCustomLabels:
    def test_ids_are_case_safe_and_scored(self, factory):
        labels = _run(
            CustomLabelsDataset(),
            factory,
            queries={"ExternalString": [{"Id": "101000000000001AAA", "Name": "Greeting", "NamespacePrefix": None}]},
            edges=[edge("01p000000000001", "ApexClass", "101000000000001", "CustomLabel")],
        )

        label = labels["101000000000001"]
        assert label.package == ""
        assert len(label.dependencies.referenced) == 1
        assert label.score == 0
        assert label.url

    def test_unreferenced_label_is_bad(self, factory):
        labels = _run(CustomLabelsDataset(), factory, queries={"ExternalString": [{"Id": "101000000000009"}]})

        assert labels["101000000000009"].bad_reason_ids == (0,)

    def test_dependency_errors_flagged(self, factory):
        labels = _run(
            CustomLabelsDataset(),
            factory,
            queries={"ExternalString": [{"Id": "101000000000009"}]},
            dependency_errors=["101000000000009"],
        )

        assert labels["101000000000009"].dependencies.had_error is True
        assert labels["101000000000009"].bad_reason_ids == (3,)


class TestDocuments:
    def test_hard_coded_document_url(self, factory):
        documents = _run(
            DocumentsDataset(),
            factory,
            queries={
                "Document": [
                    {"Id": "015000000000001AAA", "Name": "Logo", "Url": "https://acme.my.salesforce.com/logo.png",
                     "Description": "Header logo", "Folder": {"Id": "00l000000000001AAA", "Name": "Shared"},
                     "BodyLength": 2048, "ContentType": "image/png"},
                    {"Id": "015000000000002AAA", "Name": "Banner", "Url": "https://login.salesforce.com/banner.png"},
                ]
            },
        )

        logo = documents["015000000000001"]
        assert logo.is_hard_coded_url is False
        assert logo.folder_id == "00l000000000001"
        assert logo.folder_name == "Shared"
        assert logo.size == 2048
        assert logo.score == 0

        banner = documents["015000000000002"]
        assert banner.is_hard_coded_url is True
        assert banner.bad_reason_ids == (6, 50)
        assert banner.url == "/015000000000002"


class TestHomePageComponents:
    def test_body_is_scanned_without_comments(self, factory):
        components = _run(
            HomePageComponentsDataset(),
            factory,
            queries={
                "HomePageComponent": [
                    {"Id": "01a000000000001AAA", "Name": "Links",
                     "Body": "<a href=\"https://login.salesforce.com/001000000000001\">x</a>"
                             "<!-- '001000000000002' -->"},
                    {"Id": "01a000000000002AAA", "Name": "Empty", "Body": None},
                ]
            },
        )

        links = components["01a000000000001"]
        assert links.is_body_empty is False
        assert links.hard_coded_urls == ["login.salesforce.com"]
        assert 46 in links.bad_reason_ids

        empty = components["01a000000000002"]
        assert empty.is_body_empty is True
        assert empty.hard_coded_urls is None
        assert empty.score == 0


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


def _custom_field_rows():
    return [
        {"Id": "00N000000000001AAA", "EntityDefinition": {"QualifiedApiName": "Account", "KeyPrefix": "001"}},
        {"Id": "00N000000000002AAA", "EntityDefinition": {"QualifiedApiName": "Invoice__c", "KeyPrefix": "a01"}},
        {"Id": "00N000000000003AAA", "EntityDefinition": {"QualifiedApiName": "Invoice__hd", "KeyPrefix": "a02"}},
    ]


def _custom_field_metadata():
    return [
        {"Id": "00N000000000001AAA", "DeveloperName": "Rating", "Description": "Customer rating",
         "Metadata": {"label": "Rating", "type": "Text"}},
        {"Id": "00N000000000002AAA", "DeveloperName": "Link", "Description": "Portal link",
         "Metadata": {"label": "Link", "type": "Text",
                      "formula": "HYPERLINK('https://acme.lightning.force.com/001000000000001', 'go')"}},
        {"Id": "00N000000000003AAA", "DeveloperName": "Trend"},
    ]


class TestCustomFields:
    def test_excluded_objects_skipped(self, factory):
        fields = _run(
            CustomFieldsDataset(),
            factory,
            queries={"CustomField": _custom_field_rows()},
            metadata={"CustomField": _custom_field_metadata()},
        )

        assert sorted(fields) == ["00N000000000001", "00N000000000002"]
        assert all(isinstance(f, Field) for f in fields.values())

    def test_formula_scanned_for_hard_coded_values(self, factory):
        fields = _run(
            CustomFieldsDataset(),
            factory,
            queries={"CustomField": _custom_field_rows()},
            metadata={"CustomField": _custom_field_metadata()},
        )

        link = fields["00N000000000002"]
        assert link.object_id == "Invoice__c"
        assert link.hard_coded_urls == ["acme.lightning.force.com"]
        assert 46 in link.bad_reason_ids

    def test_restricted_to_one_object(self, factory):
        fields = _run(
            CustomFieldsDataset(),
            factory,
            {"object": "Account"},
            queries={"CustomField": _custom_field_rows()},
            metadata={"CustomField": _custom_field_metadata()},
        )

        assert list(fields) == ["00N000000000001"]


class TestObject:
    def test_unknown_object_is_none(self, factory):
        assert _run(ObjectDataset(), factory, {"object": "Nope__c"}) is None

    def test_object_types_are_static(self, factory):
        types = _run(ObjectTypesDataset(), factory)

        assert "CustomObject" in types
        assert types["CustomObject"].label


# ---------------------------------------------------------------------------
# Security
# ---------------------------------------------------------------------------


class TestUserRoles:
    ROWS = [
        {"Id": "00E000000000001", "Name": "CEO", "ParentRoleId": None, "PortalType": "None",
         "Users": {"records": [{"Id": "005000000000001", "IsActive": True}]}},
        {"Id": "00E000000000002", "Name": "VP", "ParentRoleId": "00E000000000001", "PortalType": "None",
         "Users": {"records": [{"Id": "005000000000002", "IsActive": False}]}},
        {"Id": "00E000000000003", "Name": "Rep", "ParentRoleId": "00E000000000002", "PortalType": "None"},
        {"Id": "00E000000000004", "Name": "Orphan", "ParentRoleId": "00E000000000099", "PortalType": "None"},
    ]

    def test_levels(self, factory):
        roles = _run(UserRolesDataset(), factory, queries={"UserRole": self.ROWS})

        assert [roles[f"00E00000000000{i}"].level for i in (1, 2, 3)] == [0, 1, 2]

    def test_orphan_has_no_level(self, factory):
        roles = _run(UserRolesDataset(), factory, queries={"UserRole": self.ROWS})

        assert roles["00E000000000004"].level is None
        assert roles["00E000000000004"].has_parent is True

    def test_members(self, factory):
        roles = _run(UserRolesDataset(), factory, queries={"UserRole": self.ROWS})
        ceo, vp = roles["00E000000000001"], roles["00E000000000002"]

        assert ceo.active_member_ids == ["005000000000001"]
        assert ceo.score == 0
        assert vp.inactive_members_count == 1
        assert vp.bad_reason_ids == (19,)

    def test_deep_hierarchy_is_bad(self, factory):
        rows = [{"Id": "00E000000000000", "Name": "L0", "PortalType": "None"}]
        for level in range(1, 8):
            rows.append(
                {"Id": f"00E00000000000{level}", "Name": f"L{level}",
                 "ParentRoleId": f"00E00000000000{level - 1}", "PortalType": "None"}
            )
        roles = _run(UserRolesDataset(), factory, queries={"UserRole": rows})

        assert roles["00E000000000007"].level == 7
        assert 45 in roles["00E000000000007"].bad_reason_ids
        assert 45 not in roles["00E000000000006"].bad_reason_ids


class TestPasswordPolicies:
    def test_numbers_parsed_and_scored(self, factory):
        policies = _run(
            ProfilePasswordPoliciesDataset(),
            factory,
            metadata={
                "ProfilePasswordPolicy": [
                    {"profile": "Admin", "passwordExpiration": "0", "passwordHistory": "3",
                     "minimumPasswordLength": "8", "passwordComplexity": "3", "maxLoginAttempts": "5",
                     "lockoutInterval": "15", "passwordQuestion": "0"},
                    {"profile": None, "passwordExpiration": "0"},
                ]
            },
        )

        assert list(policies) == ["Admin"]
        policy = policies["Admin"]
        assert policy.password_expiration == 0
        assert policy.password_question is False
        assert policy.bad_reason_ids == (26,)

    def test_missing_numbers_read_as_none(self, factory):
        policies = _run(
            ProfilePasswordPoliciesDataset(),
            factory,
            metadata={"ProfilePasswordPolicy": [{"profile": "Standard", "lockoutInterval": ""}]},
        )

        assert policies["Standard"].lockout_interval is None
        assert 31 in policies["Standard"].bad_reason_ids


class TestProfileRestrictions:
    def test_ip_ranges_and_login_hours(self, factory):
        restrictions = _run(
            ProfileRestrictionsDataset(),
            factory,
            queries={"Profile": [{"Id": "00e000000000001AAA"}]},
            metadata={
                "Profile": [
                    {
                        "Id": "00e000000000001AAA",
                        "Metadata": {
                            "loginHours": {"mondayStart": "480", "mondayEnd": "1080"},
                            "loginIpRanges": [{"startAddress": "10.0.0.0", "endAddress": "10.0.0.255"}],
                        },
                    }
                ]
            },
        )

        restriction = restrictions["00e000000000001"]
        assert isinstance(restriction, ProfileRestrictions)
        assert len(restriction.login_hours) == 7
        monday = restriction.login_hours[0]
        assert (monday.day, monday.from_time, monday.to_time, monday.difference) == ("monday", "08:00", "18:00", 600)
        assert restriction.login_hours[1].difference == 0
        assert restriction.ip_ranges[0].difference == 256
        assert restriction.ip_ranges[0].description == "(empty)"
        assert restriction.score == 0

    def test_ip_to_number(self):
        assert ip_to_number("0.0.0.1") == 1
        assert ip_to_number("0.0.1.0") == 255
        assert ip_to_number(None) == 0


class TestObjectPermissions:
    def test_profile_permissions_keyed_by_profile(self, factory):
        permissions = _run(
            ObjectPermissionsDataset(),
            factory,
            queries={
                "ObjectPermissions": [
                    {"ParentId": "0PS000000000001", "Parent": {"IsOwnedByProfile": True, "ProfileId": "00e000000000001"},
                     "SobjectType": "Account", "PermissionsRead": True},
                    {"ParentId": "0PS000000000002", "Parent": {"IsOwnedByProfile": False},
                     "SobjectType": "Account", "PermissionsRead": True, "PermissionsEdit": True},
                    {"ParentId": "0PS000000000003", "Parent": None, "SobjectType": "Account"},
                ]
            },
        )

        assert sorted(permissions) == ["00e000000000001_Account", "0PS000000000002_Account"]


class TestFieldPermissions:
    def test_rows_without_permission_set_parent_are_skipped(self, factory):
        permissions = _run(
            FieldPermissionsDataset(),
            factory,
            {"object": "Account"},
            queries={
                "FieldPermissions": [
                    {"Field": "Account.Industry", "ParentId": "0PS000000000001",
                     "Parent": {"IsOwnedByProfile": True, "ProfileId": "00e000000000001AAA"},
                     "PermissionsRead": True, "PermissionsEdit": False},
                    {"Field": "Account.Rating", "ParentId": "0PS000000000002", "Parent": {"IsOwnedByProfile": False},
                     "PermissionsRead": True, "PermissionsEdit": True},
                    {"Field": "Account.Rating", "ParentId": "00e000000000009", "Parent": {"IsOwnedByProfile": False}},
                    {"Field": "Account.Rating", "ParentId": "0PS000000000003", "Parent": None},
                    {"Field": None, "ParentId": "0PS000000000004", "Parent": {"IsOwnedByProfile": False}},
                ]
            },
        )

        assert sorted(permissions) == ["Account.Industry-00e000000000001", "Account.Rating-0PS000000000002"]
        industry = permissions["Account.Industry-00e000000000001"]
        assert industry.field_api_name == "Industry"
        assert industry.is_read is True
        assert industry.is_edit is False


class TestAppPermissions:
    def _menu(self):
        return [
            {"ApplicationId": "02u000000000001AAA", "Name": "Sales", "Label": "Sales", "NamespacePrefix": None,
             "IsAccessible": True, "IsVisible": False},
        ]

    def test_applications_from_the_menu(self, factory):
        applications = _run(ApplicationsDataset(), factory, queries={"AppMenuItem": self._menu()})

        assert applications["02u000000000001"].label == "Sales"
        assert applications["02u000000000001"].package == ""

    def test_only_apps_in_the_menu_are_kept(self, factory):
        permissions = _run(
            AppPermissionsDataset(),
            factory,
            queries={
                "AppMenuItem": self._menu(),
                "SetupEntityAccess": [
                    {"SetupEntityId": "02u000000000001AAA", "ParentId": "0PS000000000001",
                     "Parent": {"IsOwnedByProfile": True, "ProfileId": "00e000000000001"}},
                    {"SetupEntityId": "02u000000000009AAA", "ParentId": "0PS000000000002",
                     "Parent": {"IsOwnedByProfile": False}},
                ],
            },
        )

        assert list(permissions) == ["02u000000000001-00e000000000001"]
        permission = permissions["02u000000000001-00e000000000001"]
        assert permission.is_accessible is True
        assert permission.is_visible is False


class TestUsers:
    def test_assignments_attached(self, factory):
        users = _run(
            InternalActiveUsersDataset(),
            factory,
            queries={
                "User": [{"Id": "005000000000001AAA", "Name": "Ada", "ProfileId": "00e000000000001AAA",
                          "LastLoginDate": "2024-01-01", "UserPreferencesLightningExperiencePreferred": True}],
                "PermissionSetAssignment": [
                    {"AssigneeId": "005000000000001", "PermissionSetId": "0PS000000000001"},
                    {"AssigneeId": "005000000000099", "PermissionSetId": "0PS000000000002"},
                ],
            },
        )

        ada = users["005000000000001"]
        assert ada.profile_id == "00e000000000001"
        assert ada.permission_set_ids == ["0PS000000000001"]
        assert ada.score == 0


class TestGroups:
    def test_group_kinds_and_members(self, factory):
        groups = _run(
            GroupsDataset(),
            factory,
            queries={
                "Group": [
                    {"Id": "00G000000000001", "Type": "Regular", "Name": "Sales", "DeveloperName": "Sales",
                     "GroupMembers": {"records": [{"UserOrGroupId": "005000000000001"},
                                                  {"UserOrGroupId": "00G000000000002"}]}},
                    {"Id": "00G000000000002", "Type": "Queue", "Name": "Support"},
                    {"Id": "00G000000000003", "Type": "RoleAndSubordinates", "RelatedId": "00E000000000001",
                     "Related": {"Name": "CEO"}},
                ]
            },
        )

        sales, support, role = (groups[f"00G00000000000{i}"] for i in (1, 2, 3))
        assert isinstance(sales, Group)
        assert sales.is_public_group is True
        assert sales.direct_user_ids == ["005000000000001"]
        assert sales.direct_group_ids == ["00G000000000002"]
        assert support.is_queue is True
        assert support.bad_reason_ids == (17,)
        assert role.name == "CEO"
        assert role.include_subordinates is True


class TestCollaborationGroups:
    def test_information_body_scanned(self, factory):
        groups = _run(
            CollaborationGroupsDataset(),
            factory,
            queries={
                "CollaborationGroup": [
                    {"Id": "0F9000000000001AAA", "Name": "All Acme", "Description": "Everyone",
                     "InformationBody": "<p>See https://acme.lightning.force.com/home</p><!-- https://login.salesforce.com -->"},
                    {"Id": "0F9000000000002AAA", "Name": "Quiet", "Description": "Nothing here"},
                ]
            },
        )

        assert groups["0F9000000000001"].hard_coded_urls == ["acme.lightning.force.com"]
        assert 46 in groups["0F9000000000001"].bad_reason_ids
        assert groups["0F9000000000002"].score == 0

    def test_orgs_without_chatter_give_no_groups(self, factory):
        groups = _run(CollaborationGroupsDataset(), factory, strict=True)

        assert groups == {}


# ---------------------------------------------------------------------------
# Org
# ---------------------------------------------------------------------------


class TestOrganization:
    @pytest.mark.parametrize(
        "row,expected",
        [
            ({"OrganizationType": "Developer Edition"}, "Developer Edition"),
            ({"IsSandbox": True}, "Sandbox"),
            ({"TrialExpirationDate": "2030-01-01"}, "Trial"),
            ({"OrganizationType": "Enterprise Edition"}, "Production"),
        ],
    )
    def test_organization_type(self, row, expected):
        assert organization_type(row) == expected

    def test_single_record(self, factory):
        organization = _run(
            OrganizationDataset(),
            factory,
            queries={"Organization": [{"Id": "00D000000000001AAA", "Name": "Acme", "IsSandbox": True}]},
        )

        assert isinstance(organization, Organization)
        assert organization.id == "00D000000000001"
        assert organization.is_sandbox is True
        assert organization.is_production is False

    def test_no_organization_row(self, factory):
        with pytest.raises(DataError):
            _run(OrganizationDataset(), factory)

    def test_packages_include_local_namespace(self, factory):
        packages = _run(
            PackagesDataset(),
            factory,
            queries={
                "InstalledSubscriberPackage": [
                    {"Id": "0A3000000000001", "SubscriberPackage": {"Name": "Tools", "NamespacePrefix": "tls"}}
                ],
                "OrganizationNamespace": [{"NamespacePrefix": "acme"}],
            },
        )

        assert packages["0A3000000000001"].namespace == "tls"
        assert packages["acme"].type == "Local"
