"""Tests for api.py - the assembled Org Check facade."""

import pytest

from conftest import run
from orgcheck import OrgCheckAPI, OrgCheckConfig
from orgcheck.cache import MemoryStorage
from orgcheck.exceptions import UnknownAliasError
from orgcheck.transport import InMemoryTransport

ROLE_ROWS = [
    {"Id": "00E000000000001AAA", "Name": "CEO", "PortalType": "None",
     "Users": {"records": [{"Id": "005000000000001", "IsActive": True}]}},
    {"Id": "00E000000000002AAA", "Name": "VP", "ParentRoleId": "00E000000000001AAA", "PortalType": "None"},
]
USER_ROWS = [{"Id": "005000000000001AAA", "Name": "Ada", "ProfileId": "00e000000000001"}]


@pytest.fixture
def transport():
    return InMemoryTransport(queries={"UserRole": ROLE_ROWS, "User": USER_ROWS})


@pytest.fixture
def api(transport):
    config = OrgCheckConfig(cache_enabled=False, api_version=60)
    api = OrgCheckAPI(transport, storage=MemoryStorage(), config=config)
    yield api
    api.close()


class TestRecipes:
    """Running recipes end to end over an in-memory org."""

    def test_user_roles_are_linked(self, api):
        roles = {role.id: role for role in api.run_recipe_sync("user-roles")}

        assert roles["00E000000000002"].parent_ref is roles["00E000000000001"]
        assert roles["00E000000000001"].active_member_refs[0].name == "Ada"
        assert roles["00E000000000002"].bad_reason_ids == (19,)

    def test_async_entry_point(self, api):
        tree = run(api.run_recipe("role-tree"))

        assert [child.id for child in tree.children] == ["00E000000000001"]

    def test_second_run_is_served_from_cache(self, api, transport):
        api.run_recipe_sync("user-roles")
        api.run_recipe_sync("user-roles")

        assert len([c for c in transport.calls if c[0] == "query"]) == 2

    def test_clean_recipe_refetches(self, api, transport):
        api.run_recipe_sync("role-tree")
        api.clean_recipe("role-tree")
        api.run_recipe_sync("role-tree")

        assert len([c for c in transport.calls if c[0] == "query"]) == 2

    def test_unknown_recipe(self, api):
        with pytest.raises(UnknownAliasError):
            api.run_recipe_sync("nope")

    def test_aliases_include_collections(self, api):
        aliases = api.recipe_aliases()

        assert "global-view" in aliases
        assert "user-roles" in aliases


class TestRulesAndCache:
    """Rule lookups and cache housekeeping."""

    def test_get_score_rule(self, api):
        assert api.get_score_rule(19).bad_field == "active_members_count"

    def test_score_rules_matrix(self, api):
        assert len(api.score_rules_matrix().row_header_ids) == 52

    def test_cache_information_and_clear(self, api):
        api.run_recipe_sync("user-roles")

        names = {item.name for item in api.cache_information()}
        assert names == {"user-roles", "internal-active-users"}

        api.remove_all_from_cache()
        assert api.cache_information() == []

    def test_dependency_error_ids_from_config(self):
        transport = InMemoryTransport(queries={"ExternalString": [{"Id": "101000000000001"}]})
        config = OrgCheckConfig(cache_enabled=False, dependency_error_ids=frozenset({"101000000000001"}))
        api = OrgCheckAPI(transport, storage=MemoryStorage(), config=config)

        (label,) = api.run_recipe_sync("custom-labels")

        assert label.dependencies.had_error is True
