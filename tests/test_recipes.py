"""Tests for recipes - extract, transform and collection summaries."""

import logging

import pytest

from conftest import run
from orgcheck.data import (
    Application,
    AppPermission,
    FieldPermission,
    ObjectPermission,
    PermissionSet,
    Profile,
    UserRole,
    Workflow,
)
from orgcheck.datasets import Dataset, DatasetAliases, DatasetManager
from orgcheck.exceptions import (
    EntityNotFoundError,
    MissingDatasetError,
    RecipeError,
    UnknownAliasError,
)
from orgcheck.recipes import (
    DataCollectionStatistics,
    Recipe,
    RecipeAliases,
    RecipeCollection,
    RecipeManager,
    get_recipe_collections,
    get_recipes,
)
from orgcheck.recipes.schema import ObjectRecipe
from orgcheck.recipes.security import (
    AppPermissionsRecipe,
    FieldPermissionsRecipe,
    ObjectPermissionsRecipe,
    RoleTreeRecipe,
    crud,
)
from orgcheck.transport import InMemoryTransport

logger = logging.getLogger("orgcheck.test")


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class WorkflowsDataset(Dataset):
    """Three workflows: one clean, one inactive, one inactive without action."""

    alias = "fake-workflows"

    def __init__(self):
        self.runs = 0

    async def run(self, transport, factory, logger, parameters):
        self.runs += 1
        typed = factory.get_instance(Workflow)
        rows = [
            {"id": "W1", "description": "ok", "is_active": True, "has_action": True},
            {"id": "W2", "description": "ok", "is_active": False, "has_action": True},
            {"id": "W3", "description": "ok", "is_active": False, "has_action": False},
        ]
        return {row["id"]: typed.create_with_score(row) for row in rows}


class BrokenDataset(Dataset):
    alias = "fake-broken"

    async def run(self, transport, factory, logger, parameters):
        raise RuntimeError("remote call failed")


class ListRecipe(Recipe):
    def __init__(self, alias, dataset):
        self.alias = alias
        self.dataset = dataset

    def extract(self, parameters):
        return [self.dataset]

    def transform(self, data, logger, parameters):
        (records,) = self.require(data, self.dataset)
        return list(records.values())


class ScalarRecipe(ListRecipe):
    def transform(self, data, logger, parameters):
        return 42


class ForgetfulRecipe(ListRecipe):
    """Declares a dataset but reads another one."""

    def transform(self, data, logger, parameters):
        return self.require(data, "never-declared")


class WorkflowView(RecipeCollection):
    alias = "workflow-view"

    def __init__(self, aliases, rule_ids=None):
        self.aliases = aliases
        self.rule_ids = rule_ids

    def extract(self, parameters):
        return list(self.aliases)

    def filter_by_score_rule_ids(self, parameters):
        return self.rule_ids


@pytest.fixture
def workflows():
    return WorkflowsDataset()


@pytest.fixture
def manager(workflows, factory, cache, registry):
    datasets = DatasetManager(
        {"fake-workflows": workflows, "fake-broken": BrokenDataset()},
        InMemoryTransport(),
        factory,
        cache,
    )
    recipes = {
        "workflows": ListRecipe("workflows", "fake-workflows"),
        "broken": ListRecipe("broken", "fake-broken"),
        "scalar": ScalarRecipe("scalar", "fake-workflows"),
        "forgetful": ForgetfulRecipe("forgetful", "fake-workflows"),
    }
    collections = {
        "everything": WorkflowView(["workflows", "broken", "scalar"]),
        "no-action": WorkflowView(["workflows"], rule_ids=[22]),
        "dangling": WorkflowView(["workflows", "nope"]),
    }
    return RecipeManager(datasets, registry, recipes, collections)


# ---------------------------------------------------------------------------
# RecipeManager
# ---------------------------------------------------------------------------


class TestRecipeManager:
    def test_run_recipe(self, manager):
        records = run(manager.run("workflows"))

        assert [r.id for r in records] == ["W1", "W2", "W3"]

    def test_datasets_come_from_cache(self, manager, workflows):
        run(manager.run("workflows"))
        run(manager.run("workflows"))

        assert workflows.runs == 1

    def test_clean_recipe(self, manager, workflows):
        run(manager.run("workflows"))
        manager.clean("workflows")
        run(manager.run("workflows"))

        assert workflows.runs == 2

    def test_clean_collection(self, manager, workflows):
        run(manager.run("workflows"))
        manager.clean("no-action")
        run(manager.run("workflows"))

        assert workflows.runs == 2

    def test_unknown_alias(self, manager):
        with pytest.raises(UnknownAliasError):
            run(manager.run("nope"))
        with pytest.raises(UnknownAliasError):
            manager.clean("nope")

    def test_missing_dataset(self, manager):
        with pytest.raises(MissingDatasetError) as excinfo:
            run(manager.run("forgetful"))

        assert excinfo.value.dataset_alias == "never-declared"
        assert excinfo.value.alias == "forgetful"

    @pytest.mark.parametrize("alias", ["flows", "workflows", "custom-labels", "profiles"])
    def test_undefined_dataset_value_fails_fast(self, alias):
        recipe = get_recipes()[alias]
        data = {getattr(request, "alias", request): None for request in recipe.extract({})}

        with pytest.raises(MissingDatasetError) as excinfo:
            recipe.transform(data, logger, {})

        assert excinfo.value.alias == alias
        assert excinfo.value.dataset_alias in data

    def test_aliases(self, manager):
        assert manager.aliases() == sorted(
            ["workflows", "broken", "scalar", "forgetful", "everything", "no-action", "dangling"]
        )


class TestCollections:
    def test_summary_of_bad_records(self, manager):
        stats = run(manager.run("everything"))["workflows"]

        assert stats.had_error is False
        assert stats.count_all == 3
        assert stats.count_bad == 2
        assert stats.count_good == 1
        assert [r.id for r in stats.data] == ["W3", "W2"]
        assert [(c["rule_id"], c["count"]) for c in stats.count_bad_by_rule] == [(22, 1), (34, 2)]
        assert stats.count_bad_by_rule[0]["rule_name"]

    def test_failing_recipe_is_isolated(self, manager):
        stats = run(manager.run("everything"))

        assert stats["broken"].had_error is True
        assert "fake-broken" in stats["broken"].last_error_message
        assert stats["workflows"].had_error is False

    def test_non_list_result_is_an_error(self, manager):
        stats = run(manager.run("everything"))["scalar"]

        assert stats.had_error is True
        assert stats.count_all == 0

    def test_rule_filter(self, manager):
        stats = run(manager.run("no-action"))["workflows"]

        assert stats.count_bad == 1
        assert [r.id for r in stats.data] == ["W3"]
        assert [c["rule_id"] for c in stats.count_bad_by_rule] == [22]

    def test_unknown_member_recipe(self, manager):
        with pytest.raises(UnknownAliasError):
            run(manager.run("dangling"))

    def test_statistics_to_dict(self):
        stats = DataCollectionStatistics(count_all=4, count_bad=1)

        assert stats.to_dict()["count_good"] == 3
        assert "data" not in stats.to_dict()


# ---------------------------------------------------------------------------
# Security recipes
# ---------------------------------------------------------------------------


class TestObjectPermissions:
    @pytest.fixture
    def data(self, factory):
        profile = factory.get_instance(Profile).create({"id": "00e000000000001", "name": "Admin", "package": ""})
        permission_set = factory.get_instance(PermissionSet).create(
            {"id": "0PS000000000001", "name": "Sales", "package": "acme"}
        )
        typed = factory.get_instance(ObjectPermission)
        permissions = {
            "00e000000000001_Account": typed.create(
                {"parent_id": "00e000000000001", "object_type": "Account", "is_read": True, "is_edit": True}
            ),
            "0PS000000000001_Case": typed.create(
                {"parent_id": "0PS000000000001", "object_type": "Case", "is_create": True, "is_read": True,
                 "is_view_all": True}
            ),
            "0PS000000000099_Case": typed.create({"parent_id": "0PS000000000099", "object_type": "Case"}),
        }
        return {
            DatasetAliases.OBJECT_PERMISSIONS: permissions,
            DatasetAliases.PROFILES: {profile.id: profile},
            DatasetAliases.PERMISSION_SETS: {permission_set.id: permission_set},
        }

    def test_matrix(self, data):
        matrix = ObjectPermissionsRecipe().transform(data, logger, {})

        assert matrix.row_header_ids == ("00e000000000001", "0PS000000000001")
        assert matrix.column_header_ids == ("Account", "Case")
        assert matrix.row("00e000000000001").data == {"Account": "RU"}
        assert matrix.row("0PS000000000001").data == {"Case": "CRv"}
        assert matrix.row_header_references["0PS000000000001"].name == "Sales"

    def test_namespace_filter(self, data):
        matrix = ObjectPermissionsRecipe().transform(data, logger, {"namespace": "acme"})

        assert matrix.row_header_ids == ("0PS000000000001",)

    def test_crud_order(self, factory):
        permission = factory.get_instance(ObjectPermission).create(
            {"is_create": True, "is_read": True, "is_edit": True, "is_delete": True,
             "is_view_all": True, "is_modify_all": True}
        )

        assert crud(permission) == "CRUDvm"


class TestFieldPermissions:
    @pytest.fixture
    def data(self, factory):
        profile = factory.get_instance(Profile).create({"id": "00e000000000001", "name": "Admin", "package": ""})
        permission_set = factory.get_instance(PermissionSet).create(
            {"id": "0PS000000000001", "name": "Sales", "package": "acme"}
        )
        typed = factory.get_instance(FieldPermission)
        permissions = {
            "Account.Industry-00e000000000001": typed.create(
                {"parent_id": "00e000000000001", "field_api_name": "Industry", "is_read": True, "is_edit": True}
            ),
            "Account.Rating-0PS000000000001": typed.create(
                {"parent_id": "0PS000000000001", "field_api_name": "Rating", "is_read": True, "is_edit": False}
            ),
            "Account.Rating-0PS000000000099": typed.create(
                {"parent_id": "0PS000000000099", "field_api_name": "Rating", "is_read": True}
            ),
        }
        return {
            DatasetAliases.FIELD_PERMISSIONS: permissions,
            DatasetAliases.PROFILES: {profile.id: profile},
            DatasetAliases.PERMISSION_SETS: {permission_set.id: permission_set},
        }

    def test_object_parameter_required(self):
        with pytest.raises(RecipeError):
            FieldPermissionsRecipe().extract({})

    def test_cached_per_object(self):
        (request, *_) = FieldPermissionsRecipe().extract({"object": "Account"})

        assert request.cache_key == "field-permissions_Account"
        assert request.parameters["object"] == "Account"

    def test_matrix(self, data):
        matrix = FieldPermissionsRecipe().transform(data, logger, {"object": "Account"})

        assert matrix.row_header_ids == ("00e000000000001", "0PS000000000001")
        assert matrix.row("00e000000000001").data == {"Industry": "RU"}
        assert matrix.row("0PS000000000001").data == {"Rating": "R"}

    def test_namespace_filter(self, data):
        matrix = FieldPermissionsRecipe().transform(data, logger, {"object": "Account", "namespace": "acme"})

        assert matrix.row_header_ids == ("0PS000000000001",)


class TestAppPermissions:
    @pytest.fixture
    def data(self, factory):
        profile = factory.get_instance(Profile).create({"id": "00e000000000001", "name": "Admin", "package": ""})
        permission_set = factory.get_instance(PermissionSet).create(
            {"id": "0PS000000000001", "name": "Sales", "package": ""}
        )
        applications = {
            "02u000000000001": factory.get_instance(Application).create(
                {"id": "02u000000000001", "label": "Sales", "package": ""}
            ),
            "02u000000000002": factory.get_instance(Application).create(
                {"id": "02u000000000002", "label": "Billing", "package": "acme"}
            ),
        }
        typed = factory.get_instance(AppPermission)
        permissions = {
            "02u000000000001-00e000000000001": typed.create(
                {"parent_id": "00e000000000001", "app_id": "02u000000000001", "is_accessible": True, "is_visible": True}
            ),
            "02u000000000002-0PS000000000001": typed.create(
                {"parent_id": "0PS000000000001", "app_id": "02u000000000002", "is_accessible": True}
            ),
            "02u000000000009-0PS000000000001": typed.create(
                {"parent_id": "0PS000000000001", "app_id": "02u000000000009", "is_visible": True}
            ),
        }
        return {
            DatasetAliases.APPLICATIONS: applications,
            DatasetAliases.APP_PERMISSIONS: permissions,
            DatasetAliases.PROFILES: {profile.id: profile},
            DatasetAliases.PERMISSION_SETS: {permission_set.id: permission_set},
        }

    def test_matrix(self, data):
        matrix = AppPermissionsRecipe().transform(data, logger, {})

        assert matrix.row_header_ids == ("00e000000000001", "0PS000000000001")
        assert matrix.column_header_ids == ("02u000000000001", "02u000000000002")
        assert matrix.row("00e000000000001").data == {"02u000000000001": "AV"}
        assert matrix.row("0PS000000000001").data == {"02u000000000002": "A"}
        assert matrix.column_header_references["02u000000000002"].label == "Billing"

    def test_namespace_of_app_is_enough(self, data):
        matrix = AppPermissionsRecipe().transform(data, logger, {"namespace": "acme"})

        assert matrix.row_header_ids == ("0PS000000000001",)
        assert matrix.column_header_ids == ("02u000000000002",)


class TestRoleTree:
    def test_hierarchy_under_root(self, factory):
        typed = factory.get_instance(UserRole)
        roles = {
            r.id: r
            for r in (
                typed.create({"id": "CEO", "parent_id": None}),
                typed.create({"id": "VP", "parent_id": "CEO"}),
                typed.create({"id": "Orphan", "parent_id": "Gone"}),
            )
        }

        tree = RoleTreeRecipe().transform({DatasetAliases.USER_ROLES: roles}, logger, {})

        assert sorted(child.id for child in tree.children) == ["CEO", "Orphan"]
        ceo = next(child for child in tree.children if child.id == "CEO")
        assert [child.id for child in ceo.children] == ["VP"]
        assert ceo.children[0].record is roles["VP"]
        assert len(list(tree.walk())) == 4


# ---------------------------------------------------------------------------
# Schema recipes
# ---------------------------------------------------------------------------


class TestObjectRecipe:
    def test_object_parameter_required(self):
        with pytest.raises(RecipeError):
            ObjectRecipe().extract({})

    def test_per_object_cache_keys(self):
        requests = ObjectRecipe().extract({"object": "Account"})
        keys = [getattr(r, "cache_key", r) for r in requests]

        assert "object_Account" in keys
        assert "custom-fields_Account" in keys

    def test_unknown_object(self):
        data = {
            DatasetAliases.OBJECT: None,
            DatasetAliases.OBJECT_TYPES: {},
            DatasetAliases.APEX_TRIGGERS: {},
            DatasetAliases.LIGHTNING_PAGES: {},
            DatasetAliases.CUSTOM_FIELDS: {},
        }

        with pytest.raises(EntityNotFoundError) as excinfo:
            ObjectRecipe().transform(data, logger, {"object": "Nope__c"})

        assert excinfo.value.name == "Nope__c"

    def test_object_dataset_not_returned(self):
        data = {
            DatasetAliases.OBJECT_TYPES: {},
            DatasetAliases.APEX_TRIGGERS: {},
            DatasetAliases.LIGHTNING_PAGES: {},
            DatasetAliases.CUSTOM_FIELDS: {},
        }

        with pytest.raises(MissingDatasetError) as excinfo:
            ObjectRecipe().transform(data, logger, {"object": "Account"})

        assert excinfo.value.dataset_alias == DatasetAliases.OBJECT

    def test_other_undefined_dataset_is_missing(self):
        data = {
            DatasetAliases.OBJECT: None,
            DatasetAliases.OBJECT_TYPES: None,
            DatasetAliases.APEX_TRIGGERS: {},
            DatasetAliases.LIGHTNING_PAGES: {},
            DatasetAliases.CUSTOM_FIELDS: {},
        }

        with pytest.raises(MissingDatasetError) as excinfo:
            ObjectRecipe().transform(data, logger, {"object": "Account"})

        assert excinfo.value.dataset_alias == DatasetAliases.OBJECT_TYPES


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:
    def test_recipes_registered_by_alias(self):
        recipes = get_recipes()

        assert all(alias == recipe.alias for alias, recipe in recipes.items())
        assert RecipeAliases.ROLE_TREE in recipes

    def test_collections_only_name_known_recipes(self):
        recipes = get_recipes()

        for collection in get_recipe_collections().values():
            assert set(collection.extract({})) <= set(recipes)

    @pytest.mark.parametrize("collection", [RecipeAliases.GLOBAL_VIEW, RecipeAliases.HARDCODED_URLS_VIEW])
    def test_scanned_classic_items_are_collected(self, collection):
        members = get_recipe_collections()[collection].extract({})

        assert RecipeAliases.DOCUMENTS in members
        assert RecipeAliases.COLLABORATION_GROUPS in members
        assert RecipeAliases.HOME_PAGE_COMPONENTS in members

    def test_recipe_datasets_are_registered(self):
        from orgcheck.datasets import get_datasets

        datasets = get_datasets()
        for recipe in get_recipes().values():
            for request in recipe.extract({"object": "Account"}):
                assert getattr(request, "alias", request) in datasets
