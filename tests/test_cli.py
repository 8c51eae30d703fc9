"""Tests for the orgcheck command line."""

import json

import pytest
from typer.testing import CliRunner

from orgcheck import __version__
from orgcheck.cli import app
from orgcheck.cli._common import parse_params, to_jsonable

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Run every command from an empty directory with a wide terminal."""
    home = tmp_path / "home"
    home.mkdir()
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("COLUMNS", "200")
    monkeypatch.chdir(work)
    return work


@pytest.fixture
def org(tmp_path):
    """A fixture org with two custom labels, one of them used by a class."""
    root = tmp_path / "org"
    (root / "queries").mkdir(parents=True)
    (root / "queries" / "ExternalString.json").write_text(
        json.dumps(
            [
                {"Id": "101000000000001AAA", "Name": "Greeting", "Value": "Hello"},
                {"Id": "101000000000002AAA", "Name": "Farewell", "Value": "Bye"},
            ]
        )
    )
    (root / "dependencies.json").write_text(
        json.dumps(
            {
                "records": [
                    {"id": "01p000000000001", "name": "Greeter", "type": "ApexClass", "url": "/01p",
                     "refId": "101000000000001", "refName": "Greeting", "refType": "CustomLabel", "refUrl": "/101"}
                ]
            }
        )
    )
    return root


class TestVersion:
    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestRun:
    def test_json_output(self, org):
        result = runner.invoke(
            app, ["run", "custom-labels", "--fixtures", str(org), "--format", "json", "--no-cache", "-q"]
        )

        assert result.exit_code == 0, result.output
        labels = {label["name"]: label for label in json.loads(result.stdout)}
        assert labels["Greeting"]["score"] == 0
        assert labels["Farewell"]["bad_reason_ids"] == [0]

    def test_table_output(self, org):
        result = runner.invoke(app, ["run", "custom-labels", "--fixtures", str(org), "--no-cache", "-q"])

        assert result.exit_code == 0, result.output
        assert "Greeting" in result.output
        assert "Farewell" in result.output

    def test_collection(self, org):
        result = runner.invoke(app, ["run", "global-view", "--fixtures", str(org), "--no-cache", "-q"])

        assert result.exit_code == 0, result.output
        assert "custom-labels" in result.output

    def test_refresh_with_disk_cache(self, org, isolated):
        for _ in range(2):
            result = runner.invoke(app, ["run", "custom-labels", "--fixtures", str(org), "--refresh", "-q"])
            assert result.exit_code == 0, result.output

        assert (isolated / ".orgcheck-cache").is_dir()

    def test_unknown_recipe(self, org):
        result = runner.invoke(app, ["run", "nope", "--fixtures", str(org), "--no-cache", "-q"])

        assert result.exit_code == 1
        assert "Unknown recipe alias" in result.output

    def test_missing_object_parameter(self, org):
        result = runner.invoke(app, ["run", "object", "--fixtures", str(org), "--no-cache", "-q"])

        assert result.exit_code == 1
        assert "object" in result.output

    def test_no_org(self):
        result = runner.invoke(app, ["run", "custom-labels", "--no-cache", "-q"])

        assert result.exit_code == 2

    def test_bad_format(self, org):
        result = runner.invoke(app, ["run", "custom-labels", "--fixtures", str(org), "--format", "xml"])

        assert result.exit_code != 0


class TestCatalogCommands:
    def test_recipes(self):
        result = runner.invoke(app, ["recipes"])

        assert result.exit_code == 0
        assert "lightning-aura-components" in result.output
        assert "hardcoded-urls-view" in result.output

    def test_rules_for_one_type(self):
        result = runner.invoke(app, ["rules", "--type", "UserRole"])

        assert result.exit_code == 0
        assert "Role with no active users" in result.output
        assert "Workflow" not in result.output

    def test_explain(self):
        result = runner.invoke(app, ["explain", "19"])

        assert result.exit_code == 0
        assert "active_members_count" in result.output

    def test_explain_unknown_rule(self):
        result = runner.invoke(app, ["explain", "999"])

        assert result.exit_code == 1


class TestCacheCommands:
    def test_clear_when_disabled(self, monkeypatch):
        monkeypatch.setenv("ORGCHECK_CACHE_ENABLED", "false")

        result = runner.invoke(app, ["cache-clear"])

        assert result.exit_code == 0
        assert "disabled" in result.output

    def test_info_after_run(self, org):
        runner.invoke(app, ["run", "custom-labels", "--fixtures", str(org), "-q"])

        result = runner.invoke(app, ["cache-info"])

        assert result.exit_code == 0
        assert "custom-labels" in result.output

    def test_clear(self, org):
        runner.invoke(app, ["run", "custom-labels", "--fixtures", str(org), "-q"])

        result = runner.invoke(app, ["cache-clear"])

        assert result.exit_code == 0
        assert "Entries: 0" in runner.invoke(app, ["cache-info"]).output


class TestHelpers:
    def test_parse_params(self):
        assert parse_params(["namespace=acme", "object = Account "]) == {"namespace": "acme", "object": "Account"}

    def test_parse_params_rejects_bare_words(self):
        import typer

        with pytest.raises(typer.BadParameter):
            parse_params(["namespace"])

    def test_to_jsonable_nested(self):
        class Matrix:
            def to_dict(self):
                return {"rows": [(1, 2)]}

        assert to_jsonable({"m": Matrix(), "t": (1,)}) == {"m": {"rows": [[1, 2]]}, "t": [1]}
