"""Tests for config.py - defaults, files, environment and overrides."""

import os

import pytest

from orgcheck.config import OrgCheckConfig, load_config
from orgcheck.exceptions import ConfigFileError, InvalidConfigError


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """No user or project config file, no ORGCHECK_* variable."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    (tmp_path / "home").mkdir()
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    for name in list(os.environ):
        if name.startswith("ORGCHECK_"):
            monkeypatch.delenv(name)
    return project


class TestDefaults:
    def test_defaults(self):
        config = load_config()

        assert config.cache_enabled is True
        assert config.cache_ttl_hours == 24
        assert config.cache_ttl_seconds == 86400
        assert config.api_version is None
        assert config.dependency_error_ids == frozenset()
        assert config.verbosity == "normal"

    def test_frozen(self):
        config = OrgCheckConfig()

        with pytest.raises(AttributeError):
            config.cache_ttl_hours = 1


class TestValidation:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"cache_ttl_hours": -1},
            {"api_version": 0},
            {"old_api_version_years": 0},
            {"verbosity": "loud"},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(InvalidConfigError):
            OrgCheckConfig(**kwargs)

    def test_unknown_key(self):
        with pytest.raises(InvalidConfigError) as excinfo:
            load_config(colour="blue")

        assert excinfo.value.details["key"] == "colour"

    def test_error_ids_become_a_frozenset(self):
        config = OrgCheckConfig(dependency_error_ids=["a", "b", "a"])

        assert config.dependency_error_ids == frozenset({"a", "b"})


class TestSources:
    def test_project_file(self, isolated):
        (isolated / "orgcheck.toml").write_text("[orgcheck]\ncache_ttl_hours = 6\n")

        assert load_config().cache_ttl_hours == 6

    def test_explicit_file_wins_over_project_file(self, isolated, tmp_path):
        (isolated / "orgcheck.toml").write_text("cache_ttl_hours = 6\n")
        explicit = tmp_path / "explicit.toml"
        explicit.write_text('cache_ttl_hours = 2\ndependency_error_ids = ["01p000000000001"]\n')

        config = load_config(explicit)

        assert config.cache_ttl_hours == 2
        assert config.dependency_error_ids == frozenset({"01p000000000001"})

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigFileError):
            load_config(tmp_path / "nope.toml")

    def test_malformed_file(self, tmp_path):
        broken = tmp_path / "broken.toml"
        broken.write_text("cache_ttl_hours = = 3\n")

        with pytest.raises(ConfigFileError):
            load_config(broken)

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("ORGCHECK_CACHE_ENABLED", "off")
        monkeypatch.setenv("ORGCHECK_API_VERSION", "59")
        monkeypatch.setenv("ORGCHECK_DEPENDENCY_ERROR_IDS", "a, b,")
        monkeypatch.setenv("ORGCHECK_FIXTURES_DIR", "/tmp/rows")

        config = load_config()

        assert config.cache_enabled is False
        assert config.api_version == 59
        assert config.dependency_error_ids == frozenset({"a", "b"})
        assert config.fixtures_dir == "/tmp/rows"

    def test_bad_environment_value(self, monkeypatch):
        monkeypatch.setenv("ORGCHECK_CACHE_TTL_HOURS", "soon")

        with pytest.raises(InvalidConfigError):
            load_config()

    def test_overrides_win_over_environment(self, monkeypatch):
        monkeypatch.setenv("ORGCHECK_CACHE_TTL_HOURS", "5")

        assert load_config(cache_ttl_hours=1).cache_ttl_hours == 1

    def test_none_overrides_are_ignored(self, monkeypatch):
        monkeypatch.setenv("ORGCHECK_CACHE_TTL_HOURS", "5")

        assert load_config(cache_ttl_hours=None).cache_ttl_hours == 5

    @pytest.mark.parametrize(
        "flags,expected",
        [
            ({"verbose": True}, "verbose"),
            ({"quiet": True}, "quiet"),
            ({"verbose": False, "quiet": False}, "normal"),
        ],
    )
    def test_verbosity_flags(self, flags, expected):
        assert load_config(**flags).verbosity == expected
