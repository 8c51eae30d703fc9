"""Tests for core/rules.py and core/catalog.py - the score rule registry."""

import datetime

import pytest

from orgcheck.core.catalog import build_score_rules, default_registry
from orgcheck.core.records import RecordType
from orgcheck.core.rules import (
    ScoreRule,
    ScoreRuleRegistry,
    is_empty,
    is_old_api_version,
    latest_api_version,
)
from orgcheck.exceptions import RuleRegistrationError


def _rule(id, kinds=(RecordType.WORKFLOW,)):
    return ScoreRule(
        id=id,
        description=f"rule {id}",
        formula=lambda d: False,
        error_message="",
        bad_field="id",
        applicable=frozenset(kinds),
    )


class TestCatalog:
    def test_ids_are_dense(self, registry):
        assert [rule.id for rule in registry] == list(range(len(registry)))
        assert len(registry) == 52

    def test_get_score_rule(self, registry):
        rule = registry.get_score_rule(45)

        assert rule.bad_field == "level"
        assert set(rule.explain()) == {"description", "error_message", "bad_field"}

    def test_unknown_rule_id(self, registry):
        with pytest.raises(KeyError):
            registry.get_score_rule(999)

    def test_rules_for_kind(self, registry):
        ids = [rule.id for rule in registry.rules_for(RecordType.USER_ROLE)]

        assert ids == [19, 45]

    def test_kind_without_rules(self, registry):
        assert registry.rules_for(RecordType.ORGANIZATION) == ()

    def test_api_version_threshold_follows_configuration(self):
        rules = build_score_rules(api_version=60, old_api_version_years=3)
        too_old = rules[4].formula

        class Stub:
            api_version = 51

        assert too_old(Stub()) is True
        Stub.api_version = 52
        assert too_old(Stub()) is False

    def test_as_matrix(self, registry):
        matrix = registry.as_matrix()

        assert len(matrix.row_header_ids) == 52
        assert matrix.row("45").data == {"Role": "true"}
        assert matrix.row_header_references["45"]["id"] == 45


class TestRegistryValidation:
    def test_duplicate_ids(self):
        with pytest.raises(RuleRegistrationError):
            ScoreRuleRegistry([_rule(0), _rule(0)])

    def test_non_dense_ids(self):
        with pytest.raises(RuleRegistrationError):
            ScoreRuleRegistry([_rule(0), _rule(2)])

    def test_negative_id(self):
        with pytest.raises(RuleRegistrationError):
            _rule(-1)

    def test_rule_without_kinds(self):
        with pytest.raises(RuleRegistrationError):
            _rule(0, kinds=())


class TestHelpers:
    @pytest.mark.parametrize(
        "value,expected",
        [(None, True), ("", True), ("   ", True), ([], True), ((), True),
         ("x", False), (0, False), (0.0, False), ([1], False)],
    )
    def test_is_empty(self, value, expected):
        assert is_empty(value) is expected

    @pytest.mark.parametrize(
        "day,expected",
        [
            (datetime.date(2022, 1, 15), 53),
            (datetime.date(2022, 6, 30), 54),
            (datetime.date(2022, 10, 1), 55),
            (datetime.date(2022, 12, 1), 56),
            (datetime.date(2024, 3, 1), 60),
        ],
    )
    def test_latest_api_version(self, day, expected):
        assert latest_api_version(day) == expected

    def test_is_old_api_version(self):
        assert is_old_api_version(60, 51, years=3) is True
        assert is_old_api_version(60, 52, years=3) is False
        assert is_old_api_version(60, None) is False

    def test_default_registry_builds(self):
        assert len(default_registry()) == 52
