"""Tests for the Org Check exception hierarchy."""

import pytest

from orgcheck.exceptions import (
    ConfigFileError,
    ConfigurationError,
    DataError,
    DatasetError,
    EntityNotFoundError,
    InvalidConfigError,
    MissingDatasetError,
    OrgCheckError,
    RecipeError,
    RuleRegistrationError,
    ScoringError,
    TransportError,
    UnknownAliasError,
)


class TestHierarchy:
    """Every error is catchable as OrgCheckError."""

    @pytest.mark.parametrize(
        "error,parent",
        [
            (InvalidConfigError("k", 1, "bad"), ConfigurationError),
            (ConfigFileError(__file__, "unreadable"), ConfigurationError),
            (RuleRegistrationError("twice"), ConfigurationError),
            (UnknownAliasError("recipe", "nope"), ConfigurationError),
            (TransportError("down"), DataError),
            (DatasetError("flows", ValueError("x")), DataError),
            (MissingDatasetError("flows", "flows"), RecipeError),
            (EntityNotFoundError("Object", "Nope__c"), DataError),
            (ScoringError("Workflow", "not initialized"), DataError),
        ],
    )
    def test_parents(self, error, parent):
        assert isinstance(error, parent)
        assert isinstance(error, OrgCheckError)


class TestMessages:
    """Messages carry their details."""

    def test_plain_message(self):
        assert str(OrgCheckError("boom")) == "boom"

    def test_details_appended(self):
        error = UnknownAliasError("dataset", "nope")

        assert str(error) == "Unknown dataset alias: nope (kind=dataset, alias=nope)"

    def test_dataset_error_keeps_cause(self):
        cause = TransportError("timeout", "SELECT Id FROM Group")
        error = DatasetError("groups", cause)

        assert error.cause is cause
        assert error.details["cause"].startswith("TransportError: Transport failure: timeout")

    def test_transport_error_query_is_optional(self):
        assert "query" not in TransportError("down").details
        assert TransportError("down", "SELECT 1").details["query"] == "SELECT 1"

    def test_missing_dataset_names_both_aliases(self):
        error = MissingDatasetError("object", "object-types")

        assert error.alias == "object"
        assert error.dataset_alias == "object-types"
        assert "object-types" in str(error)

    def test_rule_id_recorded(self):
        assert RuleRegistrationError("duplicate", rule_id=3).details["rule_id"] == "3"
