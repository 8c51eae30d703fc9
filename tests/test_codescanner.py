"""Tests for core/codescanner.py - regex heuristics over sources."""

import pytest

from orgcheck.core import codescanner


class TestComments:
    def test_code_comments_removed(self):
        source = "a = 1; // trailing\n/* block\n comment */b = 2;"

        cleaned = codescanner.remove_comments_from_code(source)

        assert "trailing" not in cleaned
        assert "block" not in cleaned
        assert "b = 2;" in cleaned

    def test_xml_comments_removed(self):
        cleaned = codescanner.remove_comments_from_xml("<a><!-- hidden --><b/></a>")

        assert cleaned == "<a> <b/></a>"

    @pytest.mark.parametrize("empty", [None, ""])
    def test_empty_source(self, empty):
        assert codescanner.remove_comments_from_code(empty) == ""
        assert codescanner.remove_comments_from_xml(empty) == ""


class TestApexShape:
    def test_interface(self):
        assert codescanner.is_interface("public interface Shape extends Base {")
        assert not codescanner.is_interface("public class Shape {")

    def test_enum(self):
        assert codescanner.is_enum("global enum Color { RED }")
        assert not codescanner.is_enum(None)

    def test_see_all_data(self):
        assert codescanner.is_test_see_all_data("@IsTest(SeeAllData=true) class T {}")
        assert not codescanner.is_test_see_all_data("@IsTest class T {}")

    def test_count_asserts(self):
        source = "System.assert(true); System.assertEquals(1, 1); Assert.areEqual(1, 1); System.debug(1);"

        assert codescanner.count_asserts(source) == 3

    def test_soql_and_dml(self):
        assert codescanner.has_soql("List<Account> a = [ SELECT Id FROM Account];")
        assert not codescanner.has_soql("String s = 'select';")
        assert codescanner.has_dml("insert accounts;")
        assert not codescanner.has_dml("Integer inserted = 0;")


class TestHardCoded:
    def test_salesforce_urls(self):
        source = (
            "go('https://acme.lightning.force.com/x'); "
            "go('https://login.salesforce.com'); "
            "go('https://acme.my.salesforce.com'); "
            "go('https://example.com')"
        )

        assert codescanner.find_hard_coded_urls(source) == [
            "acme.lightning.force.com",
            "login.salesforce.com",
        ]

    def test_ids_between_delimiters(self):
        source = "Id a = '001000000000001'; Id b = \"001000000000002AAA\"; String c = 'hello';"

        assert codescanner.find_hard_coded_ids(source) == ["001000000000001", "001000000000002AAA"]

    def test_ids_inside_words_ignored(self):
        assert codescanner.find_hard_coded_ids("x001000000000001x") == []

    @pytest.mark.parametrize("empty", [None, ""])
    def test_empty_source(self, empty):
        assert codescanner.find_hard_coded_urls(empty) == []
        assert codescanner.find_hard_coded_ids(empty) == []
