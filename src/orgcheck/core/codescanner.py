"""Regex heuristics over Apex, formula and markup sources."""

from __future__ import annotations

import re
from typing import Optional

_IS_INTERFACE = re.compile(r"(?:public|global)\s+(?:interface)\s+\w+(\s+(?:extends)\s+\w+)?\s*\{", re.I)
_IS_ENUM = re.compile(r"(?:public|global)\s+(?:enum)\s+\w+\s*\{", re.I)
_IS_TEST_SEE_ALL_DATA = re.compile(r"@IsTest\s*\(.*SeeAllData=true.*\)", re.I)
_ASSERTS = re.compile(r"(System.assert(Equals|NotEquals|)\s*\(|Assert\.[a-zA-Z]*\s*\()", re.I)
_HAS_SOQL = re.compile(r"\[\s*(?:SELECT|FIND)")
_HAS_DML = re.compile(r"(?:insert|update|delete)\s*(?:\s\w+|\(|\[)")
_CODE_COMMENTS_AND_NEWLINES = re.compile(r"(/\*[\s\S]*?\*/|//.*\n|//[^\n]*|\n)", re.I)
_XML_COMMENTS_AND_NEWLINES = re.compile(r"(<!--[\s\S]*?-->|\n)", re.I)
_DOMAINS = re.compile(r"(?:[A-Za-z0-9-]{1,63}\.)+[A-Za-z]{2,6}", re.I)
# Whole match includes the surrounding delimiters; the group is the id
_IDS = re.compile(r"(?=[,\"'\s]([a-zA-Z0-9]{5}0[a-zA-Z0-9]{9}(?:[a-zA-Z0-9]{3})?)[,\"'\s])")

SALESFORCE_DOMAINS = ("salesforce.com", ".force.")
SALESFORCE_MY_DOMAIN = ".my.salesforce.com"


def remove_comments_from_code(source: Optional[str]) -> str:
    return _CODE_COMMENTS_AND_NEWLINES.sub(" ", source) if source else ""


def remove_comments_from_xml(source: Optional[str]) -> str:
    return _XML_COMMENTS_AND_NEWLINES.sub(" ", source) if source else ""


def is_interface(source: Optional[str]) -> bool:
    return bool(source) and _IS_INTERFACE.search(source) is not None


def is_enum(source: Optional[str]) -> bool:
    return bool(source) and _IS_ENUM.search(source) is not None


def is_test_see_all_data(source: Optional[str]) -> bool:
    return bool(source) and _IS_TEST_SEE_ALL_DATA.search(source) is not None


def count_asserts(source: Optional[str]) -> int:
    return sum(1 for _ in _ASSERTS.finditer(source)) if source else 0


def has_soql(source: Optional[str]) -> bool:
    return bool(source) and _HAS_SOQL.search(source) is not None


def has_dml(source: Optional[str]) -> bool:
    return bool(source) and _HAS_DML.search(source) is not None


def find_hard_coded_urls(source: Optional[str]) -> list[str]:
    """Salesforce domains found in the source, sorted and unique, My Domain excluded."""
    if not source:
        return []
    domains = {
        m.group(0)
        for m in _DOMAINS.finditer(source)
        if any(sf in m.group(0) for sf in SALESFORCE_DOMAINS)
    }
    return sorted(d for d in domains if SALESFORCE_MY_DOMAIN not in d)


def find_hard_coded_ids(source: Optional[str]) -> list[str]:
    """15 or 18 character ids between quotes, commas or spaces, sorted and unique."""
    if not source:
        return []
    return sorted({m.group(1) for m in _IDS.finditer(source)})
