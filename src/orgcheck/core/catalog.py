"""The best-practice rule catalog.

Rule ids are hard coded and never reused: new rules go at the end with the
next id.
"""

from __future__ import annotations

from typing import Optional

from .records import RecordType as T
from .rules import ScoreRule, ScoreRuleRegistry, is_empty, is_old_api_version, latest_api_version


def _unreferenced(d) -> bool:
    deps = d.dependencies
    return deps is not None and deps.had_error is False and is_empty(deps.referenced)


def _dependency_error(d) -> bool:
    return d.dependencies is not None and d.dependencies.had_error is True


def _attr(obj, name: str):
    return getattr(obj, name, None) if obj is not None else None


def _gt(value, limit) -> bool:
    return value is not None and value > limit


def _lt(value, limit) -> bool:
    return value is not None and value < limit


_CODE_WITH_DEPENDENCIES = frozenset(
    {
        T.CUSTOM_LABEL,
        T.FLOW,
        T.LIGHTNING_PAGE,
        T.LIGHTNING_AURA_COMPONENT,
        T.LIGHTNING_WEB_COMPONENT,
        T.VISUALFORCE_COMPONENT,
        T.VISUALFORCE_PAGE,
    }
)

_SOURCE_SCANNED = frozenset(
    {
        T.APEX_CLASS,
        T.APEX_TRIGGER,
        T.COLLABORATION_GROUP,
        T.FIELD,
        T.HOME_PAGE_COMPONENT,
        T.VISUALFORCE_COMPONENT,
        T.VISUALFORCE_PAGE,
        T.WEB_LINK,
    }
)


def build_score_rules(api_version: Optional[int] = None, old_api_version_years: int = 3) -> list[ScoreRule]:
    """Build the catalog against the given latest API version.

    Args:
        api_version: Latest API version of the org (None = computed from today)
        old_api_version_years: Age in years after which an API version is old

    Returns:
        Rules in id order
    """
    current = api_version or latest_api_version()

    def too_old(version) -> bool:
        return is_old_api_version(current, version, old_api_version_years)

    return [
        ScoreRule(
            id=0,
            description="Not referenced anywhere",
            formula=_unreferenced,
            error_message="This component is not referenced anywhere (as we were told by the Dependency API). Please review the need to keep it in your org.",
            bad_field="dependencies.referenced",
            applicable=_CODE_WITH_DEPENDENCIES,
            uses_dependencies=True,
        ),
        ScoreRule(
            id=1,
            description="No reference anywhere for custom field",
            formula=lambda d: d.is_custom is True and _unreferenced(d),
            error_message="This custom field is not referenced anywhere (as we were told by the Dependency API). Please review the need to keep it in your org.",
            bad_field="dependencies.referenced",
            applicable=frozenset({T.FIELD}),
            uses_dependencies=True,
        ),
        ScoreRule(
            id=2,
            description="No reference anywhere for apex class",
            formula=lambda d: d.is_test is False and _unreferenced(d),
            error_message="This apex class is not referenced anywhere (as we were told by the Dependency API). Please review the need to keep it in your org.",
            bad_field="dependencies.referenced",
            applicable=frozenset({T.APEX_CLASS}),
            uses_dependencies=True,
        ),
        ScoreRule(
            id=3,
            description="Sorry, we had an issue with the Dependency API to gather the dependencies of this item",
            formula=_dependency_error,
            error_message="Sorry, we had an issue with the Dependency API to gather the dependencies of this item.",
            bad_field="dependencies.referenced",
            applicable=_CODE_WITH_DEPENDENCIES | {T.FIELD, T.APEX_CLASS},
            uses_dependencies=True,
        ),
        ScoreRule(
            id=4,
            description="API Version too old",
            formula=lambda d: too_old(d.api_version),
            error_message="The API version of this component is too old. Please update it to a newest version.",
            bad_field="api_version",
            applicable=frozenset(
                {
                    T.APEX_CLASS,
                    T.APEX_TRIGGER,
                    T.FLOW,
                    T.LIGHTNING_AURA_COMPONENT,
                    T.LIGHTNING_WEB_COMPONENT,
                    T.VISUALFORCE_PAGE,
                    T.VISUALFORCE_COMPONENT,
                }
            ),
        ),
        ScoreRule(
            id=5,
            description="No assert in this Apex Test",
            formula=lambda d: d.is_test is True and d.nb_system_asserts == 0,
            error_message="This apex test does not contain any assert! Best practices force you to define asserts in tests.",
            bad_field="nb_system_asserts",
            applicable=frozenset({T.APEX_CLASS}),
        ),
        ScoreRule(
            id=6,
            description="No description",
            formula=lambda d: is_empty(d.description),
            error_message="This component does not have a description. Best practices force you to use the Description field to give some informative context about why and how it is used/set/govern.",
            bad_field="description",
            applicable=frozenset(
                {
                    T.FLOW,
                    T.LIGHTNING_PAGE,
                    T.LIGHTNING_AURA_COMPONENT,
                    T.LIGHTNING_WEB_COMPONENT,
                    T.VISUALFORCE_PAGE,
                    T.VISUALFORCE_COMPONENT,
                    T.WORKFLOW,
                    T.WEB_LINK,
                    T.FIELD_SET,
                    T.VALIDATION_RULE,
                    T.DOCUMENT,
                }
            ),
        ),
        ScoreRule(
            id=7,
            description="No description for custom component",
            formula=lambda d: d.is_custom is True and is_empty(d.description),
            error_message="This custom component does not have a description. Best practices force you to use the Description field to give some informative context about why and how it is used/set/govern.",
            bad_field="description",
            applicable=frozenset({T.FIELD, T.PERMISSION_SET, T.PROFILE}),
        ),
        ScoreRule(
            id=8,
            description="No explicit sharing in apex class",
            formula=lambda d: d.is_test is False and d.is_class is True and not d.specified_sharing,
            error_message="This Apex Class does not specify a sharing model. Best practices force you to specify with, without or inherit sharing to better control the visibility of the data you process in Apex.",
            bad_field="specified_sharing",
            applicable=frozenset({T.APEX_CLASS}),
        ),
        ScoreRule(
            id=9,
            description="Schedulable should be scheduled",
            formula=lambda d: d.is_scheduled is False and d.is_schedulable is True,
            error_message="This Apex Class implements Schedulable but is not scheduled. What is the point? Is this class still necessary?",
            bad_field="is_scheduled",
            applicable=frozenset({T.APEX_CLASS}),
        ),
        ScoreRule(
            id=10,
            description="Not able to compile class",
            formula=lambda d: d.needs_recompilation is True,
            error_message="This Apex Class can not be compiled for some reason. You should try to recompile it. If the issue remains you need to consider refactorying this class or the classes that it is using.",
            bad_field="name",
            applicable=frozenset({T.APEX_CLASS}),
        ),
        ScoreRule(
            id=11,
            description="No coverage for this class",
            formula=lambda d: d.is_test is False and not d.coverage,
            error_message="This Apex Class does not have any code coverage. Consider launching the corresponding tests that will bring some coverage. If you do not know which test to launch just run them all!",
            bad_field="coverage",
            applicable=frozenset({T.APEX_CLASS}),
        ),
        ScoreRule(
            id=12,
            description="Coverage not enough",
            formula=lambda d: _gt(d.coverage, 0) and d.coverage < 0.75,
            error_message="This Apex Class does not have enough code coverage (less than 75% of lines are covered by successful unit tests). Maybe you ran not all the unit tests to cover this class entirely? If you did, then consider augmenting that coverage with new test methods.",
            bad_field="coverage",
            applicable=frozenset({T.APEX_CLASS}),
        ),
        ScoreRule(
            id=13,
            description="At least one testing method failed",
            formula=lambda d: d.is_test is True and bool(d.test_failed_methods),
            error_message="This Apex Test Class has at least one failed method.",
            bad_field="test_failed_methods",
            applicable=frozenset({T.APEX_CLASS}),
        ),
        ScoreRule(
            id=14,
            description="Apex trigger should not contain SOQL statement",
            formula=lambda d: d.has_soql is True,
            error_message="This Apex Trigger contains at least one SOQL statement. Best practices force you to move any SOQL statement in dedicated Apex Classes that you would call from the trigger. Please update the code accordingly.",
            bad_field="has_soql",
            applicable=frozenset({T.APEX_TRIGGER}),
        ),
        ScoreRule(
            id=15,
            description="Apex trigger should not contain DML action",
            formula=lambda d: d.has_dml is True,
            error_message="This Apex Trigger contains at least one DML action. Best practices force you to move any DML action in dedicated Apex Classes that you would call from the trigger. Please update the code accordingly.",
            bad_field="has_dml",
            applicable=frozenset({T.APEX_TRIGGER}),
        ),
        ScoreRule(
            id=16,
            description="Apex Trigger should not contain logic",
            formula=lambda d: _gt(d.length, 5000),
            error_message="Due to the massive number of source code (more than 5000 characters) in this Apex Trigger, we suspect that it contains logic. Best practices force you to move any logic in dedicated Apex Classes that you would call from the trigger. Please update the code accordingly.",
            bad_field="length",
            applicable=frozenset({T.APEX_TRIGGER}),
        ),
        ScoreRule(
            id=17,
            description="No direct member for this group",
            formula=lambda d: not d.nb_direct_members,
            error_message="This public group (or queue) does not contain any direct members (users or sub groups). Is it empty on purpose? Maybe you should review its use in your org...",
            bad_field="nb_direct_members",
            applicable=frozenset({T.GROUP}),
        ),
        ScoreRule(
            id=18,
            description="Custom permset or profile with no member",
            formula=lambda d: d.is_custom is True and d.member_counts == 0,
            error_message="This custom permission set (or custom profile) has no members. Is it empty on purpose? Maybe you should review its use in your org...",
            bad_field="member_counts",
            applicable=frozenset({T.PERMISSION_SET, T.PROFILE}),
        ),
        ScoreRule(
            id=19,
            description="Role with no active users",
            formula=lambda d: d.active_members_count == 0,
            error_message="This role has no active users assigned to it. Is it on purpose? Maybe you should review its use in your org...",
            bad_field="active_members_count",
            applicable=frozenset({T.USER_ROLE}),
        ),
        ScoreRule(
            id=20,
            description="Active user not under LEX",
            formula=lambda d: d.on_lightning_experience is False,
            error_message="This user is still using Classic. Time to switch to Lightning for all your users, don't you think?",
            bad_field="on_lightning_experience",
            applicable=frozenset({T.USER}),
        ),
        ScoreRule(
            id=21,
            description="Active user never logged",
            formula=lambda d: d.last_login is None,
            error_message="This active user never logged yet. Time to optimize your licence cost!",
            bad_field="last_login",
            applicable=frozenset({T.USER}),
        ),
        ScoreRule(
            id=22,
            description="Workflow with no action",
            formula=lambda d: d.has_action is False,
            error_message="This workflow has no action, please review it and potentially remove it.",
            bad_field="has_action",
            applicable=frozenset({T.WORKFLOW}),
        ),
        ScoreRule(
            id=23,
            description="Workflow with empty time triggered list",
            formula=lambda d: bool(d.empty_time_triggers),
            error_message="This workflow is time triggered but with no time triggered action, please review it.",
            bad_field="empty_time_triggers",
            applicable=frozenset({T.WORKFLOW}),
        ),
        ScoreRule(
            id=24,
            description="Password policy with question containing password!",
            formula=lambda d: d.password_question is True,
            error_message="This profile password policy allows to have password in the question! Please change that setting as it is clearly a lack of security in your org!",
            bad_field="password_question",
            applicable=frozenset({T.PROFILE_PASSWORD_POLICY}),
        ),
        ScoreRule(
            id=25,
            description="Password policy with too big expiration",
            formula=lambda d: _gt(d.password_expiration, 90),
            error_message="This profile password policy allows to have password that expires after 90 days. Please consider having a shorter period of time for expiration if you policy.",
            bad_field="password_expiration",
            applicable=frozenset({T.PROFILE_PASSWORD_POLICY}),
        ),
        ScoreRule(
            id=26,
            description="Password policy with no expiration",
            formula=lambda d: d.password_expiration == 0,
            error_message="This profile password policy allows to have password that never expires. Why is that? Do you have this profile for technical users? Please reconsider this setting and use JWT authentication instead for technical users.",
            bad_field="password_expiration",
            applicable=frozenset({T.PROFILE_PASSWORD_POLICY}),
        ),
        ScoreRule(
            id=27,
            description="Password history too small",
            formula=lambda d: _lt(d.password_history, 3),
            error_message="This profile password policy allows users to set their password with a too-short memory. For example, they can keep on using the same different password everytime you ask them to change it. Please increase this setting.",
            bad_field="password_history",
            applicable=frozenset({T.PROFILE_PASSWORD_POLICY}),
        ),
        ScoreRule(
            id=28,
            description="Password minimum size too small",
            formula=lambda d: _lt(d.minimum_password_length, 8),
            error_message="This profile password policy allows users to set passwords with less than 8 charcaters. That minimum length is not strong enough. Please increase this setting.",
            bad_field="minimum_password_length",
            applicable=frozenset({T.PROFILE_PASSWORD_POLICY}),
        ),
        ScoreRule(
            id=29,
            description="Password complexity too weak",
            formula=lambda d: _lt(d.password_complexity, 3),
            error_message="This profile password policy allows users to set too-easy passwords. The complexity you choose is not storng enough. Please increase this setting.",
            bad_field="password_complexity",
            applicable=frozenset({T.PROFILE_PASSWORD_POLICY}),
        ),
        ScoreRule(
            id=30,
            description="No max login attempts set",
            formula=lambda d: d.max_login_attempts is None,
            error_message="This profile password policy allows users to try infinitely to log in without locking the access. Please review this setting.",
            bad_field="max_login_attempts",
            applicable=frozenset({T.PROFILE_PASSWORD_POLICY}),
        ),
        ScoreRule(
            id=31,
            description="No lockout period set",
            formula=lambda d: d.lockout_interval is None,
            error_message="This profile password policy does not set a value for any locked out period. Please review this setting.",
            bad_field="lockout_interval",
            applicable=frozenset({T.PROFILE_PASSWORD_POLICY}),
        ),
        ScoreRule(
            id=32,
            description="IP Range too large",
            formula=lambda d: any(_gt(i.difference, 100000) for i in d.ip_ranges or ()),
            error_message="This profile includes an IP range that is to wide (more than 100.000 IP addresses!). If you set an IP Range it should be not that large. You could split that range into multiple ones. The risk is that you include an IP that is not part of your company. Please review this setting.",
            bad_field="ip_ranges",
            applicable=frozenset({T.PROFILE_RESTRICTIONS}),
        ),
        ScoreRule(
            id=33,
            description="Login hours too large",
            formula=lambda d: any(_gt(i.difference, 1200) for i in d.login_hours or ()),
            error_message="This profile includes a login hour that is to wide (more than 20 hours a day!). If you set a login hour it should reflect the reality. Please review this setting.",
            bad_field="login_hours",
            applicable=frozenset({T.PROFILE_RESTRICTIONS}),
        ),
        ScoreRule(
            id=34,
            description="Inactive component",
            formula=lambda d: d.is_active is False,
            error_message="This component is inactive, so why do not you just remove it from your org?",
            bad_field="is_active",
            applicable=frozenset({T.VALIDATION_RULE, T.RECORD_TYPE, T.APEX_TRIGGER, T.WORKFLOW}),
        ),
        ScoreRule(
            id=35,
            description="No active version for this flow",
            formula=lambda d: d.is_version_active is False,
            error_message="This flow does not have an active version, did you forgot to activate its latest version? or you do not need that flow anymore?",
            bad_field="is_version_active",
            applicable=frozenset({T.FLOW}),
        ),
        ScoreRule(
            id=36,
            description="Too many versions under this flow",
            formula=lambda d: _gt(d.versions_count, 7),
            error_message="This flow has more than seven versions. Maybe it is time to do some cleaning in this flow!",
            bad_field="versions_count",
            applicable=frozenset({T.FLOW}),
        ),
        ScoreRule(
            id=37,
            description="Migrate this process builder",
            formula=lambda d: _attr(d.current_version_ref, "type") == "Workflow",
            error_message="Time to migrate this process builder to flow!",
            bad_field="name",
            applicable=frozenset({T.FLOW}),
        ),
        ScoreRule(
            id=38,
            description="No description for the current version of a flow",
            formula=lambda d: is_empty(_attr(d.current_version_ref, "description")),
            error_message="This flow's current version does not have a description. Best practices force you to use the Description field to give some informative context about why and how it is used/set/govern.",
            bad_field="current_version_ref.description",
            applicable=frozenset({T.FLOW}),
        ),
        ScoreRule(
            id=39,
            description="API Version too old for the current version of a flow",
            formula=lambda d: too_old(_attr(d.current_version_ref, "api_version")),
            error_message="The API version of this flow's current version is too old. Please update it to a newest version.",
            bad_field="current_version_ref.api_version",
            applicable=frozenset({T.FLOW}),
        ),
        ScoreRule(
            id=40,
            description="This flow is running without sharing",
            formula=lambda d: _attr(d.current_version_ref, "running_mode") == "SystemModeWithoutSharing",
            error_message="The running mode of this version without sharing. With great power comes great responsabilities. Please check if this is REALLY needed.",
            bad_field="current_version_ref.running_mode",
            applicable=frozenset({T.FLOW}),
        ),
        ScoreRule(
            id=41,
            description="Too many nodes in this version",
            formula=lambda d: _gt(_attr(d.current_version_ref, "total_node_count"), 100),
            error_message="There are more than one hundred of nodes in this flow. Please consider using Apex? or cut it into multiple sub flows?",
            bad_field="current_version_ref.total_node_count",
            applicable=frozenset({T.FLOW}),
        ),
        ScoreRule(
            id=42,
            description="Near the limit",
            formula=lambda d: d.used_percentage is not None and d.used_percentage >= 0.80,
            error_message="This limit is almost reached (>80%). Please review this.",
            bad_field="used_percentage",
            applicable=frozenset({T.LIMIT}),
        ),
        ScoreRule(
            id=43,
            description="Almost all licenses are used",
            formula=lambda d: d.used_percentage is not None and d.used_percentage >= 0.80,
            error_message="The number of seats for this license is almost reached (>80%). Please review this.",
            bad_field="used_percentage",
            applicable=frozenset({T.PERMISSION_SET_LICENSE}),
        ),
        ScoreRule(
            id=44,
            description="You could have licenses to free up",
            formula=lambda d: _gt(d.remaining_count, 0) and d.distinct_active_assignee_count != d.used_count,
            error_message="The Used count from that permission set license does not match the number of disctinct active user assigned to the same license. Please check if you could free up some licenses!",
            bad_field="distinct_active_assignee_count",
            applicable=frozenset({T.PERMISSION_SET_LICENSE}),
        ),
        ScoreRule(
            id=45,
            description="Role with a level >= 7",
            formula=lambda d: d.level is not None and d.level >= 7,
            error_message="This role has a level in the Role Hierarchy which is seven or greater. Please reduce the maximum depth of the role hierarchy. Having that much levels has an impact on performance...",
            bad_field="level",
            applicable=frozenset({T.USER_ROLE}),
        ),
        ScoreRule(
            id=46,
            description="Hard-coded URL suspicion in this item",
            formula=lambda d: bool(d.hard_coded_urls),
            error_message="The source code of this item contains one or more hard coded URLs pointing to domains like salesforce.com or force.*",
            bad_field="hard_coded_urls",
            applicable=_SOURCE_SCANNED,
        ),
        ScoreRule(
            id=47,
            description="Hard-coded Salesforce IDs suspicion in this item",
            formula=lambda d: bool(d.hard_coded_ids),
            error_message="The source code of this item contains one or more hard coded Salesforce IDs",
            bad_field="hard_coded_ids",
            applicable=_SOURCE_SCANNED,
        ),
        ScoreRule(
            id=48,
            description="At least one successful testing method was very long",
            formula=lambda d: d.is_test is True and bool(d.test_passed_but_long_methods),
            error_message="This Apex Test Class has at least one successful method which took more than 20 secondes to execute",
            bad_field="test_passed_but_long_methods",
            applicable=frozenset({T.APEX_CLASS}),
        ),
        ScoreRule(
            id=49,
            description="Page layout should be assigned to at least one Profile",
            formula=lambda d: d.profile_assignment_count == 0,
            error_message="This Page Layout is not assigned to any Profile. Please review this page layout and assign it to at least one profile.",
            bad_field="profile_assignment_count",
            applicable=frozenset({T.PAGE_LAYOUT}),
        ),
        ScoreRule(
            id=50,
            description="Hard-coded URL suspicion in this document",
            formula=lambda d: d.is_hard_coded_url is True,
            error_message="The URL of this document contains a hard coded URL pointing to domains like salesforce.com or force.*",
            bad_field="document_url",
            applicable=frozenset({T.DOCUMENT}),
        ),
        ScoreRule(
            id=51,
            description="Unassigned Record Type",
            formula=lambda d: d.is_default is False and d.is_available is False,
            error_message="This record type is not set as default nor as visible in any profile in this org. Please review this record type and remove it if it is not needed anymore.",
            bad_field="is_default",
            applicable=frozenset({T.RECORD_TYPE}),
        ),
    ]


def default_registry(api_version: Optional[int] = None, old_api_version_years: int = 3) -> ScoreRuleRegistry:
    """Registry over the full catalog."""
    return ScoreRuleRegistry(build_score_rules(api_version, old_api_version_years))


ALL_SCORE_RULES = build_score_rules()
