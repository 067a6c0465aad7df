"""Tests for endpoint paths, locator suffixes and request bodies."""

import json

import pytest

from teamcity_client import locators

FULL_BUILD_FIELDS = (
    "*,tags(tag),triggered(*),properties(property),"
    "problemOccurrences(*,problemOccurrence(*)),"
    "testOccurrences(*,testOccurrence(*)),"
    "changes(*,change(*))"
)

# ---------------------------------------------------------------------------
# Field projections
# ---------------------------------------------------------------------------


def test_build_fields_projection_is_verbatim():
    assert locators.BUILD_FIELDS == FULL_BUILD_FIELDS


def test_build_list_fields_wraps_build_projection():
    assert locators.BUILD_LIST_FIELDS == f"count,build({FULL_BUILD_FIELDS})"


# ---------------------------------------------------------------------------
# Build paths
# ---------------------------------------------------------------------------


def test_queue_build_path():
    assert locators.queue_build_path() == "/httpAuth/app/rest/buildQueue"


def test_search_builds_path():
    path = locators.search_builds_path("buildType:bt1,branch:main")
    assert path == (
        "/httpAuth/app/rest/builds/?locator=buildType:bt1,branch:main"
        f"&fields=count,build({FULL_BUILD_FIELDS})"
    )


def test_queued_builds_path():
    path = locators.queued_builds_path("project:P1")
    assert path == (
        "/httpAuth/app/rest/buildQueue?locator=project:P1"
        f"&fields=count,build({FULL_BUILD_FIELDS})"
    )


@pytest.mark.parametrize("build_id", [1234, "1234"])
def test_build_path_substitutes_id(build_id):
    assert locators.build_path(build_id) == (
        f"/httpAuth/app/rest/builds/id:1234?fields={FULL_BUILD_FIELDS}"
    )


def test_build_id_path():
    path = locators.build_id_path("bt1", "feature/x", "42")
    assert path == (
        "/httpAuth/app/rest/buildTypes/id:bt1/builds"
        "?locator=branch:feature/x,number:42,count:1"
    )


def test_identifiers_are_not_escaped():
    """Values are substituted by string formatting only."""
    assert locators.build_path("a b&c").startswith("/httpAuth/app/rest/builds/id:a b&c?")


def test_resulting_properties_path():
    assert locators.resulting_properties_path(7) == (
        "/httpAuth/app/rest/builds/id:7/resulting-properties"
    )


def test_cancel_build_path():
    assert locators.cancel_build_path(7) == "/httpAuth/app/rest/builds/id:7"


def test_build_log_path():
    assert locators.build_log_path(7) == "/httpAuth/downloadBuildLog.html?buildId=7"


# ---------------------------------------------------------------------------
# Changes, problems, tests
# ---------------------------------------------------------------------------


def test_changes_path_requests_everything():
    path = locators.changes_path("/httpAuth/app/rest/changes?locator=build:(id:7)")
    assert path == "/httpAuth/app/rest/changes?locator=build:(id:7),count:99999"


def test_problems_path_forces_detail_projection():
    path = locators.problems_path("/p?locator=build:(id:7)")
    assert path == (
        "/p?locator=build:(id:7),count:99999&fields=*,problemOccurrence(*,details)"
    )


def test_problems_path_custom_count():
    assert locators.problems_path("/p?locator=x", 5).startswith("/p?locator=x,count:5&")


@pytest.mark.parametrize(
    ("failing_only", "ignore_muted", "suffix"),
    [
        (False, False, ",count:50"),
        (True, False, ",status:FAILURE,count:50"),
        (False, True, ",currentlyMuted:false,count:50"),
        (True, True, ",currentlyMuted:false,status:FAILURE,count:50"),
    ],
)
def test_tests_path_clause_order(failing_only, ignore_muted, suffix):
    base = "/httpAuth/app/rest/testOccurrences?locator=build:(id:7)"
    path = locators.tests_path(base, 50, failing_only, ignore_muted)
    assert path == base + suffix


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------


def test_queue_build_body_shape():
    body = locators.queue_build_body("bt1", "feature/x", {"k": "v"})

    assert json.loads(json.dumps(body)) == {
        "buildTypeId": "bt1",
        "personal": "true",
        "branchName": "feature/x",
        "properties": {"property": [{"name": "k", "value": "v"}]},
    }


def test_queue_build_body_branch_passed_verbatim():
    body = locators.queue_build_body("bt1", "main")
    assert body["branchName"] == "main"


def test_queue_build_body_without_branch_or_properties():
    body = locators.queue_build_body("bt1")

    assert "branchName" not in body
    assert body["personal"] == "true"
    assert body["properties"] == {}


def test_queue_build_body_keeps_property_order():
    body = locators.queue_build_body("bt1", properties={"b": "2", "a": "1"})
    names = [prop["name"] for prop in body["properties"]["property"]]
    assert names == ["b", "a"]


def test_cancel_body_always_readds_to_queue():
    assert locators.cancel_build_body("stop") == {
        "buildCancelRequest": {"comment": "stop", "readIntoQueue": True},
    }


def test_cancel_body_serializes_true_literal():
    serialized = json.dumps(locators.cancel_build_body(""))
    assert '"readIntoQueue": true' in serialized
