"""Endpoint paths, locator suffixes and request bodies.

Paths are assembled with plain string formatting. Locators and identifiers
are substituted verbatim and are not URL-escaped, so callers must pass
values that are already safe to embed in a URL.
"""

from collections.abc import Mapping
from typing import Any

from .models import wrap_properties

REST_ROOT = "/httpAuth/app/rest"

# Nested collections expanded for every build. The server omits any
# collection not listed here.
BUILD_FIELDS = (
    "*,"
    "tags(tag),"
    "triggered(*),"
    "properties(property),"
    "problemOccurrences(*,problemOccurrence(*)),"
    "testOccurrences(*,testOccurrence(*)),"
    "changes(*,change(*))"
)
BUILD_LIST_FIELDS = f"count,build({BUILD_FIELDS})"

PROBLEM_FIELDS = "*,problemOccurrence(*,details)"

# Count bound meaning "everything" for changes and problems.
ALL_COUNT = 99999


def queue_build_path() -> str:
    return f"{REST_ROOT}/buildQueue"


def search_builds_path(locator: str) -> str:
    return f"{REST_ROOT}/builds/?locator={locator}&fields={BUILD_LIST_FIELDS}"


def queued_builds_path(locator: str) -> str:
    return f"{REST_ROOT}/buildQueue?locator={locator}&fields={BUILD_LIST_FIELDS}"


def build_path(build_id: str | int) -> str:
    return f"{REST_ROOT}/builds/id:{build_id}?fields={BUILD_FIELDS}"


def build_id_path(build_type_id: str, branch_name: str, build_number: str) -> str:
    return (
        f"{REST_ROOT}/buildTypes/id:{build_type_id}/builds"
        f"?locator=branch:{branch_name},number:{build_number},count:1"
    )


def resulting_properties_path(build_id: str | int) -> str:
    return f"{REST_ROOT}/builds/id:{build_id}/resulting-properties"


def cancel_build_path(build_id: str | int) -> str:
    return f"{REST_ROOT}/builds/id:{build_id}"


def build_log_path(build_id: str | int) -> str:
    return f"/httpAuth/downloadBuildLog.html?buildId={build_id}"


def changes_path(path: str) -> str:
    """Bound a caller-supplied changes locator path to all results."""
    return f"{path},count:{ALL_COUNT}"


def problems_path(path: str, count: int = ALL_COUNT) -> str:
    """Bound a problems locator path and request full problem details."""
    return f"{path},count:{count}&fields={PROBLEM_FIELDS}"


def tests_path(
    path: str,
    count: int,
    failing_only: bool = False,
    ignore_muted: bool = False,
) -> str:
    """Append test occurrence filters and the count bound to a locator path.

    Clauses are appended in a fixed order: ``currentlyMuted:false``, then
    ``status:FAILURE``, then ``count:N``.
    """
    if ignore_muted:
        path += ",currentlyMuted:false"
    if failing_only:
        path += ",status:FAILURE"
    return f"{path},count:{count}"


def queue_build_body(
    build_type_id: str,
    branch_name: str = "",
    properties: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Build the JSON body for queueing a personal build.

    The branch name is sent as given, without a ``refs/heads/`` prefix.
    """
    body: dict[str, Any] = {}
    if build_type_id:
        body["buildTypeId"] = build_type_id
    body["properties"] = wrap_properties(properties)
    if branch_name:
        body["branchName"] = branch_name
    body["personal"] = "true"
    return body


def cancel_build_body(comment: str) -> dict[str, Any]:
    """Build the JSON body of a cancel request; the build is re-added to the queue."""
    return {
        "buildCancelRequest": {
            "comment": comment,
            "readIntoQueue": True,
        },
    }
