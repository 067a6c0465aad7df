"""Canonical build model and the conversion pass that produces it.

Structural decoding (:mod:`.decoding`) yields the wire types of
:mod:`.types`. The functions here run once afterwards and turn them into
values with a single in-memory representation: identifiers become ``int``,
flags become ``bool``, missing strings become ``""`` and envelopes are
unwrapped into plain lists and dicts.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field

import structlog

from . import types
from .types import Change, ProblemOccurrence, TestOccurrence, Triggered

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Scalar conversions
# ---------------------------------------------------------------------------


def to_int(value: types.StringOrNumber | None) -> int:
    """Convert a number-or-string wire value into an ``int``.

    Args:
        value: JSON number, numeric string, or None.

    Returns:
        The integer value; 0 when the value is missing or not numeric.
    """
    if value is None:
        return 0
    if isinstance(value, (bool, int)):
        return int(value)
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0

    text = value.strip()
    if not text:
        return 0
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return int(float(text))
    except (ValueError, OverflowError):
        logger.warning("Failed to parse integer field", value=value)
        return 0


def to_bool(value: types.StringOrBool | None) -> bool:
    """Convert a bool-or-string wire value into a ``bool``."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return value.strip().lower() == "true"


def to_str(value: types.StringOrNumber | None) -> str:
    """Convert an optional wire value into a string, ``""`` when absent."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


def unwrap_properties(envelope: types.PropertyEnvelope | None) -> dict[str, str]:
    """Flatten a property envelope into a name to value mapping.

    Later entries overwrite earlier ones with the same name.
    """
    if envelope is None or envelope.property is None:
        return {}
    return {prop.name or "": prop.value or "" for prop in envelope.property}


def wrap_properties(properties: Mapping[str, str] | None) -> dict:
    """Build the wire envelope for a name to value mapping.

    An empty mapping produces an empty envelope with no ``property`` key.
    """
    if not properties:
        return {}
    return {
        "property": [
            {"name": name, "value": value}
            for name, value in properties.items()
        ],
    }


def unwrap_tags(envelope: types.TagEnvelope | None) -> list[str]:
    """Return tag names from a tag envelope; a null name becomes ``""``."""
    if envelope is None or envelope.tag is None:
        return []
    return [to_str(tag.name) for tag in envelope.tag]


def unwrap_changes(envelope: types.ChangeEnvelope | None) -> list[Change] | None:
    """Return the change list, or None when the envelope carries none."""
    if envelope is None:
        return None
    return envelope.change


def unwrap_problems(
    envelope: types.ProblemOccurrenceEnvelope | None,
) -> list[ProblemOccurrence] | None:
    """Return the problem occurrence list, or None when absent."""
    if envelope is None:
        return None
    return envelope.problem_occurrence


def unwrap_tests(
    envelope: types.TestOccurrenceEnvelope | None,
) -> list[TestOccurrence] | None:
    """Return the test occurrence list, or None when absent."""
    if envelope is None:
        return None
    return envelope.test_occurrence


# ---------------------------------------------------------------------------
# Builds
# ---------------------------------------------------------------------------


@dataclass
class Build:
    """A TeamCity build with every field in its canonical form."""

    id: int = 0
    build_type_id: str = ""
    number: str = ""

    status: str = ""
    state: str = ""
    status_text: str = ""
    branch_name: str = ""
    default_branch: bool = False
    personal: bool = False
    running: bool = False
    composite: bool = False
    percentage_complete: int = 0

    href: str = ""
    web_url: str = ""
    queued_date: str = ""
    start_date: str = ""
    finish_date: str = ""

    tags: list[str] = field(default_factory=list)
    triggered: Triggered | None = None
    properties: dict[str, str] = field(default_factory=dict)
    problem_occurrences: list[ProblemOccurrence] = field(default_factory=list)
    test_occurrences: list[TestOccurrence] = field(default_factory=list)
    changes: list[Change] = field(default_factory=list)

    problem_count: int = 0
    test_count: int = 0
    tests_passed: int = 0
    tests_failed: int = 0
    tests_muted: int = 0
    tests_ignored: int = 0
    change_count: int = 0

    @property
    def is_finished(self) -> bool:
        """Whether the server reports the build as finished."""
        return self.state == "finished"

    @property
    def is_successful(self) -> bool:
        """Whether the build finished with SUCCESS status."""
        return self.is_finished and self.status == "SUCCESS"


def convert_build(raw: types.RawBuild) -> Build:
    """Transform a decoded wire build into a canonical :class:`Build`.

    Args:
        raw: Build as decoded from the response body.

    Returns:
        Build with every canonical field populated.
    """
    problems = raw.problem_occurrences
    tests = raw.test_occurrences
    changes = raw.changes

    return Build(
        id=to_int(raw.id),
        build_type_id=raw.build_type_id or "",
        number=to_str(raw.number),
        status=raw.status or "",
        state=raw.state or "",
        status_text=raw.status_text or "",
        branch_name=raw.branch_name or "",
        default_branch=to_bool(raw.default_branch),
        personal=to_bool(raw.personal),
        running=to_bool(raw.running),
        composite=to_bool(raw.composite),
        percentage_complete=to_int(raw.percentage_complete),
        href=raw.href or "",
        web_url=raw.web_url or "",
        queued_date=raw.queued_date or "",
        start_date=raw.start_date or "",
        finish_date=raw.finish_date or "",
        tags=unwrap_tags(raw.tags),
        triggered=raw.triggered,
        properties=unwrap_properties(raw.properties),
        problem_occurrences=unwrap_problems(problems) or [],
        test_occurrences=unwrap_tests(tests) or [],
        changes=unwrap_changes(changes) or [],
        problem_count=to_int(problems.count) if problems else 0,
        test_count=to_int(tests.count) if tests else 0,
        tests_passed=to_int(tests.passed) if tests else 0,
        tests_failed=to_int(tests.failed) if tests else 0,
        tests_muted=to_int(tests.muted) if tests else 0,
        tests_ignored=to_int(tests.ignored) if tests else 0,
        change_count=to_int(changes.count) if changes else 0,
    )


def convert_builds(envelope: types.BuildEnvelope | None) -> list[Build]:
    """Convert every build in a build list envelope.

    A missing envelope or a null/absent ``build`` key yields an empty list.
    """
    if envelope is None or envelope.build is None:
        return []
    return [convert_build(raw) for raw in envelope.build]
