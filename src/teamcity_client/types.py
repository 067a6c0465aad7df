"""Wire types for TeamCity REST API responses.

Pydantic models describing what the server actually sends, before any
normalization. Fields the server emits with varying JSON types are typed as
unions here and reconciled into canonical values by :mod:`.models`.

Collections are never sent as bare lists: each sits inside an envelope
object keyed by the singular entity name (``{"property": [...]}``). Every
envelope has its own model so unwrapping is an explicit step.
"""

from typing import TypeAlias

from pydantic import BaseModel, ConfigDict, Field

# Numbers and identifiers arrive either as JSON numbers or inside strings.
StringOrNumber: TypeAlias = int | float | str

# Flags arrive either as JSON booleans or as "true"/"false" strings.
StringOrBool: TypeAlias = bool | str


class WireModel(BaseModel):
    """Base for wire models: camelCase aliases, unknown fields ignored."""

    model_config = ConfigDict(populate_by_name=True)


class PassThroughModel(BaseModel):
    """Base for records whose remaining fields are kept verbatim."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")


# Properties


class Property(WireModel):
    """A single name/value property."""

    name: str | None = None
    value: str | None = None


class PropertyEnvelope(WireModel):
    """Wire wrapper around a property list."""

    count: StringOrNumber | None = None
    property: list[Property] | None = None


# Tags


class Tag(PassThroughModel):
    """A build tag."""

    name: StringOrNumber | None = None


class TagEnvelope(WireModel):
    """Wire wrapper around a tag list."""

    count: StringOrNumber | None = None
    tag: list[Tag] | None = None


# Pass-through records


class Triggered(PassThroughModel):
    """Information about what triggered a build."""

    type: str | None = None
    date: str | None = None
    details: str | None = None
    user: dict | None = None


class Change(PassThroughModel):
    """A VCS change attached to a build."""

    id: StringOrNumber | None = None
    version: str | None = None
    username: str | None = None
    date: str | None = None
    href: str | None = None
    web_url: str | None = Field(None, alias="webUrl")
    comment: str | None = None


class ChangeEnvelope(WireModel):
    """Wire wrapper around a change list."""

    count: StringOrNumber | None = None
    href: str | None = None
    change: list[Change] | None = None


class ProblemOccurrence(PassThroughModel):
    """A build problem (compilation failure, exit code, ...)."""

    id: StringOrNumber | None = None
    type: str | None = None
    identity: str | None = None
    href: str | None = None
    details: str | None = None


class ProblemOccurrenceEnvelope(WireModel):
    """Wire wrapper around a problem occurrence list."""

    count: StringOrNumber | None = None
    default: StringOrBool | None = None
    href: str | None = None
    problem_occurrence: list[ProblemOccurrence] | None = Field(
        None,
        alias="problemOccurrence",
    )


class TestOccurrence(PassThroughModel):
    """A single test run result."""

    id: StringOrNumber | None = None
    name: str | None = None
    status: str | None = None
    duration: StringOrNumber | None = None
    href: str | None = None
    muted: StringOrBool | None = None
    currently_muted: StringOrBool | None = Field(None, alias="currentlyMuted")
    ignored: StringOrBool | None = None
    details: str | None = None


class TestOccurrenceEnvelope(WireModel):
    """Wire wrapper around a test occurrence list with run totals."""

    count: StringOrNumber | None = None
    href: str | None = None
    passed: StringOrNumber | None = None
    failed: StringOrNumber | None = None
    muted: StringOrNumber | None = None
    ignored: StringOrNumber | None = None
    new_failed: StringOrNumber | None = Field(None, alias="newFailed")
    test_occurrence: list[TestOccurrence] | None = Field(
        None,
        alias="testOccurrence",
    )


# Builds


class RawBuild(WireModel):
    """Build record exactly as decoded from the server."""

    # Identity
    id: StringOrNumber | None = None
    build_type_id: str | None = Field(None, alias="buildTypeId")
    number: StringOrNumber | None = None

    # State
    status: str | None = None
    state: str | None = None
    status_text: str | None = Field(None, alias="statusText")
    branch_name: str | None = Field(None, alias="branchName")
    default_branch: StringOrBool | None = Field(None, alias="defaultBranch")
    personal: StringOrBool | None = None
    running: StringOrBool | None = None
    composite: StringOrBool | None = None
    percentage_complete: StringOrNumber | None = Field(
        None,
        alias="percentageComplete",
    )

    # Links and dates
    href: str | None = None
    web_url: str | None = Field(None, alias="webUrl")
    queued_date: str | None = Field(None, alias="queuedDate")
    start_date: str | None = Field(None, alias="startDate")
    finish_date: str | None = Field(None, alias="finishDate")

    # Nested collections, present only when requested through ``fields``
    tags: TagEnvelope | None = None
    triggered: Triggered | None = None
    properties: PropertyEnvelope | None = None
    problem_occurrences: ProblemOccurrenceEnvelope | None = Field(
        None,
        alias="problemOccurrences",
    )
    test_occurrences: TestOccurrenceEnvelope | None = Field(
        None,
        alias="testOccurrences",
    )
    changes: ChangeEnvelope | None = None


class BuildEnvelope(WireModel):
    """Wire wrapper around a page of builds."""

    count: StringOrNumber | None = None
    href: str | None = None
    next_href: str | None = Field(None, alias="nextHref")
    build: list[RawBuild] | None = None
