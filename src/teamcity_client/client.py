"""TeamCity REST API client.

Every operation follows the same pipeline: the path is assembled by
:mod:`.locators`, the request runs through the client's
:class:`~.retry.RetryPolicy` and :class:`~.transport.Transport`, the body is
decoded into wire models and finally converted into canonical values.
"""

from collections.abc import Callable, Mapping
from typing import Any, TypeVar

import httpx
import pydantic
import structlog

from . import locators
from .decoding import decode_optional
from .errors import BuildNotFoundError, ChangesNotFoundError, ProblemsNotFoundError
from .models import (
    Build,
    convert_build,
    convert_builds,
    to_int,
    unwrap_changes,
    unwrap_problems,
    unwrap_properties,
    unwrap_tests,
)
from .retry import RetryPolicy
from .sinks import ResponseSink
from .transport import DEFAULT_TIMEOUT, Transport
from .types import (
    BuildEnvelope,
    Change,
    ChangeEnvelope,
    ProblemOccurrence,
    ProblemOccurrenceEnvelope,
    PropertyEnvelope,
    RawBuild,
    TestOccurrence,
    TestOccurrenceEnvelope,
)

M = TypeVar("M", bound=pydantic.BaseModel)
R = TypeVar("R")

# Placeholder carried by id lookup failures; never a usable build id.
ID_NOT_FOUND = "ID not found"


def _require_build(raw: RawBuild | None) -> Build:
    if raw is None:
        raise BuildNotFoundError
    return convert_build(raw)


class TeamCityClient:
    """Synchronous client for the TeamCity REST API.

    Host and credentials are fixed at construction. ``debug`` may be toggled
    at any time; it is an attribute of this instance only. Can be used as a
    context manager to close an internally created HTTP client.
    """

    def __init__(
        self,
        host: str,
        username: str,
        password: str,
        *,
        http_client: httpx.Client | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        debug: bool = False,
        retry_policy: RetryPolicy | None = None,
        response_sink: ResponseSink | None = None,
        logger: Any = None,
    ):
        """Initialize the client.

        Args:
            host: TeamCity host, e.g. "teamcity.example.com" or
                "http://localhost:8111". Without a scheme https is used.
            username: HTTP Basic user name.
            password: HTTP Basic password or access token.
            http_client: Shared HTTP client. When omitted one is created
                with ``timeout`` and closed by :meth:`close`.
            timeout: Request timeout in seconds for the internal client.
            debug: Log every resolved URL and feed decoded bodies to
                ``response_sink``.
            retry_policy: Retry policy for every request (default: 8
                attempts, permanent errors are not retried).
            response_sink: Optional callable receiving ``(url, body)`` of
                each decoded response while debug is on.
            logger: structlog logger; defaults to ``teamcity_client``.

        Raises:
            ValueError: If host is empty or timeout is not positive.
        """
        if not host:
            msg = "host cannot be empty"
            raise ValueError(msg)
        if timeout <= 0:
            msg = "timeout must be positive"
            raise ValueError(msg)

        if logger is None:
            logger = structlog.get_logger("teamcity_client")
        self._logger = logger
        self._owns_http_client = http_client is None
        if http_client is None:
            http_client = httpx.Client(timeout=timeout)
        self._http_client = http_client
        self._transport = Transport(
            host,
            username,
            password,
            self._http_client,
            logger=self._logger,
        )
        self._username = username
        self._retry = retry_policy if retry_policy is not None else RetryPolicy()
        self._response_sink = response_sink
        self.debug = debug

    @property
    def host(self) -> str:
        return self._transport.host

    @property
    def username(self) -> str:
        return self._username

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry

    def __enter__(self):
        """Enter context manager."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context manager and cleanup resources."""
        self.close()

    def close(self):
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client and not self._http_client.is_closed:
            self._http_client.close()

    # -----------------------------------------------------------------
    # Pipeline
    # -----------------------------------------------------------------

    def _emit(self, path: str, body: bytes) -> None:
        """Hand a decoded body to the response sink; never fails the caller."""
        if not self.debug or self._response_sink is None:
            return
        url = self._transport.resolve_url(path)
        try:
            self._response_sink(url, body)
        except Exception:
            self._logger.exception("Response sink failed", url=url)

    def _call(
        self,
        method: str,
        path: str,
        model: type[M],
        convert: Callable[[M | None], R],
        payload: Any = None,
    ) -> R:
        """Run request, decode and conversion as one retried unit of work.

        The response sink sees the body of the successful attempt only, after
        the retry loop has finished.
        """

        def unit_of_work() -> tuple[bytes, R]:
            body = self._transport.request(method, path, payload, debug=self.debug)
            return body, convert(decode_optional(body, model))

        body, result = self._retry.run(unit_of_work, log=self._logger)
        self._emit(path, body)
        return result

    def _call_raw(self, method: str, path: str, payload: Any = None) -> bytes:
        return self._retry.run(
            lambda: self._transport.request(method, path, payload, debug=self.debug),
            log=self._logger,
        )

    # -----------------------------------------------------------------
    # Builds
    # -----------------------------------------------------------------

    def queue_build(
        self,
        build_type_id: str,
        branch_name: str = "",
        properties: Mapping[str, str] | None = None,
    ) -> Build:
        """Queue a personal build of ``build_type_id``.

        Args:
            build_type_id: Build configuration id.
            branch_name: Branch to build, sent verbatim; empty for default.
            properties: Build parameters to set on the queued build.

        Returns:
            The queued build as reported by the server.
        """
        body = locators.queue_build_body(build_type_id, branch_name, properties)
        build = self._call(
            "POST",
            locators.queue_build_path(),
            RawBuild,
            _require_build,
            payload=body,
        )
        self._logger.info(
            "Queued build",
            build_id=build.id,
            build_type_id=build_type_id,
            branch_name=branch_name,
        )
        return build

    def search_builds(self, locator: str) -> list[Build]:
        """Return builds matching ``locator`` with all nested collections."""
        return self._call(
            "GET",
            locators.search_builds_path(locator),
            BuildEnvelope,
            convert_builds,
        )

    def get_queued_builds(self, locator: str) -> list[Build]:
        """Return queued builds matching ``locator``."""
        return self._call(
            "GET",
            locators.queued_builds_path(locator),
            BuildEnvelope,
            convert_builds,
        )

    def get_build(self, build_id: str | int) -> Build:
        """Return one build by id.

        Raises:
            BuildNotFoundError: If the server returns no build.
        """
        return self._call(
            "GET",
            locators.build_path(build_id),
            RawBuild,
            _require_build,
        )

    def get_build_id(
        self,
        build_type_id: str,
        branch_name: str,
        build_number: str,
    ) -> str:
        """Look up the id of a build by configuration, branch and number.

        Returns:
            The build id as a decimal string.

        Raises:
            BuildNotFoundError: If nothing matches. The exception's ``value``
                holds the ``ID_NOT_FOUND`` placeholder.
        """

        def first_id(envelope: BuildEnvelope | None) -> str:
            if envelope is None or not envelope.build:
                raise BuildNotFoundError(value=ID_NOT_FOUND)
            return str(to_int(envelope.build[0].id))

        return self._call(
            "GET",
            locators.build_id_path(build_type_id, branch_name, build_number),
            BuildEnvelope,
            first_id,
        )

    def get_build_properties(self, build_id: str | int) -> dict[str, str]:
        """Return the resulting properties of a build as a name to value map."""
        return self._call(
            "GET",
            locators.resulting_properties_path(build_id),
            PropertyEnvelope,
            unwrap_properties,
        )

    def cancel_build(self, build_id: str | int, comment: str) -> None:
        """Cancel a build; it is put back into the queue."""
        self._call_raw(
            "POST",
            locators.cancel_build_path(build_id),
            locators.cancel_build_body(comment),
        )
        self._logger.info("Cancelled build", build_id=build_id)

    def get_build_log(self, build_id: str | int) -> str:
        """Return the plain-text build log."""
        body = self._call_raw("GET", locators.build_log_path(build_id))
        return body.decode("utf-8", errors="replace")

    # -----------------------------------------------------------------
    # Changes, problems and tests
    # -----------------------------------------------------------------

    def get_changes(self, path: str) -> list[Change]:
        """Return all changes selected by a locator path.

        Args:
            path: Changes path ending in a locator, e.g.
                "/httpAuth/app/rest/changes?locator=build:(id:42)".

        Raises:
            ChangesNotFoundError: If the response carries no change list.
        """

        def require(envelope: ChangeEnvelope | None) -> list[Change]:
            changes = unwrap_changes(envelope)
            if changes is None:
                msg = "changes not found"
                raise ChangesNotFoundError(msg)
            return changes

        return self._call("GET", locators.changes_path(path), ChangeEnvelope, require)

    def get_problems(
        self,
        path: str,
        count: int = locators.ALL_COUNT,
    ) -> list[ProblemOccurrence]:
        """Return problem occurrences, with details, selected by a locator path.

        Raises:
            ProblemsNotFoundError: If the response carries no problem list.
        """

        def require(
            envelope: ProblemOccurrenceEnvelope | None,
        ) -> list[ProblemOccurrence]:
            problems = unwrap_problems(envelope)
            if problems is None:
                msg = "problemOccurrence list not found"
                raise ProblemsNotFoundError(msg)
            return problems

        return self._call(
            "GET",
            locators.problems_path(path, count),
            ProblemOccurrenceEnvelope,
            require,
        )

    def get_tests(
        self,
        path: str,
        count: int,
        failing_only: bool = False,
        ignore_muted: bool = False,
    ) -> list[TestOccurrence]:
        """Return up to ``count`` test occurrences selected by a locator path.

        An absent test list is returned as an empty list.
        """
        return self._call(
            "GET",
            locators.tests_path(path, count, failing_only, ignore_muted),
            TestOccurrenceEnvelope,
            lambda envelope: unwrap_tests(envelope) or [],
        )
