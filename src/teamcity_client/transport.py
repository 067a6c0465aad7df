"""Authenticated HTTP transport for the TeamCity REST API.

Builds and executes a single request. Retrying is left to the caller.
"""

import json
import time
from typing import Any

import httpx
import structlog

from .errors import RequestEncodeError

DEFAULT_TIMEOUT = 30.0


def resolve_url(host: str, path: str) -> str:
    """Join ``host`` and ``path`` into a fully qualified URL.

    A trailing slash on the host is dropped. Hosts that already mention
    ``http`` (in any case) keep their scheme; all others get ``https://``.
    """
    if host.endswith("/"):
        host = host[:-1]
    prefix = "" if "http" in host.lower() else "https://"
    return f"{prefix}{host}{path}"


class Transport:
    """Executes authenticated JSON requests against one TeamCity host.

    The ``httpx.Client`` is shared by every request made through this
    transport and is never copied. Whether it is safe to use from several
    threads at once is up to the client passed in.
    """

    def __init__(
        self,
        host: str,
        username: str,
        password: str,
        http_client: httpx.Client,
        logger: Any = None,
    ):
        """Initialize the transport.

        Args:
            host: Server host, with or without scheme.
            username: HTTP Basic user name.
            password: HTTP Basic password or access token.
            http_client: Client used to send requests.
            logger: structlog logger; defaults to the module logger.

        Raises:
            ValueError: If host is empty.
        """
        if not host:
            msg = "host cannot be empty"
            raise ValueError(msg)

        self._host = host
        self._auth = httpx.BasicAuth(username, password)
        self._http = http_client
        if logger is None:
            logger = structlog.get_logger(__name__)
        self._logger = logger

    @property
    def host(self) -> str:
        return self._host

    def resolve_url(self, path: str) -> str:
        return resolve_url(self._host, path)

    def request(
        self,
        method: str,
        path: str,
        payload: Any = None,
        *,
        debug: bool = False,
    ) -> bytes:
        """Send one request and return the raw response body.

        Args:
            method: HTTP method.
            path: Path and query, appended to the resolved host.
            payload: Optional JSON-serializable request body.
            debug: Log the resolved URL before sending.

        Returns:
            Response body bytes.

        Raises:
            RequestEncodeError: If payload is not JSON serializable.
            httpx.HTTPError: If the request fails or the status is not 2xx.
        """
        url = self.resolve_url(path)
        if debug:
            self._logger.info("Sending request", method=method, url=url)

        headers = {"Accept": "application/json"}
        content = None
        if payload is not None:
            try:
                content = json.dumps(payload).encode("utf-8")
            except (TypeError, ValueError) as exc:
                msg = f"marshaling data: {exc}"
                raise RequestEncodeError(msg) from exc
            headers["Content-Type"] = "application/json"

        start_time = time.time()
        try:
            self._logger.debug("Making API request", method=method, path=path)
            response = self._http.request(
                method,
                url,
                content=content,
                headers=headers,
                auth=self._auth,
            )
            response.raise_for_status()
            duration = time.time() - start_time
            self._logger.debug(
                "API request completed",
                duration_seconds=round(duration, 3),
            )
            return response.content  # noqa: TRY300

        except httpx.HTTPError:
            duration = time.time() - start_time
            self._logger.exception(
                "API request failed",
                method=method,
                path=path,
                duration_seconds=round(duration, 3),
            )
            raise
