"""Shared fixtures: a TeamCity client wired to an in-memory HTTP transport."""

import httpx
import pytest

from teamcity_client import client, retry

HOST = "teamcity.example.com"
USERNAME = "username"
PASSWORD = "password"


class FakeServer:
    """Records requests and answers them from a queue of responses.

    Each queued item is either an ``httpx.Response``, an exception to raise,
    or a callable producing one of those from the request. The last item is
    reused once the queue is exhausted.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._replies: list = []

    def reply(self, *replies) -> "FakeServer":
        self._replies.extend(replies)
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._replies:
            return httpx.Response(200, json={})
        item = self._replies.pop(0) if len(self._replies) > 1 else self._replies[0]
        if callable(item):
            item = item(request)
        if isinstance(item, Exception):
            raise item
        # Fresh copy so a reused reply never shares state between requests.
        return httpx.Response(item.status_code, headers=item.headers, content=item.content)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def http_client(server: FakeServer) -> httpx.Client:
    with httpx.Client(transport=httpx.MockTransport(server)) as c:
        yield c


@pytest.fixture
def tc(http_client: httpx.Client) -> client.TeamCityClient:
    """Client with the default retry policy talking to the fake server."""
    return client.TeamCityClient(
        HOST,
        USERNAME,
        PASSWORD,
        http_client=http_client,
    )


@pytest.fixture
def retry_all_tc(http_client: httpx.Client) -> client.TeamCityClient:
    """Client retrying every error, like the uniform policy."""
    return client.TeamCityClient(
        HOST,
        USERNAME,
        PASSWORD,
        http_client=http_client,
        retry_policy=retry.RetryPolicy(is_retryable=retry.retry_always),
    )
