"""TeamCity REST API client.

Queues builds, polls build and queue state, and fetches logs, changes,
problem and test occurrences. Responses are normalized into a stable typed
model regardless of how the server chose to encode individual fields.

Exports:
    TeamCityClient: Client exposing the REST operations.
    Build: Canonical build record.
    RetryPolicy: Retry configuration shared by a client's requests.
    types: Module containing Pydantic models for wire payloads.
"""

from . import types
from .client import ID_NOT_FOUND, TeamCityClient
from .errors import (
    BuildNotFoundError,
    ChangesNotFoundError,
    DecodeError,
    NotFoundError,
    ProblemsNotFoundError,
    RequestEncodeError,
    TeamCityError,
)
from .models import Build
from .retry import DEFAULT_MAX_ATTEMPTS, RetryPolicy, with_retry
from .sinks import DirectoryResponseSink
from .transport import DEFAULT_TIMEOUT

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_TIMEOUT",
    "ID_NOT_FOUND",
    "Build",
    "BuildNotFoundError",
    "ChangesNotFoundError",
    "DecodeError",
    "DirectoryResponseSink",
    "NotFoundError",
    "ProblemsNotFoundError",
    "RequestEncodeError",
    "RetryPolicy",
    "TeamCityClient",
    "TeamCityError",
    "types",
    "with_retry",
]
