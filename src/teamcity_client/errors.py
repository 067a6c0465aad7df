"""Exception types raised by the TeamCity REST client.

Transport failures are not wrapped: they surface as the ``httpx.HTTPError``
subclasses raised by the underlying HTTP client.
"""


class TeamCityError(Exception):
    """Base class for errors raised by this package."""


class RequestEncodeError(TeamCityError):
    """Raised when a request payload cannot be serialized to JSON."""


class DecodeError(TeamCityError):
    """Raised when a response body does not match the expected shape.

    Carries a bounded prefix of the offending payload so failures can be
    diagnosed from logs without dumping whole responses.
    """

    def __init__(self, message: str, snippet: str):
        super().__init__(f"json unmarshal: {message} ({snippet!r})")
        self.snippet = snippet


class NotFoundError(TeamCityError):
    """Raised when a well-formed response says the entity does not exist."""


class BuildNotFoundError(NotFoundError):
    """Raised when a build lookup yields no record."""

    def __init__(self, message: str = "build not found", value: str | None = None):
        super().__init__(message)
        # Placeholder returned alongside the error by id lookups; never a valid id.
        self.value = value


class ChangesNotFoundError(NotFoundError):
    """Raised when a changes response carries no change list."""


class ProblemsNotFoundError(NotFoundError):
    """Raised when a problems response carries no problem occurrence list."""
