"""Optional sinks receiving raw response bodies for debugging."""

import tempfile
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import TypeAlias

import structlog

logger = structlog.get_logger(__name__)

# Called with the request URL and the raw body of each decoded response.
ResponseSink: TypeAlias = Callable[[str, bytes], None]


class DirectoryResponseSink:
    """Write each response body to a timestamped JSON file in a directory.

    Files are named ``teamcity-<HH>h<MM>m<SS>.<mmm>.json``; a numeric suffix
    is added when several responses land in the same millisecond.
    """

    def __init__(self, directory: str | Path | None = None, prefix: str = "teamcity"):
        self.directory = Path(directory) if directory else Path(tempfile.gettempdir())
        self.prefix = prefix

    def _target(self, now: datetime) -> Path:
        stamp = f"{now:%H}h{now:%M}m{now:%S}.{now.microsecond // 1000:03d}"
        target = self.directory / f"{self.prefix}-{stamp}.json"
        counter = 1
        while target.exists():
            target = self.directory / f"{self.prefix}-{stamp}-{counter}.json"
            counter += 1
        return target

    def __call__(self, url: str, body: bytes) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self._target(datetime.now())
        target.write_bytes(body)
        logger.debug("Saved response body", url=url, path=str(target))
