"""Configuration, logging setup and client construction."""

import logging
import os
import pathlib
import sys
from typing import TextIO

import pydantic
import structlog

from .client import TeamCityClient
from .retry import DEFAULT_MAX_ATTEMPTS, RetryPolicy
from .sinks import DirectoryResponseSink
from .transport import DEFAULT_TIMEOUT

CONFIG_ENV_VAR = "TEAMCITY_CLIENT_CONFIG_PATH"
logger = structlog.get_logger(__name__)


class ClientConfig(pydantic.BaseModel):
    """Configuration for a TeamCity client."""

    host: str = pydantic.Field(description="TeamCity host, with or without scheme")
    username: str = pydantic.Field(description="HTTP Basic user name")
    password: str = pydantic.Field(description="HTTP Basic password or token")
    timeout: float = pydantic.Field(
        DEFAULT_TIMEOUT,
        description="Request timeout in seconds",
        gt=0,
    )
    max_attempts: int = pydantic.Field(
        DEFAULT_MAX_ATTEMPTS,
        description="Attempts per request before giving up",
        gt=0,
    )
    debug: bool = pydantic.Field(False, description="Log request URLs")
    response_dump_dir: str | None = pydantic.Field(
        None,
        description="Directory receiving response bodies while debugging",
    )
    log_level: str = pydantic.Field(
        "INFO",
        description="Level for applications calling configure_logging",
    )


def configure_logging(log_level_name: str, stream: TextIO | None = None) -> None:
    """Route structlog events to ``stream`` as logfmt lines.

    Meant for applications and scripts built on this package; the client
    never calls it and logs through whatever structlog setup is in place.

    Args:
        log_level_name: Minimum level, e.g. "info" or "DEBUG".
        stream: Destination text stream, ``sys.stderr`` when omitted.

    Raises:
        ValueError: If the level name is unknown.
    """
    level = logging.getLevelName(log_level_name.upper())
    if not isinstance(level, int):
        msg = f"Unknown log level: {log_level_name}"
        raise ValueError(msg)

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.LogfmtRenderer(
                key_order=("timestamp", "level", "event"),
                drop_missing=True,
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.WriteLoggerFactory(file=stream or sys.stderr),
    )


def load_config(config_path: str | os.PathLike) -> ClientConfig:
    """Read and validate a JSON configuration file.

    Raises:
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If the document is not a valid config.
    """
    try:
        text = pathlib.Path(config_path).read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg) from exc
    return ClientConfig.model_validate_json(text)


def create_client_from_config(config: ClientConfig) -> TeamCityClient:
    """Construct a client from validated config."""
    sink = None
    if config.response_dump_dir:
        sink = DirectoryResponseSink(config.response_dump_dir)

    client = TeamCityClient(
        host=config.host,
        username=config.username,
        password=config.password,
        timeout=config.timeout,
        debug=config.debug,
        retry_policy=RetryPolicy(max_attempts=config.max_attempts),
        response_sink=sink,
    )
    logger.info("Created TeamCity client", host=config.host, debug=config.debug)
    return client


def create_client(config_path: str | None = None) -> TeamCityClient:
    """Create a client using a config path or the environment default.

    Logging is left alone; pass ``config.log_level`` to
    :func:`configure_logging` when the application wants it.
    """
    resolved_path = config_path or os.environ.get(CONFIG_ENV_VAR)
    if not resolved_path:
        msg = f"No configuration path given and {CONFIG_ENV_VAR} is not set"
        raise ValueError(msg)
    config = load_config(resolved_path)
    return create_client_from_config(config)
