"""Configuration and logging setup for the Marathon API client."""

import json
import logging
import os
import pathlib

import pydantic
import structlog

from . import restapi

CONFIG_ENV_VAR = "MARATHON_CLIENT_CONFIG_PATH"
logger = structlog.get_logger(__name__)


class ClientConfig(pydantic.BaseModel):
    """Configuration for the Marathon API client."""

    url: str = pydantic.Field(description="Base URL of the Marathon API")
    timeout: float = pydantic.Field(
        restapi.DEFAULT_TIMEOUT,
        description="Request timeout in seconds",
        gt=0,
    )
    log_level: str = pydantic.Field("INFO", description="Logging level")


def configure_logging(log_level_name: str) -> None:
    """Configure structlog for logfmt output."""
    log_level = getattr(logging, log_level_name.upper(), logging.INFO)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.EventRenamer("msg"),
            structlog.processors.format_exc_info,
            structlog.processors.LogfmtRenderer(
                key_order=("timestamp", "level", "msg"),
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def load_config(config_path: str) -> ClientConfig:
    """Load configuration from JSON file."""
    path = pathlib.Path(config_path)
    if not path.exists():
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg)

    with path.open("r") as f:
        data = json.load(f)

    return ClientConfig(**data)


def create_client(config_path: str | None = None) -> restapi.MarathonClient:
    """Create a Marathon client using a config path or environment default."""
    resolved_path = config_path or os.environ.get(CONFIG_ENV_VAR, "/config.json")
    config = load_config(resolved_path)
    configure_logging(config.log_level)
    client = restapi.MarathonClient(base_url=config.url, timeout=config.timeout)
    logger.info("Created Marathon client", base_url=client.base_url)
    return client
