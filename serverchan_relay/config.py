import logging
import os
from dataclasses import dataclass
from datetime import timezone, tzinfo
from typing import Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .constants import (
    DEFAULT_AUTH_TOKEN,
    DEFAULT_PORT,
    DEFAULT_SERVER_CHAN_BASE_URL,
    DEFAULT_SERVER_CHAN_KEY,
    DEFAULT_SERVER_CHAN_TIMEOUT_SECONDS,
    DEFAULT_TIME_ZONE,
    ENV_AUTH_TOKEN,
    ENV_PORT,
    ENV_SERVER_CHAN_BASE_URL,
    ENV_SERVER_CHAN_KEY,
    ENV_SERVER_CHAN_TIMEOUT_SECONDS,
    ENV_TIME_ZONE,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RelayConfig:
    """Read-only settings shared by every request."""

    port: str
    auth_token: str
    server_chan_key: str
    time_zone: str
    time_location: tzinfo
    server_chan_base_url: str = DEFAULT_SERVER_CHAN_BASE_URL
    timeout_seconds: float = DEFAULT_SERVER_CHAN_TIMEOUT_SECONDS

    @property
    def listen_port(self) -> int:
        return int(self.port.lstrip(':'))

    @property
    def expected_authorization(self) -> str:
        return f"Bearer {self.auth_token}"

    @property
    def server_chan_url(self) -> str:
        return f"{self.server_chan_base_url}/{self.server_chan_key}.send"


def _get_env(environ: Mapping[str, str], key: str, default: str) -> str:
    value = environ.get(key)
    if value:
        return value
    return default


def normalize_port(port: Optional[str]) -> str:
    """Return the listen address in ``:<port>`` form.

    Bare digits get a leading colon. Anything that is not ``<digits>`` or
    ``:<digits>`` falls back to the default port.
    """
    if not port:
        return DEFAULT_PORT
    port = port.strip()
    digits = port[1:] if port.startswith(':') else port
    if digits.isdigit():
        return f":{digits}"
    logger.warning("Invalid port format '%s', using default port %s", port, DEFAULT_PORT)
    return DEFAULT_PORT


def load_time_location(name: str) -> tzinfo:
    cleaned = (name or "").strip()
    if cleaned.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(cleaned)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        logger.warning("Failed to load time zone '%s', using UTC. Error: %s", name, exc)
        return timezone.utc


def parse_timeout(raw: Optional[str]) -> float:
    if not raw:
        return DEFAULT_SERVER_CHAN_TIMEOUT_SECONDS
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid timeout '%s', using %ss", raw, DEFAULT_SERVER_CHAN_TIMEOUT_SECONDS)
        return DEFAULT_SERVER_CHAN_TIMEOUT_SECONDS
    if value <= 0:
        logger.warning("Invalid timeout '%s', using %ss", raw, DEFAULT_SERVER_CHAN_TIMEOUT_SECONDS)
        return DEFAULT_SERVER_CHAN_TIMEOUT_SECONDS
    return value


def load_config(environ: Optional[Mapping[str, str]] = None) -> RelayConfig:
    """Build the configuration from environment variables, unset ones get defaults."""
    if environ is None:
        environ = os.environ

    auth_token = _get_env(environ, ENV_AUTH_TOKEN, DEFAULT_AUTH_TOKEN)
    if auth_token == DEFAULT_AUTH_TOKEN:
        logger.warning("%s not set, using the built-in default token", ENV_AUTH_TOKEN)

    server_chan_key = _get_env(environ, ENV_SERVER_CHAN_KEY, DEFAULT_SERVER_CHAN_KEY)
    if server_chan_key == DEFAULT_SERVER_CHAN_KEY:
        logger.warning("%s not set, pushes will be rejected by ServerChan", ENV_SERVER_CHAN_KEY)

    time_zone = _get_env(environ, ENV_TIME_ZONE, DEFAULT_TIME_ZONE)
    base_url = _get_env(environ, ENV_SERVER_CHAN_BASE_URL, DEFAULT_SERVER_CHAN_BASE_URL).rstrip('/')

    return RelayConfig(
        port=normalize_port(_get_env(environ, ENV_PORT, DEFAULT_PORT)),
        auth_token=auth_token,
        server_chan_key=server_chan_key,
        time_zone=time_zone,
        time_location=load_time_location(time_zone),
        server_chan_base_url=base_url,
        timeout_seconds=parse_timeout(environ.get(ENV_SERVER_CHAN_TIMEOUT_SECONDS)),
    )
