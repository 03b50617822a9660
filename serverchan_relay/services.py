import json
import logging
from dataclasses import dataclass
from typing import Optional

import requests

from .config import RelayConfig
from .constants import REPLY_FORWARD_FAILED
from .errors import ResponseReadFailure, UpstreamFailure
from .formatters import NotificationRequest
from .utils import mask_secret, zone_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServerChanResponse:
    code: int
    message: str = ""
    pushid: str = ""
    readkey: str = ""
    error: str = ""
    errorcode: int = 0

    @property
    def ok(self) -> bool:
        return self.code == 0


def _field(data: dict, key: str, kind, default):
    value = data.get(key, default)
    if value is None:
        return default
    if kind is int and isinstance(value, bool):
        raise ValueError(f"{key} must be {kind.__name__}")
    if not isinstance(value, kind):
        raise ValueError(f"{key} must be {kind.__name__}")
    return value


def parse_serverchan_response(body: bytes) -> ServerChanResponse:
    """Decode a ServerChan reply. Raises ValueError when the shape does not match."""
    try:
        data = json.loads(body)
    except RecursionError as exc:
        raise ValueError(f"response nested too deeply: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError("response is not a JSON object")
    inner = data.get('data') or {}
    if not isinstance(inner, dict):
        raise ValueError("data must be an object")
    return ServerChanResponse(
        code=_field(data, 'code', int, 0),
        message=_field(data, 'message', str, ""),
        pushid=_field(inner, 'pushid', str, ""),
        readkey=_field(inner, 'readkey', str, ""),
        error=_field(inner, 'error', str, ""),
        errorcode=_field(inner, 'errorcode', int, 0),
    )


def log_serverchan_response(body: bytes) -> Optional[ServerChanResponse]:
    try:
        result = parse_serverchan_response(body)
    except ValueError as exc:
        logger.warning("Failed to parse ServerChan JSON response: %s", exc)
        return None

    if result.ok:
        logger.info("ServerChan push successful! PushID: %s", result.pushid)
    else:
        logger.warning(
            "ServerChan push failed! Code: %d, Message: %s, Error: %s",
            result.code, result.message, result.error,
        )
    return result


def send_to_serverchan(config: RelayConfig, notification: NotificationRequest) -> Optional[ServerChanResponse]:
    """POST the notification to ServerChan.

    Success is decided by the HTTP status alone; the parsed reply is returned
    when it could be decoded. Raises UpstreamFailure on transport errors or a
    non-200 status, ResponseReadFailure when the reply body cannot be read.
    """
    payload = notification.to_payload()
    masked_url = f"{config.server_chan_base_url}/{mask_secret(config.server_chan_key)}.send"

    logger.debug("Using timezone: %s", zone_name(config.time_location))
    logger.info("Sending to ServerChan: %s", json.dumps(payload, ensure_ascii=False))
    logger.info("ServerChan URL: %s", masked_url)

    try:
        resp = requests.post(
            config.server_chan_url,
            json=payload,
            timeout=config.timeout_seconds,
            stream=True,
        )
    except requests.exceptions.Timeout as exc:
        raise UpstreamFailure(f"HTTP request timed out after {config.timeout_seconds}s: {exc}") from exc
    except requests.exceptions.RequestException as exc:
        raise UpstreamFailure(f"HTTP request failed: {exc}") from exc

    with resp:
        try:
            body = resp.content
        except requests.exceptions.RequestException as exc:
            raise ResponseReadFailure(
                f"Failed to read response body: {exc}",
                public_message=REPLY_FORWARD_FAILED,
            ) from exc

    text = body.decode('utf-8', errors='replace')
    logger.info("ServerChan response status: %s %s", resp.status_code, resp.reason)
    logger.info("ServerChan response body: %s", text)

    result = log_serverchan_response(body)

    if resp.status_code != requests.codes.ok:
        raise UpstreamFailure(
            f"ServerChan API returned non-200 status: {resp.status_code} {resp.reason}, body: {text}",
            status_code=resp.status_code,
            body=text,
        )
    return result
