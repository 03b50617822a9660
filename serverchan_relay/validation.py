import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from .config import RelayConfig
from .constants import (
    REPLY_AUTH_REQUIRED,
    REPLY_INVALID_JSON,
    REPLY_INVALID_TOKEN,
    REPLY_MISSING_FIELDS,
)
from .errors import BadRequest, MethodNotAllowed, Unauthorized
from .utils import unix_to_datetime, zone_name

logger = logging.getLogger(__name__)

# JSON key -> AlertRecord attribute
STRING_FIELDS = {
    'monitor_id': 'id',
    'monitor_name': 'name',
    'monitor_target': 'target',
    'monitor_type': 'type',
    'monitor_category': 'category',
    'monitor_status': 'status',
}


@dataclass(frozen=True)
class AlertRecord:
    name: str
    target: str
    status: str
    timestamp: int
    id: str = ""
    type: str = ""
    category: str = ""
    errors: Dict[str, str] = field(default_factory=dict)

    def is_valid(self) -> bool:
        return bool(self.name and self.target and self.status and self.timestamp != 0)


def check_method(method: str):
    if method != 'POST':
        raise MethodNotAllowed(f"method {method} not allowed")


def check_authorization(headers: Mapping[str, str], config: RelayConfig):
    auth_header = headers.get('Authorization')
    if not auth_header:
        raise Unauthorized("missing Authorization header", public_message=REPLY_AUTH_REQUIRED)
    if auth_header != config.expected_authorization:
        raise Unauthorized("Authorization header does not match", public_message=REPLY_INVALID_TOKEN)


def _invalid(detail: str) -> BadRequest:
    return BadRequest(detail, public_message=REPLY_INVALID_JSON)


def _parse_string(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise _invalid(f"{key} must be a string, got {type(value).__name__}")
    return value


def _parse_timestamp(data: Dict[str, Any]) -> int:
    value = data.get('timestamp')
    if value is None:
        return 0
    # bool is an int subclass, reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise _invalid(f"timestamp must be an integer, got {value!r}")
    return value


def _parse_errors(data: Dict[str, Any]) -> Dict[str, str]:
    value = data.get('monitor_errors')
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise _invalid("monitor_errors must be an object")
    errors = {}
    for location, message in value.items():
        if message is None:
            message = ""
        if not isinstance(message, str):
            raise _invalid(f"monitor_errors[{location}] must be a string")
        errors[location] = message
    return errors


def parse_alert(body: bytes) -> AlertRecord:
    """Decode the webhook body into an AlertRecord.

    Raises BadRequest when the body is not the expected JSON shape or a
    required field is missing.
    """
    # Invalid UTF-8 inside strings becomes U+FFFD instead of failing the decode
    text = body.decode('utf-8', errors='replace')
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as exc:
        raise _invalid(f"body is not valid JSON: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise _invalid(f"body must be a JSON object, got {type(data).__name__}")

    values = {attr: _parse_string(data, key) for key, attr in STRING_FIELDS.items()}
    record = AlertRecord(
        timestamp=_parse_timestamp(data),
        errors=_parse_errors(data),
        **values,
    )

    if not record.is_valid():
        raise BadRequest("name, target, status and timestamp are required", public_message=REPLY_MISSING_FIELDS)
    return record


def validate_request(method: str, headers: Mapping[str, str], read_body, config: RelayConfig) -> AlertRecord:
    """Run the inbound checks in order and return the parsed record.

    ``read_body`` is called only once the caller is authenticated, so
    unauthenticated requests never have their payload read.
    """
    check_method(method)
    check_authorization(headers, config)

    body = read_body()
    logger.info("Received webhook data: %s", body.decode('utf-8', errors='replace'))

    record = parse_alert(body)
    converted = unix_to_datetime(record.timestamp, config.time_location)

    logger.info(
        "Parsed monitor data: Name=%s, Target=%s, Status=%s, Type=%s",
        record.name, record.target, record.status, record.type,
    )
    logger.info("Timestamp: %d -> %s (Timezone: %s)", record.timestamp, converted, zone_name(config.time_location))
    return record


def summarize(record: AlertRecord) -> str:
    return f"{record.name} ({record.target}) status={record.status}"
