import logging
from datetime import datetime

from .constants import DATETIME_FORMAT, DEBUG_MODE


def unix_to_datetime(timestamp, location):
    """Format Unix seconds as ``YYYY-MM-DD HH:MM:SS`` in the given zone.

    Instants outside the range ``datetime`` supports render as the raw integer.
    """
    try:
        return datetime.fromtimestamp(timestamp, location).strftime(DATETIME_FORMAT)
    except (OverflowError, OSError, ValueError):
        return str(timestamp)


def zone_name(location):
    return str(getattr(location, 'key', None) or location)


def truncate(text, limit):
    if len(text) > limit:
        return text[:limit]
    return text


def mask_secret(value, visible=4):
    if not value:
        return ""
    if len(value) <= visible:
        return "*" * len(value)
    return value[:visible] + "*" * (len(value) - visible)


def configure_logging(debug_mode=DEBUG_MODE):
    logging.basicConfig(
        level=logging.DEBUG if debug_mode else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
