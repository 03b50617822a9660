from .constants import (
    REPLY_FORWARD_FAILED,
    REPLY_INVALID_JSON,
    REPLY_INVALID_TOKEN,
    REPLY_METHOD_NOT_ALLOWED,
    REPLY_READ_BODY_FAILED,
)


class RelayError(Exception):
    """Terminal failure of a webhook request.

    ``public_message`` is what the webhook caller sees; ``str(exc)`` holds the
    diagnostic detail that only goes to the log.
    """

    status_code = 500
    default_message = "Internal error"

    def __init__(self, detail: str = "", public_message: str | None = None):
        super().__init__(detail or public_message or self.default_message)
        self.public_message = public_message or self.default_message


class MethodNotAllowed(RelayError):
    status_code = 405
    default_message = REPLY_METHOD_NOT_ALLOWED


class Unauthorized(RelayError):
    status_code = 401
    default_message = REPLY_INVALID_TOKEN


class BadRequest(RelayError):
    status_code = 400
    default_message = REPLY_INVALID_JSON


class UpstreamFailure(RelayError):
    """Transport error or non-200 reply from ServerChan."""

    status_code = 500
    default_message = REPLY_FORWARD_FAILED

    def __init__(self, detail: str = "", status_code: int | None = None, body: str = ""):
        super().__init__(detail)
        self.upstream_status = status_code
        self.upstream_body = body


class ResponseReadFailure(RelayError):
    status_code = 500
    default_message = REPLY_READ_BODY_FAILED
