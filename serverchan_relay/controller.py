import logging

from flask import Flask, request
from werkzeug.exceptions import ClientDisconnected

from .config import RelayConfig, load_config
from .constants import REPLY_METHOD_NOT_ALLOWED, REPLY_OK, REPLY_READ_BODY_FAILED, SERVICE_NAME, WEBHOOK_PATH
from .errors import RelayError, ResponseReadFailure, UpstreamFailure
from .formatters import compose_notification
from .services import send_to_serverchan
from .utils import zone_name
from .validation import summarize, validate_request

logger = logging.getLogger(__name__)

PLAIN_TEXT = {'Content-Type': 'text/plain; charset=utf-8'}


def _read_request_body():
    try:
        return request.get_data(cache=False)
    except (ClientDisconnected, OSError) as exc:
        raise ResponseReadFailure(f"failed to read request body: {exc}", public_message=REPLY_READ_BODY_FAILED) from exc


def create_app(config: RelayConfig | None = None):
    if config is None:
        config = load_config()

    app = Flask(__name__)
    app.config['RELAY'] = config

    logger.info("Service starting: port %s, timezone %s", config.port, zone_name(config.time_location))

    @app.errorhandler(RelayError)
    def handle_relay_error(exc):
        if isinstance(exc, UpstreamFailure):
            logger.error("Error sending to ServerChan: %s", exc)
        elif exc.status_code >= 500:
            logger.error("Webhook failed: %s", exc)
        else:
            logger.warning("Webhook rejected (%d): %s", exc.status_code, exc)
        return exc.public_message, exc.status_code, PLAIN_TEXT

    # Methods werkzeug rejects before routing (PROPFIND, TRACE, ...)
    @app.errorhandler(405)
    def handle_method_not_allowed(exc):
        logger.warning("Webhook rejected (405): method %s not allowed", request.method)
        return REPLY_METHOD_NOT_ALLOWED, 405, PLAIN_TEXT

    @app.route('/health', methods=['GET'])
    def health():
        return {'status': 'ok', 'service': SERVICE_NAME}, 200

    # Every method is routed here so non-POST requests get the plain-text 405
    @app.route(
        WEBHOOK_PATH,
        methods=['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS'],
        provide_automatic_options=False,
    )
    def webhook():
        record = validate_request(request.method, request.headers, _read_request_body, config)
        notification = compose_notification(record, config.time_location)
        send_to_serverchan(config, notification)
        logger.info("Relayed alert %s", summarize(record))
        return REPLY_OK, 200, PLAIN_TEXT

    return app
