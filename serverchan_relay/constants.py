import os

# Defaults used when the environment does not provide a value
DEFAULT_PORT = ":8080"
DEFAULT_AUTH_TOKEN = "default_auth_token_here"
DEFAULT_SERVER_CHAN_KEY = "default_server_chan_key_here"
DEFAULT_TIME_ZONE = "Asia/Shanghai"
DEFAULT_SERVER_CHAN_BASE_URL = "https://sctapi.ftqq.com"
DEFAULT_SERVER_CHAN_TIMEOUT_SECONDS = 10.0

# Environment variable names
ENV_PORT = "PORT"
ENV_AUTH_TOKEN = "AUTH_TOKEN"
ENV_SERVER_CHAN_KEY = "SERVER_CHAN_KEY"
ENV_TIME_ZONE = "TZ"
ENV_SERVER_CHAN_BASE_URL = "SERVER_CHAN_BASE_URL"
ENV_SERVER_CHAN_TIMEOUT_SECONDS = "SERVER_CHAN_TIMEOUT_SECONDS"

DEBUG_MODE = os.getenv("DEBUG_MODE", "False").lower() == "true"

WEBHOOK_PATH = "/webhook"
SERVICE_NAME = "serverchan-relay"

# Status sentinel and the push labels (external contract with the ServerChan reader)
STATUS_OFFLINE = "offline"
STATUS_LABELS = {
    "offline": "离线",
    "recovered": "恢复",
}
TITLE_MAX_LENGTH = 32
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
ERRORS_HEADER = "**错误信息:**"

# Plain-text replies to the webhook caller
REPLY_OK = "Webhook processed successfully"
REPLY_METHOD_NOT_ALLOWED = "Method not allowed"
REPLY_AUTH_REQUIRED = "Authorization header required"
REPLY_INVALID_TOKEN = "Invalid token"
REPLY_READ_BODY_FAILED = "Error reading request body"
REPLY_INVALID_JSON = "Invalid JSON format"
REPLY_MISSING_FIELDS = "Missing required fields"
REPLY_FORWARD_FAILED = "Error sending to ServerChan"
