"""Webhook relay from uptime monitors to the ServerChan push API.

This package contains:
- constants: environment variable names and defaults
- config: immutable runtime configuration built once at startup
- errors: exception taxonomy mapped to HTTP replies
- utils: time formatting and small helpers
- validation: inbound request authentication and payload parsing
- formatters: ServerChan title/body composition
- services: outbound call to ServerChan
- controller: Flask app factory and endpoints
"""
