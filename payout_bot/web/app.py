"""
HTTP entry point.

Flask application that runs one payout check per request. Deployed as a
serverless function; the handler is built on the first request and kept
for the life of the process.
"""

from typing import Callable, Optional

import structlog
from flask import Flask, current_app, jsonify, request

from ..config.loader import load_settings
from ..core.handler import PayoutHandler, build_handler
from ..core.logging import setup_logging

logger = structlog.get_logger(__name__)

HANDLER_KEY = "payout_handler"
METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


def _handler_from_environment() -> PayoutHandler:
    settings = load_settings()
    setup_logging(settings.log_level, settings.log_format)
    handler = build_handler(settings)
    # A ledger that cannot be written would repeat every announcement.
    handler.ledger.verify_writable()
    return handler


def get_handler() -> PayoutHandler:
    """Return the process-wide handler, building it on first use."""
    handler = current_app.extensions.get(HANDLER_KEY)
    if handler is None:
        handler = current_app.extensions["payout_handler_factory"]()
        current_app.extensions[HANDLER_KEY] = handler
    return handler


def create_app(
    handler: Optional[PayoutHandler] = None,
    handler_factory: Callable[[], PayoutHandler] = _handler_from_environment
) -> Flask:
    """Create the Flask application.

    Args:
        handler: Ready handler to use (tests pass one in)
        handler_factory: Builds the handler on first request when none given
    """
    app = Flask(__name__)
    app.extensions["payout_handler_factory"] = handler_factory
    if handler is not None:
        app.extensions[HANDLER_KEY] = handler

    @app.route('/', defaults={'path': ''}, methods=METHODS)
    @app.route('/<path:path>', methods=METHODS)
    def check_payout(path):
        result = get_handler().handle(request.headers.get("Authorization"))
        if isinstance(result.body, dict):
            return jsonify(result.body), result.status
        return result.body, result.status

    return app
