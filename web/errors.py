import logging
from flask import Flask, abort, jsonify, request
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


def json_object() -> dict:
    """The request's JSON body as a dict; a missing body counts as empty."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        abort(400, "Request body must be a JSON object")
    return data


def register_error_handlers(app: Flask):
    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify(error=e.description), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception):
        logger.exception("Unhandled error")
        return jsonify(error="Internal server error"), 500
