"""Request correlation ids, request logging and JSON error responses."""

import uuid

from flask import g, jsonify, request
from werkzeug.exceptions import HTTPException

from leaderboarder import login_manager
from leaderboarder.errors import LeaderboarderError

CORRELATION_HEADER = 'X-Correlation-ID'


def current_correlation_id():
    return getattr(g, 'correlation_id', None)


def _error_response(message, status):
    return jsonify({'error': message, 'correlation_id': current_correlation_id()}), status


def register_middleware(app):
    @app.before_request
    def assign_correlation_id():
        g.correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())

    @app.after_request
    def log_request(response):
        cid = current_correlation_id()
        if cid:
            response.headers[CORRELATION_HEADER] = cid
        app.logger.info(
            f"[request] cid={cid} method={request.method} path={request.path} status={response.status_code}"
        )
        return response

    @app.errorhandler(LeaderboarderError)
    def handle_domain_error(exc):
        if exc.status_code >= 500:
            app.logger.error(f"[error] cid={current_correlation_id()} {exc.__class__.__name__}: {exc.message}")
        return _error_response(exc.message, exc.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return _error_response(exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(exc):
        app.logger.exception(f"[error] cid={current_correlation_id()} unhandled exception")
        return _error_response('Internal server error', 500)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Unauthorized'}), 401
