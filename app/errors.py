import logging
from flask import Blueprint
from werkzeug.exceptions import HTTPException
from app.exceptions import (  # noqa: F401
    BillingError,
    ValidationError,
    NotFoundError,
    ConflictError,
    UpstreamError,
)
from app.utils.responses import error

errors_bp = Blueprint("errors_bp", __name__)


@errors_bp.app_errorhandler(BillingError)
def handle_billing_error(e):
    if isinstance(e, UpstreamError):
        logging.error("Upstream failure: %s", e.message, exc_info=True)
        return error("A downstream service failed. Please try again later.", status=e.status)
    return error(e.message, status=e.status, details=e.details or None)


@errors_bp.app_errorhandler(HTTPException)
def handle_http_exception(e):
    msg = e.description or getattr(e, "name", "HTTP Error")
    return error(msg, status=e.code, code=e.code)


@errors_bp.app_errorhandler(Exception)
def handle_unexpected_exception(e):
    logging.exception("Unhandled exception")
    return error(
        "An unexpected error occurred. Please try again later.",
        status=500,
        code=500,
    )
