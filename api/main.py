"""
Flask application for the Forex Quote API.

This API serves exchange rate quotes from the database as JSON or JSONP,
with HTTP caching headers suitable for a shared reverse cache.
"""

import logging
import re
from datetime import date, datetime, time, timezone
from typing import Optional

import pg8000.dbapi as pg8000
from flask import Flask, Response, request
from werkzeug.routing import BaseConverter

from api.core import db_manager, settings
from api.schemas import ErrorResponse, ServiceDetails
from api.services import Invalid, Quote, RateRepository
from api.utils import parse_symbols

# Configure logging
logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

# JSONP callbacks are limited to (dotted) JavaScript identifiers.
CALLBACK_PATTERN = re.compile(r"[A-Za-z_$][\w$.]*")


class IsoDateConverter(BaseConverter):
    """Matches a YYYY-MM-DD path segment; calendar validity is checked later."""

    regex = r"\d{4}-\d{2}-\d{2}"


# Initialize Flask app
app = Flask(__name__)
app.url_map.converters["isodate"] = IsoDateConverter

# Ensure indexes exist (idempotent). This runs on import/startup.
if settings.ENSURE_INDEXES:
    db_manager.ensure_indexes()

rate_repository = RateRepository(db_manager)


def encode_json(data) -> str:
    return app.json.dumps(data)


def jsonp(data, status: int = 200) -> Response:
    """Render ``data`` as JSON, or as JSONP when a ``callback`` is given."""
    body = encode_json(data)
    callback = request.args.get("callback")
    if callback:
        if not CALLBACK_PATTERN.fullmatch(callback):
            raise Invalid("Invalid callback")
        return Response(f"{callback}({body})", status, mimetype="application/javascript")
    return Response(body, status, mimetype="application/json")


def error_response(message: str, status: int) -> Response:
    return Response(
        encode_json(ErrorResponse(error=message).to_dict()),
        status,
        mimetype="application/json",
    )


def quote_response(requested: Optional[str] = None) -> Response:
    """Build the quote for this request and shape it into a response."""
    params = {
        "base": request.args.get("base"),
        "from": request.args.get("from"),
        "date": requested or request.args.get("date"),
    }
    quote = Quote.from_params(params, rate_repository)

    response = jsonp(quote.filtered(parse_symbols(request.args)))
    response.last_modified = last_modified_for(quote.date)
    return response.make_conditional(request)


def last_modified_for(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


@app.before_request
def answer_preflight():
    # CORS preflight is answered for any path, known or not.
    if request.method == "OPTIONS":
        return Response(status=200)
    return None


@app.after_request
def add_cache_control(response: Response) -> Response:
    if request.method in ("GET", "HEAD"):
        response.cache_control.public = True
        response.cache_control.must_revalidate = True
        response.cache_control.max_age = settings.CACHE_MAX_AGE
    return response


@app.route("/")
def get_details():
    """
    Describe the service.

    Returns:
        JSON response with the data provider URL and the deployed version,
        tagged with the version as its ETag
    """
    details = ServiceDetails(details=settings.DETAILS_URL, version=settings.APP_VERSION)
    response = jsonp(details.to_dict())
    response.set_etag(settings.APP_VERSION)
    return response.make_conditional(request)


@app.route("/latest")
def get_latest_quote():
    """
    Fetch the most recent quote.

    Query Parameters:
        date: Optional YYYY-MM-DD date, as for the dated route
        base: Base currency (default EUR), ``from`` is accepted as an alias
        symbols: Comma-separated currency codes to keep, ``to`` is an alias
        callback: JSONP function name

    Raises:
        422: If the date or base currency is invalid
    """
    return quote_response()


@app.route("/<isodate:requested>")
def get_historical_quote(requested: str):
    """
    Fetch the quote published on or most recently before a date.

    Takes the same query parameters as ``/latest``.

    Raises:
        422: If the date is not a valid calendar date, predates the
            reference rates or the base currency is unknown
    """
    return quote_response(requested)


@app.errorhandler(404)
def not_found(error):
    return error_response("Not found", 404)


@app.errorhandler(405)
def method_not_allowed(error):
    return error_response("Method not allowed", 405)


@app.errorhandler(Invalid)
def invalid_quote(error: Invalid):
    return error_response(str(error), 422)


@app.errorhandler(pg8000.Error)
def database_error(error: pg8000.Error):
    logger.error("Database error: %s", error)
    return error_response("Database error occurred", 500)


@app.errorhandler(500)
def internal_error(error):
    logger.error("Unexpected error: %s", getattr(error, "original_exception", error))
    return error_response("Internal server error", 500)


# Vercel serverless function handler
def handler(request):
    """Serverless function handler for Vercel."""
    with app.test_request_context(
        request.url,
        method=request.method,
        headers=dict(request.headers),
        data=request.get_data(),
    ):
        return app.full_dispatch_request()


# Used during development
# if __name__ == "__main__":
#     app.run(host=settings.HOST, port=settings.PORT, debug=True)
