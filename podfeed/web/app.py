"""Flask JSON API serving the mapped podcast feed.

Every response uses the ``ApiResponse`` envelope. Terminal feed errors are
logged with their raw cause and returned with a short ``error`` plus the
verbose ``details``.
"""

import logging
from datetime import datetime, timezone

from flask import Blueprint, Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from podfeed import __version__
from podfeed.config import Settings, get_settings
from podfeed.core.mapper import load_feed
from podfeed.core.normalizers import parse_int
from podfeed.errors import is_network_failure
from podfeed.models.schemas import ApiResponse, FeedResult, Pagination
from podfeed.web.cache import FeedCache

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _envelope(status: int, **fields):
    body = ApiResponse(timestamp=_utcnow(), **fields).to_json()
    return jsonify(body), status


def _settings() -> Settings:
    return current_app.config["settings"]


def _cached_feed() -> FeedResult:
    settings = _settings()
    cache: FeedCache = current_app.config["feed_cache"]
    return cache.get_or_load(settings.rss_feed_url, lambda: load_feed(settings))


def _failure(error: str, exc: Exception):
    logger.exception("%s: %s", error, exc)
    status = 503 if is_network_failure(exc) else 500
    return _envelope(status, success=False, error=error, details=str(exc))


def _int_arg(name: str, default: int) -> int:
    number = parse_int(request.args.get(name))
    return default if number is None else number


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@api.route("/health", methods=["GET"])
def health():
    return jsonify({
        "status": "ok",
        "time": _utcnow().isoformat(),
        "version": __version__,
    })


@api.route("/episodes", methods=["GET"])
def list_episodes():
    settings = _settings()
    limit = min(max(_int_arg("limit", settings.default_page_size), 1), settings.max_page_size)
    offset = max(_int_arg("offset", 0), 0)

    if not settings.feed_configured:
        return _envelope(500, success=False, error="RSS feed URL not configured")

    try:
        feed = _cached_feed()
    except Exception as e:
        return _failure("Failed to fetch episodes", e)

    total = len(feed.episodes)
    page = feed.episodes[offset:offset + limit]
    response, status = _envelope(
        200,
        success=True,
        data=[ep.to_json() for ep in page],
        pagination=Pagination(
            total=total, limit=limit, offset=offset, has_more=offset + limit < total,
        ),
    )
    response.headers["Cache-Control"] = f"public, max-age={settings.episodes_max_age}"
    return response, status


@api.route("/podcast-info", methods=["GET"])
def podcast_info():
    settings = _settings()
    if not settings.feed_configured:
        return _envelope(500, success=False, error="RSS feed URL not configured")

    try:
        feed = _cached_feed()
    except Exception as e:
        return _failure("Failed to fetch podcast information", e)

    response, status = _envelope(200, success=True, data=feed.podcast.to_json())
    response.headers["Cache-Control"] = f"public, max-age={settings.podcast_info_max_age}"
    return response, status


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app(settings: Settings | None = None) -> Flask:
    settings = settings or get_settings()

    app = Flask(__name__)
    app.config["settings"] = settings
    app.config["feed_cache"] = FeedCache(ttl_seconds=settings.feed_cache_ttl_seconds)
    app.register_blueprint(api, url_prefix="/api")

    @app.after_request
    def add_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = settings.cors_origin
        response.headers["Access-Control-Allow-Headers"] = "Content-Type, Accept"
        response.headers["Access-Control-Allow-Methods"] = "GET, OPTIONS"
        return response

    @app.errorhandler(404)
    def not_found(e):
        return _envelope(404, success=False, error="Route not found")

    @app.errorhandler(405)
    def method_not_allowed(e):
        return _envelope(405, success=False, error="Method not allowed")

    @app.errorhandler(Exception)
    def unhandled(e):
        if isinstance(e, HTTPException):
            return _envelope(e.code or 500, success=False, error=e.name)
        logger.exception("Unhandled error")
        return _envelope(500, success=False, error="Internal server error")

    return app
