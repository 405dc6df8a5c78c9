import logging
from time import monotonic

from flask import Flask, jsonify, request
from flask_cors import CORS

from api.routes import bp as api_bp
from config import Settings
from services.errors import DataUnavailableError, ValidationError
from services.market import MarketDataService
from services.yahoo import YahooFinanceClient
from utils.cache import TTLCache

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def create_app(settings: Settings = None, client=None, clock=monotonic, now=None):
    settings = settings or Settings()
    configure_logging(settings.LOG_LEVEL)

    app = Flask(__name__)
    CORS(app)
    app.config["SETTINGS"] = settings

    # one cache per app; torn down with it
    cache = TTLCache(
        ttl_seconds=settings.CACHE_TTL_SECONDS,
        maxsize=settings.CACHE_MAXSIZE,
        sweep_interval=settings.CACHE_SWEEP_SECONDS,
        clock=clock,
    )
    client = client or YahooFinanceClient(
        timeout=settings.UPSTREAM_TIMEOUT_SECS,
        region=settings.SCREENER_REGION,
    )
    app.extensions["market_data"] = MarketDataService(
        cache, client,
        ttl=settings.CACHE_TTL_SECONDS,
        screener_count=settings.SCREENER_COUNT,
        now=now,
    )
    app.register_blueprint(api_bp)

    @app.errorhandler(ValidationError)
    def handle_validation(e):
        return jsonify(error=str(e)), 400

    @app.errorhandler(DataUnavailableError)
    def handle_unavailable(e):
        return jsonify(error=str(e)), 502

    # Return JSON for API errors so the client never sees HTML
    @app.errorhandler(404)
    def handle_404(e):
        if request.path.startswith('/api/'):
            return jsonify(error="Not found"), 404
        return e, 404

    @app.errorhandler(500)
    def handle_500(e):
        if request.path.startswith('/api/'):
            return jsonify(error="Internal server error"), 500
        return e, 500

    logger.info("Market data API ready (cache ttl=%ss)", settings.CACHE_TTL_SECONDS)
    return app


if __name__ == '__main__':
    settings = Settings()
    app = create_app(settings)
    try:
        app.run(host=settings.HOST, port=settings.PORT, debug=settings.DEBUG)
    finally:
        app.extensions["market_data"].cache.clear()
