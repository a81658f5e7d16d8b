"""
Flask Application Factory - Marketplace Sales Dashboard API

Serves the dashboard metrics layer:
- /api/dashboard/top: cached fan-out over the rollup functions
- /api/dashboard/month-comparison, /api/dashboard/goals: derived views over
  per-day platform records
- /api/goals: monthly targets (admin writes)

Each app instance owns its cache and worker pool (app.extensions), so tests
can build isolated apps.
"""

import logging
import os

from flask import Flask, jsonify
from flask_cors import CORS

from config import Config
from models.database import db

logger = logging.getLogger('dashboard.app')


def create_app(config_object=None):
    config_object = config_object or Config

    app = Flask(__name__)
    app.config.from_object(config_object)
    if not app.config.get('SQLALCHEMY_DATABASE_URI'):
        app.config['SQLALCHEMY_DATABASE_URI'] = config_object.database_url()

    CORS(app,
         resources={r"/api/*": {"origins": app.config.get('CORS_ORIGINS', '*')}},
         methods=["GET", "POST", "OPTIONS", "DELETE"],
         allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
         expose_headers=["X-Request-ID", "X-DB-Time-Ms", "X-Query-Count", "X-Cache"],
         supports_credentials=False)

    # === MIDDLEWARE ===
    # Request ID injection for request correlation and debugging
    from api.middleware import setup_request_id_middleware
    setup_request_id_middleware(app)

    # Query timing instrumentation (production-safe, no EXPLAIN)
    from api.middleware import setup_query_timing_middleware
    setup_query_timing_middleware(app)

    # Request usage logging (sampling + watchlist)
    from api.middleware import setup_request_logging_middleware
    setup_request_logging_middleware(app)

    # Standardized error envelopes (400 validation, 500 aggregation, HTTP errors)
    from api.middleware import setup_error_handlers
    setup_error_handlers(app)

    db.init_app(app)

    from utils.rate_limiter import init_limiter
    limiter = init_limiter(app)

    with app.app_context():
        # Import all models before create_all to ensure tables are created
        from models.goal import Goal  # noqa: F401
        from models.platform_metric import PlatformMetric  # noqa: F401
        from models.product_master import ProductMaster  # noqa: F401

        env = (os.environ.get("ENV") or os.environ.get("FLASK_ENV") or os.environ.get("APP_ENV") or "").lower()
        is_prod = env in {"prod", "production"}
        if app.config.get("TESTING") or not is_prod:
            db.create_all()
            logger.info("Database tables ensured")
        else:
            logger.info("Schema creation disabled in production")

        _init_dashboard_services(app)

    # Register routes
    from routes.dashboard import dashboard_bp
    app.register_blueprint(dashboard_bp, url_prefix='/api/dashboard')

    from routes.goals import goals_bp
    app.register_blueprint(goals_bp, url_prefix='/api/goals')

    _apply_rate_limits(app, limiter)

    @app.route("/api/health", methods=["GET"])
    def health():
        cache = app.extensions['dashboard_cache']
        return jsonify({"status": "ok", "cache": {"size": cache.stats()['size']}})

    return app


def _init_dashboard_services(app):
    """Create the per-app cache and aggregation fetcher."""
    from services.cache_service import TTLCache
    from services.rollup_repository import SqlRollupRepository
    from services.top_entities_service import TopEntitiesService

    cache = TTLCache(
        maxsize=app.config['CACHE_MAX_SIZE'],
        ttl=app.config['TOP_CACHE_TTL_SECONDS'],
    )
    app.extensions['dashboard_cache'] = cache
    app.extensions['top_entities_service'] = TopEntitiesService(
        repository=SqlRollupRepository(db.engine),
        cache=cache,
        ttl=app.config['TOP_CACHE_TTL_SECONDS'],
        timeout=app.config['QUERY_TIMEOUT_SECONDS'],
        max_workers=app.config['AGGREGATION_WORKERS'],
    )


def _apply_rate_limits(app, limiter):
    from utils.rate_limiter import RATE_LIMITS

    tiers = {
        'dashboard.get_top': RATE_LIMITS['cached'],
        'dashboard.month_comparison': RATE_LIMITS['summary'],
        'dashboard.goal_progress': RATE_LIMITS['summary'],
        'dashboard.clear_cache': RATE_LIMITS['write'],
        'goals.upsert_goal': RATE_LIMITS['write'],
    }
    for endpoint, limit in tiers.items():
        view = app.view_functions.get(endpoint)
        if view is not None:
            app.view_functions[endpoint] = limiter.limit(limit)(view)


def run_app():
    """Main entry point for local development - starts server with Flask's dev server."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    app = create_app()
    app.run(debug=app.config.get('DEBUG', False), host="0.0.0.0", port=int(os.environ.get('PORT', 5000)))


if __name__ == "__main__":
    run_app()
