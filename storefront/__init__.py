import os
from pathlib import Path

from flask import Flask
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

from storefront.logger import get_logger

db = SQLAlchemy()
migrate = Migrate()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["1000 per day", "200 per hour"],
    storage_uri="memory://"  # single process; swap for redis:// when scaled out
)


def _env_flag(name, default):
    return os.environ.get(name, default).lower() in ('true', '1', 'yes', 'on')


def _default_database_uri():
    instance_dir = Path(__file__).parent.parent / 'instance'
    instance_dir.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{(instance_dir / 'storefront.db').resolve()}"


def config_from_env():
    """Read every setting the app understands from the environment."""
    return {
        'SECRET_KEY': os.environ.get('SECRET_KEY'),
        'SQLALCHEMY_DATABASE_URI': os.environ.get('DATABASE_URL') or _default_database_uri(),
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'ORDER_RESERVATION_MINUTES': int(os.environ.get('ORDER_RESERVATION_MINUTES', '15')),
        'ORDER_RATE_LIMIT': os.environ.get('ORDER_RATE_LIMIT', '30 per minute'),
        # an unset base URL means competitor prices are unavailable
        'COMPETITOR_API_BASE_URL': os.environ.get('COMPETITOR_API_BASE_URL'),
        'COMPETITOR_API_KEY': os.environ.get('COMPETITOR_API_KEY'),
        'COMPETITOR_API_TIMEOUT': float(os.environ.get('COMPETITOR_API_TIMEOUT', '10')),
        'RATELIMIT_ENABLED': _env_flag('RATELIMIT_ENABLED', 'True'),
    }


def create_app(config_overrides=None):
    """
    Application factory.

    Settings come from the environment (see generate_env.py) with
    `config_overrides` applied on top; tests use the overrides for an
    in-memory database and a fixed SECRET_KEY.

    Raises:
        RuntimeError: SECRET_KEY is missing
    """
    app = Flask(__name__)
    logger = get_logger("storefront.app")
    logger.info("Initializing Flask application")

    app.config.update(config_from_env())
    if config_overrides:
        app.config.update(config_overrides)

    # SECURITY: no fallback secret
    if not app.config['SECRET_KEY']:
        logger.critical("SECRET_KEY not set in environment! Application cannot start.")
        raise RuntimeError("SECRET_KEY environment variable is required")

    if not app.config['RATELIMIT_ENABLED']:
        logger.warning("Rate limiting DISABLED")
    logger.debug(f"Database backend: {app.config['SQLALCHEMY_DATABASE_URI'].split(':', 1)[0]}")

    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)

    # register models with the metadata
    from storefront.data.core.user import User  # noqa: F401
    from storefront.data.catalog.product import Product  # noqa: F401
    from storefront.data.ordering.cart import Cart  # noqa: F401
    from storefront.data.ordering.cart_item import CartItem  # noqa: F401
    from storefront.data.ordering.cart_addition import CartAddition  # noqa: F401
    from storefront.data.ordering.order import Order  # noqa: F401
    from storefront.data.ordering.order_line import OrderLine  # noqa: F401

    from storefront.presentation.routes import init_app as init_routes
    init_routes(app)

    @app.after_request
    def set_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        return response

    logger.info("Flask application initialization complete")
    return app
