"""
Routes package for the storefront JSON API
"""

from flask import jsonify

from storefront.logger import get_logger

logger = get_logger("storefront.routes")


def init_app(app):
    """Initialize all route blueprints with the Flask app"""
    logger.debug("Initializing route blueprints")

    from . import health, products, cart, orders

    app.register_blueprint(health.bp)
    app.register_blueprint(products.bp, url_prefix='/products')
    app.register_blueprint(cart.bp, url_prefix='/cart')
    app.register_blueprint(orders.bp, url_prefix='/orders')

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(429)
    def rate_limited(error):
        return jsonify({'error': f"Rate limit exceeded: {error.description}"}), 429

    logger.debug("Route blueprints registered")
