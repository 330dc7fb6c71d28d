from flask import Blueprint, jsonify

from storefront import db
from storefront.data.catalog.product import Product
from storefront.services.ordering.serializers import product_json

bp = Blueprint('products', __name__)


@bp.get('')
def list_products():
    products = Product.query.order_by(Product.id).all()
    return jsonify([product_json(p) for p in products])


@bp.get('/<int:product_id>')
def show_product(product_id):
    product = db.session.get(Product, product_id)
    if product is None:
        return jsonify({'error': 'Product not found'}), 404
    return jsonify(product_json(product))
