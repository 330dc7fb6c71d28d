#!/usr/bin/env python3
"""
Database build for the storefront
Creates tables and optionally seeds the catalog with debug data
"""

from pathlib import Path
import json

from storefront import db
from storefront.logger import get_logger

logger = get_logger("storefront.build")

DEBUG_DATA_FILE = Path(__file__).parent / 'data' / 'build_data_debug.json'


def build_models():
    """Create all tables (models are registered by create_app)"""
    logger.info("Creating database tables...")
    db.create_all()
    logger.info("Database tables created")


def insert_debug_data(data_file=DEBUG_DATA_FILE):
    """
    Seed products from a JSON file when the catalog is empty.

    Args:
        data_file (Path): JSON file with a top-level "products" list

    Returns:
        int: Number of products inserted
    """
    from storefront.data.catalog.product import Product

    if Product.query.first() is not None:
        logger.info("Catalog already has products, skipping debug data")
        return 0

    if not Path(data_file).exists():
        logger.warning(f"Debug data file not found: {data_file}")
        return 0

    with open(data_file, 'r') as f:
        debug_data = json.load(f)

    inserted = 0
    for product_data in debug_data.get('products', []):
        Product.create_from_dict(product_data, skip_fields=['id'], commit=False)
        inserted += 1

    db.session.commit()
    logger.info(f"Inserted {inserted} debug products")
    return inserted


def build_database(enable_debug_data=True):
    """
    Build the database

    Args:
        enable_debug_data (bool): Whether to insert debug data (default: True)
    """
    logger.debug("Building database")
    build_models()

    if enable_debug_data:
        try:
            insert_debug_data()
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error inserting debug data: {e}")
            raise

    logger.info("Database build completed")
