#!/usr/bin/env python3
"""
Run script for the Storefront
Builds the database, runs scheduled jobs or starts the API server.
"""

from storefront import create_app
from storefront.build import build_database
from storefront.logger import get_logger
import sys
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

import argparse

# Run 'python generate_env.py' to create a .env file with a SECRET_KEY.

logger = get_logger("storefront.run")


def parse_arguments(argv=None):
    """Parse command line arguments for build, jobs and server"""
    parser = argparse.ArgumentParser(description='Storefront')
    parser.add_argument('--build-only', action='store_true',
                        help='Build database tables only, then exit without starting the server')
    parser.add_argument('--enable-debug-data', action='store_true', default=True,
                        help='Enable debug data insertion (default: enabled if flag not present)')
    parser.add_argument('--no-debug-data', action='store_false', dest='enable_debug_data',
                        help='Disable debug data insertion')

    jobs = parser.add_mutually_exclusive_group()
    jobs.add_argument('--sweep-expired', action='store_true',
                      help='Expire overdue pending orders and return their stock, then exit')
    jobs.add_argument('--update-prices', action='store_true',
                      help='Recompute dynamic prices for all products, then exit')
    jobs.add_argument('--import-products', metavar='PATH',
                      help='Import products from a NAME,CATEGORY,QTY,PRICE CSV file, then exit')

    parser.add_argument('--dry-run', action='store_true',
                        help='With --update-prices: compute and log prices without saving them')

    return parser.parse_args(argv)


def run_job(args):
    """
    Run the job selected on the command line.

    Returns:
        int: Process exit code
    """
    if args.sweep_expired:
        from storefront.jobs import order_cleanup_job
        order_cleanup_job()
        return 0

    if args.update_prices:
        from storefront.jobs import price_update_job
        result = price_update_job(dry_run=args.dry_run)
        if result is None:
            return 1
        return 1 if result.failed else 0

    if args.import_products:
        from storefront.business.catalog.product_import import ProductImporter
        result = ProductImporter().import_csv(args.import_products)
        logger.info(f"Imported {len(result.created)} products, skipped {len(result.skipped)} rows")
        return 0

    return None


if __name__ == '__main__':
    args = parse_arguments()

    if args.dry_run and not args.update_prices:
        logger.warning("--dry-run only applies to --update-prices; ignoring")

    logger.debug("Starting Storefront...")
    app = create_app()
    running_job = bool(args.sweep_expired or args.update_prices or args.import_products)

    with app.app_context():
        # jobs never seed the catalog
        build_database(enable_debug_data=args.enable_debug_data and not (args.build_only or running_job))

        exit_code = run_job(args)
        if exit_code is not None:
            sys.exit(exit_code)

    if args.build_only:
        logger.debug("Build completed. Exiting without starting web server.")
        sys.exit(0)

    # FLASK_DEBUG: Enable/disable debug mode (default: False for security)
    debug_mode = os.environ.get('FLASK_DEBUG', 'False').lower() in ('true', '1', 'yes', 'on')

    # USE_RELOADER: Enable/disable auto-reloader (default: False in production)
    use_reloader = os.environ.get('USE_RELOADER', 'False').lower() in ('true', '1', 'yes', 'on')

    host = os.environ.get('FLASK_HOST', '127.0.0.1')
    port = int(os.environ.get('FLASK_PORT', '5000'))

    if debug_mode:
        logger.warning("DEBUG MODE ENABLED - Do not use in production!")

    logger.info(f"Starting server on {host}:{port} (debug={debug_mode}, reloader={use_reloader})")
    app.run(debug=debug_mode, host=host, port=port, use_reloader=use_reloader)
