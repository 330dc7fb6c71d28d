"""
Product CSV import.

Expected header: NAME,CATEGORY,QTY,PRICE. Rows are created independently;
bad or duplicate rows are skipped and reported, never fatal.
"""

from __future__ import annotations

import csv
from dataclasses import dataclass, field
from decimal import InvalidOperation
from pathlib import Path

from storefront import db
from storefront.data.catalog.product import Product
from storefront.logger import get_logger
from storefront.utils.rounding import round_half_up

logger = get_logger("storefront.catalog.import")


@dataclass
class ImportResult:
    created: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


class ProductImporter:

    def import_csv(self, path: str | Path) -> ImportResult:
        """
        Import products from a CSV file.

        Args:
            path: CSV file path

        Returns:
            ImportResult with created product names and skip messages
        """
        path = Path(path)
        result = ImportResult()
        logger.info(f"Importing products from {path}")

        with path.open(newline='', encoding='utf-8') as f:
            for row_number, row in enumerate(csv.DictReader(f), start=2):
                self._import_row(row_number, row, result)

        logger.info(f"Import finished: {len(result.created)} created, {len(result.skipped)} skipped")
        return result

    def _import_row(self, row_number: int, row: dict, result: ImportResult) -> None:
        name = (row.get('NAME') or '').strip()
        category = (row.get('CATEGORY') or '').strip()

        if not name or not category:
            self._skip(result, f"Row {row_number}: Skipping row with missing name or category")
            return

        try:
            quantity = int((row.get('QTY') or '0').strip())
            default_price = round_half_up((row.get('PRICE') or '').strip())
        except (ValueError, InvalidOperation):
            self._skip(result, f"Row {row_number}: Skipping {name}, invalid quantity or price")
            return

        if quantity < 0 or default_price < 0:
            self._skip(result, f"Row {row_number}: Skipping {name}, negative quantity or price")
            return

        if Product.query.filter_by(name=name, category=category).first() is not None:
            self._skip(result, f"Row {row_number}: Product already exists, skipping {name}")
            return

        db.session.add(Product(name=name, category=category, quantity=quantity, default_price=default_price))
        db.session.commit()
        result.created.append(name)
        logger.info(f"Created product: {name}")

    def _skip(self, result: ImportResult, message: str) -> None:
        result.skipped.append(message)
        logger.warning(message)
