"""
Column-aware dict conversion shared by seed data, CSV imports and API serializers.
"""

from datetime import datetime

from sqlalchemy import inspect

from storefront import db
from storefront.logger import get_logger

logger = get_logger("storefront.business.core.data_insertion")

AUDIT_FIELDS = ('created_at', 'updated_at')


def _column_keys(model_cls):
    return [attr.key for attr in inspect(model_cls).column_attrs]


class DataInsertionMixin:
    """
    Adds from_dict, to_dict and create_from_dict to a model.
    Only mapped columns take part; relationships are never touched.
    """

    @classmethod
    def from_dict(cls, data_dict, skip_fields=None):
        """
        Build an unsaved instance, ignoring unknown keys.

        A None audit timestamp is dropped so the column default applies.
        """
        skipped = set(skip_fields or ())
        values = {
            key: data_dict[key]
            for key in _column_keys(cls)
            if key in data_dict and key not in skipped
            and not (key in AUDIT_FIELDS and data_dict[key] is None)
        }
        return cls(**values)

    def to_dict(self, include_audit_fields=True):
        data = {}
        for key in _column_keys(type(self)):
            if key in AUDIT_FIELDS and not include_audit_fields:
                continue
            value = getattr(self, key)
            data[key] = value.isoformat() if isinstance(value, datetime) else value
        return data

    @classmethod
    def create_from_dict(cls, data_dict, skip_fields=None, commit=True):
        """
        Add an instance built by from_dict to the session.

        Args:
            data_dict (dict): Column values
            skip_fields (list, optional): Keys to leave out, e.g. ['id']
            commit (bool): Commit immediately; otherwise the caller commits

        Returns:
            The new instance
        """
        instance = cls.from_dict(data_dict, skip_fields)
        db.session.add(instance)
        if not commit:
            return instance

        try:
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            logger.error(f"Could not save {cls.__name__}: {e}")
            raise
        logger.info(f"Created {cls.__name__}: {instance}")
        return instance
