from storefront import db
from sqlalchemy.orm import declared_attr
from storefront.business.core.data_insertion_mixin import DataInsertionMixin
from storefront.utils.clock import utcnow


class TimestampedBase(db.Model, DataInsertionMixin):
    """Abstract base class for all storefront records with creation/update timestamps"""

    __abstract__ = True

    @declared_attr
    def __tablename__(cls):
        return cls.__name__.lower() + 's'

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)
