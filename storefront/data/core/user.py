from storefront import db
from storefront.data.core.timestamped_base import TimestampedBase


class User(TimestampedBase):
    """
    Shopper placing carts and orders.

    There are no credentials: the API resolves users from a `user_id`
    parameter and creates them on first sight.
    """
    __tablename__ = 'users'

    email = db.Column(db.String(255), nullable=False, unique=True)
    name = db.Column(db.String(255), nullable=True)

    cart = db.relationship('Cart', back_populates='user', uselist=False)
    orders = db.relationship('Order', back_populates='user', lazy='dynamic')

    def __repr__(self):
        return f'<User {self.id}: {self.email}>'

    @classmethod
    def find_or_create(cls, user_id):
        """
        Find a user by id, creating a placeholder record if missing.

        Args:
            user_id (int): User ID from the request

        Returns:
            User: Persisted user (session is committed when a user is created)
        """
        user = db.session.get(cls, user_id)
        if user is None:
            user = cls(id=user_id, email=f"user{user_id}@example.com", name=f"User {user_id}")
            db.session.add(user)
            db.session.commit()
        return user
