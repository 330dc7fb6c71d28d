"""Request parameter helpers shared by the API blueprints"""

from flask import request

from storefront.data.core.user import User

DEFAULT_USER_ID = 1


def param(name, default=None, type=None):
    """Read a parameter from the JSON body, falling back to query/form values"""
    body = request.get_json(silent=True)
    if isinstance(body, dict) and name in body:
        value = body[name]
        if type is None or value is None:
            return value
        try:
            return type(value)
        except (TypeError, ValueError):
            return default
    return request.values.get(name, default, type=type)


def current_user():
    """
    Resolve the acting user from `user_id` (default 1).

    There is no authentication; unknown ids are created on first use.
    """
    user_id = param('user_id', DEFAULT_USER_ID, type=int)
    if user_id is None or user_id < 1:
        user_id = DEFAULT_USER_ID
    return User.find_or_create(user_id)
