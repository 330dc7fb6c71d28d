from flask import Blueprint, jsonify
from sqlalchemy import text

from storefront import db

bp = Blueprint('health', __name__)


@bp.get('/up')
def up():
    db.session.execute(text('SELECT 1'))
    return jsonify({'status': 'ok'})
