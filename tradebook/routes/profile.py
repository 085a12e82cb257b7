from flask import Blueprint, request, jsonify

from .. import store
from ..calculations import compute_stats, stats_to_dict
from ..context import current_user_id
from ..payloads import parse_capital

profile_bp = Blueprint('profile', __name__, url_prefix='/api/user')


@profile_bp.route('/stats', methods=['GET'])
def user_stats():
    user_id = current_user_id()
    user = store.get_user(user_id)
    trades = store.list_trades(user_id)
    stats = compute_stats(trades, user.initial_capital)

    return jsonify({
        'user': user.to_dict(),
        'trades': [t.to_dict() for t in trades],
        'stats': stats_to_dict(stats),
    })


@profile_bp.route('/capital', methods=['POST'])
def set_capital():
    capital = parse_capital(request.get_json(silent=True))
    success = store.set_initial_capital(current_user_id(), capital)
    return jsonify({'success': success})
