from flask import Blueprint, request, jsonify, current_app, send_file
import io

from .. import store
from ..context import current_user_id
from ..export import trades_to_xlsx
from ..payloads import parse_trade_payload

trades_bp = Blueprint('trades', __name__, url_prefix='/api/trades')


@trades_bp.route('', methods=['GET'])
def list_trades():
    trades = store.list_trades(
        current_user_id(),
        search=request.args.get('search'),
        outcome=request.args.get('filter', 'all'),
    )
    return jsonify([t.to_dict() for t in trades])


@trades_bp.route('', methods=['POST'])
def create_trade():
    fields = parse_trade_payload(request.get_json(silent=True))
    trade_id = store.create_trade(current_user_id(), fields)
    return jsonify({'id': trade_id}), 201


@trades_bp.route('/<int:trade_id>', methods=['GET'])
def trade_detail(trade_id):
    trade = store.get_trade(trade_id, current_user_id())
    return jsonify(trade.to_dict())


@trades_bp.route('/<int:trade_id>', methods=['PUT'])
def update_trade(trade_id):
    fields = parse_trade_payload(request.get_json(silent=True))
    success = store.update_trade(trade_id, current_user_id(), fields)
    return jsonify({'success': success})


@trades_bp.route('/<int:trade_id>', methods=['DELETE'])
def delete_trade(trade_id):
    success = store.delete_trade(trade_id, current_user_id())
    return jsonify({'success': success})


@trades_bp.route('/export', methods=['GET'])
def export_trades():
    trades = store.list_trades(current_user_id())
    content = trades_to_xlsx(trades)
    return send_file(
        io.BytesIO(content),
        mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        as_attachment=True,
        download_name=current_app.config['EXPORT_FILENAME'],
    )
