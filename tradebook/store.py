"""
Trade store: every operation is scoped to an explicit user id.
"""
import logging

from sqlalchemy.exc import SQLAlchemyError

from . import db
from .calculations import derive_financials
from .errors import NotFound, StorageUnavailable, ValidationError
from .models import Trade, User

logger = logging.getLogger(__name__)

OUTCOME_FILTERS = ('all', 'win', 'loss', 'open')


def _commit(action):
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"[store] {action} failed: {e}", exc_info=True)
        raise StorageUnavailable(f"Could not {action}") from e
    except Exception:
        db.session.rollback()
        logger.error(f"[store] {action} failed", exc_info=True)
        raise


def _apply_fields(trade, fields):
    """Copy input columns onto the row and recompute the derived ones."""
    for column in ('stock_name', 'trade_type', 'entry_date', 'exit_date', 'entry_price',
                   'exit_price', 'quantity', 'commission', 'strategy', 'notes',
                   'ai_insight', 'chart_image'):
        if column in fields:
            setattr(trade, column, fields[column])

    financials = derive_financials(trade.entry_price, trade.exit_price, trade.quantity, trade.commission)
    trade.total_buy = financials.total_buy
    trade.total_sell = financials.total_sell
    trade.net_profit = financials.net_profit
    trade.profit_percent = financials.profit_percent


def _owned_trade(trade_id, user_id):
    try:
        trade = Trade.query.filter_by(id=trade_id, user_id=user_id).first()
    except SQLAlchemyError as e:
        raise StorageUnavailable("Could not load trade") from e
    if trade is None:
        raise NotFound(f"Trade {trade_id} not found")
    return trade


def create_trade(user_id, fields):
    trade = Trade(user_id=user_id)
    _apply_fields(trade, fields)
    db.session.add(trade)
    _commit('create trade')
    logger.info(f"[+] Trade {trade.id} created: {trade.stock_name} {trade.entry_date}")
    return trade.id


def update_trade(trade_id, user_id, fields):
    trade = _owned_trade(trade_id, user_id)
    _apply_fields(trade, fields)
    _commit('update trade')
    logger.info(f"[~] Trade {trade_id} updated")
    return True


def delete_trade(trade_id, user_id):
    trade = _owned_trade(trade_id, user_id)
    db.session.delete(trade)
    _commit('delete trade')
    logger.info(f"[-] Trade {trade_id} deleted")
    return True


def get_trade(trade_id, user_id):
    return _owned_trade(trade_id, user_id)


def list_trades(user_id, search=None, outcome='all'):
    """Newest first. `outcome` is one of all, win, loss, open."""
    outcome = (outcome or 'all').lower()
    if outcome not in OUTCOME_FILTERS:
        raise ValidationError(f"filter must be one of: {', '.join(OUTCOME_FILTERS)}")

    query = Trade.query.filter_by(user_id=user_id)

    if search and search.strip():
        term = search.strip().replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
        query = query.filter(Trade.stock_name.ilike(f"%{term}%", escape='\\'))
    if outcome == 'win':
        query = query.filter(Trade.net_profit > 0)
    elif outcome == 'loss':
        query = query.filter(Trade.net_profit < 0)
    elif outcome == 'open':
        query = query.filter(Trade.exit_price.is_(None))

    try:
        return query.order_by(Trade.created_at.desc(), Trade.id.desc()).all()
    except SQLAlchemyError as e:
        raise StorageUnavailable("Could not load trades") from e


def get_user(user_id):
    try:
        user = db.session.get(User, user_id)
    except SQLAlchemyError as e:
        raise StorageUnavailable("Could not load user") from e
    if user is None:
        raise NotFound(f"User {user_id} not found")
    return user


def set_initial_capital(user_id, capital):
    user = get_user(user_id)
    user.initial_capital = capital
    _commit('update capital')
    logger.info(f"[~] Initial capital of user {user_id} set to {capital}")
    return True


def ensure_demo_user(user_id, email, initial_capital):
    """Create the demo account on first start; an existing row is left untouched."""
    user = db.session.get(User, user_id)
    if user is None:
        user = User(id=user_id, email=email, initial_capital=initial_capital)
        db.session.add(user)
        _commit('create demo user')
        logger.info(f"[+] Demo user {user_id} ({email}) created")
    return user
