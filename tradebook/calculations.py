"""
Financial derivation for a single trade and statistics over a trade list.

Everything here is pure: inputs are plain numbers or objects exposing the
trade attributes (ORM rows in the app, simple namespaces in tests).
"""
from collections import namedtuple
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

Financials = namedtuple('Financials', ['total_buy', 'total_sell', 'net_profit', 'profit_percent'])
EquityPoint = namedtuple('EquityPoint', ['date_label', 'balance'])
TradeStats = namedtuple('TradeStats', [
    'total_trades', 'winning_trades', 'losing_trades', 'success_rate',
    'total_profit', 'stock_performance', 'best_stock', 'worst_stock',
    'largest_win', 'largest_loss', 'average_profit', 'equity_curve',
])

NO_STOCK = '-'


def derive_financials(entry_price, exit_price, quantity, commission=0):
    """
    Compute the derived money fields of a trade.

    An open trade (exit_price is None) only carries its entry cost; the
    realised fields stay at 0. profit_percent falls back to 0 when the
    entry cost is 0.
    """
    commission = commission or 0
    total_buy = entry_price * quantity + commission

    if exit_price is None:
        return Financials(total_buy, 0, 0, 0)

    total_sell = exit_price * quantity - commission
    net_profit = total_sell - total_buy
    profit_percent = net_profit / total_buy * 100 if total_buy else 0
    return Financials(total_buy, total_sell, net_profit, profit_percent)


def _as_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, '%Y-%m-%d').date()


def _created(t):
    created = getattr(t, 'created_at', None) or datetime.min
    if created.tzinfo is not None:
        created = created.astimezone(timezone.utc).replace(tzinfo=None)
    return created


def insertion_order(trades):
    """Oldest insert first (creation time, then id)."""
    return sorted(trades, key=lambda t: (_created(t), getattr(t, 'id', None) or 0))


def chronological(trades):
    """Oldest first by entry date; creation time and id break ties."""
    return sorted(insertion_order(trades), key=lambda t: _as_date(t.entry_date))


def percent_one_decimal(part, whole):
    """part / whole * 100 rounded to one decimal, halves rounded up."""
    if not whole:
        return 0
    value = Decimal(part) * 100 / Decimal(whole)
    return float(value.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))


def stock_performance(trades):
    """Summed net profit per instrument, in first-seen order."""
    performance = {}
    for t in trades:
        performance[t.stock_name] = performance.get(t.stock_name, 0) + (t.net_profit or 0)
    return performance


def equity_curve(trades, initial_capital):
    """Running balance after each trade, labelled with its entry date (MM/DD)."""
    balance = initial_capital or 0
    points = []
    for t in chronological(trades):
        balance += t.net_profit or 0
        points.append(EquityPoint(_as_date(t.entry_date).strftime('%m/%d'), balance))
    return points


def compute_stats(trades, initial_capital=0):
    trades = list(trades)
    ordered = chronological(trades)
    profits = [t.net_profit or 0 for t in ordered]

    total_trades = len(ordered)
    winning_trades = sum(1 for p in profits if p > 0)
    success_rate = percent_one_decimal(winning_trades, total_trades)
    total_profit = sum(profits)

    performance = stock_performance(insertion_order(trades))
    if performance:
        # max/min keep the first of equal values, i.e. the first inserted stock
        best_stock = max(performance, key=performance.get)
        worst_stock = min(performance, key=performance.get)
    else:
        best_stock = worst_stock = NO_STOCK

    return TradeStats(
        total_trades=total_trades,
        winning_trades=winning_trades,
        losing_trades=total_trades - winning_trades,
        success_rate=success_rate,
        total_profit=total_profit,
        stock_performance=performance,
        best_stock=best_stock,
        worst_stock=worst_stock,
        largest_win=max(profits + [0]),
        largest_loss=min(profits + [0]),
        average_profit=total_profit / (total_trades or 1),
        equity_curve=equity_curve(ordered, initial_capital),
    )


def stats_to_dict(stats):
    data = stats._asdict()
    data['equity_curve'] = [{'name': p.date_label, 'balance': p.balance} for p in stats.equity_curve]
    return data
