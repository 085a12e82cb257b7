from datetime import datetime
import math

from .errors import ValidationError

TRADE_TYPES = ('buy', 'sell')

# SQLite INTEGER is a signed 64-bit value
MIN_QUANTITY = -2 ** 63
MAX_QUANTITY = 2 ** 63 - 1


def _blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def parse_date(value, field, required=False):
    if _blank(value):
        if required:
            raise ValidationError(f"{field} is required")
        return None
    try:
        return datetime.strptime(str(value).strip(), '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError(f"{field} must be a date in YYYY-MM-DD format")


def parse_number(value, field, required=False, default=None):
    if _blank(value):
        if required:
            raise ValidationError(f"{field} is required")
        return default
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"{field} must be a number")
    if not math.isfinite(number):
        raise ValidationError(f"{field} must be a finite number")
    return number


def parse_quantity(value):
    number = parse_number(value, 'quantity', required=True)
    if not number.is_integer():
        raise ValidationError("quantity must be a whole number")
    quantity = int(number)
    if not MIN_QUANTITY <= quantity <= MAX_QUANTITY:
        raise ValidationError("quantity is out of range")
    return quantity


def _optional_text(value):
    return None if _blank(value) else str(value)


def parse_trade_payload(data):
    """
    Turn a camelCase trade body into column values.

    Derived money fields are never read from the body; the store recomputes
    them. Signs and magnitudes are not checked.
    """
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")

    stock_name = data.get('stockName')
    if _blank(stock_name):
        raise ValidationError("stockName is required")

    trade_type = str(data.get('tradeType') or 'buy').strip().lower()
    if trade_type not in TRADE_TYPES:
        raise ValidationError(f"tradeType must be one of: {', '.join(TRADE_TYPES)}")

    entry_date = parse_date(data.get('entryDate'), 'entryDate', required=True)
    exit_date = parse_date(data.get('exitDate'), 'exitDate')
    if exit_date and exit_date < entry_date:
        raise ValidationError("exitDate cannot be before entryDate")

    return {
        'stock_name': str(stock_name).strip(),
        'trade_type': trade_type,
        'entry_date': entry_date,
        'exit_date': exit_date,
        'entry_price': parse_number(data.get('entryPrice'), 'entryPrice', required=True),
        'exit_price': parse_number(data.get('exitPrice'), 'exitPrice'),
        'quantity': parse_quantity(data.get('quantity')),
        'commission': parse_number(data.get('commission'), 'commission', default=0.0),
        'strategy': _optional_text(data.get('strategy')),
        'notes': _optional_text(data.get('notes')),
        'ai_insight': _optional_text(data.get('aiInsight')),
        'chart_image': _optional_text(data.get('chartImage')),
    }


def parse_capital(data):
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return parse_number(data.get('capital'), 'capital', required=True)
