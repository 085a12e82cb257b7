import io

import pandas as pd

EXPORT_COLUMNS = [
    'id', 'stock_name', 'trade_type', 'entry_date', 'exit_date', 'entry_price',
    'exit_price', 'quantity', 'commission', 'total_buy', 'total_sell',
    'net_profit', 'profit_percent', 'strategy', 'notes', 'ai_insight', 'created_at',
]


def trades_to_xlsx(trades, sheet_name='Trades'):
    """Serialize trades into an .xlsx workbook and return its bytes.

    Chart images are left out, they are data URLs and blow past Excel's cell limit.
    """
    df = pd.DataFrame([t.to_dict() for t in trades], columns=EXPORT_COLUMNS)

    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)
    return buffer.getvalue()
