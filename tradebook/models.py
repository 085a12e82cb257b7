from . import db
from datetime import datetime, timezone


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String, unique=True)
    password = db.Column(db.String)
    initial_capital = db.Column(db.Float, default=0)

    trades = db.relationship('Trade', back_populates='user')

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'initial_capital': self.initial_capital or 0,
        }


class Trade(db.Model):
    __tablename__ = 'trades'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    stock_name = db.Column(db.String, nullable=False)
    trade_type = db.Column(db.String, default='buy')
    entry_date = db.Column(db.Date, nullable=False)
    exit_date = db.Column(db.Date)
    entry_price = db.Column(db.Float, nullable=False)
    exit_price = db.Column(db.Float)
    quantity = db.Column(db.Integer, nullable=False)
    commission = db.Column(db.Float, default=0)
    # derived from the four inputs above on every write
    total_buy = db.Column(db.Float, default=0)
    total_sell = db.Column(db.Float, default=0)
    net_profit = db.Column(db.Float, default=0)
    profit_percent = db.Column(db.Float, default=0)
    strategy = db.Column(db.String)
    notes = db.Column(db.Text)
    ai_insight = db.Column(db.Text, nullable=True)
    chart_image = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    user = db.relationship('User', back_populates='trades')

    @property
    def is_open(self):
        return self.exit_price is None

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'stock_name': self.stock_name,
            'trade_type': self.trade_type,
            'entry_date': self.entry_date.isoformat() if self.entry_date else None,
            'exit_date': self.exit_date.isoformat() if self.exit_date else None,
            'entry_price': self.entry_price,
            'exit_price': self.exit_price,
            'quantity': self.quantity,
            'commission': self.commission,
            'total_buy': self.total_buy,
            'total_sell': self.total_sell,
            'net_profit': self.net_profit,
            'profit_percent': self.profit_percent,
            'strategy': self.strategy,
            'notes': self.notes,
            'ai_insight': self.ai_insight,
            'chart_image': self.chart_image,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
