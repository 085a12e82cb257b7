"""Tests for additive column migration on an existing database."""

from sqlalchemy import create_engine, inspect, text

from tradebook.schema import ensure_columns

OLD_TRADES_TABLE = """
CREATE TABLE trades (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER,
    stock_name TEXT,
    net_profit REAL
)
"""


def columns(engine):
    return {col['name'] for col in inspect(engine).get_columns('trades')}


class TestEnsureColumns:

    def test_adds_missing_columns_and_keeps_rows(self, tmp_path):
        engine = create_engine(f"sqlite:///{tmp_path / 'old.db'}")
        with engine.begin() as conn:
            conn.execute(text(OLD_TRADES_TABLE))
            conn.execute(text("INSERT INTO trades (user_id, stock_name, net_profit) VALUES (1, 'COMI', 50)"))

        added = ensure_columns(engine)

        assert added == ['ai_insight', 'chart_image']
        assert {'ai_insight', 'chart_image'} <= columns(engine)
        with engine.connect() as conn:
            row = conn.execute(text("SELECT stock_name, net_profit, ai_insight FROM trades")).one()
        assert tuple(row) == ('COMI', 50, None)

    def test_second_run_is_a_no_op(self, tmp_path):
        engine = create_engine(f"sqlite:///{tmp_path / 'old.db'}")
        with engine.begin() as conn:
            conn.execute(text(OLD_TRADES_TABLE))

        ensure_columns(engine)
        assert ensure_columns(engine) == []

    def test_current_schema_needs_nothing(self, ctx):
        from tradebook import db
        assert ensure_columns(db.engine) == []
