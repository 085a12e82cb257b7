import logging

from sqlalchemy import inspect, text

logger = logging.getLogger(__name__)

# Nullable columns appended after the first release: (table, column, SQL type)
ADDED_COLUMNS = [
    ('trades', 'ai_insight', 'TEXT'),
    ('trades', 'chart_image', 'TEXT'),
]


def add_column_if_missing(engine, table, column, col_type):
    """Add a column to an existing table if it doesn't already exist."""
    existing_cols = {col['name'] for col in inspect(engine).get_columns(table)}
    if column in existing_cols:
        return False

    with engine.begin() as conn:
        conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {col_type}"))
    logger.info(f"Added column {table}.{column}")
    return True


def ensure_columns(engine, columns=ADDED_COLUMNS):
    return [column for table, column, col_type in columns
            if add_column_if_missing(engine, table, column, col_type)]
