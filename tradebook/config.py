import os


def load_config():
    """Collect settings from the environment (after .env has been loaded)."""
    return {
        'SQLALCHEMY_DATABASE_URI': os.getenv('DATABASE_URL', 'sqlite:///trading_journal.db'),
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'SECRET_KEY': os.getenv('SECRET_KEY', os.urandom(24)),
        # chart images travel inline as data URLs
        'MAX_CONTENT_LENGTH': 10 * 1024 * 1024,

        'DEMO_USER_ID': int(os.getenv('DEMO_USER_ID', '1')),
        'DEMO_USER_EMAIL': os.getenv('DEMO_USER_EMAIL', 'demo@example.com'),
        'DEMO_INITIAL_CAPITAL': float(os.getenv('DEMO_INITIAL_CAPITAL', '100000')),

        'GEMINI_API_KEY': os.getenv('GEMINI_API_KEY', ''),
        'GEMINI_TEXT_MODEL': os.getenv('GEMINI_TEXT_MODEL', 'gemini-2.5-flash'),
        'GEMINI_IMAGE_MODEL': os.getenv('GEMINI_IMAGE_MODEL', 'gemini-2.5-flash-image'),
        'GEMINI_BASE_URL': os.getenv('GEMINI_BASE_URL', 'https://generativelanguage.googleapis.com/v1beta'),
        'AI_TIMEOUT': float(os.getenv('AI_TIMEOUT', '30')),
        'AI_MARKET': os.getenv('AI_MARKET', 'the Egyptian Exchange (EGX)'),

        'EXPORT_FILENAME': os.getenv('EXPORT_FILENAME', 'Trading_Journal.xlsx'),
        'LOG_LEVEL': os.getenv('LOG_LEVEL', 'INFO'),
    }
