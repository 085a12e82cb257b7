from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
import logging
from dotenv import load_dotenv

db = SQLAlchemy()


def create_app(test_config=None):
    load_dotenv()

    app = Flask(__name__)

    from .config import load_config
    app.config.update(load_config())
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    db.init_app(app)

    from .errors import register_error_handlers
    register_error_handlers(app)

    from .routes import register_routes
    register_routes(app)

    @app.route('/health')
    def health():
        return jsonify({'status': 'ok'})

    with app.app_context():
        from . import models  # noqa: F401
        from .schema import ensure_columns
        from .store import ensure_demo_user

        db.create_all()
        ensure_columns(db.engine)
        ensure_demo_user(
            app.config['DEMO_USER_ID'],
            app.config['DEMO_USER_EMAIL'],
            app.config['DEMO_INITIAL_CAPITAL'],
        )

    return app
