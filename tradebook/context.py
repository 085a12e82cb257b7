from flask import current_app


def current_user_id():
    """Id of the caller. There is no auth yet, so this is always the demo account."""
    return current_app.config['DEMO_USER_ID']
