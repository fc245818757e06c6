# File: recallstack_app/core/config.py
# Infrastructure Layer: application configuration

import os
from dotenv import load_dotenv

load_dotenv()

# recallstack_app/core/ -> project root
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))

DATABASE_PATH = os.path.join(BASE_DIR, "database", "recallstack.db")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    return int(raw)


class Config:
    """RecallStack application settings."""

    SECRET_KEY = os.environ.get('SECRET_KEY')
    if not SECRET_KEY:
        # Fallback for development, though env is preferred
        SECRET_KEY = 'dev-secret-key-replace-in-production'

    SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI') or f'sqlite:///{DATABASE_PATH}'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'connect_args': {'timeout': 30},
    }
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_DIR = os.environ.get('LOG_DIR') or os.path.join(BASE_DIR, 'logs')
    LOG_JSON = os.environ.get('LOG_JSON', 'false').lower() == 'true'

    # Review queue / scheduler
    REVIEW_QUEUE_DEFAULT_LIMIT = _env_int('REVIEW_QUEUE_DEFAULT_LIMIT', 10)
    REVIEW_QUEUE_MAX_LIMIT = _env_int('REVIEW_QUEUE_MAX_LIMIT', 50)
    REVIEW_ANSWER_MAX_RETRIES = _env_int('REVIEW_ANSWER_MAX_RETRIES', 3)

    @classmethod
    def init_app(cls, app):
        """Create the directories the app writes into."""
        uri = app.config.get('SQLALCHEMY_DATABASE_URI', '')
        if uri == f'sqlite:///{DATABASE_PATH}':
            os.makedirs(os.path.dirname(DATABASE_PATH), exist_ok=True)
        os.makedirs(app.config.get('LOG_DIR', cls.LOG_DIR), exist_ok=True)
