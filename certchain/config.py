# config.py
# Manages application configuration for different environments using python-dotenv.

import os
import re
from dotenv import load_dotenv

# 'basedir' is the certchain package, 'PROJECT_ROOT' the repository checkout.
basedir = os.path.abspath(os.path.dirname(__file__))
PROJECT_ROOT = os.path.dirname(basedir)

load_dotenv(os.path.join(PROJECT_ROOT, '.env')) # Load .env from the project root

DEFAULT_SECRET_KEY = 'a-very-hard-to-guess-default-secret-key'


def _float_env(name, default):
    value = os.environ.get(name)
    return float(value) if value else default


class Config:
    """Base configuration class with settings common to all environments."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or DEFAULT_SECRET_KEY
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    FRONTEND_URL = os.environ.get('FRONTEND_URL') or 'http://localhost:5173'

    # Certificate service (client side)
    CERTCHAIN_API_URL = os.environ.get('CERTCHAIN_API_URL') or 'http://localhost:3001/api'
    CERTCHAIN_STORAGE_PATH = os.environ.get('CERTCHAIN_STORAGE_PATH') or \
        os.path.join(PROJECT_ROOT, 'instance', 'local_storage.json')
    CERTCHAIN_STORAGE_KEY = os.environ.get('CERTCHAIN_STORAGE_KEY') or 'certchain_certificates'
    CERTCHAIN_REQUEST_TIMEOUT = _float_env('CERTCHAIN_REQUEST_TIMEOUT', 5.0)
    CERTCHAIN_FALLBACK_DELAY = _float_env('CERTCHAIN_FALLBACK_DELAY', 1.0)

    # Blockchain simulator
    CERTCHAIN_CHAIN_ISSUE_DELAY = _float_env('CERTCHAIN_CHAIN_ISSUE_DELAY', 3.0)
    CERTCHAIN_CHAIN_VERIFY_DELAY = _float_env('CERTCHAIN_CHAIN_VERIFY_DELAY', 1.5)

    @staticmethod
    def init_app(app):
        pass

class DevelopmentConfig(Config):
    """Configuration for the development environment."""
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get('DEV_DATABASE_URL') or \
        'sqlite:///' + os.path.join(PROJECT_ROOT, 'instance', 'data-dev.db')

class TestingConfig(Config):
    """Configuration for the testing environment."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.environ.get('TEST_DATABASE_URL') or 'sqlite:///:memory:'
    CERTCHAIN_FALLBACK_DELAY = 0.0
    CERTCHAIN_CHAIN_ISSUE_DELAY = 0.0
    CERTCHAIN_CHAIN_VERIFY_DELAY = 0.0

class ProductionConfig(Config):
    """Configuration for the production environment."""
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')

    @classmethod
    def init_app(cls, app):
        Config.init_app(app)
        if not cls.SQLALCHEMY_DATABASE_URI:
            raise ValueError("DATABASE_URL is not set for the production environment.")

config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}


def get_config(config_name=None):
    """Returns the configuration class named by FLASK_CONFIG (or the default)."""
    if config_name is None:
        config_name = os.getenv('FLASK_CONFIG', 'default')
    return config[config_name]


def config_getter(cfg):
    """Reads settings the same way from a Config class or a Flask app.config mapping."""
    if isinstance(cfg, dict):
        return cfg.get
    return lambda name, default=None: getattr(cfg, name, default)


def validate_environment(cfg):
    """
    Checks a configuration for settings that would break or weaken a deployment.

    Returns a (is_valid, errors) tuple so callers can report every problem at once.
    """
    get = config_getter(cfg)
    errors = []
    if not get('CERTCHAIN_API_URL'):
        errors.append('API URL is not configured')
    if not get('SQLALCHEMY_DATABASE_URI'):
        errors.append('Database URI is not configured')
    if not get('SECRET_KEY') or get('SECRET_KEY') == DEFAULT_SECRET_KEY:
        errors.append('SECRET_KEY is not properly configured')
    return len(errors) == 0, errors


def mask_credentials(uri):
    """Hides the user:password part of a connection URI for display."""
    if not uri:
        return uri
    return re.sub(r'//[^/@]*@', '//***@', uri)
