# certchain/app.py

import os
import logging
from logging.handlers import RotatingFileHandler
from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, NotFound

from certchain.config import config, PROJECT_ROOT
from certchain.models import db
from certchain.seed import seed_command
from certchain.cli import certs_cli, chain_cli, check_env_command
from certchain.routes.certificates import certificates_bp

def create_app(config_name=None):
    if config_name is None:
        config_name = os.getenv('FLASK_CONFIG', 'default')

    INSTANCE_FOLDER_PATH = os.path.join(PROJECT_ROOT, 'instance')

    app = Flask(__name__, instance_path=INSTANCE_FOLDER_PATH)
    app.config.from_object(config[config_name])
    app.config['CONFIG_NAME'] = config_name
    config[config_name].init_app(app)

    os.makedirs(app.instance_path, exist_ok=True)

    db.init_app(app)
    CORS(app, origins=[app.config['FRONTEND_URL']])

    app.register_blueprint(certificates_bp)

    if not app.debug and not app.testing:
        log_dir = os.path.join(PROJECT_ROOT, 'logs')
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(os.path.join(log_dir, 'certchain.log'), maxBytes=10240, backupCount=10)
        file_handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        app.logger.setLevel(logging.INFO)
        # Service modules log under the "certchain" package logger.
        package_logger = logging.getLogger('certchain')
        package_logger.addHandler(file_handler)
        package_logger.setLevel(logging.INFO)
        app.logger.info('CertChain Application Startup')

    with app.app_context():
        db.create_all()

    @app.errorhandler(NotFound)
    def handle_not_found(e):
        return jsonify(error="Not Found", message="The requested resource was not found."), 404

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify(error=e.name, message=e.description), e.code

    @app.errorhandler(Exception)
    def handle_generic_error(e):
        app.logger.exception(f"An unhandled exception occurred: {e}")
        return jsonify(error="Internal Server Error", message="An unexpected error occurred."), 500

    app.cli.add_command(seed_command)
    app.cli.add_command(certs_cli)
    app.cli.add_command(chain_cli)
    app.cli.add_command(check_env_command)

    @app.route("/")
    def index():
        return "✅ CertChain - API Service is Running"

    return app
