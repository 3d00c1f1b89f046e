# Main Flask app
import logging

import click
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from auth import authenticate_jwt, jwt
from config import config
from errors import AppError
from models import bcrypt, db
from routes import auth_bp, main_bp, posts_bp, users_bp

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_logging_initialized = False


def configure_logging(app):
    """Configure the root logger once; every create_app sets the level."""
    global _logging_initialized
    root = logging.getLogger()
    if not _logging_initialized:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        root.addHandler(handler)
        _logging_initialized = True
    root.setLevel(app.config['LOG_LEVEL'])


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(error):
        return error.to_response()

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({"error": error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        app.logger.exception(f"Unhandled error: {error}")
        db.session.rollback()
        return jsonify({"error": "Internal Server Error"}), 500


def create_app(config_name='default'):
    app = Flask(__name__)
    app.config.from_object(config[config_name])
    if not app.config.get('JWT_SECRET_KEY'):
        raise RuntimeError("JWT_SECRET_KEY must be set")
    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    bcrypt.init_app(app)
    jwt.init_app(app)

    app.before_request(authenticate_jwt)
    register_error_handlers(app)

    # Register blueprints
    app.register_blueprint(main_bp, url_prefix='/')
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(posts_bp, url_prefix='/posts')
    app.register_blueprint(users_bp, url_prefix='/users')

    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables first.')
    def init_db(drop):
        """Create the database tables."""
        if drop:
            db.drop_all()
        db.create_all()
        click.echo('Initialized the database.')

    app.logger.info(f"App created with '{config_name}' config")
    return app
