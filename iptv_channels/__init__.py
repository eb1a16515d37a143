# iptv_channels/__init__.py
import logging
from flask import Flask, request, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_wtf.csrf import CSRFProtect
from werkzeug.exceptions import HTTPException
from .config import Config

# --- Initialize Extensions ---
db = SQLAlchemy()
csrf = CSRFProtect()

def create_app(config_class=Config):
    """
    Creates and configures the Flask application instance.
    This is the application factory pattern.
    """
    app = Flask(
        __name__,
        instance_path=config_class.INSTANCE_PATH
    )
    app.config.from_object(config_class)

    # --- Logging Setup ---
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s [%(name)s.%(funcName)s]: %(message)s')
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    app.logger.info(f"Instance path set to: {app.instance_path}")

    # --- Initialize Flask Extensions with the App ---
    db.init_app(app)
    csrf.init_app(app)

    with app.app_context():
        # --- Import and Register Blueprints ---
        from .routes.main import main_bp
        from .routes.channels import channels_bp
        from .routes.media import media_bp
        from .routes.series import series_bp

        app.register_blueprint(main_bp)
        app.register_blueprint(channels_bp, url_prefix='/channels')
        app.register_blueprint(media_bp, url_prefix='/media')
        app.register_blueprint(series_bp, url_prefix='/series')

        app.logger.info("Blueprints registered.")

        initialize_database(app)

    @app.errorhandler(Exception)
    def handle_exception(e):
        if isinstance(e, HTTPException):
            return jsonify({'error': e.description}), e.code
        app.logger.error(f"Unhandled exception on {request.path} [{request.method}]", exc_info=e)
        if app.debug:
            raise e
        return jsonify({'error': 'The server encountered an internal error. The error has been logged.'}), 500

    return app

def initialize_database(app):
    """Ensures database tables exist."""
    app.logger.info("Application initialization: Ensuring database tables exist...")
    try:
        from . import models
        db.create_all()
        app.logger.info("SQLAlchemy tables checked/created.")
    except Exception as e:
        app.logger.error(f"Error during initial db.create_all(): {e}", exc_info=True)
