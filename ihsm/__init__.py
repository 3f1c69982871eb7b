"""Application factory for the Inter-Hostel Sports Manager."""

from __future__ import annotations

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from ihsm.blueprints.api import api_bp
from ihsm.blueprints.auth import auth_bp
from ihsm.blueprints.public import public_bp
from ihsm.config import Config
from ihsm.extensions import (
    db,
    migrate,
    login_manager,
    csrf,
    limiter,
)
from ihsm.models import User
from ihsm.security.config import (
    configure_security_headers,
    configure_secure_session,
    validate_input_length,
)


def create_app(config_class=Config):
    """Create Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize Flask extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)

    # Configure security
    configure_security_headers(app)
    configure_secure_session(app)
    validate_input_length(app)

    @login_manager.user_loader
    def load_user(user_id: str):
        return db.session.get(User, user_id)

    @login_manager.unauthorized_handler
    def handle_unauthorized():
        return jsonify({'error': 'Authentication required'}), 401

    # Ensure models are registered for migrations
    import ihsm.models  # noqa: F401

    # The client talks JSON over a same-site session cookie
    csrf.exempt(auth_bp)
    csrf.exempt(api_bp)
    csrf.exempt(public_bp)

    # Register blueprints
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(api_bp, url_prefix='/api')
    app.register_blueprint(public_bp)

    @app.errorhandler(HTTPException)
    def http_error(error):
        return jsonify({'error': error.description or error.name}), error.code

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error(f"Unhandled error: {getattr(error, 'original_exception', error)}")
        return jsonify({'error': 'Internal server error'}), 500

    # Register CLI commands
    from ihsm.commands import register_commands
    register_commands(app)

    return app
