import logging
import os
from flask import Flask, jsonify

from extensions import db, migrate
from config import DevConfig, ProdConfig
from logging_setup import setup_logger
from src.services.errors import ClinicError
from src.services.storage import build_backend


logger = logging.getLogger("app_factory")


def create_app(config_object=None) -> Flask:
    """Initialize Flask app with DB, storage backend + configuration."""
    app = Flask(__name__)

    if config_object is not None:
        app.config.from_object(config_object)
    elif os.getenv("FLASK_ENV") == "production":
        app.config.from_object(ProdConfig)
    else:
        app.config.from_object(DevConfig)

    if not app.testing:
        setup_logger()

    db.init_app(app)
    migrate.init_app(app, db)

    app.extensions["clinic_store"] = build_backend(app.config)

    # Import models so SQLAlchemy registers tables.
    with app.app_context():
        from src.models import User, SessionSlot, Patient, Visit, Appointment  # noqa: F401
        # Ensure tables exist (useful for SQLite/dev). For production, prefer migrations.
        if app.config["STORAGE_BACKEND"].lower() == "sql":
            db.create_all()

        # Register HTTP blueprints
        from src.routes.auth import auth_bp
        from src.routes.dashboard import dashboard_bp
        from src.routes.patients import patients_bp
        from src.routes.agenda import agenda_bp

        app.register_blueprint(auth_bp)
        app.register_blueprint(dashboard_bp)
        app.register_blueprint(patients_bp)
        app.register_blueprint(agenda_bp)

    @app.errorhandler(ClinicError)
    def handle_clinic_error(error: ClinicError):
        # Form-submit boundary: every domain error becomes a message, never a crash
        logger.warning(f"[{type(error).__name__}] {error.message}")
        return jsonify({"error": error.message, "kind": type(error).__name__}), error.status_code

    logger.info(f"App ready with storage backend={app.config['STORAGE_BACKEND']}")
    return app
