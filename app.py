from flask import Flask, jsonify, request
from flask_cors import CORS
from extensions import db, jwt, scheduler
from sqlalchemy.exc import IntegrityError
from routes import all_blueprints
from config import Config
from services.delivery_vendor import DeliverySimulator
from dotenv import load_dotenv
import models  # noqa: F401  Register models before create_all
import logging

load_dotenv()

logger = logging.getLogger(__name__)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )
    logger.info("Database URI: %s", app.config.get('SQLALCHEMY_DATABASE_URI'))

    CORS(app, origins=app.config["CORS_ORIGINS"], supports_credentials=True)
    db.init_app(app)
    jwt.init_app(app)

    for blueprint in all_blueprints:
        app.register_blueprint(blueprint)

    @app.before_request
    def log_request_info():
        """Log incoming JSON requests for debugging."""
        if request.method in ["POST", "PUT", "PATCH"] and request.is_json:
            logger.debug("%s Body: %s", request.path, request.get_json(silent=True))

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(e):
        db.session.rollback()
        logger.error("Database Integrity Error: %s", e.orig)
        return jsonify({"error": "Database integrity error", "message": str(e.orig)}), 400

    @app.errorhandler(404)
    def handle_not_found(e):
        return jsonify({"error": "Not found", "message": "The requested URL was not found on the server."}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(e):
        return jsonify({"error": "Method not allowed", "message": "The method is not allowed for the requested URL."}), 405

    app.extensions["delivery_vendor"] = DeliverySimulator.from_config(app.config, scheduler)

    with app.app_context():
        db.create_all()

    if app.config.get("SCHEDULER_ENABLED") and not scheduler.running:
        scheduler.start()
        logger.info("Delivery scheduler started")

    return app


if __name__ == "__main__":
    app = create_app()
    # The reloader would start a second scheduler in the child process
    app.run(host="0.0.0.0", port=5000, debug=True, use_reloader=False)
