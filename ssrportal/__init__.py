# ssrportal/__init__.py
import os
import logging

from flask import Flask, jsonify
from flask_cors import CORS

from ssrportal.config import Config
from ssrportal.extension.extensions import db, migrate, jwt, socketio
from ssrportal.errors import register_error_handlers


def _register_jwt_loaders():

    @jwt.unauthorized_loader
    def missing_token(reason):
        return jsonify({"error": "Unauthorized"}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify({"error": "Unauthorized"}), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify({"error": "Unauthorized"}), 401


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    log_level = app.config.get("LOG_LEVEL") or os.getenv("LOG_LEVEL", "INFO")
    logging.basicConfig(level=log_level)
    app.logger.setLevel(log_level)

    # Extensions
    jwt.init_app(app)
    _register_jwt_loaders()
    CORS(app)
    db.init_app(app)
    migrate.init_app(app, db)
    socketio.init_app(app, cors_allowed_origins="*", async_mode=app.config.get("SOCKETIO_ASYNC_MODE"))

    # models must be imported before migrations / create_all see the metadata
    from ssrportal import models  # noqa: F401

    # Import blueprints AFTER extensions are inited to avoid premature current_app usage
    from ssrportal.controllers.auth_controller import bp_auth
    from ssrportal.controllers.evaluation_controller import bp_mentor, bp_student_team
    from ssrportal.controllers.proposal_controller import bp_student_proposals, bp_mentor_proposals
    from ssrportal.controllers.admin_controller import bp_admin
    from ssrportal.controllers.upload_controller import bp_upload

    app.register_blueprint(bp_auth)
    app.register_blueprint(bp_mentor)
    app.register_blueprint(bp_student_team)
    app.register_blueprint(bp_student_proposals)
    app.register_blueprint(bp_mentor_proposals)
    app.register_blueprint(bp_admin)
    app.register_blueprint(bp_upload)

    register_error_handlers(app)

    from ssrportal.commands import export_evaluations_command, seed_demo_command
    app.cli.add_command(export_evaluations_command)
    app.cli.add_command(seed_demo_command)

    # Socket events
    from ssrportal.services.notification_service import register_portal_events
    register_portal_events()

    return app
