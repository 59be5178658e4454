from flask import Flask, jsonify

from .config import Config
from .container import build_services
from .errors import SloggerError, StorageError
from .extensions import db
from .services.scheduler import start_scheduler


def create_app(overrides: dict | None = None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    # module loggers (slogger.*) are children of app.logger
    app.logger.setLevel(app.config["LOG_LEVEL"])

    db.init_app(app)
    app.extensions["slogger"] = build_services(db.session, app.config)

    @app.errorhandler(SloggerError)
    def handle_slogger_error(err):
        if isinstance(err, StorageError):
            app.logger.warning("REQUEST storage failure status=%s error=%s", err.status_code, err.message)
        return jsonify(err.to_dict()), err.status_code

    # Blueprints
    from .controllers.health_controller import health_bp
    from .controllers.ingest_controller import ingest_bp
    from .controllers.logs_controller import logs_bp
    from .controllers.sources_controller import sources_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(ingest_bp)
    app.register_blueprint(logs_bp)
    app.register_blueprint(sources_bp)

    from .cli import register_commands
    register_commands(app)

    with app.app_context():
        app.extensions["slogger"].partition_repository.ensure_storage()

    if app.config["SCHEDULER_ENABLED"]:
        start_scheduler(app)

    return app
