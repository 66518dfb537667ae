import logging

from dotenv import load_dotenv
from flask import Flask
from flask_cors import CORS

from app.guestbook.auth import AdminAuth, bp as auth_bp
from app.guestbook.config import insecure_defaults_in_use, load_config
from app.guestbook.db import init_db
from app.guestbook.errors import register_error_handlers
from app.guestbook.modules.reporting.admin import bp as reporting_bp
from app.guestbook.modules.signatures.api import bp as signatures_bp
from app.guestbook.routes import bp as routes_bp
from app.guestbook.storage import store_from_config


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__, static_folder=None)
    app.config.from_mapping(load_config())
    app.json.sort_keys = False  # type: ignore[attr-defined]
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Development defaults are allowed but never silent.
    for name in insecure_defaults_in_use(app.config):
        app.logger.warning("%s is using its insecure development default; set it in the environment.", name)

    engine = init_db(app)
    app.extensions["signature_store"] = store_from_config(
        app.config, engine, app.extensions["sqlalchemy_sessionmaker"]
    )
    app.extensions["admin_auth"] = AdminAuth.from_config(app.config)

    # The guestbook UI is served from another origin.
    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})

    app.register_blueprint(routes_bp)
    app.register_blueprint(signatures_bp, url_prefix="/api")
    app.register_blueprint(auth_bp, url_prefix="/api/admin")
    app.register_blueprint(reporting_bp, url_prefix="/api/admin")

    register_error_handlers(app)

    # Startup logging
    logging.getLogger(__name__).info(
        "create_app() complete; storage=%s app ready to serve", app.extensions["signature_store"].mode
    )

    return app
