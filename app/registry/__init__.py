import logging
import uuid

from flask import Flask, g, request
from dotenv import load_dotenv
from werkzeug.exceptions import HTTPException

from app.registry.config import load_config
from app.registry.db import create_tables, init_db, teardown_db_session
from app.registry.routes import api_bp, bp as routes_bp
from app.registry.modules.customers.api import bp as customers_api_bp
from app.registry.modules.customers.frontend import bp as customers_frontend_bp
from app.registry.utils import api_error

_API_ERROR_MESSAGES = {
    404: "Rota não encontrada",
    405: "Método não permitido",
    413: "Requisição muito grande",
}


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__, template_folder="templates", static_folder="static")
    app.config.from_mapping(load_config())
    app.json.sort_keys = False  # type: ignore[attr-defined]
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        if not app.config.get("DATABASE_URL") or str(app.config["DATABASE_URL"]).strip() == "":
            raise RuntimeError("DATABASE_URL is required in production.")
        if str(app.config["DATABASE_URL"]).startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")

    init_db(app)
    if app.config.get("AUTO_CREATE_TABLES"):
        create_tables(app)

    def _dispose_engine_on_fork() -> None:
        import os
        if hasattr(os, "register_at_fork"):
            def _after_fork_child():
                engine = app.extensions.get("sqlalchemy_engine")
                if engine:
                    engine.dispose()
                    app.logger.info("Disposed DB engine after fork (pid=%s)", os.getpid())

            os.register_at_fork(after_in_child=_after_fork_child)

    _dispose_engine_on_fork()

    api_prefix = app.config["API_PREFIX"]
    app.register_blueprint(routes_bp)
    app.register_blueprint(customers_frontend_bp)
    app.register_blueprint(api_bp, url_prefix=api_prefix)
    app.register_blueprint(customers_api_bp, url_prefix=api_prefix)

    @app.before_request
    def _assign_request_id():
        # Honour an upstream proxy's id so logs correlate across hops.
        g.request_id = (request.headers.get("X-Request-ID") or "").strip()[:64] or uuid.uuid4().hex

    @app.after_request
    def _echo_request_id(response):
        rid = getattr(g, "request_id", None)
        if rid:
            response.headers["X-Request-ID"] = rid
        return response

    app.teardown_appcontext(teardown_db_session)

    def _is_api_request() -> bool:
        return request.path == api_prefix or request.path.startswith(api_prefix + "/")

    @app.errorhandler(HTTPException)
    def _err_http(e: HTTPException):  # type: ignore[no-redef]
        if not _is_api_request():
            return e
        message = _API_ERROR_MESSAGES.get(e.code or 500, e.name)
        return api_error(message, e.code or 500)

    @app.errorhandler(Exception)
    def _err_500(e: Exception):  # type: ignore[no-redef]
        if isinstance(e, HTTPException):
            return _err_http(e)
        # Ensure stack trace shows in logs.
        app.logger.exception("Unhandled 500 (request_id=%s)", getattr(g, "request_id", None))
        if _is_api_request():
            return api_error("Erro interno do servidor", 500, exc=e)
        return "Erro interno do servidor", 500

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app
