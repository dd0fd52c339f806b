from flask import Flask, request, current_app
from flask_sqlalchemy import SQLAlchemy
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config

# SQLAlchemy instance
db = SQLAlchemy()


def create_app(config_class: type[Config] = Config, notifier=None) -> Flask:
    """Application factory for the LTI login service."""
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Trust the reverse proxy so Flask sees https/host/port correctly
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)
    app.config.setdefault("PREFERRED_URL_SCHEME", "https")

    # --- login request/response logging (helps spot missing form data) ---
    @app.before_request
    def _log_incoming():
        if request.path.startswith("/auth/"):
            current_app.logger.info(
                "IN %s %s ct=%s qs=%s form_keys=%s",
                request.method,
                request.url,
                request.headers.get("Content-Type"),
                dict(request.args),
                list(request.form.keys()),
            )

    @app.after_request
    def _log_outgoing(resp):
        if request.path.startswith("/auth/"):
            current_app.logger.info(
                "OUT %s %s -> %s", request.method, request.path, resp.status
            )
        return resp
    # ----------------------------------------------------------------------

    db.init_app(app)

    from .lti.login import LoginRequestHandler, bp as login_bp
    from .lti.notify import notifier_from_config
    from .lti.repository import SqlDeploymentRepository
    from .lti.resolver import DeploymentResolver
    from .lti.tokens import StateTokenSigner
    from .status import bp as status_bp

    resolver = DeploymentResolver(
        SqlDeploymentRepository(db.session),
        notifier or notifier_from_config(app.config),
        environment=app.config["APP_ENV"],
        registration_url=app.config.get("REGISTRATION_URL"),
    )
    signer = StateTokenSigner(
        app.config["LTI_STATE_SECRET"], lifetime=app.config["STATE_EXPIRATION"]
    )
    app.extensions["lti_login"] = LoginRequestHandler(
        resolver,
        signer,
        issuer=app.config.get("TOOL_ISSUER"),
    )

    app.register_blueprint(login_bp)
    app.register_blueprint(status_bp)

    app.logger.info("URL MAP: %s", app.url_map)

    return app
