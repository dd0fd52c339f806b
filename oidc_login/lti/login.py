"""Third-party initiated login: resolve the deployment, mint a state token
and send the browser to the platform's OIDC authorization endpoint."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping
from urllib.parse import urlencode

from flask import Blueprint, Response, current_app, render_template, request

from ..models import Deployment
from .errors import LoginError, MissingParameterError
from .resolver import DeploymentResolver
from .tokens import StateTokenSigner, generate_nonce

bp = Blueprint("lti", __name__)

REQUIRED_PARAMS = ("iss", "login_hint", "target_link_uri")
# platforms disagree on where the deployment discriminator goes:
# moodle/brightspace/blackboard, canvas, then schoology's login_hint
DEPLOYMENT_ID_PARAMS = ("lti_deployment_id", "deployment_id", "login_hint")


@dataclass(frozen=True)
class LoginResult:
    deployment: Deployment
    auth_url: str
    state: str
    nonce: str


def build_redirect_url(
    oidc_auth_url: str,
    login_hint: str,
    redirect_uri: str,
    client_id: str,
    state: str,
    nonce: str,
    lti_message_hint: str | None = None,
) -> str:
    params = {
        "response_type": "id_token",
        "response_mode": "form_post",
        "scope": "openid",
        "prompt": "none",
        "login_hint": login_hint,
        "redirect_uri": redirect_uri,
    }
    if lti_message_hint is not None:
        params["lti_message_hint"] = lti_message_hint
    params["client_id"] = client_id
    params["state"] = state
    params["nonce"] = nonce
    return f"{oidc_auth_url}?{urlencode(params, safe=':/')}"


def candidate_deployment_id(params: Mapping[str, str]) -> str | None:
    for name in DEPLOYMENT_ID_PARAMS:
        value = params.get(name)
        if value is not None:
            return value
    return None


class LoginRequestHandler:
    def __init__(
        self,
        resolver: DeploymentResolver,
        signer: StateTokenSigner,
        issuer: str | None = None,
    ):
        self.resolver = resolver
        self.signer = signer
        self.issuer = issuer

    def handle(self, params: Mapping[str, str], issuer: str | None = None) -> LoginResult:
        """Validate ``params`` and build the authorization redirect.

        ``issuer`` is used when the handler was not configured with one.
        """
        for name in REQUIRED_PARAMS:
            if not params.get(name):
                raise MissingParameterError(name)

        platform_id = params["iss"]
        login_hint = params["login_hint"]
        redirect_uri = params["target_link_uri"]

        d = self.resolver.resolve(
            platform_id,
            candidate_deployment_id(params),
            params.get("client_id"),
            params,
        )

        nonce = generate_nonce()
        state = self.signer.sign(
            issuer=self.issuer or issuer,
            subject=login_hint,
            audience=d.platform_id,
            deployment_id=d.deployment_id,
            client_id=d.client_id,
            redirect_uri=redirect_uri,
            nonce=nonce,
        )
        auth_url = build_redirect_url(
            d.oidc_auth_url,
            login_hint,
            redirect_uri,
            d.client_id,
            state,
            nonce,
            lti_message_hint=params.get("lti_message_hint"),
        )
        return LoginResult(deployment=d, auth_url=auth_url, state=state, nonce=nonce)


def _fail(message: str, params: Mapping[str, str]) -> Response:
    dump = "".join(f"{name}:{value};" for name, value in params.items())
    return Response(f"Failed Auth Token. {message}\n{dump}", status=401, mimetype="text/plain")


@bp.route("/auth/token/", methods=["GET", "POST"], strict_slashes=False)
@bp.route("/auth/token", methods=["GET", "POST"], strict_slashes=False)
def token():
    """Initiate OIDC login flow."""
    params = request.values.to_dict()
    handler: LoginRequestHandler = current_app.extensions["lti_login"]

    try:
        result = handler.handle(params, issuer=f"https://{request.host}")
    except LoginError as exc:
        current_app.logger.error("AUTH TOKEN FAIL: %s", exc)
        return _fail(str(exc), params)
    except Exception as exc:
        current_app.logger.exception("AUTH TOKEN FAIL")
        return _fail(str(exc) or repr(exc), params)

    current_app.logger.info(
        "Redirecting %s to %s",
        result.deployment.platform_deployment_id,
        result.auth_url.split("&state=")[0],
    )
    html = render_template(
        "auth_token.html",
        title=current_app.config.get("TOOL_TITLE", "Chem4AP"),
        auth_url=result.auth_url,
    )
    resp = Response(html, mimetype="text/html")
    resp.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
    return resp
