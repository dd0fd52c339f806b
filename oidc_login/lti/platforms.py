"""Compiled-in endpoint profiles for platform families that may self-register."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PlatformProfile:
    platform_id: str
    name: str
    oidc_auth_url: str
    oauth_access_token_url: str
    well_known_jwks_url: str
    lms: str
    # claim inside lti_message_hint that names the customer's domain, if any
    domain_hint_claim: str | None = None


CANVAS = PlatformProfile(
    platform_id="https://canvas.instructure.com",
    name="Canvas",
    oidc_auth_url="https://sso.canvaslms.com/api/lti/authorize_redirect",
    oauth_access_token_url="https://sso.canvaslms.com/login/oauth2/token",
    well_known_jwks_url="https://sso.canvaslms.com/api/lti/security/jwks",
    lms="canvas",
    domain_hint_claim="canvas_domain",
)

SCHOOLOGY = PlatformProfile(
    platform_id="https://schoology.schoology.com",
    name="Schoology",
    oidc_auth_url="https://lti-service.svc.schoology.com/lti-service/authorize-redirect",
    oauth_access_token_url="https://lti-service.svc.schoology.com/lti-service/access-token",
    well_known_jwks_url="https://lti-service.svc.schoology.com/lti-service/.well-known/jwks",
    lms="schoology",
)

BLACKBOARD = PlatformProfile(
    platform_id="https://blackboard.com",
    name="Blackboard",
    oidc_auth_url="https://developer.blackboard.com/api/v1/gateway/oidcauth",
    oauth_access_token_url="https://developer.blackboard.com/api/v1/gateway/oauth2/jwttoken",
    well_known_jwks_url=(
        "https://developer.blackboard.com/api/v1/management/applications/"
        "be1004de-6f8e-45b9-aae4-2c1370c24e1e/jwks.json"
    ),
    lms="blackboard",
)

PROFILES: dict[str, PlatformProfile] = {
    profile.platform_id: profile for profile in (CANVAS, SCHOOLOGY, BLACKBOARD)
}


def get_profile(platform_id: str) -> PlatformProfile | None:
    """Return the profile registered for ``platform_id``, if any."""
    return PROFILES.get(platform_id)
