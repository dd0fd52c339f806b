"""Database models used by the login service."""
from __future__ import annotations

from datetime import datetime
from urllib.parse import urlparse

from sqlalchemy import Column, DateTime, Integer, String

from . import db

STATUS_ACTIVE = "active"
STATUS_AUTO = "auto"

LTI_AGS_SCOPE = (
    "https://purl.imsglobal.org/spec/lti-ags/scope/lineitem "
    "https://purl.imsglobal.org/spec/lti-ags/scope/lineitem.readonly "
    "https://purl.imsglobal.org/spec/lti-ags/scope/result.readonly "
    "https://purl.imsglobal.org/spec/lti-ags/scope/score "
    "https://purl.imsglobal.org/spec/lti-nrps/scope/contextmembership.readonly"
)


def _require_https(label: str, url: str) -> str:
    if urlparse(url).scheme != "https":
        raise ValueError(f"{label} must be secure (https): {url}")
    return url


class Deployment(db.Model):
    """A tenant's registration with one LMS platform.

    Keyed by ``platform_id + "/" + deployment_id`` so that every deployment of
    a platform sorts into one contiguous key range.
    """

    __tablename__ = "deployments"

    platform_deployment_id = Column(String, primary_key=True)
    platform_id = Column(String, nullable=False, index=True)
    client_id = Column(String, nullable=False, index=True)
    oidc_auth_url = Column(String, nullable=False)
    oauth_access_token_url = Column(String, nullable=False)
    well_known_jwks_url = Column(String, nullable=False)
    contact_name = Column(String)
    email = Column(String)
    organization = Column(String)
    org_url = Column(String)
    lms_type = Column(String)
    scope = Column(String, default=LTI_AGS_SCOPE)
    status = Column(String, index=True)
    licenses_remaining = Column(Integer, nullable=False, default=5)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    last_login = Column(DateTime)

    @classmethod
    def create(
        cls,
        platform_id: str,
        deployment_id: str | None,
        client_id: str,
        oidc_auth_url: str,
        oauth_access_token_url: str,
        well_known_jwks_url: str,
        contact_name: str | None = None,
        email: str | None = None,
        organization: str | None = None,
        org_url: str | None = None,
        lms: str | None = None,
        status: str = STATUS_ACTIVE,
        licenses_remaining: int = 5,
    ) -> "Deployment":
        """Build a validated, unsaved deployment."""
        if not platform_id:
            raise ValueError("platform_id cannot be null or empty")
        if not client_id:
            raise ValueError("client_id cannot be null or empty")
        if platform_id.endswith("/"):
            platform_id = platform_id[:-1]
        _require_https("Platform URL", platform_id)

        return cls(
            platform_deployment_id=f"{platform_id}/{deployment_id or ''}",
            platform_id=platform_id,
            client_id=client_id,
            oidc_auth_url=_require_https("OIDC auth URL", oidc_auth_url),
            oauth_access_token_url=_require_https("OAuth token URL", oauth_access_token_url),
            well_known_jwks_url=_require_https("JWKS URL", well_known_jwks_url),
            contact_name=contact_name,
            email=email,
            organization=organization,
            org_url=org_url,
            lms_type=lms,
            scope=LTI_AGS_SCOPE,
            status=status,
            licenses_remaining=licenses_remaining,
            created_at=datetime.utcnow(),
        )

    @property
    def deployment_id(self) -> str:
        return self.platform_deployment_id[len(self.platform_id) + 1:]

    def __repr__(self) -> str:
        return f"<Deployment {self.platform_deployment_id} status={self.status}>"
