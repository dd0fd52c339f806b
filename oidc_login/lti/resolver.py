"""Decide which deployment a login request belongs to.

Lookup runs in tiers, first hit wins:

1. exact key ``platform_id/deployment_id``;
2. the sole deployment registered under ``platform_id/`` when there is
   exactly one, whatever discriminator the request carried;
3. auto-registration for platform families with a compiled-in profile,
   stored with status ``auto`` and no licenses until an operator reviews it.

Anything else is reported to the administrator and rejected. The read and
the conditional write are not locked, so two first-contact requests for the
same key may both register; the repository overwrites by key and the only
visible effect is a duplicate notice.
"""
from __future__ import annotations

import logging
from typing import Mapping
from urllib.parse import urlparse

import jwt

from ..models import STATUS_AUTO, Deployment
from .errors import DeploymentNotFoundError, InvalidPlatformError, MissingParameterError
from .notify import AdminNotifier, format_notice
from .platforms import PlatformProfile, get_profile
from .repository import DeploymentRepository

logger = logging.getLogger(__name__)

# sorts after every character allowed in a deployment_id
RANGE_SENTINEL = "~"


def normalize_platform_id(platform_id: str | None) -> str:
    """Strip one trailing slash and insist on https."""
    if not platform_id:
        raise MissingParameterError("iss", "Platform ID (iss parameter) is required.")
    if platform_id.endswith("/"):
        platform_id = platform_id[:-1]
    parsed = urlparse(platform_id)
    if parsed.scheme != "https" or not parsed.netloc:
        raise InvalidPlatformError(
            f"The platform_id must be a secure HTTPS URL. Received: {platform_id}"
        )
    return platform_id


def extract_domain_hint(profile: PlatformProfile, message_hint: str | None) -> str | None:
    """Best-effort read of the customer domain from an opaque message hint."""
    if not profile.domain_hint_claim or not message_hint:
        return None
    try:
        claims = jwt.decode(message_hint, options={"verify_signature": False})
    except jwt.InvalidTokenError:
        return None
    value = claims.get(profile.domain_hint_claim)
    return value if isinstance(value, str) else None


class DeploymentResolver:
    def __init__(
        self,
        repository: DeploymentRepository,
        notifier: AdminNotifier,
        environment: str = "production",
        registration_url: str | None = None,
    ):
        self.repository = repository
        self.notifier = notifier
        self.environment = environment
        self.registration_url = registration_url

    def resolve(
        self,
        platform_id: str,
        deployment_id: str | None,
        client_id: str | None,
        raw_params: Mapping[str, str],
    ) -> Deployment:
        platform_id = normalize_platform_id(platform_id)

        if deployment_id is not None:
            d = self.repository.get_exact(f"{platform_id}/{deployment_id}")
            if d is not None:
                logger.info("Deployment %s matched exactly", d.platform_deployment_id)
                return d

        candidates = self.repository.scan_range(
            f"{platform_id}/", f"{platform_id}/{RANGE_SENTINEL}"
        )
        if len(candidates) == 1:
            d = candidates[0]
            logger.info(
                "Deployment %s is the only one for %s; requested deployment_id=%s",
                d.platform_deployment_id,
                platform_id,
                deployment_id,
            )
            return d

        profile = get_profile(platform_id)
        if profile is not None:
            return self._auto_register(profile, deployment_id, client_id, raw_params)

        logger.warning(
            "No deployment for %s/%s (%d candidates)", platform_id, deployment_id, len(candidates)
        )
        self._report_failure(raw_params)
        raise DeploymentNotFoundError(self._guidance())

    def _auto_register(
        self,
        profile: PlatformProfile,
        deployment_id: str | None,
        client_id: str | None,
        raw_params: Mapping[str, str],
    ) -> Deployment:
        if not client_id:
            self._report_failure(raw_params)
            raise MissingParameterError(
                "client_id",
                f"Missing required client_id parameter for automatic {profile.name} registration.",
            )
        d = Deployment.create(
            profile.platform_id,
            deployment_id,
            client_id,
            profile.oidc_auth_url,
            profile.oauth_access_token_url,
            profile.well_known_jwks_url,
            lms=profile.lms,
            status=STATUS_AUTO,
            licenses_remaining=0,
        )
        d = self.repository.put(d)
        logger.info("Auto-registered %s deployment %s", profile.name, d.platform_deployment_id)

        domain = extract_domain_hint(profile, raw_params.get("lti_message_hint"))
        self.notifier.send(
            f"Automatic {profile.name} Registration",
            format_notice("Deployment Registration", raw_params, domain=domain),
        )
        return d

    def _report_failure(self, raw_params: Mapping[str, str]) -> None:
        self.notifier.send(
            f"AuthToken Request Failure ({self.environment.title()})",
            format_notice("Deployment Not Found", raw_params),
        )

    def _guidance(self) -> str:
        message = (
            "Unable to identify this deployment from your LMS. If you received a "
            "registration email within the past 7 days, please use the tokenized link "
            "in that message to submit (or resubmit) the deployment_id and other "
            "required parameters."
        )
        if self.registration_url:
            message += (
                " Otherwise, you may repeat the registration process at "
                f"{self.registration_url}"
            )
        return message
