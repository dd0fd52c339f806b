"""Nonce generation and HMAC-signed OIDC state tokens."""
from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone

import jwt

ALGORITHM = "HS256"


def generate_nonce() -> str:
    """Return a fresh single-use random value."""
    return secrets.token_urlsafe(32)


class StateTokenSigner:
    """Sign and verify the state token round-tripped through the platform.

    The token is signed, not encrypted: its claims are readable by anyone
    holding it, but only a holder of ``secret`` can produce or verify one.
    """

    def __init__(self, secret: str, lifetime: timedelta = timedelta(minutes=5)):
        if not secret:
            raise ValueError("state token secret must not be empty")
        self._secret = secret
        self.lifetime = lifetime

    def sign(
        self,
        issuer: str,
        subject: str,
        audience: str,
        deployment_id: str,
        client_id: str,
        redirect_uri: str,
        nonce: str | None = None,
        now: datetime | None = None,
    ) -> str:
        issued = now or datetime.now(timezone.utc)
        payload = {
            "iss": issuer,
            "sub": subject,
            "aud": audience,
            "iat": int(issued.timestamp()),
            "exp": int((issued + self.lifetime).timestamp()),
            "nonce": nonce or generate_nonce(),
            "deployment_id": deployment_id,
            "client_id": client_id,
            "redirect_uri": redirect_uri,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str, audience: str, leeway: int = 0) -> dict:
        """Return the claims of ``token``; raises ``jwt.InvalidTokenError``."""
        return jwt.decode(
            token,
            self._secret,
            algorithms=[ALGORITHM],
            audience=audience,
            leeway=leeway,
            options={"require": ["iss", "sub", "aud", "iat", "exp", "nonce"]},
        )

    def __repr__(self) -> str:
        return f"<StateTokenSigner lifetime={self.lifetime}>"
