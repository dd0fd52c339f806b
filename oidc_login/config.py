"""Application configuration."""
from __future__ import annotations

import os
from datetime import timedelta


class Config:
    """Base configuration loaded from environment variables."""

    # Deployment store - default to in-memory SQLite for tests
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret")
    # HMAC key for state tokens; the launch handler must share it
    LTI_STATE_SECRET = os.environ.get("LTI_STATE_SECRET", SECRET_KEY)

    # iss claim of the state token; falls back to https://<request host>
    TOOL_ISSUER = os.environ.get("TOOL_ISSUER")
    TOOL_TITLE = os.environ.get("TOOL_TITLE", "Chem4AP")

    STATE_EXPIRATION = timedelta(minutes=5)

    REGISTRATION_URL = os.environ.get(
        "REGISTRATION_URL", "https://www.chemvantage.org/lti/registration"
    )

    # Administrative notices
    APP_ENV = os.environ.get("APP_ENV", "production")
    ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "admin@chemvantage.org")
    NOTICE_FROM_EMAIL = os.environ.get("NOTICE_FROM_EMAIL", "noreply@chemvantage.org")
    NOTICE_FROM_NAME = os.environ.get("NOTICE_FROM_NAME", "ChemVantage")
    SENDGRID_API_KEY = os.environ.get("SENDGRID_API_KEY")
