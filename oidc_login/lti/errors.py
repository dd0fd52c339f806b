"""Errors raised while handling a third-party initiated login."""
from __future__ import annotations


class LoginError(Exception):
    """Base class for login failures that end in a 401."""


class MissingParameterError(LoginError):
    def __init__(self, parameter: str, message: str | None = None):
        self.parameter = parameter
        super().__init__(message or f"Missing required {parameter} parameter.")


class InvalidPlatformError(LoginError):
    """The platform_id is not a secure HTTPS URL."""


class DeploymentNotFoundError(LoginError):
    """No deployment matched and the platform cannot self-register."""
