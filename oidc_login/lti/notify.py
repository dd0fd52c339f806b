"""Administrative notices about auto-registrations and failed lookups."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Mapping

import requests

logger = logging.getLogger(__name__)

SENDGRID_ENDPOINT = "https://api.sendgrid.com/v3/mail/send"


def format_notice(heading: str, params: Mapping[str, str], domain: str | None = None) -> str:
    """Render a notice body listing every received parameter as name=value."""
    lines = [heading, ""]
    if domain:
        lines += [f"Platform domain: {domain}", ""]
    lines.append("Query parameters:")
    lines += [f"{name}={value}" for name, value in params.items()]
    return "\n".join(lines)


class AdminNotifier(ABC):
    """Sink for notices meant for a human operator."""

    @abstractmethod
    def send(self, subject: str, message: str) -> None:
        ...


class LogNotifier(AdminNotifier):
    """Write notices to the log when no mail transport is configured."""

    def send(self, subject: str, message: str) -> None:
        logger.warning("ADMIN NOTICE (not mailed) %s\n%s", subject, message)


class SendGridNotifier(AdminNotifier):
    """Mail notices to the administrator through the SendGrid v3 API."""

    def __init__(
        self,
        api_key: str,
        recipient: str,
        sender: str,
        sender_name: str | None = None,
        timeout: float = 10,
    ):
        self.api_key = api_key
        self.recipient = recipient
        self.sender = sender
        self.sender_name = sender_name
        self.timeout = timeout

    def send(self, subject: str, message: str) -> None:
        sender = {"email": self.sender}
        if self.sender_name:
            sender["name"] = self.sender_name
        payload = {
            "personalizations": [{"to": [{"email": self.recipient}]}],
            "from": sender,
            "subject": subject,
            "content": [{"type": "text/plain", "value": message}],
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        resp = requests.post(SENDGRID_ENDPOINT, json=payload, headers=headers, timeout=self.timeout)
        resp.raise_for_status()
        logger.info("Admin notice sent to %s: %s", self.recipient, subject)


def notifier_from_config(config: Mapping) -> AdminNotifier:
    api_key = config.get("SENDGRID_API_KEY")
    if not api_key:
        return LogNotifier()
    return SendGridNotifier(
        api_key,
        recipient=config["ADMIN_EMAIL"],
        sender=config["NOTICE_FROM_EMAIL"],
        sender_name=config.get("NOTICE_FROM_NAME"),
    )
