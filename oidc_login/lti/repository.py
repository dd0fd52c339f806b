"""Keyed access to deployment records."""
from __future__ import annotations

from abc import ABC, abstractmethod

from sqlalchemy.exc import IntegrityError

from ..models import Deployment


class DeploymentRepository(ABC):
    """Exact-key lookup, key-range scan and upsert over deployments."""

    @abstractmethod
    def get_exact(self, key: str) -> Deployment | None:
        ...

    @abstractmethod
    def scan_range(self, start: str, end: str) -> list[Deployment]:
        """Return deployments with ``start <= key < end``, ordered by key."""

    @abstractmethod
    def put(self, deployment: Deployment) -> Deployment:
        """Insert or overwrite ``deployment`` by key (last write wins)."""


class SqlDeploymentRepository(DeploymentRepository):
    def __init__(self, session):
        self.session = session

    def get_exact(self, key: str) -> Deployment | None:
        return self.session.get(Deployment, key)

    def scan_range(self, start: str, end: str) -> list[Deployment]:
        # prefix match in SQL, codepoint bounds here; locale collations
        # (Postgres en_US) skip punctuation when ordering
        rows = (
            self.session.query(Deployment)
            .filter(Deployment.platform_deployment_id.startswith(start, autoescape=True))
            .all()
        )
        return sorted(
            (d for d in rows if start <= d.platform_deployment_id < end),
            key=lambda d: d.platform_deployment_id,
        )

    def put(self, deployment: Deployment) -> Deployment:
        try:
            merged = self.session.merge(deployment)
            self.session.commit()
        except IntegrityError:
            # a concurrent request inserted the same key first; overwrite it
            self.session.rollback()
            merged = self.session.merge(deployment)
            self.session.commit()
        return merged
