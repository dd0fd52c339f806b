"""Initial database schema."""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# Revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "deployments",
        sa.Column("platform_deployment_id", sa.String(), primary_key=True),
        sa.Column("platform_id", sa.String(), nullable=False),
        sa.Column("client_id", sa.String(), nullable=False),
        sa.Column("oidc_auth_url", sa.String(), nullable=False),
        sa.Column("oauth_access_token_url", sa.String(), nullable=False),
        sa.Column("well_known_jwks_url", sa.String(), nullable=False),
        sa.Column("contact_name", sa.String()),
        sa.Column("email", sa.String()),
        sa.Column("organization", sa.String()),
        sa.Column("org_url", sa.String()),
        sa.Column("lms_type", sa.String()),
        sa.Column("scope", sa.String()),
        sa.Column("status", sa.String()),
        sa.Column("licenses_remaining", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime()),
        sa.Column("last_login", sa.DateTime()),
    )
    op.create_index("ix_deployments_platform_id", "deployments", ["platform_id"])
    op.create_index("ix_deployments_client_id", "deployments", ["client_id"])
    op.create_index("ix_deployments_status", "deployments", ["status"])
    op.create_index("ix_deployments_created_at", "deployments", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_deployments_created_at", table_name="deployments")
    op.drop_index("ix_deployments_status", table_name="deployments")
    op.drop_index("ix_deployments_client_id", table_name="deployments")
    op.drop_index("ix_deployments_platform_id", table_name="deployments")
    op.drop_table("deployments")
