"""WSGI entry point."""
from sqlalchemy import inspect

from oidc_login import create_app, db

# Expose application instance for WSGI servers
app = create_app()

# Verify the deployments table exists so migrations aren't skipped
with app.app_context():
    inspector = inspect(db.engine)
    if not inspector.has_table("deployments"):
        app.logger.error(
            "Required table 'deployments' not found. Run database migrations before starting."
        )
