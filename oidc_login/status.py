"""Health check endpoint."""
from __future__ import annotations

from datetime import datetime

from flask import Blueprint, jsonify

bp = Blueprint("status", __name__)


@bp.route("/health")
def health():
    """Simple health check endpoint."""
    return jsonify({"status": "ok", "timestamp": datetime.utcnow().isoformat()})
