from flask import Blueprint

bp = Blueprint("utility", __name__)


@bp.route("/healthz")
def healthz():
    """Lightweight liveness probe."""
    return "ok", 200
