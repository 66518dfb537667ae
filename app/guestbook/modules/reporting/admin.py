from __future__ import annotations

from flask import Blueprint, Response, current_app, g, jsonify, request

from app.guestbook.auth import require_admin
from app.guestbook.errors import storage_failure_message
from app.guestbook.extensions import current_store
from app.guestbook.modules.reporting.service import (
    CsvExport,
    compute_dashboard,
    export_all_csv,
    export_newsletter_csv,
    export_range_csv,
)

bp = Blueprint("reporting", __name__)


def _csv_response(export: CsvExport, kind: str) -> Response:
    current_app.logger.info(
        "Export %s by %s: %s rows -> %s", kind, getattr(g, "admin_username", None), export.row_count, export.filename
    )
    resp = Response(export.body, mimetype="text/csv")
    resp.headers["Content-Disposition"] = f'attachment; filename="{export.filename}"'
    resp.headers["Cache-Control"] = "no-store"
    return resp


@bp.get("/dashboard")
@require_admin
@storage_failure_message("Failed to fetch dashboard data")
def dashboard():
    return jsonify(compute_dashboard(current_store()))


@bp.get("/export/all")
@require_admin
@storage_failure_message("Failed to export data")
def export_all():
    return _csv_response(export_all_csv(current_store()), "all")


@bp.get("/export/newsletter")
@require_admin
@storage_failure_message("Failed to export data")
def export_newsletter():
    export = export_newsletter_csv(current_store(), tag=current_app.config["NEWSLETTER_TAG"])
    return _csv_response(export, "newsletter")


@bp.get("/export/range")
@require_admin
@storage_failure_message("Failed to export data")
def export_range():
    export = export_range_csv(current_store(), request.args.get("start"), request.args.get("end"))
    return _csv_response(export, "range")
