from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from app.guestbook.errors import storage_failure_message
from app.guestbook.extensions import current_store
from app.guestbook.modules.signatures.service import list_entries, public_stats, submit_signature
from app.guestbook.modules.signatures.utils import parse_positive_int

bp = Blueprint("signatures", __name__)


def request_payload() -> dict:
    """JSON body if there is one, otherwise form fields."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


@bp.post("/sign")
@storage_failure_message("Failed to save signature")
def sign():
    result = submit_signature(current_store(), request_payload())
    return jsonify({"success": True, "id": result["id"], "message": result["message"]})


@bp.get("/entries")
@storage_failure_message("Failed to fetch entries")
def entries():
    cfg = current_app.config
    page = parse_positive_int(request.args.get("page"), 1)
    limit = min(
        parse_positive_int(request.args.get("limit"), cfg["ENTRIES_PAGE_SIZE"]),
        cfg["ENTRIES_MAX_LIMIT"],
    )
    return jsonify(list_entries(current_store(), page=page, limit=limit))


@bp.get("/stats")
@storage_failure_message("Failed to fetch statistics")
def stats():
    return jsonify(public_stats(current_store()))
