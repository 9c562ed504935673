"""
Routes for the logs blueprint.

Mounted under ``/api/logs``.  Entries written by the assignment engine
carry ``changed_by = 0``.  Explicit entries and corrections can be
posted for audit reconciliation.
"""

from flask import make_response, request

from software_tracker.blueprints.common import (
    date_range_args,
    int_field,
    json_body,
    paginated,
    pagination_args,
)
from software_tracker.blueprints.logs import bp
from software_tracker.services import assignment_log_service, export_service


def _filter_args() -> dict:
    """Log filters shared by the list and export endpoints."""
    start_date, end_date = date_range_args()
    return {
        "staff_id": request.args.get("staff_id", type=int),
        "software_id": request.args.get("software_id", type=int),
        "action": request.args.get("action") or None,
        "changed_by": request.args.get("changed_by", type=int),
        "start_date": start_date,
        "end_date": end_date,
        "search": request.args.get("search", "").strip() or None,
    }


@bp.route("")
def list_logs():
    """
    Paginated assignment log, newest first.

    Query params: ``staff_id``, ``software_id``, ``action``,
    ``changed_by``, ``start_date``, ``end_date``, ``search`` (software
    or staff name), ``page``, ``page_size``.
    """
    page, per_page = pagination_args()
    pagination = assignment_log_service.get_logs(
        page=page, per_page=per_page, **_filter_args()
    )
    body = paginated(pagination, lambda entry: entry)
    body["data"] = assignment_log_service.describe_logs(body["data"])
    return body


@bp.route("/<int:log_id>")
def get_log(log_id):
    entry = assignment_log_service.get_log_by_id(log_id)
    return assignment_log_service.describe_logs([entry])[0]


@bp.route("", methods=["POST"])
def create_log():
    data = json_body()
    entry = assignment_log_service.create_log(
        staff_id=int_field(data, "staff_id", required=True),
        software_id=int_field(data, "software_id", required=True),
        action=data.get("action"),
        changed_by=int_field(data, "changed_by", required=True),
    )
    return entry.to_dict(), 201


@bp.route("/<int:log_id>", methods=["PUT"])
def update_log(log_id):
    data = json_body()
    entry = assignment_log_service.update_log(
        log_id,
        staff_id=int_field(data, "staff_id"),
        software_id=int_field(data, "software_id"),
        action=data.get("action"),
        changed_by=int_field(data, "changed_by"),
    )
    return entry.to_dict()


@bp.route("/<int:log_id>", methods=["DELETE"])
def delete_log(log_id):
    assignment_log_service.delete_log(log_id)
    return {"message": f"Log {log_id} deleted."}


@bp.route("/export/<fmt>")
def export_logs(fmt):
    """
    Export the filtered log as CSV or Excel.

    Args:
        fmt: Export format — 'csv' or 'xlsx'.
    """
    if fmt not in ("csv", "xlsx"):
        raise ValueError(f"Unsupported export format '{fmt}'; use csv or xlsx.")

    entries = assignment_log_service.get_all_logs(**_filter_args())
    rows = assignment_log_service.describe_logs(entries)

    if fmt == "xlsx":
        buffer = export_service.export_logs_excel(rows)
        response = make_response(buffer.read())
        response.headers["Content-Type"] = (
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        response.headers["Content-Disposition"] = (
            "attachment; filename=assignment_logs.xlsx"
        )
    else:
        buffer = export_service.export_logs_csv(rows)
        response = make_response(buffer.read())
        response.headers["Content-Type"] = "text/csv; charset=utf-8"
        response.headers["Content-Disposition"] = (
            "attachment; filename=assignment_logs.csv"
        )

    return response
