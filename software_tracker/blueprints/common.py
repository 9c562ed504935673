"""
Request parsing and response helpers shared by the API blueprints.

Parsing helpers raise ``ValueError`` on bad input; the application's
error handler turns that into a 400 JSON response.
"""

from datetime import datetime, time

from flask import current_app, request

_DATE_FORMAT = "%Y-%m-%d"
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


# -- Query string ----------------------------------------------------------


def pagination_args() -> tuple[int, int]:
    """
    Read ``page`` and ``page_size`` (or ``per_page``) from the query string.

    The page size defaults to ``API_DEFAULT_PAGE_SIZE`` and is clamped to
    ``API_MAX_PAGE_SIZE``.
    """
    default_size = current_app.config["API_DEFAULT_PAGE_SIZE"]
    max_size = current_app.config["API_MAX_PAGE_SIZE"]

    page = request.args.get("page", 1, type=int)
    per_page = request.args.get(
        "page_size", request.args.get("per_page", default_size, type=int), type=int
    )
    page = max(page or 1, 1)
    per_page = min(max(per_page or default_size, 1), max_size)
    return page, per_page


def _parse_date(name: str) -> datetime | None:
    raw = request.args.get(name, "").strip()
    if not raw:
        return None
    try:
        return datetime.strptime(raw, _DATE_FORMAT)
    except ValueError:
        raise ValueError(f"Invalid {name} '{raw}'; expected YYYY-MM-DD.")


def date_range_args() -> tuple[datetime | None, datetime | None]:
    """
    Read ``start_date`` / ``end_date`` (YYYY-MM-DD) from the query string.

    The end date is inclusive: it is moved to the last instant of that day.
    """
    start_date = _parse_date("start_date")
    end_date = _parse_date("end_date")
    if end_date is not None:
        end_date = datetime.combine(end_date.date(), time.max)
    if start_date and end_date and start_date > end_date:
        raise ValueError("start_date must not be after end_date.")
    return start_date, end_date


def bool_arg(name: str, default: bool) -> bool:
    """Read a boolean flag (1/0, true/false, yes/no) from the query string."""
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid value '{raw}' for {name}; expected true or false.")


# -- JSON body -------------------------------------------------------------


def json_body() -> dict:
    """Return the request's JSON object body (empty dict if none)."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object.")
    return data


def int_field(data: dict, name: str, required: bool = False) -> int | None:
    """Read an integer field from a JSON body."""
    value = data.get(name)
    if value is None or value == "":
        if required:
            raise ValueError(f"'{name}' is required.")
        return None
    if isinstance(value, bool):
        raise ValueError(f"'{name}' must be an integer.")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"'{name}' must be an integer.")


# -- Responses -------------------------------------------------------------


def paginated(pagination, serialize) -> dict:
    """Wrap a Flask-SQLAlchemy pagination object in the list envelope."""
    return {
        "data": [serialize(item) for item in pagination.items],
        "page": pagination.page,
        "per_page": pagination.per_page,
        "total": pagination.total,
        "pages": pagination.pages,
    }


def with_assignments(payload: dict, result) -> dict:
    """Attach an engine ``AssignmentResult`` summary to a response body."""
    payload["assignments"] = result.to_dict()
    return payload
