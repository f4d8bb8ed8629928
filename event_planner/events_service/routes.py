"""
Events service routes: list, create, update and delete calendar events.
"""

import logging
from datetime import datetime, timezone
from typing import Tuple, Dict, Any, Optional

from flask import Blueprint, jsonify, request, Response

from event_planner.database.stores import get_event_store
from event_planner.errors import NotFoundError, ValidationError, translate_errors
from event_planner.utils import read_json, require_fields, text_field

events_bp = Blueprint("events", __name__)


@events_bp.before_request
def before_request() -> None:
    logging.info(f"[Events] Incoming {request.method} {request.path}")


@events_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[Events] Response {response.status}")
    return response


def parse_dt(val: Any) -> Optional[datetime]:
    """
    Safely parse an ISO-8601 string to a timezone-aware datetime.

    Naive values are taken to be UTC.

    Args:
        val (str): The date string to parse.

    Returns:
        datetime: The parsed datetime, or None if invalid.
    """
    if not val or not isinstance(val, str):
        return None
    try:
        # Handles 'YYYY-MM-DDTHH:MM' and '...Z' or '...+00:00'
        val = val.strip()
        if val.endswith(("Z", "z")):
            val = val[:-1] + "+00:00"
        parsed = datetime.fromisoformat(val)
    except (ValueError, TypeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_iso(dt: datetime) -> str:
    """Format a datetime as UTC ISO-8601 with a 'Z' suffix."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def serialize_event(row: Dict[str, Any]) -> Dict[str, Any]:
    """Map a stored event row to its JSON shape."""
    return {
        "id": row["id"],
        "title": row["title"],
        "description": row["description"] or "",
        "start": to_iso(row["start_time"]),
        "end": to_iso(row["end_time"]),
        "allDay": bool(row["all_day"]),
    }


def event_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate an event body and return the store arguments.

    Used by both create and update: every call supplies the full record,
    so optional fields fall back to their defaults.

    Note: end is not checked against start.

    Raises:
        ValidationError: title, start or end missing, unparseable times,
            or a non-boolean allDay.
    """
    require_fields(data, "title", "start", "end")

    start_dt = parse_dt(data.get("start"))
    end_dt = parse_dt(data.get("end"))
    if not start_dt or not end_dt:
        raise ValidationError("Invalid datetime format. Use ISO-8601.")

    # Only a real JSON boolean; "false" would otherwise be truthy
    all_day = data.get("allDay")
    if all_day is None:
        all_day = False
    elif not isinstance(all_day, bool):
        raise ValidationError("allDay must be a boolean")

    description = data.get("description")
    return {
        "title": text_field(data, "title"),
        "description": "" if description is None else str(description),
        "start": start_dt,
        "end": end_dt,
        "all_day": all_day,
    }


@events_bp.route("/events", methods=["GET"])
def list_events() -> Tuple[Response, int]:
    """
    Return all events, earliest start first.

    Returns:
        200: List of event objects (empty list when there are none).
        500: Database error.
    """
    with translate_errors("Failed to retrieve events"):
        rows = get_event_store().list_all()

    return jsonify([serialize_event(row) for row in rows]), 200


@events_bp.route("/events", methods=["POST"])
def create_event() -> Tuple[Response, int]:
    """
    Create an event.

    Expects JSON: title, start, end, and optionally description and allDay.

    Returns:
        201: The stored event, including its id.
        400: Validation error.
        500: Server error.
    """
    fields = event_fields(read_json())

    with translate_errors("Failed to create event"):
        row = get_event_store().create(**fields)

    logging.info(f"[Events] Created event id={row['id']}")
    return jsonify(serialize_event(row)), 201


@events_bp.route("/events/<int:event_id>", methods=["PUT"])
def update_event(event_id: int) -> Tuple[Response, int]:
    """
    Replace an event's fields.

    The body is validated like create; fields left out are reset to their
    defaults rather than merged with the stored values.

    Returns:
        200: The updated event.
        400: Validation error.
        404: No event with this id.
        500: Server error.
    """
    fields = event_fields(read_json())

    with translate_errors("Failed to update event"):
        row = get_event_store().replace(event_id, **fields)

    if row is None:
        raise NotFoundError("Event not found")

    return jsonify(serialize_event(row)), 200


@events_bp.route("/events/<int:event_id>", methods=["DELETE"])
def delete_event(event_id: int) -> Tuple[Response, int]:
    """
    Delete an event.

    Returns:
        200: Confirmation message.
        404: No event with this id.
        500: Server error.
    """
    with translate_errors("Failed to delete event"):
        deleted = get_event_store().delete(event_id)

    if not deleted:
        raise NotFoundError("Event not found")

    logging.info(f"[Events] Deleted event id={event_id}")
    return jsonify({"message": "Event deleted successfully", "id": event_id}), 200
