"""
JSON API for Panelboard.

Registers a Flask blueprint on the Dash server exposing the layout store,
notes and health checks under /api.
"""

import logging
import sqlite3
import time
from datetime import datetime, timezone

from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, NotFound

from panelboard import __version__
from panelboard.db.repository import NoteRepository, PanelRepository
from panelboard.db.schema import check_connection
from panelboard.exceptions import LayoutStoreError, LayoutValidationError, PanelNotFoundError
from panelboard.layouts.serializer import deserialize_layout, panel_to_wire, serialize_layout

logger = logging.getLogger(__name__)

API_PREFIX = "/api"

api = Blueprint("api", __name__, url_prefix=API_PREFIX)

_started_at = time.monotonic()


def register_api(server: Flask, panel_repo: PanelRepository, note_repo: NoteRepository, cors_origins=None) -> None:
    """
    Attach the API blueprint and its repositories to a Flask server.

    Args:
        server: The Flask app (for Dash apps, ``app.server``)
        panel_repo: Layout store used by the /panels routes
        note_repo: Repository used by the /notes routes
        cors_origins: Browser origins allowed to call the API
    """
    server.config["panel_repo"] = panel_repo
    server.config["note_repo"] = note_repo
    server.register_blueprint(api)
    server.register_error_handler(404, _not_found)
    if cors_origins:
        CORS(server, resources={rf"{API_PREFIX}/*": {"origins": list(cors_origins)}}, supports_credentials=True)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _error(message: str, status: int):
    return jsonify({"error": message}), status


def _json_body():
    """Parsed JSON body, or None if the body is not valid JSON."""
    return request.get_json(silent=True)


@api.before_request
def log_request():
    logger.debug("%s %s - %s", request.method, request.path, request.remote_addr)


@api.errorhandler(Exception)
def handle_error(error):
    if isinstance(error, HTTPException):
        return jsonify({"error": error.description, "timestamp": _timestamp()}), error.code
    logger.exception("Unhandled API error")
    return jsonify({"error": "Internal Server Error", "timestamp": _timestamp()}), 500


def _not_found(error):
    # Unmatched paths never reach the blueprint handler.
    if request.path.startswith(API_PREFIX):
        return jsonify({"error": "Not Found", "timestamp": _timestamp()}), 404
    return error


@api.route("/<path:path>", methods=["GET"])
def unknown_route(path: str):
    # Registered so Dash's catch-all page route does not answer for /api paths.
    raise NotFound("Not Found")


# -----------------------------------------------------------------------------
# Info & health
# -----------------------------------------------------------------------------

@api.route("", methods=["GET"])
@api.route("/", methods=["GET"])
def api_info():
    return jsonify({
        "message": "Panelboard API",
        "version": __version__,
        "endpoints": {
            "health": f"{API_PREFIX}/health",
            "healthDetailed": f"{API_PREFIX}/health/detailed",
            "panels": f"{API_PREFIX}/panels",
            "specificPanel": f"{API_PREFIX}/panels/:panelKey",
            "notes": f"{API_PREFIX}/notes",
        },
        "documentation": {
            "panels": {
                "GET /panels": "Get all panels with widgets",
                "POST /panels": "Save panels configuration",
                "GET /panels/:panelKey": "Get specific panel",
                "DELETE /panels/:panelKey": "Delete a panel and its widgets",
            },
            "notes": {
                "GET /notes": "List notes, newest first",
                "POST /notes": "Create a note",
                "GET /notes/:id": "Get a note",
                "PUT /notes/:id": "Update a note",
                "DELETE /notes/:id": "Delete a note",
            },
            "health": {
                "GET /health": "Basic health check",
                "GET /health/detailed": "Detailed health check with database status",
            },
        },
    })


@api.route("/health", methods=["GET"])
def health():
    return jsonify({
        "status": "OK",
        "message": "Panelboard API is running",
        "timestamp": _timestamp(),
        "uptime": round(time.monotonic() - _started_at, 3),
    })


@api.route("/health/detailed", methods=["GET"])
def health_detailed():
    panel_repo: PanelRepository = current_app.config["panel_repo"]
    try:
        check_connection(panel_repo.db_path)
    except sqlite3.Error as e:
        return jsonify({
            "status": "ERROR",
            "message": "Database connection failed",
            "database": "Disconnected",
            "error": str(e),
            "timestamp": _timestamp(),
        }), 500

    return jsonify({
        "status": "OK",
        "message": "Panelboard API is running",
        "database": "Connected",
        "timestamp": _timestamp(),
        "uptime": round(time.monotonic() - _started_at, 3),
        "version": __version__,
    })


# -----------------------------------------------------------------------------
# Panels
# -----------------------------------------------------------------------------

@api.route("/panels", methods=["GET"])
def get_panels():
    panel_repo: PanelRepository = current_app.config["panel_repo"]
    try:
        snapshot = panel_repo.get_all_panels()
    except LayoutStoreError:
        return _error("Failed to fetch panels", 500)
    return jsonify(serialize_layout(snapshot))


@api.route("/panels", methods=["POST"])
def save_panels():
    panel_repo: PanelRepository = current_app.config["panel_repo"]

    payload = _json_body()
    if payload is None:
        return _error("Invalid JSON", 400)

    try:
        snapshot = deserialize_layout(payload)
    except LayoutValidationError as e:
        logger.info("Rejected layout: %s", e)
        return _error(str(e), 400)

    try:
        panel_repo.save_panels(snapshot)
    except LayoutValidationError as e:
        return _error(str(e), 400)
    except LayoutStoreError:
        return _error("Failed to save panels", 500)

    return jsonify({"success": True, "message": "Panels saved successfully"})


@api.route("/panels/<panel_key>", methods=["GET"])
def get_panel(panel_key: str):
    panel_repo: PanelRepository = current_app.config["panel_repo"]
    try:
        panel = panel_repo.get_panel(panel_key)
    except PanelNotFoundError:
        return _error("Panel not found", 404)
    except LayoutStoreError:
        return _error("Failed to fetch panel", 500)
    return jsonify(panel_to_wire(panel))


@api.route("/panels/<panel_key>", methods=["DELETE"])
def delete_panel(panel_key: str):
    panel_repo: PanelRepository = current_app.config["panel_repo"]
    try:
        deleted = panel_repo.delete_panel(panel_key)
    except LayoutStoreError:
        return _error("Failed to delete panel", 500)
    if not deleted:
        return _error("Panel not found", 404)
    return jsonify({"success": True, "message": f"Panel {panel_key} deleted"})


# -----------------------------------------------------------------------------
# Notes
# -----------------------------------------------------------------------------

NOTE_FIELDS = ("note", "color", "user")


def _parse_note_id(raw: str):
    try:
        note_id = int(raw)
    except ValueError:
        return None
    return note_id if note_id > 0 else None


def _note_fields():
    body = _json_body()
    if not isinstance(body, dict) or not all(
        isinstance(body.get(name), str) and body.get(name) for name in NOTE_FIELDS
    ):
        return None
    return {name: body[name] for name in NOTE_FIELDS}


@api.route("/notes", methods=["GET"])
def list_notes():
    note_repo: NoteRepository = current_app.config["note_repo"]
    return jsonify([note.to_dict() for note in note_repo.get_all()])


@api.route("/notes/<note_id>", methods=["GET"])
def get_note(note_id: str):
    note_repo: NoteRepository = current_app.config["note_repo"]
    parsed_id = _parse_note_id(note_id)
    if parsed_id is None:
        return _error("Invalid note ID", 400)

    note = note_repo.get_by_id(parsed_id)
    if note is None:
        return _error("Note not found", 404)
    return jsonify(note.to_dict())


@api.route("/notes", methods=["POST"])
def create_note():
    note_repo: NoteRepository = current_app.config["note_repo"]
    fields = _note_fields()
    if fields is None:
        return _error("Missing required fields: note, color, user", 400)

    note = note_repo.create(**fields)
    logger.info("Note created with ID %s", note.id)
    return jsonify(note.to_dict()), 201


@api.route("/notes/<note_id>", methods=["PUT"])
def update_note(note_id: str):
    note_repo: NoteRepository = current_app.config["note_repo"]
    parsed_id = _parse_note_id(note_id)
    if parsed_id is None:
        return _error("Invalid note ID", 400)

    fields = _note_fields()
    if fields is None:
        return _error("Missing required fields: note, color, user", 400)

    if not note_repo.update(parsed_id, **fields):
        return _error("Note not found", 404)
    return jsonify({"id": parsed_id, **fields})


@api.route("/notes/<note_id>", methods=["DELETE"])
def delete_note(note_id: str):
    note_repo: NoteRepository = current_app.config["note_repo"]
    parsed_id = _parse_note_id(note_id)
    if parsed_id is None:
        return _error("Invalid note ID", 400)

    if not note_repo.delete(parsed_id):
        return _error("Note not found", 404)
    return jsonify({"id": parsed_id, "message": "Note deleted successfully"})
