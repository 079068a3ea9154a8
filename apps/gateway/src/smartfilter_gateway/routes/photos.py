"""Photo upload and retrieval routes."""

from __future__ import annotations

import logging
from pathlib import Path

from flask import Blueprint, current_app, jsonify, request, send_from_directory
from werkzeug.exceptions import NotFound

from smartfilter_shared.files import new_staging_name, resolve_in_dir

from ..errors import InvalidUpload, RetrievalNotFound, StagingFailed
from ..services import run_job

logger = logging.getLogger(__name__)

photos_bp = Blueprint("photos", __name__)


@photos_bp.post("/send_photo")
def send_photo():
    """Stage an uploaded photo, run it through the worker, report the verdict."""
    upload_dir: Path = current_app.config["upload_dir"]
    output_dir: Path = current_app.config["output_dir"]
    backend = current_app.config["backend"]

    f = request.files.get("photo")
    if f is None or not f.filename:
        raise InvalidUpload("Missing file field 'photo'")

    mode = request.form.get("type", "")

    staged_path = upload_dir / new_staging_name()
    try:
        f.save(staged_path)
    except OSError as e:
        logger.error("Could not stage upload at %s: %s", staged_path, e)
        raise StagingFailed(f"Could not stage upload: {e.strerror or e}") from e
    logger.debug("Staged %s as %s", f.filename, staged_path.name)

    result = run_job(backend, staged_path, output_dir, mode)
    return jsonify(result.to_dict())


@photos_bp.get("/photo/<path:name>")
def get_photo(name: str):
    """Serve a worker-produced file by its output name."""
    output_dir: Path = current_app.config["output_dir"]

    target = resolve_in_dir(output_dir, name)
    if target is None or not target.is_file():
        raise RetrievalNotFound(f"No output named {name!r}")

    try:
        return send_from_directory(output_dir, target.name)
    except NotFound as e:
        raise RetrievalNotFound(f"No output named {name!r}") from e
