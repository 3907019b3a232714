"""
Product image storage on the local filesystem.

Files are saved under UPLOAD_FOLDER with a generated uuid name and the
original extension; the product row keeps only that filename.
"""

from __future__ import annotations

import os
import uuid

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from ..validation import ValidationError


ALLOWED_EXTENSIONS = {"jpeg", "jpg", "png", "gif"}


def upload_folder() -> str:
    folder = current_app.config.get("UPLOAD_FOLDER") or os.path.join(current_app.instance_path, "uploads")
    os.makedirs(folder, exist_ok=True)
    return folder


def _extension(filename: str) -> str:
    _, ext = os.path.splitext(secure_filename(filename or ""))
    return ext.lower().lstrip(".")


def is_allowed_image(file: FileStorage) -> bool:
    ext = _extension(file.filename)
    if ext not in ALLOWED_EXTENSIONS:
        return False
    mimetype = (file.mimetype or "").lower()
    return mimetype.startswith("image/") and mimetype.split("/", 1)[1] in ALLOWED_EXTENSIONS


def save_image(file: FileStorage | None) -> str | None:
    """
    Persist an uploaded image and return its generated filename.

    Returns None when no file was sent.

    Raises:
        ValidationError: the file is not a JPEG/PNG/GIF image
    """
    if file is None or not file.filename:
        return None
    if not is_allowed_image(file):
        raise ValidationError("Apenas imagens são permitidas!")

    filename = f"{uuid.uuid4()}.{_extension(file.filename)}"
    file.save(os.path.join(upload_folder(), filename))
    return filename


def remove_image(filename: str | None) -> bool:
    """
    Best-effort delete. Failures are logged, never raised.

    Returns True if a file was removed.
    """
    if not filename:
        return False
    path = os.path.join(upload_folder(), secure_filename(filename))
    try:
        os.remove(path)
        return True
    except FileNotFoundError:
        return False
    except OSError as exc:
        current_app.logger.warning("Failed to remove image %s: %s", filename, exc)
        return False
