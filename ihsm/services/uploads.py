"""Player photo uploads, relayed to the external image host."""

from __future__ import annotations

import os

import requests
from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

UPLOAD_FAILED = "Failed to upload image"
NOT_AN_IMAGE = "Please upload an image file"


class ImageUploadError(Exception):
    """Raised when a photo cannot be accepted or stored.

    ``status_code`` is 400 for a bad file and 502 when the image host fails.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _determine_size(file: FileStorage) -> int:
    stream = file.stream
    current = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(current)
    return size


def validate_image(file: FileStorage | None) -> None:
    if not file or not file.filename:
        raise ImageUploadError(NOT_AN_IMAGE)
    if not (file.mimetype or '').startswith('image/'):
        raise ImageUploadError(NOT_AN_IMAGE)

    limit = current_app.config.get('MAX_IMAGE_SIZE', 2 * 1024 * 1024)
    if _determine_size(file) > limit:
        raise ImageUploadError(f"Image size must be less than {limit // (1024 * 1024)}MB")


def upload_image(file: FileStorage | None) -> str:
    """
    Validate ``file`` and push it to the image host.

    The host API key stays on the server; clients only ever see the
    returned URL.

    Returns:
        The public URL of the stored image.
    """
    validate_image(file)

    api_key = current_app.config.get('IMGBB_API_KEY')
    if not api_key:
        current_app.logger.error("Image upload attempted without IMGBB_API_KEY configured")
        raise ImageUploadError(UPLOAD_FAILED, status_code=502)

    file.stream.seek(0)
    filename = secure_filename(file.filename) or 'photo'
    try:
        response = requests.post(
            current_app.config['IMAGE_UPLOAD_URL'],
            params={'key': api_key},
            files={'image': (filename, file.stream, file.mimetype)},
            timeout=current_app.config.get('UPLOAD_TIMEOUT', 15),
        )
        response.raise_for_status()
        payload = response.json()
    except (requests.RequestException, ValueError) as e:
        current_app.logger.error(f"Error uploading image: {e}")
        raise ImageUploadError(UPLOAD_FAILED, status_code=502) from e

    url = (payload.get('data') or {}).get('url') if isinstance(payload, dict) else None
    if not url or not payload.get('success', True):
        current_app.logger.error(f"Image host returned an unexpected payload: {str(payload)[:200]}")
        raise ImageUploadError(UPLOAD_FAILED, status_code=502)

    return url


__all__ = ['ImageUploadError', 'NOT_AN_IMAGE', 'UPLOAD_FAILED', 'upload_image', 'validate_image']
