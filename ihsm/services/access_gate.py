"""Per-hostel password gate for the hostel management dashboard.

The gate guards a view, not an identity: anyone who knows a hostel's
dashboard password may unlock it for the rest of their browser session.
The unlocked flag lives in the signed session cookie under
``hostel_auth_<hostel id>`` so a page reload does not prompt again.
"""

from __future__ import annotations

from functools import wraps

from flask import current_app, jsonify, session

from ihsm.extensions import bcrypt, db
from ihsm.models import MAX_PASSWORD_BYTES, Hostel

INCORRECT_PASSWORD = "Incorrect password"
MIN_SECRET_LENGTH = 6
MAX_SECRET_BYTES = MAX_PASSWORD_BYTES


def secret_length_error(secret: str | None) -> str | None:
    """Return why ``secret`` cannot be a dashboard password, or None."""
    if len(secret or '') < MIN_SECRET_LENGTH:
        return f"Password must be at least {MIN_SECRET_LENGTH} characters long"
    if len(secret.encode('utf-8')) > MAX_SECRET_BYTES:
        return f"Password cannot be longer than {MAX_SECRET_BYTES} bytes"
    return None


def _session_key(hostel_id: str) -> str:
    return f"hostel_auth_{hostel_id}"


def check_access(submitted_secret: str | None, hostel: Hostel) -> bool:
    """Return True iff ``submitted_secret`` is the hostel's dashboard password."""
    if not submitted_secret or not hostel.access_secret_hash:
        return False
    encoded = submitted_secret.encode('utf-8')
    if len(encoded) > MAX_SECRET_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, hostel.access_secret_hash.encode('utf-8'))
    except ValueError:
        return False


def unlock(hostel: Hostel, submitted_secret: str | None) -> tuple[bool, str | None]:
    """Unlock ``hostel`` for this session if the secret matches."""
    if not check_access(submitted_secret, hostel):
        current_app.logger.info(f"Rejected dashboard password for hostel {hostel.id}")
        return False, INCORRECT_PASSWORD

    session[_session_key(hostel.id)] = True
    return True, None


def lock(hostel_id: str) -> None:
    session.pop(_session_key(hostel_id), None)


def is_unlocked(hostel_id: str) -> bool:
    return session.get(_session_key(hostel_id)) is True


def hostel_unlock_required(view):
    """Reject requests for a hostel view until its gate has been unlocked.

    The wrapped view must take ``hostel_id`` and receives the loaded
    ``hostel`` as a keyword argument.
    """

    @wraps(view)
    def wrapped(hostel_id: str, *args, **kwargs):
        hostel = db.session.get(Hostel, hostel_id)
        if hostel is None:
            return jsonify({'error': 'Hostel not found'}), 404
        if not is_unlocked(hostel_id):
            return jsonify({'error': 'Hostel is locked', 'locked': True}), 403
        return view(hostel_id, *args, hostel=hostel, **kwargs)

    return wrapped


__all__ = [
    'INCORRECT_PASSWORD',
    'MAX_SECRET_BYTES',
    'MIN_SECRET_LENGTH',
    'secret_length_error',
    'check_access',
    'unlock',
    'lock',
    'is_unlocked',
    'hostel_unlock_required',
]
