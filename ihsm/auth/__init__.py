"""Authentication helpers shared across blueprints."""

from __future__ import annotations

from functools import wraps
from typing import Callable, TypeVar, cast

from flask import jsonify
from flask_login import current_user

F = TypeVar('F', bound=Callable[..., object])


def api_login_required(func: F) -> F:
    """Decorator requiring an authenticated, active session; answers in JSON."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated:
            return jsonify({'error': 'Authentication required'}), 401
        if not current_user.is_active:
            return jsonify({'error': 'Account is inactive'}), 403
        return func(*args, **kwargs)
    return cast(F, wrapper)


__all__ = ['api_login_required']
