"""Authentication blueprint for IHSM."""

from __future__ import annotations

from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, session
from flask_login import current_user, login_user, logout_user

from ihsm.extensions import db, limiter
from ihsm.forms import LoginForm, bind_form, form_error_response
from ihsm.models import User

auth_bp = Blueprint("auth", __name__)


def serialize_session() -> dict:
    if not current_user.is_authenticated:
        return {'logged_in': False, 'user_id': None}
    return {
        'logged_in': True,
        'user_id': current_user.id,
        'email': current_user.email,
        'display_name': current_user.display_name,
    }


@auth_bp.route("/login", methods=["POST"])
@limiter.limit("5 per minute")
def login():
    if current_user.is_authenticated:
        return jsonify(serialize_session())

    form = bind_form(LoginForm)
    if not form.validate_on_submit():
        return form_error_response(form)

    email = form.email.data.strip().lower()
    user = User.query.filter(User.email.ilike(email)).first()
    if user is None or not user.check_password(form.password.data):
        current_app.logger.info(f"Failed login for {email}")
        return jsonify({'error': 'Invalid email or password'}), 401

    if not user.is_active:
        return jsonify({'error': 'Account is inactive. Contact your administrator.'}), 403

    user.last_login_at = datetime.now(timezone.utc)
    db.session.commit()

    login_user(user, remember=form.remember_me.data)
    current_app.logger.info(f"User {user.id} logged in")
    return jsonify(serialize_session())


@auth_bp.route("/logout", methods=["POST"])
def logout():
    if current_user.is_authenticated:
        logout_user()
    # Also drops every hostel unlock held by this browser
    session.clear()
    return jsonify({'logged_in': False, 'user_id': None})


@auth_bp.route("/session", methods=["GET"])
def session_state():
    """Session observer for the client: who, if anyone, is signed in."""
    return jsonify(serialize_session())


__all__ = ["auth_bp"]
