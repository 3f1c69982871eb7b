"""Public routes: player self-registration through a team's link."""

from __future__ import annotations

from flask import Blueprint, jsonify, redirect, url_for

from ihsm.extensions import limiter
from ihsm.forms import PlayerRegistrationForm, bind_form, form_error_response
from ihsm.models import RegistrationLink
from ihsm.services import roster
from ihsm.services.uploads import ImageUploadError, upload_image

public_bp = Blueprint('public', __name__)


def _link_error(error: str):
    status = 410 if error == roster.EXPIRED_LINK else 404
    return jsonify({'error': error}), status


def serialize_link_target(link: RegistrationLink) -> dict:
    team = link.team
    return {
        'link_id': link.id,
        'team_id': team.id,
        'team_name': team.name,
        'hostel_name': team.hostel.name,
        'sport': link.sport.value,
        'spots_left': max(team.max_players - len(team.roster), 0),
    }


@public_bp.route('/', methods=['GET'])
def index():
    return jsonify({'name': 'Inter-Hostel Sports Manager', 'status': 'ok'})


@public_bp.route('/register/<link_id>', methods=['GET'])
def registration_form(link_id: str):
    """Tell the registration page which team the link belongs to."""
    link, error = roster.resolve_link(link_id)
    if error:
        return _link_error(error)
    return jsonify(serialize_link_target(link))


@public_bp.route('/register/<link_id>', methods=['POST'])
@limiter.limit("10 per minute")
def submit_registration(link_id: str):
    link, error = roster.resolve_link(link_id)
    if error:
        return _link_error(error)

    form = bind_form(PlayerRegistrationForm)
    if not form.validate_on_submit():
        return form_error_response(form)

    photo_url = None
    if form.player_photo.data:
        try:
            photo_url = upload_image(form.player_photo.data)
        except ImageUploadError as e:
            return jsonify({'error': e.message}), e.status_code

    player, error = roster.submit_registration(
        link,
        {
            'name': form.name.data,
            'role': form.role.data,
            'jersey_number': form.jersey_number.data,
            'mobile_number': form.mobile_number.data,
            'tshirt_size': form.tshirt_size.data,
        },
        photo_url=photo_url,
    )
    if error:
        return _link_error(error) if error == roster.EXPIRED_LINK else (jsonify({'error': error}), 400)

    return redirect(url_for('public.registration_success'), code=303)


@public_bp.route('/registration-success', methods=['GET'])
def registration_success():
    return jsonify({
        'message': 'Registration submitted. The team manager will review your request.',
    })
