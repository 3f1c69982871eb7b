"""Team rosters: manager-added players, self-registration and review."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any

from flask import current_app, request
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from ihsm.extensions import db
from ihsm.models import Player, PlayerStatus, RegistrationLink, Team, TShirtSize

MOBILE_PATTERN = re.compile(r'^[0-9]{10}$')

TEAM_FULL = "Team is already at maximum capacity"
NOT_TEAM_OWNER = "You do not have permission to modify this team"
INVALID_LINK = "Invalid registration link"
EXPIRED_LINK = "This registration link has expired"

PLAYER_FIELDS = ('name', 'role', 'jersey_number', 'mobile_number', 'tshirt_size', 'photo_url')


def is_valid_mobile(number: str | None) -> bool:
    return bool(number) and MOBILE_PATTERN.match(number) is not None


def _approved_count(team: Team) -> int:
    return (
        db.session.query(func.count(Player.id))
        .filter(Player.team_id == team.id, Player.status == PlayerStatus.APPROVED)
        .scalar()
    ) or 0


def _player_values(data: dict[str, Any]) -> dict[str, Any]:
    values = {k: v for k, v in data.items() if k in PLAYER_FIELDS}
    if isinstance(values.get('tshirt_size'), str):
        values['tshirt_size'] = TShirtSize(values['tshirt_size'])
    for key in ('name', 'role'):
        if isinstance(values.get(key), str):
            values[key] = values[key].strip()
    return values


def add_player(team: Team, data: dict[str, Any], owner_id: str) -> tuple[Player | None, str | None]:
    """Add a player straight onto ``team``'s roster."""
    if team.owner_id != owner_id:
        return None, NOT_TEAM_OWNER
    if not is_valid_mobile(data.get('mobile_number')):
        return None, "Please enter a valid 10-digit mobile number"
    if _approved_count(team) >= team.max_players:
        return None, TEAM_FULL

    player = Player(
        team_id=team.id,
        status=PlayerStatus.APPROVED,
        reviewed_at=datetime.now(timezone.utc),
        owner_id=owner_id,
        **_player_values(data),
    )
    try:
        db.session.add(player)
        db.session.commit()
        current_app.logger.info(f"Player {player.id} added to team {team.id}")
        return player, None
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to add player: {e}")
        return None, "Failed to add player. Please try again."


def update_player(player: Player, data: dict[str, Any], owner_id: str) -> tuple[bool, str | None]:
    """Edit a player in place."""
    if player.team.owner_id != owner_id:
        return False, NOT_TEAM_OWNER
    if 'mobile_number' in data and not is_valid_mobile(data['mobile_number']):
        return False, "Please enter a valid 10-digit mobile number"

    try:
        for key, value in _player_values(data).items():
            setattr(player, key, value)
        db.session.commit()
        return True, None
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to update player: {e}")
        return False, "Failed to update player"


def remove_player(player: Player, owner_id: str) -> tuple[bool, str | None]:
    if player.team.owner_id != owner_id:
        return False, NOT_TEAM_OWNER
    try:
        db.session.delete(player)
        db.session.commit()
        return True, None
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to delete player: {e}")
        return False, "Failed to delete player"


def _review(player: Player, owner_id: str, status: PlayerStatus) -> tuple[bool, str | None]:
    if player.team.owner_id != owner_id:
        return False, NOT_TEAM_OWNER
    if player.status != PlayerStatus.PENDING:
        return False, f"Only pending players can be {status.value}"
    if status == PlayerStatus.APPROVED and _approved_count(player.team) >= player.team.max_players:
        return False, TEAM_FULL

    try:
        player.status = status
        player.reviewed_at = datetime.now(timezone.utc)
        db.session.commit()
        current_app.logger.info(f"Player {player.id} {status.value}")
        return True, None
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to review player: {e}")
        return False, "Failed to update player"


def approve_player(player: Player, owner_id: str) -> tuple[bool, str | None]:
    return _review(player, owner_id, PlayerStatus.APPROVED)


def reject_player(player: Player, owner_id: str) -> tuple[bool, str | None]:
    return _review(player, owner_id, PlayerStatus.REJECTED)


def create_registration_link(
    team: Team,
    owner_id: str,
    expires_at: datetime | None = None,
) -> tuple[RegistrationLink | None, str | None]:
    if team.owner_id != owner_id:
        return None, NOT_TEAM_OWNER
    link = RegistrationLink(team_id=team.id, sport=team.sport, active=True, expires_at=expires_at, owner_id=owner_id)
    try:
        db.session.add(link)
        db.session.commit()
        return link, None
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error generating registration link: {e}")
        return None, "Failed to generate registration link"


def deactivate_link(link: RegistrationLink, owner_id: str) -> tuple[bool, str | None]:
    if link.owner_id != owner_id:
        return False, NOT_TEAM_OWNER
    try:
        link.active = False
        db.session.commit()
        return True, None
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to deactivate registration link: {e}")
        return False, "Failed to deactivate registration link"


def registration_url(link: RegistrationLink) -> str:
    origin = current_app.config.get('PUBLIC_ORIGIN') or request.host_url
    return f"{origin.rstrip('/')}/register/{link.id}"


def resolve_link(link_id: str) -> tuple[RegistrationLink | None, str | None]:
    link = db.session.get(RegistrationLink, link_id)
    if link is None or link.team is None:
        return None, INVALID_LINK
    if not link.is_usable():
        return None, EXPIRED_LINK
    return link, None


def submit_registration(
    link: RegistrationLink,
    data: dict[str, Any],
    photo_url: str | None = None,
) -> tuple[Player | None, str | None]:
    """Record a self-registration as a pending player of the link's team."""
    if not link.is_usable():
        return None, EXPIRED_LINK
    if not is_valid_mobile(data.get('mobile_number')):
        return None, "Please enter a valid 10-digit mobile number"

    values = _player_values(data)
    if photo_url:
        values['photo_url'] = photo_url
    player = Player(
        team_id=link.team_id,
        registration_link_id=link.id,
        status=PlayerStatus.PENDING,
        **values,
    )
    try:
        db.session.add(player)
        db.session.commit()
        current_app.logger.info(f"Registration {player.id} received for team {link.team_id}")
        return player, None
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to submit registration: {e}")
        return None, "Failed to submit registration"


__all__ = [
    'EXPIRED_LINK',
    'INVALID_LINK',
    'NOT_TEAM_OWNER',
    'TEAM_FULL',
    'add_player',
    'approve_player',
    'create_registration_link',
    'deactivate_link',
    'is_valid_mobile',
    'registration_url',
    'reject_player',
    'remove_player',
    'resolve_link',
    'submit_registration',
    'update_player',
]
