"""Hostel and team creation rules."""

from __future__ import annotations

from typing import Any

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ihsm.extensions import db
from ihsm.models import Hostel, SportType, Team
from ihsm.services.access_gate import secret_length_error
from ihsm.services.crud import CRUDService

DEFAULT_MAX_PLAYERS = 15


def create_hostel(
    name: str,
    total_students: int,
    access_secret: str,
    sports: dict[str, bool],
    owner_id: str,
) -> tuple[Hostel | None, str | None]:
    secret_error = secret_length_error(access_secret)
    if secret_error:
        return None, secret_error

    hostel = Hostel(name=name.strip(), total_students=total_students, owner_id=owner_id)
    hostel.set_access_secret(access_secret)
    hostel.set_sports(sports)
    try:
        db.session.add(hostel)
        db.session.commit()
        current_app.logger.info(f"Hostel {hostel.id} created by {owner_id}")
        return hostel, None
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to add hostel: {e}")
        return None, "Failed to add hostel. Please try again."


def update_hostel(
    hostel: Hostel,
    data: dict[str, Any],
    owner_id: str,
) -> tuple[bool, str | None]:
    """Edit name, size, sports and (optionally) the dashboard password."""
    if hostel.owner_id != owner_id:
        return False, "You do not have permission to modify this hostel"

    sports = data.get('sports')
    if sports is not None:
        for team in hostel.teams:
            if not sports.get(team.sport.value, False):
                return False, f"Cannot remove {team.sport.value} while {hostel.name} has a {team.sport.value} team"

    secret = data.get('access_secret')
    secret_error = secret_length_error(secret) if secret else None
    if secret_error:
        return False, secret_error

    try:
        if data.get('name'):
            hostel.name = data['name'].strip()
        if data.get('total_students') is not None:
            hostel.total_students = data['total_students']
        if sports is not None:
            hostel.set_sports(sports)
        if secret:
            hostel.set_access_secret(secret)
        db.session.commit()
        current_app.logger.info(f"Hostel {hostel.id} updated by {owner_id}")
        return True, None
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to update hostel: {e}")
        return False, "Failed to update hostel"


def available_sports(hostel: Hostel) -> list[SportType]:
    """Sports the hostel signed up for that do not have a team yet."""
    taken = {team.sport for team in hostel.teams}
    return [sport for sport in SportType if hostel.plays(sport) and sport not in taken]


def create_team(
    hostel: Hostel,
    sport: SportType | str,
    owner_id: str,
    max_players: int = DEFAULT_MAX_PLAYERS,
    name: str | None = None,
) -> tuple[Team | None, str | None]:
    sport = sport if isinstance(sport, SportType) else SportType(sport)

    if hostel.owner_id != owner_id:
        return None, "You do not have permission to add teams to this hostel"
    if not hostel.plays(sport):
        return None, f"{hostel.name} is not registered for {sport.value}"
    if any(team.sport == sport for team in hostel.teams):
        return None, f"{hostel.name} already has a {sport.value} team"
    if max_players < 1:
        return None, "Maximum players must be at least 1"

    team = Team(
        hostel=hostel,
        sport=sport,
        name=(name or '').strip() or f"{hostel.name} {sport.label} Team",
        max_players=max_players,
        owner_id=owner_id,
    )
    try:
        db.session.add(team)
        db.session.commit()
        current_app.logger.info(f"Team {team.id} ({sport.value}) created for hostel {hostel.id}")
        return team, None
    except IntegrityError:
        db.session.rollback()
        return None, f"{hostel.name} already has a {sport.value} team"
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to create team: {e}")
        return None, "Failed to create team"


class TeamService(CRUDService):
    """Team edits; a roster may never end up larger than its cap."""

    def __init__(self):
        super().__init__(Team)

    def _validate_update(self, instance: Team, data: dict[str, Any]) -> str | None:
        max_players = data.get('max_players')
        if max_players is not None and max_players < len(instance.roster):
            return "Maximum players cannot be less than the current roster size"
        return None


__all__ = [
    'DEFAULT_MAX_PLAYERS',
    'TeamService',
    'available_sports',
    'create_hostel',
    'create_team',
    'update_hostel',
]
