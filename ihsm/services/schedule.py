"""Match scheduling, result recording and the per-sport schedule view."""

from __future__ import annotations

from datetime import date
from typing import Iterable

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ihsm.extensions import db
from ihsm.models import Match, MatchStatus, SportType, Team


def _coerce_sport(sport: SportType | str) -> SportType:
    return sport if isinstance(sport, SportType) else SportType(str(sport).lower())


def team_display_name(team: Team) -> str:
    return f"{team.hostel.name} {team.sport.label} Team"


def sort_matches(matches: Iterable[Match]) -> list[Match]:
    """Order matches by date, then start time, earliest first."""
    return sorted(matches, key=lambda m: (m.match_date, m.start_time or ''))


def filter_by_status(matches: Iterable[Match], status: MatchStatus | str) -> list[Match]:
    status = status if isinstance(status, MatchStatus) else MatchStatus(status)
    return [m for m in matches if m.status == status]


def group_matches_by_date(matches: Iterable[Match], sport: SportType | str) -> dict[str, list[Match]]:
    """
    Group the matches of one sport by ISO date.

    Keys come out in ascending date order and every match of ``sport``
    lands in exactly one group. An empty mapping means nothing is scheduled.
    """
    sport = _coerce_sport(sport)
    grouped: dict[str, list[Match]] = {}
    for match in sort_matches(m for m in matches if m.sport == sport):
        grouped.setdefault(match.match_date.isoformat(), []).append(match)
    return grouped


def empty_schedule_message(sport: SportType | str) -> str:
    return f"No matches scheduled for {_coerce_sport(sport).value}"


def schedule_match(
    sport: SportType | str,
    team1: Team,
    team2: Team,
    match_date: date,
    start_time: str,
    end_time: str,
    venue: str,
    owner_id: str | None = None,
    notes: str | None = None,
    round_number: int | None = None,
    match_number: int | None = None,
) -> tuple[Match | None, str | None]:
    """Create a scheduled match between two teams of the same sport."""
    sport = _coerce_sport(sport)
    if team1.id == team2.id:
        return None, "A team cannot play against itself"
    if team1.sport != sport or team2.sport != sport:
        return None, "Invalid team or hostel selection"
    if end_time and start_time and end_time <= start_time:
        return None, "End time must be after start time"

    match = Match(
        sport=sport,
        team1_id=team1.id,
        team2_id=team2.id,
        team1_name=team_display_name(team1),
        team2_name=team_display_name(team2),
        match_date=match_date,
        start_time=start_time,
        end_time=end_time,
        venue=venue.strip(),
        notes=(notes or '').strip() or None,
        round_number=round_number,
        match_number=match_number,
        status=MatchStatus.SCHEDULED,
        owner_id=owner_id,
    )
    try:
        db.session.add(match)
        db.session.commit()
        return match, None
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to add match: {e}")
        return None, "Failed to add match"


def record_result(
    match: Match,
    status: MatchStatus | str,
    winner: str | None = None,
) -> tuple[bool, str | None]:
    """
    Move a scheduled match to ``completed`` (with a winner) or ``cancelled``.

    Completed and cancelled are terminal. Completing a match bumps both
    teams' played counters and the winner's win count in the same commit.
    """
    status = status if isinstance(status, MatchStatus) else MatchStatus(status)
    if match.status != MatchStatus.SCHEDULED:
        return False, "Only scheduled matches can be updated"
    if status == MatchStatus.SCHEDULED:
        return False, "Match is already scheduled"

    if status == MatchStatus.COMPLETED:
        if winner not in (match.team1_name, match.team2_name):
            return False, "Winner must be one of the two teams"

    try:
        match.status = status
        if status == MatchStatus.COMPLETED:
            match.winner = winner
            for team in (match.team1, match.team2):
                if team is not None:
                    team.matches_played += 1
            winning_team = match.team1 if winner == match.team1_name else match.team2
            if winning_team is not None:
                winning_team.wins += 1
        db.session.commit()
        current_app.logger.info(f"Match {match.id} marked {status.value}")
        return True, None
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to update match: {e}")
        return False, "Failed to update match"


__all__ = [
    'empty_schedule_message',
    'filter_by_status',
    'group_matches_by_date',
    'record_result',
    'schedule_match',
    'sort_matches',
    'team_display_name',
]
