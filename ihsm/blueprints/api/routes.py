"""Manager-facing JSON API blueprint."""

from __future__ import annotations

import io
from datetime import datetime, timedelta, timezone

from flask import Blueprint, jsonify, request, send_file
from flask_login import current_user

from ihsm.auth import api_login_required
from ihsm.blueprints.common.owner import get_or_404, get_owned_or_404
from ihsm.extensions import limiter
from ihsm.forms import (
    BudgetForm,
    ExpenseForm,
    HostelForm,
    HostelUpdateForm,
    MatchForm,
    MatchResultForm,
    PlayerForm,
    RegistrationLinkForm,
    RevenueForm,
    TeamForm,
    TeamUpdateForm,
    UnlockForm,
    VolunteerForm,
    bind_form,
    form_error_response,
)
from ihsm.models import (
    Budget,
    Expense,
    ExpenseCategory,
    Hostel,
    Match,
    MatchStatus,
    Player,
    PlayerStatus,
    RegistrationLink,
    Revenue,
    RevenueType,
    Sponsor,
    SportType,
    Team,
    Volunteer,
)
from ihsm.services import access_gate, roster
from ihsm.services.crud import CRUDService, is_forbidden, is_not_found
from ihsm.services.export_import import export_team_roster, roster_filename
from ihsm.services.hostels import TeamService, available_sports, create_hostel, create_team, update_hostel
from ihsm.services.ledger import BUDGET_UPDATE_FAILED, load_ledger, summarize_ledger, update_budget
from ihsm.services.records import FetchResult, fetch_all, fetch_by_foreign_key, fetch_owned
from ihsm.services.schedule import (
    empty_schedule_message,
    group_matches_by_date,
    record_result,
    schedule_match,
)
from ihsm.services.uploads import ImageUploadError, upload_image

api_bp = Blueprint('api', __name__)


@api_bp.before_request
@api_login_required
def require_login():
    return None


def _iso(value):
    return value.isoformat() if value else None


def _money(value):
    return float(value) if value is not None else None


def _error(error: str | None, default_status: int = 400):
    if is_forbidden(error):
        return jsonify({'error': error}), 403
    if is_not_found(error):
        return jsonify({'error': error}), 404
    return jsonify({'error': error}), default_status


def _load_failed(result: FetchResult):
    return jsonify({'error': result.error}), 503


# Serializers
def serialize_hostel(hostel: Hostel) -> dict:
    return {
        'id': hostel.id,
        'name': hostel.name,
        'total_students': hostel.total_students,
        'sports': hostel.sports,
        'unlocked': access_gate.is_unlocked(hostel.id),
        'created_at': _iso(hostel.created_at),
    }


def serialize_team(team: Team) -> dict:
    return {
        'id': team.id,
        'hostel_id': team.hostel_id,
        'hostel_name': team.hostel.name if team.hostel else None,
        'sport': team.sport.value,
        'name': team.name,
        'max_players': team.max_players,
        'player_count': len(team.roster),
        'pending_count': len(team.pending_players),
        'is_full': team.is_full,
        'matches_played': team.matches_played,
        'wins': team.wins,
    }


def serialize_player(player: Player) -> dict:
    return {
        'id': player.id,
        'team_id': player.team_id,
        'name': player.name,
        'role': player.role,
        'jersey_number': player.jersey_number,
        'mobile_number': player.mobile_number,
        'tshirt_size': player.tshirt_size.value if player.tshirt_size else None,
        'photo_url': player.photo_url,
        'status': player.status.value,
        'registration_link_id': player.registration_link_id,
        'created_at': _iso(player.created_at),
    }


def serialize_registration_link(link: RegistrationLink) -> dict:
    return {
        'id': link.id,
        'team_id': link.team_id,
        'sport': link.sport.value,
        'active': link.active,
        'expires_at': _iso(link.expires_at),
        'url': roster.registration_url(link),
    }


def serialize_match(match: Match) -> dict:
    return {
        'id': match.id,
        'sport': match.sport.value,
        'team1_id': match.team1_id,
        'team2_id': match.team2_id,
        'team1_name': match.team1_name,
        'team2_name': match.team2_name,
        'match_date': _iso(match.match_date),
        'start_time': match.start_time,
        'end_time': match.end_time,
        'venue': match.venue,
        'status': match.status.value,
        'winner': match.winner,
        'notes': match.notes,
        'round_number': match.round_number,
        'match_number': match.match_number,
    }


def serialize_volunteer(volunteer: Volunteer) -> dict:
    return {
        'id': volunteer.id,
        'name': volunteer.name,
        'role': volunteer.role,
        'contact_number': volunteer.contact_number,
        'email': volunteer.email,
        'assigned_sport': volunteer.assigned_sport.value if volunteer.assigned_sport else None,
    }


def serialize_expense(expense: Expense) -> dict:
    return {
        'id': expense.id,
        'description': expense.description,
        'amount': _money(expense.amount),
        'category': expense.category.value,
        'expense_date': _iso(expense.expense_date),
    }


def serialize_sponsor(sponsor: Sponsor) -> dict:
    return {
        'id': sponsor.id,
        'name': sponsor.name,
        'amount': _money(sponsor.amount),
        'sponsor_date': _iso(sponsor.sponsor_date),
    }


def serialize_budget(budget: Budget | None) -> dict | None:
    if budget is None:
        return None
    return {
        'id': budget.id,
        'total_amount': _money(budget.total_amount),
        'sponsorship_amount': _money(budget.sponsorship_amount),
        'start_date': _iso(budget.start_date),
        'end_date': _iso(budget.end_date),
    }


def serialize_revenue(revenue: Revenue) -> dict:
    return {
        'id': revenue.id,
        'event_name': revenue.event_name,
        'amount': _money(revenue.amount),
        'revenue_type': revenue.revenue_type.value,
        'revenue_date': _iso(revenue.revenue_date),
        'notes': revenue.notes,
    }


# ============================================================================
# OVERVIEW
# ============================================================================

@api_bp.route('/stats', methods=['GET'])
def overview_stats():
    """Headline counts for the manager's landing dashboard."""
    hostels = fetch_owned(Hostel, current_user.id)
    if hostels.failed:
        return _load_failed(hostels)
    teams = fetch_owned(Team, current_user.id)
    if teams.failed:
        return _load_failed(teams)

    sport_stats = {sport.value: 0 for sport in SportType}
    for team in teams:
        sport_stats[team.sport.value] += 1

    return jsonify({
        'total_hostels': len(hostels),
        'total_teams': len(teams),
        'total_players': sum(len(team.roster) for team in teams),
        'sport_stats': sport_stats,
    })


# ============================================================================
# HOSTELS
# ============================================================================

@api_bp.route('/hostels', methods=['GET'])
def list_hostels():
    """List the signed-in manager's hostels."""
    hostels = fetch_owned(Hostel, current_user.id, order_by=Hostel.name)
    if hostels.failed:
        return _load_failed(hostels)
    return jsonify({'hostels': [serialize_hostel(h) for h in hostels]})


@api_bp.route('/hostels', methods=['POST'])
def add_hostel():
    form = bind_form(HostelForm)
    if not form.validate_on_submit():
        return form_error_response(form)

    hostel, error = create_hostel(
        name=form.name.data,
        total_students=form.total_students.data,
        access_secret=form.password.data,
        sports=form.sports,
        owner_id=current_user.id,
    )
    if error:
        return _error(error)
    return jsonify({'hostel': serialize_hostel(hostel)}), 201


@api_bp.route('/hostels/<hostel_id>', methods=['GET'])
def get_hostel(hostel_id: str):
    hostel = get_owned_or_404(Hostel, hostel_id)
    return jsonify({'hostel': serialize_hostel(hostel)})


@api_bp.route('/hostels/<hostel_id>', methods=['PUT'])
def edit_hostel(hostel_id: str):
    hostel = get_or_404(Hostel, hostel_id)
    form = bind_form(HostelUpdateForm)
    if not form.validate_on_submit():
        return form_error_response(form)

    success, error = update_hostel(
        hostel,
        {
            'name': form.name.data,
            'total_students': form.total_students.data,
            'sports': form.sports,
            'access_secret': form.password.data,
        },
        owner_id=current_user.id,
    )
    if error:
        return _error(error)
    return jsonify({'hostel': serialize_hostel(hostel)})


@api_bp.route('/hostels/<hostel_id>', methods=['DELETE'])
def delete_hostel(hostel_id: str):
    success, error = CRUDService(Hostel).delete(hostel_id, owner_id=current_user.id)
    if error:
        return _error(error)
    access_gate.lock(hostel_id)
    return jsonify({'success': True})


# ============================================================================
# ACCESS GATE + DASHBOARD
# ============================================================================

@api_bp.route('/hostels/<hostel_id>/unlock', methods=['POST'])
@limiter.limit("10 per minute")
def unlock_hostel(hostel_id: str):
    hostel = get_or_404(Hostel, hostel_id)
    form = bind_form(UnlockForm)
    unlocked, error = access_gate.unlock(hostel, form.password.data)
    if not unlocked:
        return jsonify({'error': error, 'locked': True}), 403
    return jsonify({'unlocked': True, 'hostel_id': hostel.id})


@api_bp.route('/hostels/<hostel_id>/lock', methods=['POST'])
def lock_hostel(hostel_id: str):
    access_gate.lock(hostel_id)
    return jsonify({'unlocked': False, 'hostel_id': hostel_id})


@api_bp.route('/hostels/<hostel_id>/dashboard', methods=['GET'])
@access_gate.hostel_unlock_required
def hostel_dashboard(hostel_id: str, hostel: Hostel):
    """Teams, rosters and open slots of one unlocked hostel."""
    teams = fetch_by_foreign_key(Team, 'hostel_id', hostel.id, order_by=Team.sport)
    if teams.failed:
        return _load_failed(teams)

    return jsonify({
        'hostel': serialize_hostel(hostel),
        'teams': [
            dict(
                serialize_team(team),
                players=[serialize_player(p) for p in team.roster],
                requests=[serialize_player(p) for p in team.pending_players],
            )
            for team in teams
        ],
        'available_sports': [sport.value for sport in available_sports(hostel)],
    })


# ============================================================================
# TEAMS
# ============================================================================

@api_bp.route('/hostels/<hostel_id>/teams', methods=['GET'])
def list_hostel_teams(hostel_id: str):
    get_or_404(Hostel, hostel_id)
    teams = fetch_by_foreign_key(Team, 'hostel_id', hostel_id, order_by=Team.sport)
    if teams.failed:
        return _load_failed(teams)
    return jsonify({'teams': [serialize_team(t) for t in teams]})


@api_bp.route('/hostels/<hostel_id>/teams', methods=['POST'])
@access_gate.hostel_unlock_required
def add_team(hostel_id: str, hostel: Hostel):
    form = bind_form(TeamForm)
    if not form.validate_on_submit():
        return form_error_response(form)

    team, error = create_team(
        hostel,
        form.sport.data,
        owner_id=current_user.id,
        max_players=form.max_players.data or 15,
        name=form.name.data,
    )
    if error:
        return _error(error)
    return jsonify({'team': serialize_team(team)}), 201


@api_bp.route('/teams', methods=['GET'])
def list_teams():
    """Every team of a sport, for picking match opponents."""
    sport = request.args.get('sport')
    filters = None
    if sport:
        try:
            filters = {'sport': SportType(sport.lower())}
        except ValueError:
            return jsonify({'error': f"Unknown sport: {sport}"}), 400

    teams = fetch_all(Team, filters=filters, order_by=Team.name)
    if teams.failed:
        return _load_failed(teams)
    return jsonify({'teams': [serialize_team(t) for t in teams]})


@api_bp.route('/teams/<team_id>', methods=['GET'])
def get_team(team_id: str):
    team = get_or_404(Team, team_id)
    return jsonify({
        'team': dict(serialize_team(team), players=[serialize_player(p) for p in team.roster]),
    })


@api_bp.route('/teams/<team_id>', methods=['PUT'])
def edit_team(team_id: str):
    form = bind_form(TeamUpdateForm)
    if not form.validate_on_submit():
        return form_error_response(form)

    data = {}
    if form.name.data:
        data['name'] = form.name.data.strip()
    if form.max_players.data is not None:
        data['max_players'] = form.max_players.data

    success, error = TeamService().update(team_id, data, owner_id=current_user.id)
    if error:
        return _error(error)
    return jsonify({'team': serialize_team(get_or_404(Team, team_id))})


@api_bp.route('/teams/<team_id>', methods=['DELETE'])
def delete_team(team_id: str):
    success, error = TeamService().delete(team_id, owner_id=current_user.id)
    if error:
        return _error(error)
    return jsonify({'success': True})


@api_bp.route('/teams/<team_id>/export', methods=['GET'])
def export_team(team_id: str):
    """Download the team's roster as a spreadsheet."""
    team = get_owned_or_404(Team, team_id)
    content = export_team_roster(team)
    return send_file(
        io.BytesIO(content),
        mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        as_attachment=True,
        download_name=roster_filename(team.hostel.name, team.sport),
    )


# ============================================================================
# PLAYERS
# ============================================================================

def _player_data(form: PlayerForm) -> dict:
    data = {
        'name': form.name.data,
        'role': form.role.data,
        'jersey_number': form.jersey_number.data,
        'mobile_number': form.mobile_number.data,
        'tshirt_size': form.tshirt_size.data,
    }
    if 'photo_url' in form and form.photo_url.data:
        data['photo_url'] = form.photo_url.data
    return data


@api_bp.route('/teams/<team_id>/players', methods=['GET'])
def list_players(team_id: str):
    get_or_404(Team, team_id)
    players = fetch_all(
        Player,
        filters={'team_id': team_id, 'status': PlayerStatus.APPROVED},
        order_by=Player.created_at,
    )
    if players.failed:
        return _load_failed(players)
    return jsonify({'players': [serialize_player(p) for p in players]})


@api_bp.route('/teams/<team_id>/players', methods=['POST'])
def add_player(team_id: str):
    team = get_or_404(Team, team_id)
    form = bind_form(PlayerForm)
    if not form.validate_on_submit():
        return form_error_response(form)

    player, error = roster.add_player(team, _player_data(form), owner_id=current_user.id)
    if error:
        return _error(error)
    return jsonify({'player': serialize_player(player)}), 201


@api_bp.route('/players/<player_id>', methods=['PUT'])
def edit_player(player_id: str):
    player = get_or_404(Player, player_id)
    form = bind_form(PlayerForm)
    if not form.validate_on_submit():
        return form_error_response(form)

    success, error = roster.update_player(player, _player_data(form), owner_id=current_user.id)
    if error:
        return _error(error)
    return jsonify({'player': serialize_player(player)})


@api_bp.route('/players/<player_id>', methods=['DELETE'])
def delete_player(player_id: str):
    player = get_or_404(Player, player_id)
    success, error = roster.remove_player(player, owner_id=current_user.id)
    if error:
        return _error(error)
    return jsonify({'success': True})


@api_bp.route('/teams/<team_id>/requests', methods=['GET'])
def list_requests(team_id: str):
    """Pending self-registrations awaiting the manager's review."""
    team = get_owned_or_404(Team, team_id)
    pending = fetch_all(
        Player,
        filters={'team_id': team.id, 'status': PlayerStatus.PENDING},
        order_by=Player.created_at,
    )
    if pending.failed:
        return _load_failed(pending)
    return jsonify({'requests': [serialize_player(p) for p in pending]})


@api_bp.route('/players/<player_id>/approve', methods=['POST'])
def approve_player(player_id: str):
    player = get_or_404(Player, player_id)
    success, error = roster.approve_player(player, owner_id=current_user.id)
    if error:
        return _error(error)
    return jsonify({'player': serialize_player(player)})


@api_bp.route('/players/<player_id>/reject', methods=['POST'])
def reject_player(player_id: str):
    player = get_or_404(Player, player_id)
    success, error = roster.reject_player(player, owner_id=current_user.id)
    if error:
        return _error(error)
    return jsonify({'player': serialize_player(player)})


# ============================================================================
# REGISTRATION LINKS
# ============================================================================

@api_bp.route('/teams/<team_id>/registration-links', methods=['GET'])
def list_registration_links(team_id: str):
    team = get_owned_or_404(Team, team_id)
    links = fetch_by_foreign_key(RegistrationLink, 'team_id', team.id, order_by=RegistrationLink.created_at.desc())
    if links.failed:
        return _load_failed(links)
    return jsonify({'links': [serialize_registration_link(link) for link in links]})


@api_bp.route('/teams/<team_id>/registration-links', methods=['POST'])
def add_registration_link(team_id: str):
    team = get_or_404(Team, team_id)
    form = bind_form(RegistrationLinkForm)
    if not form.validate_on_submit():
        return form_error_response(form)

    expires_at = None
    if form.expires_in_days.data:
        expires_at = datetime.now(timezone.utc) + timedelta(days=form.expires_in_days.data)

    link, error = roster.create_registration_link(team, owner_id=current_user.id, expires_at=expires_at)
    if error:
        return _error(error)
    return jsonify({'link': serialize_registration_link(link)}), 201


@api_bp.route('/registration-links/<link_id>/deactivate', methods=['POST'])
def deactivate_registration_link(link_id: str):
    link = get_or_404(RegistrationLink, link_id)
    success, error = roster.deactivate_link(link, owner_id=current_user.id)
    if error:
        return _error(error)
    return jsonify({'link': serialize_registration_link(link)})


# ============================================================================
# MATCHES
# ============================================================================

def _parse_sport(value: str | None) -> SportType | None:
    if not value:
        return None
    try:
        return SportType(value.lower())
    except ValueError:
        return None


@api_bp.route('/matches', methods=['GET'])
def list_matches():
    filters = {}
    if request.args.get('sport'):
        sport = _parse_sport(request.args['sport'])
        if sport is None:
            return jsonify({'error': f"Unknown sport: {request.args['sport']}"}), 400
        filters['sport'] = sport
    if request.args.get('status'):
        try:
            filters['status'] = MatchStatus(request.args['status'].lower())
        except ValueError:
            return jsonify({'error': f"Unknown status: {request.args['status']}"}), 400

    matches = fetch_all(Match, filters=filters or None, order_by=(Match.match_date, Match.start_time))
    if matches.failed:
        return _load_failed(matches)
    return jsonify({'matches': [serialize_match(m) for m in matches]})


@api_bp.route('/matches', methods=['POST'])
def add_match():
    form = bind_form(MatchForm)
    if not form.validate_on_submit():
        return form_error_response(form)

    team1 = Team.query.filter_by(id=form.team1_id.data).first()
    team2 = Team.query.filter_by(id=form.team2_id.data).first()
    if team1 is None or team2 is None:
        return jsonify({'error': 'Invalid team or hostel selection'}), 400

    match, error = schedule_match(
        sport=form.sport.data,
        team1=team1,
        team2=team2,
        match_date=form.match_date.data,
        start_time=form.start_time.data.strftime('%H:%M'),
        end_time=form.end_time.data.strftime('%H:%M'),
        venue=form.venue.data,
        owner_id=current_user.id,
        notes=form.notes.data,
        round_number=form.round_number.data,
        match_number=form.match_number.data,
    )
    if error:
        return _error(error)
    return jsonify({'match': serialize_match(match)}), 201


@api_bp.route('/matches/schedule', methods=['GET'])
def match_schedule():
    """One sport's matches grouped by date, earliest first."""
    sport = _parse_sport(request.args.get('sport'))
    if sport is None:
        return jsonify({'error': 'Select a valid sport'}), 400

    matches = fetch_all(Match, filters={'sport': sport})
    if matches.failed:
        return _load_failed(matches)

    grouped = group_matches_by_date(matches, sport)
    return jsonify({
        'sport': sport.value,
        'schedule': [
            {'date': day, 'matches': [serialize_match(m) for m in day_matches]}
            for day, day_matches in grouped.items()
        ],
        'message': None if grouped else empty_schedule_message(sport),
    })


@api_bp.route('/matches/<match_id>/result', methods=['POST'])
def match_result(match_id: str):
    match = get_or_404(Match, match_id)
    if match.owner_id != current_user.id:
        return jsonify({'error': 'You do not have permission to modify this match'}), 403

    form = bind_form(MatchResultForm)
    if not form.validate_on_submit():
        return form_error_response(form)

    success, error = record_result(match, form.status.data, winner=form.winner.data or None)
    if error:
        return _error(error)
    return jsonify({'match': serialize_match(match)})


@api_bp.route('/matches/<match_id>', methods=['DELETE'])
def delete_match(match_id: str):
    success, error = CRUDService(Match).delete(match_id, owner_id=current_user.id)
    if error:
        return _error(error)
    return jsonify({'success': True})


# ============================================================================
# VOLUNTEERS
# ============================================================================

@api_bp.route('/volunteers', methods=['GET'])
def list_volunteers():
    volunteers = fetch_owned(Volunteer, current_user.id, order_by=Volunteer.name)
    if volunteers.failed:
        return _load_failed(volunteers)
    return jsonify({'volunteers': [serialize_volunteer(v) for v in volunteers]})


@api_bp.route('/volunteers', methods=['POST'])
def add_volunteer():
    form = bind_form(VolunteerForm)
    if not form.validate_on_submit():
        return form_error_response(form)

    volunteer, error = CRUDService(Volunteer).create(
        {
            'name': form.name.data.strip(),
            'role': form.role.data.strip(),
            'contact_number': form.contact_number.data or None,
            'email': form.email.data or None,
            'assigned_sport': SportType(form.assigned_sport.data) if form.assigned_sport.data else None,
        },
        owner_id=current_user.id,
    )
    if error:
        return _error(error)
    return jsonify({'volunteer': serialize_volunteer(volunteer)}), 201


@api_bp.route('/volunteers/<volunteer_id>', methods=['DELETE'])
def delete_volunteer(volunteer_id: str):
    success, error = CRUDService(Volunteer).delete(volunteer_id, owner_id=current_user.id)
    if error:
        return _error(error)
    return jsonify({'success': True})


# ============================================================================
# LEDGER: EXPENSES, SPONSORS, BUDGET
# ============================================================================

def _ledger_payload(owner_id: str):
    snapshot = load_ledger(owner_id)
    if snapshot.error:
        return None, snapshot.error
    return {
        'expenses': [serialize_expense(e) for e in snapshot.expenses],
        'sponsors': [serialize_sponsor(s) for s in snapshot.sponsors],
        'budget': serialize_budget(snapshot.budget),
        'summary': snapshot.summary.as_dict(),
    }, None


@api_bp.route('/ledger', methods=['GET'])
def ledger():
    payload, error = _ledger_payload(current_user.id)
    if error:
        return jsonify({'error': error}), 503
    return jsonify(payload)


@api_bp.route('/expenses', methods=['GET'])
def list_expenses():
    expenses = fetch_owned(
        Expense,
        current_user.id,
        order_by=(Expense.expense_date.desc(), Expense.created_at.desc()),
    )
    if expenses.failed:
        return _load_failed(expenses)
    return jsonify({
        'expenses': [serialize_expense(e) for e in expenses],
        'total': float(summarize_ledger(expenses, [], None).total_expenses),
    })


@api_bp.route('/expenses', methods=['POST'])
def add_expense():
    form = bind_form(ExpenseForm)
    if not form.validate_on_submit():
        return form_error_response(form)

    expense, error = CRUDService(Expense).create(
        {
            'description': form.description.data.strip(),
            'amount': form.amount.data,
            'category': ExpenseCategory(form.category.data),
            'expense_date': form.expense_date.data,
        },
        owner_id=current_user.id,
    )
    if error:
        return _error(error)
    return jsonify({'expense': serialize_expense(expense)}), 201


@api_bp.route('/expenses/<expense_id>', methods=['DELETE'])
def delete_expense(expense_id: str):
    success, error = CRUDService(Expense).delete(expense_id, owner_id=current_user.id)
    if error:
        return _error(error)
    payload, load_error = _ledger_payload(current_user.id)
    if load_error:
        return jsonify({'success': True, 'error': load_error}), 503
    return jsonify({'success': True, 'summary': payload['summary']})


@api_bp.route('/sponsors', methods=['GET'])
def list_sponsors():
    sponsors = fetch_owned(
        Sponsor,
        current_user.id,
        order_by=(Sponsor.sponsor_date.desc(), Sponsor.created_at.desc()),
    )
    if sponsors.failed:
        return _load_failed(sponsors)
    return jsonify({
        'sponsors': [serialize_sponsor(s) for s in sponsors],
        'total': float(summarize_ledger([], sponsors, None).total_sponsorship),
    })


@api_bp.route('/sponsors/<sponsor_id>', methods=['DELETE'])
def delete_sponsor(sponsor_id: str):
    success, error = CRUDService(Sponsor).delete(sponsor_id, owner_id=current_user.id)
    if error:
        return _error(error)
    payload, load_error = _ledger_payload(current_user.id)
    if load_error:
        return jsonify({'success': True, 'error': load_error}), 503
    return jsonify({'success': True, 'summary': payload['summary']})


@api_bp.route('/budget', methods=['POST'])
def set_budget():
    """Set the event budget, optionally recording a sponsor in the same write."""
    form = bind_form(BudgetForm)
    if not form.validate_on_submit():
        return form_error_response(form)

    budget, error = update_budget(
        current_user.id,
        base_amount=form.total_amount.data,
        start_date=form.start_date.data,
        end_date=form.end_date.data,
        sponsor_name=form.sponsor_name.data,
        sponsor_amount=form.sponsor_amount.data,
    )
    if error == BUDGET_UPDATE_FAILED:
        return jsonify({'error': error}), 503
    if error:
        return _error(error)

    payload, load_error = _ledger_payload(current_user.id)
    if load_error:
        return jsonify({'budget': serialize_budget(budget), 'error': load_error}), 503
    return jsonify(payload)


# ============================================================================
# REVENUE
# ============================================================================

@api_bp.route('/revenues', methods=['GET'])
def list_revenues():
    revenues = fetch_owned(
        Revenue,
        current_user.id,
        order_by=(Revenue.revenue_date.desc(), Revenue.created_at.desc()),
    )
    if revenues.failed:
        return _load_failed(revenues)

    by_type = {revenue_type.value: 0.0 for revenue_type in RevenueType}
    for revenue in revenues:
        by_type[revenue.revenue_type.value] += float(revenue.amount)
    return jsonify({
        'revenues': [serialize_revenue(r) for r in revenues],
        'total': sum(by_type.values()),
        'by_type': by_type,
    })


@api_bp.route('/revenues', methods=['POST'])
def add_revenue():
    form = bind_form(RevenueForm)
    if not form.validate_on_submit():
        return form_error_response(form)

    revenue, error = CRUDService(Revenue).create(
        {
            'event_name': form.event_name.data.strip(),
            'amount': form.amount.data,
            'revenue_type': RevenueType(form.revenue_type.data),
            'revenue_date': form.revenue_date.data,
            'notes': form.notes.data or None,
        },
        owner_id=current_user.id,
    )
    if error:
        return _error(error)
    return jsonify({'revenue': serialize_revenue(revenue)}), 201


@api_bp.route('/revenues/<revenue_id>', methods=['DELETE'])
def delete_revenue(revenue_id: str):
    success, error = CRUDService(Revenue).delete(revenue_id, owner_id=current_user.id)
    if error:
        return _error(error)
    return jsonify({'success': True})


# ============================================================================
# UPLOADS
# ============================================================================

@api_bp.route('/uploads/image', methods=['POST'])
def upload_image_endpoint():
    try:
        url = upload_image(request.files.get('image'))
    except ImageUploadError as e:
        return jsonify({'error': e.message}), e.status_code
    return jsonify({'url': url}), 201
