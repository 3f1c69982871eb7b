from datetime import date
from types import SimpleNamespace

import pytest

from ihsm.extensions import db
from ihsm.models import Match, MatchStatus, SportType, Team
from ihsm.services.schedule import (
    empty_schedule_message,
    filter_by_status,
    group_matches_by_date,
    record_result,
    schedule_match,
    sort_matches,
)

from conftest import create_hostel, create_team, create_user


def _match(sport, day, start='10:00', status=MatchStatus.SCHEDULED):
    return SimpleNamespace(sport=sport, match_date=day, start_time=start, status=status)


def test_grouping_covers_every_match_of_the_sport_exactly_once():
    matches = [
        _match(SportType.CRICKET, date(2024, 3, 2), '14:00'),
        _match(SportType.VOLLEYBALL, date(2024, 3, 1)),
        _match(SportType.CRICKET, date(2024, 3, 1), '16:00'),
        _match(SportType.CRICKET, date(2024, 3, 2), '09:00'),
        _match(SportType.KABADDI, date(2024, 3, 2)),
    ]

    grouped = group_matches_by_date(matches, 'cricket')

    assert list(grouped) == ['2024-03-01', '2024-03-02']
    flattened = [m for day in grouped.values() for m in day]
    assert all(m.sport == SportType.CRICKET for m in flattened)
    assert sorted(map(id, flattened)) == sorted(id(m) for m in matches if m.sport == SportType.CRICKET)
    assert [m.start_time for m in grouped['2024-03-02']] == ['09:00', '14:00']


def test_grouping_with_no_matches_is_empty():
    assert group_matches_by_date([_match(SportType.KABADDI, date(2024, 1, 1))], SportType.CRICKET) == {}
    assert empty_schedule_message(SportType.CRICKET) == "No matches scheduled for cricket"


def test_sort_is_ascending_by_date_then_time():
    later = _match(SportType.CRICKET, date(2024, 5, 2), '08:00')
    earlier = _match(SportType.CRICKET, date(2024, 5, 1), '18:00')
    same_day_first = _match(SportType.CRICKET, date(2024, 5, 1), '07:30')
    assert sort_matches([later, earlier, same_day_first]) == [same_day_first, earlier, later]


@pytest.fixture()
def teams(app):
    with app.app_context():
        owner = create_user()
        alpha = create_hostel(owner.id, name='Alpha', cricket=True)
        beta = create_hostel(owner.id, name='Beta', cricket=True, volleyball=True)
        return {
            'owner_id': owner.id,
            'a': create_team(alpha).id,
            'b': create_team(beta).id,
            'b_volleyball': create_team(beta, SportType.VOLLEYBALL).id,
        }


def test_schedule_match_rejects_invalid_pairings(app, teams):
    with app.app_context():
        a = db.session.get(Team, teams['a'])
        b_volleyball = db.session.get(Team, teams['b_volleyball'])

        match, error = schedule_match('cricket', a, a, date(2024, 3, 1), '10:00', '12:00', 'Ground')
        assert match is None and error == "A team cannot play against itself"

        match, error = schedule_match('cricket', a, b_volleyball, date(2024, 3, 1), '10:00', '12:00', 'Ground')
        assert match is None and error == "Invalid team or hostel selection"

        b = db.session.get(Team, teams['b'])
        match, error = schedule_match('cricket', a, b, date(2024, 3, 1), '12:00', '10:00', 'Ground')
        assert match is None and error == "End time must be after start time"
        assert Match.query.count() == 0


def test_scenario_completed_match_leaves_scheduled_view(app, teams):
    with app.app_context():
        a = db.session.get(Team, teams['a'])
        b = db.session.get(Team, teams['b'])

        match, error = schedule_match(
            SportType.CRICKET, a, b, date(2024, 3, 1), '10:00', '12:00', 'Main Ground',
            owner_id=teams['owner_id'],
        )
        assert error is None
        assert match.team1_name == 'Alpha Cricket Team'

        success, error = record_result(match, 'completed', winner='Alpha Cricket Team')
        assert success and error is None

        match = db.session.get(Match, match.id)
        assert match.status == MatchStatus.COMPLETED
        assert match.winner == 'Alpha Cricket Team'
        assert filter_by_status(Match.query.all(), MatchStatus.SCHEDULED) == []
        assert a.matches_played == 1 and a.wins == 1
        assert b.matches_played == 1 and b.wins == 0


def test_result_states_are_terminal(app, teams):
    with app.app_context():
        a = db.session.get(Team, teams['a'])
        b = db.session.get(Team, teams['b'])
        match, _ = schedule_match('cricket', a, b, date(2024, 3, 1), '10:00', '12:00', 'Ground')

        assert record_result(match, 'completed', winner='Someone Else') == (
            False, "Winner must be one of the two teams",
        )
        assert record_result(match, 'cancelled') == (True, None)
        assert record_result(match, 'completed', winner='Alpha Cricket Team') == (
            False, "Only scheduled matches can be updated",
        )
        assert a.matches_played == 0


def test_schedule_endpoint_groups_by_date(auth_client, app, manager_id):
    with app.app_context():
        alpha = create_hostel(manager_id, name='Alpha', kabaddi=True)
        beta = create_hostel(manager_id, name='Beta', kabaddi=True)
        a_id = create_team(alpha, SportType.KABADDI).id
        b_id = create_team(beta, SportType.KABADDI).id

    response = auth_client.get('/api/matches/schedule?sport=kabaddi')
    assert response.status_code == 200
    assert response.get_json()['schedule'] == []
    assert response.get_json()['message'] == "No matches scheduled for kabaddi"

    for day, start in [('2024-04-02', '15:00'), ('2024-04-01', '09:00'), ('2024-04-02', '11:00')]:
        response = auth_client.post('/api/matches', json={
            'sport': 'kabaddi',
            'team1_id': a_id,
            'team2_id': b_id,
            'match_date': day,
            'start_time': start,
            'end_time': '18:00',
            'venue': 'Indoor Arena',
        })
        assert response.status_code == 201

    body = auth_client.get('/api/matches/schedule?sport=kabaddi').get_json()
    assert [group['date'] for group in body['schedule']] == ['2024-04-01', '2024-04-02']
    assert [m['start_time'] for m in body['schedule'][1]['matches']] == ['11:00', '15:00']
    assert body['message'] is None

    assert auth_client.get('/api/matches/schedule?sport=chess').status_code == 400


def test_match_result_endpoint(auth_client, app, manager_id):
    with app.app_context():
        a_id = create_team(create_hostel(manager_id, name='A')).id
        b_id = create_team(create_hostel(manager_id, name='B')).id

    match = auth_client.post('/api/matches', json={
        'sport': 'cricket',
        'team1_id': a_id,
        'team2_id': b_id,
        'match_date': '2024-04-01',
        'start_time': '10:00',
        'end_time': '13:00',
        'venue': 'Main Ground',
    }).get_json()['match']

    response = auth_client.post(f"/api/matches/{match['id']}/result", json={
        'status': 'completed',
        'winner': 'A Cricket Team',
    })
    assert response.status_code == 200
    assert response.get_json()['match']['winner'] == 'A Cricket Team'

    scheduled = auth_client.get('/api/matches?status=scheduled').get_json()['matches']
    assert scheduled == []
    completed = auth_client.get('/api/matches?status=completed').get_json()['matches']
    assert [m['id'] for m in completed] == [match['id']]
