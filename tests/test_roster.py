from datetime import datetime, timedelta, timezone

import pytest

from ihsm.extensions import db
from ihsm.models import Player, PlayerStatus, RegistrationLink, Team
from ihsm.services import roster

from conftest import create_hostel, create_team, create_user

PLAYER = {
    'name': 'Raj',
    'role': 'Batsman',
    'jersey_number': 7,
    'mobile_number': '9876543210',
    'tshirt_size': 'M',
}


def test_scenario_hostel_team_player(auth_client):
    response = auth_client.post('/api/hostels', json={
        'name': 'Alpha',
        'total_students': 100,
        'password': 'secret1',
        'sports': {'cricket': True},
    })
    assert response.status_code == 201
    hostel = response.get_json()['hostel']
    assert hostel['sports'] == {'cricket': True, 'volleyball': False, 'kabaddi': False}

    assert auth_client.post(f"/api/hostels/{hostel['id']}/unlock", json={'password': 'secret1'}).status_code == 200

    response = auth_client.post(f"/api/hostels/{hostel['id']}/teams", json={'sport': 'cricket', 'max_players': 15})
    assert response.status_code == 201
    team = response.get_json()['team']
    assert team['name'] == 'Alpha Cricket Team'

    response = auth_client.post(f"/api/teams/{team['id']}/players", json=PLAYER)
    assert response.status_code == 201
    assert response.get_json()['player']['status'] == 'approved'

    players = auth_client.get(f"/api/teams/{team['id']}/players").get_json()['players']
    assert len(players) == 1
    assert len(players) <= team['max_players']

    dashboard = auth_client.get(f"/api/hostels/{hostel['id']}/dashboard").get_json()
    assert dashboard['available_sports'] == []
    assert [p['name'] for p in dashboard['teams'][0]['players']] == ['Raj']


def test_short_hostel_password_is_rejected(auth_client):
    response = auth_client.post('/api/hostels', json={
        'name': 'Alpha',
        'total_students': 100,
        'password': 'abc',
        'sports': {'cricket': True},
    })
    assert response.status_code == 400
    assert response.get_json()['error'] == "Password must be at least 6 characters long"


def test_team_needs_registered_sport(auth_client, app, manager_id):
    with app.app_context():
        hostel_id = create_hostel(manager_id, name='Alpha', cricket=True).id

    auth_client.post(f'/api/hostels/{hostel_id}/unlock', json={'password': 'secret1'})
    response = auth_client.post(f'/api/hostels/{hostel_id}/teams', json={'sport': 'kabaddi'})
    assert response.status_code == 400
    assert response.get_json()['error'] == "Alpha is not registered for kabaddi"

    assert auth_client.post(f'/api/hostels/{hostel_id}/teams', json={'sport': 'cricket'}).status_code == 201
    response = auth_client.post(f'/api/hostels/{hostel_id}/teams', json={'sport': 'cricket'})
    assert response.get_json()['error'] == "Alpha already has a cricket team"


def test_invalid_mobile_number_is_rejected(auth_client, app, manager_id):
    with app.app_context():
        team_id = create_team(create_hostel(manager_id)).id

    response = auth_client.post(f'/api/teams/{team_id}/players', json=dict(PLAYER, mobile_number='98765'))
    assert response.status_code == 400
    assert response.get_json()['error'] == "Please enter a valid 10-digit mobile number"
    assert response.get_json()['fields']['mobile_number']


def test_roster_never_exceeds_capacity(app):
    with app.test_request_context():
        owner = create_user()
        team = create_team(create_hostel(owner.id), max_players=2)

        for number in (1, 2):
            player, error = roster.add_player(team, dict(PLAYER, jersey_number=number), owner.id)
            assert error is None

        player, error = roster.add_player(team, dict(PLAYER, jersey_number=3), owner.id)
        assert player is None
        assert error == roster.TEAM_FULL
        assert len(db.session.get(Team, team.id).roster) == 2


def test_only_the_owner_can_modify_a_team(app):
    with app.test_request_context():
        owner = create_user()
        stranger = create_user('stranger@example.com', 'stranger-pass')
        team = create_team(create_hostel(owner.id))

        player, error = roster.add_player(team, PLAYER, stranger.id)
        assert player is None
        assert error == "You do not have permission to modify this team"
        assert Player.query.count() == 0


def test_update_player_edits_single_record(app):
    with app.test_request_context():
        owner = create_user()
        team = create_team(create_hostel(owner.id))
        player, _ = roster.add_player(team, PLAYER, owner.id)
        player_id = player.id

        success, error = roster.update_player(player, dict(PLAYER, role='Bowler', jersey_number=10), owner.id)
        assert success and error is None

        players = Player.query.filter_by(team_id=team.id).all()
        assert [(p.id, p.role, p.jersey_number) for p in players] == [(player_id, 'Bowler', 10)]


def test_approval_rechecks_capacity(app):
    with app.test_request_context():
        owner = create_user()
        team = create_team(create_hostel(owner.id), max_players=1)
        link, _ = roster.create_registration_link(team, owner.id)

        first, _ = roster.submit_registration(link, dict(PLAYER, name='First'))
        second, _ = roster.submit_registration(link, dict(PLAYER, name='Second'))
        assert first.status == PlayerStatus.PENDING

        assert roster.approve_player(first, owner.id) == (True, None)
        assert roster.approve_player(second, owner.id) == (False, roster.TEAM_FULL)
        assert roster.reject_player(second, owner.id) == (True, None)
        assert roster.approve_player(second, owner.id) == (False, "Only pending players can be approved")

        assert [p.name for p in db.session.get(Team, team.id).roster] == ['First']


def test_registration_url_uses_public_origin(app):
    with app.test_request_context():
        owner = create_user()
        team = create_team(create_hostel(owner.id))
        link, _ = roster.create_registration_link(team, owner.id)
        assert roster.registration_url(link) == f"http://localhost:5173/register/{link.id}"


@pytest.fixture()
def link_id(auth_client, app, manager_id):
    with app.app_context():
        team_id = create_team(create_hostel(manager_id)).id

    response = auth_client.post(f'/api/teams/{team_id}/registration-links', json={})
    assert response.status_code == 201
    link = response.get_json()['link']
    assert link['url'].endswith(f"/register/{link['id']}")
    return link['id']


def test_scenario_public_registration_creates_pending_request(app, link_id):
    visitor = app.test_client()

    response = visitor.get(f'/register/{link_id}')
    assert response.status_code == 200
    assert response.get_json()['team_name'] == 'Alpha Cricket Team'

    response = visitor.post(f'/register/{link_id}', data=dict(PLAYER, jersey_number='7'))
    assert response.status_code == 303
    assert response.headers['Location'].endswith('/registration-success')

    with app.app_context():
        link = db.session.get(RegistrationLink, link_id)
        requests = Player.query.filter_by(registration_link_id=link_id).all()
        assert len(requests) == 1
        assert requests[0].status == PlayerStatus.PENDING
        assert requests[0].team_id == link.team_id
        assert requests[0].owner_id is None


def test_pending_request_is_reviewed_by_manager(auth_client, app, link_id):
    app.test_client().post(f'/register/{link_id}', data=dict(PLAYER, jersey_number='7'))

    with app.app_context():
        team_id = db.session.get(RegistrationLink, link_id).team_id

    requests = auth_client.get(f'/api/teams/{team_id}/requests').get_json()['requests']
    assert [r['name'] for r in requests] == ['Raj']

    response = auth_client.post(f"/api/players/{requests[0]['id']}/approve")
    assert response.status_code == 200
    assert response.get_json()['player']['status'] == 'approved'
    assert auth_client.get(f'/api/teams/{team_id}/requests').get_json()['requests'] == []


def test_deactivated_and_expired_links_are_refused(app, auth_client, link_id):
    assert auth_client.post(f'/api/registration-links/{link_id}/deactivate').status_code == 200
    assert app.test_client().get(f'/register/{link_id}').status_code == 410

    with app.app_context():
        link = db.session.get(RegistrationLink, link_id)
        link.active = True
        link.expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
        db.session.commit()

    response = app.test_client().post(f'/register/{link_id}', data=dict(PLAYER, jersey_number='7'))
    assert response.status_code == 410
    assert response.get_json()['error'] == "This registration link has expired"


def test_unknown_link_is_not_found(client):
    response = client.get('/register/missing')
    assert response.status_code == 404
    assert response.get_json()['error'] == "Invalid registration link"
