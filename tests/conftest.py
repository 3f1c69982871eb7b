import pytest

from ihsm import create_app
from ihsm.config import TestConfig
from ihsm.extensions import db
from ihsm.models import Hostel, SportType, Team, User

MANAGER_EMAIL = 'manager@example.com'
MANAGER_PASSWORD = 'manager-pass'


@pytest.fixture()
def app():
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


def create_user(email: str = MANAGER_EMAIL, password: str = MANAGER_PASSWORD) -> User:
    user = User(email=email, display_name=email.split('@')[0])
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


def create_hostel(owner_id: str, name: str = 'Alpha', secret: str = 'secret1', **sports) -> Hostel:
    hostel = Hostel(name=name, total_students=100, owner_id=owner_id)
    hostel.set_access_secret(secret)
    hostel.set_sports(sports or {'cricket': True})
    db.session.add(hostel)
    db.session.commit()
    return hostel


def create_team(hostel: Hostel, sport: SportType = SportType.CRICKET, max_players: int = 15) -> Team:
    team = Team(
        hostel=hostel,
        sport=sport,
        name=f"{hostel.name} {sport.label} Team",
        max_players=max_players,
        owner_id=hostel.owner_id,
    )
    db.session.add(team)
    db.session.commit()
    return team


@pytest.fixture()
def manager_id(app):
    with app.app_context():
        return create_user().id


@pytest.fixture()
def auth_client(client, manager_id):
    response = client.post('/auth/login', json={'email': MANAGER_EMAIL, 'password': MANAGER_PASSWORD})
    assert response.status_code == 200
    return client
