from ihsm.extensions import db
from ihsm.models import Budget, Hostel, Match, Team, User


def test_user_create_and_set_password(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=['user', 'create', '--email', 'Admin@Example.com', '--password', 'first-pass'])
    assert 'User created successfully!' in result.output

    result = runner.invoke(args=['user', 'create', '--email', 'admin@example.com', '--password', 'again'])
    assert 'already exists' in result.output

    result = runner.invoke(args=['user', 'set-password', '--email', 'admin@example.com', '--password', 'second-pass'])
    assert 'Password updated.' in result.output

    with app.app_context():
        user = User.query.filter_by(email='admin@example.com').one()
        assert user.check_password('second-pass')


def test_init_db_is_repeatable(app):
    result = app.test_cli_runner().invoke(args=['init-db'])
    assert result.exit_code == 0
    assert 'Database initialised.' in result.output


def test_seed_demo(app):
    runner = app.test_cli_runner()
    runner.invoke(args=['user', 'create', '--email', 'admin@example.com', '--password', 'admin-pass'])

    result = runner.invoke(args=['seed', 'demo', '--email', 'admin@example.com', '--hostels', '2', '--players-per-team', '3'])
    assert result.exit_code == 0, result.output
    assert 'Demo data created!' in result.output

    with app.app_context():
        assert Hostel.query.count() == 2
        assert Team.query.count() == 6
        assert Match.query.count() == 3
        budget = Budget.query.one()
        assert budget.total_amount == 60000
        assert budget.sponsorship_amount == 10000
        assert all(len(team.roster) == 3 for team in Team.query.all())


def test_user_create_refuses_overlong_password(app):
    result = app.test_cli_runner().invoke(args=['user', 'create', '--email', 'admin@example.com', '--password', 'p' * 80])
    assert 'Password cannot be longer than 72 bytes' in result.output

    with app.app_context():
        assert User.query.count() == 0
