import random
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import OperationalError

from ihsm.extensions import db
from ihsm.models import Budget, Expense, ExpenseCategory, Sponsor
from ihsm.services.ledger import BUDGET_UPDATE_FAILED, load_ledger, summarize_ledger, update_budget

from conftest import create_user


def _amounts(*values):
    return [SimpleNamespace(amount=Decimal(str(v))) for v in values]


def test_available_budget_is_total_minus_expenses():
    budget = SimpleNamespace(total_amount=Decimal('12000'))
    summary = summarize_ledger(_amounts(3000, 1500.50), _amounts(2000), budget)

    assert summary.total_expenses == Decimal('4500.50')
    assert summary.total_sponsorship == Decimal('2000')
    assert summary.available_budget == Decimal('7499.50')
    assert summary.over_budget is False


def test_summary_ignores_record_order_and_is_repeatable():
    expenses = _amounts(10, 250.25, 99.99, 1000, 0)
    sponsors = _amounts(500, 1200)
    budget = SimpleNamespace(total_amount=Decimal('5000'))

    first = summarize_ledger(expenses, sponsors, budget)
    shuffled_expenses = list(expenses)
    shuffled_sponsors = list(sponsors)
    random.Random(7).shuffle(shuffled_expenses)
    random.Random(7).shuffle(shuffled_sponsors)

    assert summarize_ledger(shuffled_expenses, shuffled_sponsors, budget) == first
    assert summarize_ledger(expenses, sponsors, budget) == first


def test_overspending_is_reported_not_rejected():
    summary = summarize_ledger(_amounts(800), [], SimpleNamespace(total_amount=Decimal('500')))
    assert summary.available_budget == Decimal('-300')
    assert summary.over_budget is True


def test_missing_budget_counts_as_zero():
    summary = summarize_ledger(_amounts(100), [], None)
    assert summary.budget_total == Decimal('0')
    assert summary.available_budget == Decimal('-100')


def test_budget_update_replaces_total_and_accumulates_sponsorship(app):
    with app.test_request_context():
        owner_id = create_user().id
        db.session.add(Budget(
            owner_id=owner_id,
            total_amount=Decimal('7000'),
            sponsorship_amount=Decimal('1500'),
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 31),
        ))
        db.session.commit()

        budget, error = update_budget(
            owner_id,
            base_amount=Decimal('10000'),
            start_date=date(2024, 2, 1),
            end_date=date(2024, 2, 28),
            sponsor_name='Acme',
            sponsor_amount=Decimal('2000'),
        )

        assert error is None
        assert budget.total_amount == Decimal('12000')
        assert budget.sponsorship_amount == Decimal('3500')
        assert Budget.query.filter_by(owner_id=owner_id).count() == 1

        sponsors = Sponsor.query.filter_by(owner_id=owner_id).all()
        assert [(s.name, s.amount) for s in sponsors] == [('Acme', Decimal('2000'))]


def test_budget_update_without_sponsor_records_nothing_extra(app):
    with app.test_request_context():
        owner_id = create_user().id
        budget, error = update_budget(owner_id, Decimal('5000'), date(2024, 3, 1), date(2024, 3, 10))

        assert error is None
        assert budget.total_amount == Decimal('5000')
        assert budget.sponsorship_amount == Decimal('0')
        assert Sponsor.query.count() == 0


@pytest.mark.parametrize(
    ('base', 'start', 'end', 'message'),
    [
        (Decimal('-1'), date(2024, 1, 1), date(2024, 1, 2), "Budget amount cannot be negative"),
        (Decimal('100'), date(2024, 1, 5), date(2024, 1, 2), "End date must be on or after the start date"),
    ],
)
def test_budget_update_validation(app, base, start, end, message):
    with app.test_request_context():
        owner_id = create_user().id
        budget, error = update_budget(owner_id, base, start, end)
        assert budget is None
        assert error == message
        assert Budget.query.count() == 0


def test_budget_update_failure_persists_nothing(app, monkeypatch):
    with app.test_request_context():
        owner_id = create_user().id

        def failing_commit(self):
            raise OperationalError("UPDATE budget", {}, Exception("database is locked"))

        monkeypatch.setattr(type(db.session()), 'commit', failing_commit)
        budget, error = update_budget(
            owner_id,
            Decimal('10000'),
            date(2024, 1, 1),
            date(2024, 1, 31),
            sponsor_name='Acme',
            sponsor_amount=Decimal('2000'),
        )
        monkeypatch.undo()

        assert budget is None
        assert error == BUDGET_UPDATE_FAILED
        assert Sponsor.query.count() == 0
        assert Budget.query.count() == 0


def test_load_ledger_reports_failed_reads(app, monkeypatch):
    with app.test_request_context():
        owner_id = create_user().id

        def broken_query(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("no such table: expense"))

        monkeypatch.setattr(Expense.query_class, 'all', broken_query)
        snapshot = load_ledger(owner_id)
        monkeypatch.undo()

        assert snapshot.error == "Failed to load expenses"
        assert snapshot.expenses == []


def test_scenario_budget_with_sponsor_then_expense(auth_client):
    response = auth_client.post('/api/budget', json={
        'total_amount': 10000,
        'start_date': '2024-02-01',
        'end_date': '2024-02-20',
        'sponsor_name': 'Acme',
        'sponsor_amount': 2000,
    })
    assert response.status_code == 200
    body = response.get_json()
    assert body['budget']['total_amount'] == 12000.0
    assert body['budget']['sponsorship_amount'] == 2000.0
    assert body['summary']['available_budget'] == 12000.0

    response = auth_client.post('/api/expenses', json={
        'description': 'Match balls',
        'amount': 3000,
        'category': ExpenseCategory.EQUIPMENT.value,
        'expense_date': '2024-02-02',
    })
    assert response.status_code == 201
    expense_id = response.get_json()['expense']['id']

    ledger = auth_client.get('/api/ledger').get_json()
    assert ledger['summary']['total_expenses'] == 3000.0
    assert ledger['summary']['available_budget'] == 9000.0

    response = auth_client.delete(f'/api/expenses/{expense_id}')
    assert response.status_code == 200
    assert response.get_json()['summary']['available_budget'] == 12000.0


def test_deleting_sponsor_keeps_budget_totals(auth_client):
    auth_client.post('/api/budget', json={
        'total_amount': 1000,
        'start_date': '2024-02-01',
        'end_date': '2024-02-20',
        'sponsor_name': 'Acme',
        'sponsor_amount': 500,
    })
    sponsor_id = auth_client.get('/api/sponsors').get_json()['sponsors'][0]['id']

    response = auth_client.delete(f'/api/sponsors/{sponsor_id}')
    assert response.status_code == 200

    ledger = auth_client.get('/api/ledger').get_json()
    assert ledger['sponsors'] == []
    assert ledger['budget']['total_amount'] == 1500.0
    assert ledger['summary']['total_sponsorship'] == 0.0


def test_negative_expense_is_rejected_before_any_write(auth_client):
    response = auth_client.post('/api/expenses', json={
        'description': 'Refund',
        'amount': -5,
        'expense_date': '2024-02-02',
    })
    assert response.status_code == 400
    assert response.get_json()['error'] == "Amount cannot be negative"
    assert auth_client.get('/api/expenses').get_json()['expenses'] == []


def test_budget_endpoint_reports_failed_write_as_unavailable(auth_client, app, monkeypatch):
    with app.app_context():
        session_class = type(db.session())

    def failing_commit(self):
        raise OperationalError("UPDATE budget", {}, Exception("database is locked"))

    monkeypatch.setattr(session_class, 'commit', failing_commit)
    response = auth_client.post('/api/budget', json={
        'total_amount': 10000,
        'start_date': '2024-01-01',
        'end_date': '2024-01-31',
        'sponsor_name': 'Acme',
        'sponsor_amount': 2000,
    })
    monkeypatch.undo()

    assert response.status_code == 503
    assert response.get_json()['error'] == BUDGET_UPDATE_FAILED
    with app.app_context():
        assert Budget.query.count() == 0
        assert Sponsor.query.count() == 0
