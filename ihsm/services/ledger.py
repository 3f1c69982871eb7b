"""Budget ledger: expense/sponsor aggregation and the budget update protocol."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, Protocol

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ihsm.extensions import db
from ihsm.models import Budget, Expense, Sponsor
from ihsm.services.records import fetch_owned

BUDGET_UPDATE_FAILED = "Failed to update budget"


class HasAmount(Protocol):
    amount: Decimal


@dataclass(frozen=True)
class LedgerSummary:
    total_expenses: Decimal
    total_sponsorship: Decimal
    budget_total: Decimal
    available_budget: Decimal

    @property
    def over_budget(self) -> bool:
        return self.available_budget < 0

    def as_dict(self) -> dict:
        return {
            'total_expenses': float(self.total_expenses),
            'total_sponsorship': float(self.total_sponsorship),
            'budget_total': float(self.budget_total),
            'available_budget': float(self.available_budget),
            'over_budget': self.over_budget,
        }


@dataclass
class LedgerSnapshot:
    expenses: list[Expense] = field(default_factory=list)
    sponsors: list[Sponsor] = field(default_factory=list)
    budget: Budget | None = None
    error: str | None = None

    @property
    def summary(self) -> LedgerSummary:
        return summarize_ledger(self.expenses, self.sponsors, self.budget)


def _sum_amounts(records: Iterable[HasAmount]) -> Decimal:
    return sum((Decimal(r.amount) for r in records), Decimal("0"))


def summarize_ledger(
    expenses: Iterable[HasAmount],
    sponsors: Iterable[HasAmount],
    budget: Budget | None,
) -> LedgerSummary:
    """Aggregate already-fetched ledger records.

    A negative ``available_budget`` is a valid state (overspent), not an error.
    """
    total_expenses = _sum_amounts(expenses)
    total_sponsorship = _sum_amounts(sponsors)
    budget_total = Decimal(budget.total_amount) if budget is not None else Decimal("0")
    return LedgerSummary(
        total_expenses=total_expenses,
        total_sponsorship=total_sponsorship,
        budget_total=budget_total,
        available_budget=budget_total - total_expenses,
    )


def load_ledger(owner_id: str) -> LedgerSnapshot:
    """Fetch the owner's expenses, sponsors and budget, newest first."""
    expenses = fetch_owned(Expense, owner_id, order_by=(Expense.expense_date.desc(), Expense.created_at.desc()))
    if expenses.failed:
        return LedgerSnapshot(error=expenses.error)

    sponsors = fetch_owned(Sponsor, owner_id, order_by=(Sponsor.sponsor_date.desc(), Sponsor.created_at.desc()))
    if sponsors.failed:
        return LedgerSnapshot(error=sponsors.error)

    budgets = fetch_owned(Budget, owner_id)
    if budgets.failed:
        return LedgerSnapshot(error=budgets.error)

    return LedgerSnapshot(
        expenses=expenses.items,
        sponsors=sponsors.items,
        budget=budgets.first(),
    )


def update_budget(
    owner_id: str,
    base_amount: Decimal,
    start_date: date,
    end_date: date,
    sponsor_name: str | None = None,
    sponsor_amount: Decimal | None = None,
) -> tuple[Budget | None, str | None]:
    """
    Set or update the owner's budget, optionally recording a new sponsor.

    The budget total becomes ``base_amount + sponsor_amount`` and the
    sponsorship running total grows by ``sponsor_amount``. The sponsor insert
    and the budget upsert commit together or not at all.

    Returns:
        (budget, error_message)
    """
    base_amount = Decimal(base_amount)
    if base_amount < 0:
        return None, "Budget amount cannot be negative"
    if end_date < start_date:
        return None, "End date must be on or after the start date"

    sponsor_name = (sponsor_name or '').strip()
    contribution = Decimal(sponsor_amount) if sponsor_name and sponsor_amount else Decimal("0")
    if contribution < 0:
        return None, "Sponsor amount cannot be negative"

    try:
        if sponsor_name and contribution > 0:
            db.session.add(Sponsor(
                name=sponsor_name,
                amount=contribution,
                sponsor_date=date.today(),
                owner_id=owner_id,
            ))

        budget = (
            Budget.query.filter_by(owner_id=owner_id)
            .with_for_update()
            .first()
        )
        if budget is None:
            budget = Budget(owner_id=owner_id, sponsorship_amount=Decimal("0"))
            db.session.add(budget)

        previous_sponsorship = Decimal(budget.sponsorship_amount or 0)
        budget.total_amount = base_amount + contribution
        budget.sponsorship_amount = previous_sponsorship + contribution
        budget.start_date = start_date
        budget.end_date = end_date

        db.session.commit()
        current_app.logger.info(
            f"Budget for {owner_id} set to {budget.total_amount} (sponsorship {budget.sponsorship_amount})"
        )
        return budget, None

    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"{BUDGET_UPDATE_FAILED}: {e}")
        return None, BUDGET_UPDATE_FAILED


__all__ = [
    'BUDGET_UPDATE_FAILED',
    'LedgerSnapshot',
    'LedgerSummary',
    'load_ledger',
    'summarize_ledger',
    'update_budget',
]
