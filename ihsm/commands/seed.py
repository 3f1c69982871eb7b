"""Data seeding CLI commands."""

import random
from datetime import date, timedelta
from decimal import Decimal

import click
from flask.cli import with_appcontext

from ihsm.extensions import db
from ihsm.models import (
    Expense, ExpenseCategory, Hostel, Match, MatchStatus, Player, PlayerStatus,
    SportType, Team, TShirtSize, User, Volunteer,
)
from ihsm.services.access_gate import secret_length_error
from ihsm.services.ledger import update_budget
from ihsm.services.schedule import team_display_name

HOSTEL_NAMES = ['Aravali', 'Nilgiri', 'Shivalik', 'Kailash', 'Vindhya', 'Satpura']
ROLES = {
    SportType.CRICKET: ['Batsman', 'Bowler', 'All-rounder', 'Wicket-keeper'],
    SportType.VOLLEYBALL: ['Setter', 'Spiker', 'Libero', 'Blocker'],
    SportType.KABADDI: ['Raider', 'Defender', 'All-rounder'],
}
VENUES = {
    SportType.CRICKET: 'Main Ground',
    SportType.VOLLEYBALL: 'Volleyball Court',
    SportType.KABADDI: 'Indoor Arena',
}


@click.group('seed')
def seed_commands():
    """Data seeding commands."""
    pass


@seed_commands.command('demo')
@click.option('--email', required=True, help='Manager account that will own the demo data')
@click.option('--hostels', default=4, help='Number of hostels to create (default: 4)')
@click.option('--players-per-team', default=8, help='Players per team (default: 8)')
@click.option('--password', default='hostel123', show_default=True, help='Dashboard password for every demo hostel')
@with_appcontext
def seed_demo(email, hostels, players_per_team, password):
    """Seed demo hostels, teams, matches and a budget for a manager.

    Example:
        flask seed demo --email admin@example.com
        flask seed demo --email admin@example.com --hostels 6
    """
    user = db.session.query(User).filter(User.email.ilike(email)).first()
    if not user:
        click.echo(click.style(f'Error: No user {email} found. Run "flask user create" first.', fg='red'))
        return

    secret_error = secret_length_error(password)
    if secret_error:
        click.echo(click.style(f'Error: {secret_error}', fg='red'))
        return

    click.echo(f'Seeding demo data for {user.email}')

    teams_by_sport: dict[SportType, list[Team]] = {sport: [] for sport in SportType}
    for index in range(min(hostels, len(HOSTEL_NAMES))):
        hostel = Hostel(name=f'{HOSTEL_NAMES[index]} Hostel', total_students=random.randint(200, 600), owner_id=user.id)
        hostel.set_access_secret(password)
        hostel.set_sports({sport.value: True for sport in SportType})
        db.session.add(hostel)

        for sport in SportType:
            team = Team(
                hostel=hostel,
                sport=sport,
                name=f'{hostel.name} {sport.label} Team',
                max_players=15,
                owner_id=user.id,
            )
            db.session.add(team)
            teams_by_sport[sport].append(team)

            for number in range(1, players_per_team + 1):
                db.session.add(Player(
                    team=team,
                    name=f'{HOSTEL_NAMES[index]} Player {number}',
                    role=random.choice(ROLES[sport]),
                    jersey_number=number,
                    mobile_number=f'9{random.randint(0, 999999999):09d}',
                    tshirt_size=random.choice(list(TShirtSize)),
                    status=PlayerStatus.APPROVED,
                    owner_id=user.id,
                ))
        click.echo(f'  Created {hostel.name}')

    db.session.flush()

    start = date.today() + timedelta(days=7)
    match_count = 0
    for sport, teams in teams_by_sport.items():
        for offset, (team1, team2) in enumerate(zip(teams[::2], teams[1::2])):
            db.session.add(Match(
                sport=sport,
                team1_id=team1.id,
                team2_id=team2.id,
                team1_name=team_display_name(team1),
                team2_name=team_display_name(team2),
                match_date=start + timedelta(days=offset),
                start_time='16:00',
                end_time='18:00',
                venue=VENUES[sport],
                status=MatchStatus.SCHEDULED,
                round_number=1,
                match_number=offset + 1,
                owner_id=user.id,
            ))
            match_count += 1

    for name, role in [('Ravi Kumar', 'Scorer'), ('Meera Nair', 'First Aid'), ('Arjun Rao', 'Equipment')]:
        db.session.add(Volunteer(name=name, role=role, owner_id=user.id))

    db.session.add(Expense(
        description='Cricket balls and stumps',
        amount=Decimal('4500.00'),
        category=ExpenseCategory.EQUIPMENT,
        expense_date=date.today(),
        owner_id=user.id,
    ))
    db.session.commit()

    budget, error = update_budget(
        user.id,
        base_amount=Decimal('50000'),
        start_date=date.today(),
        end_date=start + timedelta(days=14),
        sponsor_name='Campus Canteen',
        sponsor_amount=Decimal('10000'),
    )
    if error:
        click.echo(click.style(f'Error: {error}', fg='red'))
        return

    click.echo(click.style('Demo data created!', fg='green'))
    click.echo(f'  Matches: {match_count}')
    click.echo(f'  Budget: {budget.total_amount}')
    click.echo(f'  Hostel dashboard password: {password}')
