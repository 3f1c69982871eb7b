"""Forms behind the manager-facing JSON API."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from flask_wtf import FlaskForm
from wtforms import (
    BooleanField,
    DateField,
    DecimalField,
    EmailField,
    IntegerField,
    PasswordField,
    SelectField,
    StringField,
    TextAreaField,
    TimeField,
)
from wtforms.validators import DataRequired, Email, InputRequired, Length, NumberRange, Optional, ValidationError

from ihsm.models import ExpenseCategory, MatchStatus, RevenueType, SportType
from ihsm.services.access_gate import MAX_SECRET_BYTES, MIN_SECRET_LENGTH

SPORT_CHOICES = [(sport.value, sport.label) for sport in SportType]


def _money(value):
    if value is None:
        return None
    return Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class ApiForm(FlaskForm):
    """JSON endpoints authenticate by session cookie, not CSRF token."""

    class Meta:
        csrf = False


class LoginForm(ApiForm):
    email = EmailField("Email", validators=[DataRequired(), Email()])
    password = PasswordField("Password", validators=[DataRequired()])
    remember_me = BooleanField("Remember me")


class HostelForm(ApiForm):
    name = StringField("Hostel Name", validators=[DataRequired(), Length(min=2, max=255)])

    total_students = IntegerField(
        "Total Students",
        validators=[InputRequired(), NumberRange(min=0, message="Total students cannot be negative")],
    )

    password = PasswordField(
        "Dashboard Password",
        validators=[
            DataRequired(),
            Length(min=MIN_SECRET_LENGTH, message=f"Password must be at least {MIN_SECRET_LENGTH} characters long"),
        ],
    )

    cricket = BooleanField("Cricket")
    volleyball = BooleanField("Volleyball")
    kabaddi = BooleanField("Kabaddi")

    def validate_password(self, field):
        if field.data and len(field.data.encode('utf-8')) > MAX_SECRET_BYTES:
            raise ValidationError(f"Password cannot be longer than {MAX_SECRET_BYTES} bytes")

    @property
    def sports(self) -> dict[str, bool]:
        return {sport.value: bool(getattr(self, sport.value).data) for sport in SportType}

    def validate(self, extra_validators=None):
        if not super().validate(extra_validators):
            return False
        if not any(self.sports.values()):
            self.form_errors.append("Select at least one sport")
            return False
        return True


class HostelUpdateForm(HostelForm):
    # Leave blank to keep the current dashboard password
    password = PasswordField(
        "Dashboard Password",
        validators=[
            Optional(),
            Length(min=MIN_SECRET_LENGTH, message=f"Password must be at least {MIN_SECRET_LENGTH} characters long"),
        ],
    )


class UnlockForm(ApiForm):
    password = PasswordField("Dashboard Password", validators=[Optional()])


class TeamForm(ApiForm):
    sport = SelectField("Sport", choices=SPORT_CHOICES, validators=[DataRequired()])
    name = StringField("Team Name", validators=[Optional(), Length(max=255)])
    max_players = IntegerField(
        "Maximum Players",
        default=15,
        validators=[Optional(), NumberRange(min=1, max=50)],
    )


class TeamUpdateForm(ApiForm):
    name = StringField("Team Name", validators=[Optional(), Length(min=2, max=255)])
    max_players = IntegerField("Maximum Players", validators=[Optional(), NumberRange(min=1, max=50)])


class RegistrationLinkForm(ApiForm):
    expires_in_days = IntegerField(
        "Expires In (days)",
        validators=[Optional(), NumberRange(min=1, max=365)],
    )


class MatchForm(ApiForm):
    sport = SelectField("Sport", choices=SPORT_CHOICES, validators=[DataRequired()])
    team1_id = StringField("Team 1", validators=[DataRequired(), Length(max=36)])
    team2_id = StringField("Team 2", validators=[DataRequired(), Length(max=36)])
    match_date = DateField("Date", format='%Y-%m-%d', validators=[DataRequired()])
    start_time = TimeField("Start Time", format='%H:%M', validators=[DataRequired()])
    end_time = TimeField("End Time", format='%H:%M', validators=[DataRequired()])
    venue = StringField("Venue", validators=[DataRequired(), Length(max=255)])
    notes = TextAreaField("Notes", validators=[Optional(), Length(max=1000)])
    round_number = IntegerField("Round", validators=[Optional(), NumberRange(min=1)])
    match_number = IntegerField("Match Number", validators=[Optional(), NumberRange(min=1)])


class MatchResultForm(ApiForm):
    status = SelectField(
        "Status",
        choices=[(MatchStatus.COMPLETED.value, "Completed"), (MatchStatus.CANCELLED.value, "Cancelled")],
        validators=[DataRequired()],
    )
    winner = StringField("Winner", validators=[Optional(), Length(max=255)])


class VolunteerForm(ApiForm):
    name = StringField("Name", validators=[DataRequired(), Length(min=2, max=255)])
    role = StringField("Role", validators=[DataRequired(), Length(max=100)])
    contact_number = StringField("Contact Number", validators=[Optional(), Length(max=32)])
    email = EmailField("Email", validators=[Optional(), Email()])
    assigned_sport = SelectField(
        "Assigned Sport",
        choices=[('', 'Any')] + SPORT_CHOICES,
        validators=[Optional()],
    )


class ExpenseForm(ApiForm):
    description = StringField("Description", validators=[DataRequired(), Length(max=500)])
    amount = DecimalField(
        "Amount",
        places=2,
        filters=[_money],
        validators=[InputRequired(), NumberRange(min=0, message="Amount cannot be negative")],
    )
    category = SelectField(
        "Category",
        choices=[(c.value, c.value.capitalize()) for c in ExpenseCategory],
        default=ExpenseCategory.OTHER.value,
    )
    expense_date = DateField("Date", format='%Y-%m-%d', validators=[DataRequired()])


class BudgetForm(ApiForm):
    total_amount = DecimalField(
        "Total Budget",
        places=2,
        filters=[_money],
        validators=[InputRequired(), NumberRange(min=0, message="Budget amount cannot be negative")],
    )
    start_date = DateField("Start Date", format='%Y-%m-%d', validators=[DataRequired()])
    end_date = DateField("End Date", format='%Y-%m-%d', validators=[DataRequired()])
    sponsor_name = StringField("Sponsor Name", validators=[Optional(), Length(max=255)])
    sponsor_amount = DecimalField(
        "Sponsorship Amount",
        places=2,
        filters=[_money],
        validators=[Optional(), NumberRange(min=0, message="Sponsor amount cannot be negative")],
    )

    def validate_end_date(self, field):
        if self.start_date.data and field.data and field.data < self.start_date.data:
            raise ValidationError("End date must be on or after the start date")


class RevenueForm(ApiForm):
    event_name = StringField("Event", validators=[DataRequired(), Length(max=255)])
    amount = DecimalField(
        "Amount",
        places=2,
        filters=[_money],
        validators=[InputRequired(), NumberRange(min=0, message="Amount cannot be negative")],
    )
    revenue_type = SelectField(
        "Type",
        choices=[(t.value, t.value.replace('_', ' ').capitalize()) for t in RevenueType],
        default=RevenueType.OTHER.value,
    )
    revenue_date = DateField("Date", format='%Y-%m-%d', validators=[DataRequired()])
    notes = TextAreaField("Notes", validators=[Optional(), Length(max=1000)])


__all__ = [
    "ApiForm",
    "BudgetForm",
    "ExpenseForm",
    "HostelForm",
    "HostelUpdateForm",
    "LoginForm",
    "MatchForm",
    "MatchResultForm",
    "RegistrationLinkForm",
    "RevenueForm",
    "SPORT_CHOICES",
    "TeamForm",
    "TeamUpdateForm",
    "UnlockForm",
    "VolunteerForm",
]
