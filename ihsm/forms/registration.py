"""Player forms for managers and for public self-registration."""

from __future__ import annotations

from flask_wtf import FlaskForm
from flask_wtf.file import FileAllowed, FileField
from wtforms import IntegerField, SelectField, StringField, TelField
from wtforms.validators import DataRequired, InputRequired, Length, NumberRange, Optional, Regexp, URL

from ihsm.models import TShirtSize

MOBILE_MESSAGE = "Please enter a valid 10-digit mobile number"

TSHIRT_CHOICES = [(size.value, size.value) for size in TShirtSize]


class PlayerForm(FlaskForm):
    """Roster entry added or edited by the team's manager."""

    class Meta:
        csrf = False

    name = StringField(
        "Full Name",
        validators=[DataRequired(), Length(min=2, max=255)],
    )

    role = StringField(
        "Role",
        validators=[DataRequired(), Length(max=100)],
        render_kw={"placeholder": "e.g. Batsman, Setter, Raider"}
    )

    jersey_number = IntegerField(
        "Jersey Number",
        validators=[InputRequired(), NumberRange(min=0, max=999)],
    )

    mobile_number = TelField(
        "Mobile Number",
        validators=[DataRequired(), Regexp(r'^[0-9]{10}$', message=MOBILE_MESSAGE)],
        render_kw={"placeholder": "10-digit mobile number"}
    )

    tshirt_size = SelectField(
        "T-shirt Size",
        choices=TSHIRT_CHOICES,
        validators=[DataRequired()],
    )

    photo_url = StringField(
        "Photo URL",
        validators=[Optional(), URL(), Length(max=512)],
    )


class PlayerRegistrationForm(PlayerForm):
    """Self-registration submitted through a team's registration link."""

    photo_url = None

    player_photo = FileField(
        "Player Photo",
        validators=[Optional(), FileAllowed(['jpg', 'jpeg', 'png', 'gif', 'webp'], 'Please upload an image file')],
    )


__all__ = ["MOBILE_MESSAGE", "PlayerForm", "PlayerRegistrationForm"]
