"""Forms for the matchmaking blueprint."""

from flask_wtf import FlaskForm  # type: ignore
from wtforms import (
    BooleanField,
    IntegerField,
    SelectField,
    SelectMultipleField,
    StringField,
)
from wtforms.validators import DataRequired, NumberRange, Optional

from squadgo.core.constants import (
    MAX_MAX_WAIT_SECONDS,
    MIN_MAX_WAIT_SECONDS,
    SKILL_TIERS,
)


def _lower(value):
    return value.strip().lower() if isinstance(value, str) else value


class TicketForm(FlaskForm):
    """JSON body of a matchmaking ticket request."""

    class Meta:
        csrf = False

    game = StringField("Game", validators=[DataRequired()])
    region = StringField("Region", validators=[DataRequired()])
    game_mode = StringField("Game Mode", validators=[DataRequired()])
    skill_tier = SelectField(
        "Skill Tier",
        choices=[(tier, tier.title()) for tier in SKILL_TIERS],
        filters=[_lower],
        validators=[DataRequired()],
    )
    preferred_roles = SelectMultipleField("Preferred Roles", validate_choice=False)
    language = StringField("Language", default="en", filters=[_lower])
    mic_required = BooleanField("Mic Required", default=False)
    max_wait_time = IntegerField(
        "Max Wait Time",
        validators=[
            Optional(),
            NumberRange(min=MIN_MAX_WAIT_SECONDS, max=MAX_MAX_WAIT_SECONDS),
        ],
    )
