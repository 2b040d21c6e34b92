"""Forms for the tournament blueprint."""

from flask_wtf import FlaskForm
from wtforms import (
    BooleanField,
    DateTimeField,
    FloatField,
    IntegerField,
    SelectField,
    SelectMultipleField,
    StringField,
    TextAreaField,
    ValidationError,
)
from wtforms.validators import DataRequired, NumberRange, Optional

from squadgo.core.constants import (
    MAX_TOURNAMENT_PARTICIPANTS,
    MIN_TOURNAMENT_PARTICIPANTS,
    SINGLE_ELIMINATION,
)

# ISO 8601 as sent by the clients, most specific first
DATETIME_FORMATS = [
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d",
]


class TournamentForm(FlaskForm):
    """Form for creating a tournament."""

    class Meta:
        csrf = False

    name = StringField("Tournament Name", validators=[DataRequired()])
    description = TextAreaField("Description", validators=[Optional()])
    game = StringField("Game", validators=[DataRequired()])
    format = SelectField(
        "Tournament Format",
        choices=[(SINGLE_ELIMINATION, "Single Elimination")],
        default=SINGLE_ELIMINATION,
    )
    max_participants = IntegerField(
        "Max Participants",
        validators=[
            DataRequired(),
            NumberRange(
                min=MIN_TOURNAMENT_PARTICIPANTS, max=MAX_TOURNAMENT_PARTICIPANTS
            ),
        ],
    )
    entry_fee = FloatField(
        "Entry Fee", default=0.0, validators=[Optional(), NumberRange(min=0)]
    )
    prize_pool = FloatField(
        "Prize Pool", default=0.0, validators=[Optional(), NumberRange(min=0)]
    )
    start_date = DateTimeField(
        "Start Date", format=DATETIME_FORMATS, validators=[DataRequired()]
    )
    registration_deadline = DateTimeField(
        "Registration Deadline", format=DATETIME_FORMATS, validators=[DataRequired()]
    )
    rules = SelectMultipleField("Rules", validate_choice=False)


class ReportMatchForm(FlaskForm):
    """Form for a participant reporting a match result."""

    class Meta:
        csrf = False

    winner_id = StringField("Winner", validators=[DataRequired()])
    score = StringField("Score", validators=[DataRequired()])
    proof = StringField("Proof", validators=[Optional()])


class VerifyMatchForm(FlaskForm):
    """Form for the organizer approving or disputing a reported result."""

    class Meta:
        csrf = False

    approved = BooleanField("Approved")

    def validate_approved(self, field):
        """The decision must be explicit; a missing value is not a dispute."""
        if not field.raw_data:
            raise ValidationError("This field is required.")
