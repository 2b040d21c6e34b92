"""Routes for the tournament blueprint."""

from __future__ import annotations

from typing import Any

from flask import current_app, g, jsonify

from squadgo.auth.decorators import login_required
from squadgo.errors import ValidationError
from squadgo.extensions import backend
from squadgo.utils import as_utc, to_json

from . import bp
from .forms import ReportMatchForm, TournamentForm, VerifyMatchForm
from .models import MatchReport, TournamentSubmission


@bp.route("/", methods=["POST"])
@login_required
def create_tournament() -> Any:
    """Create a new tournament in registration."""
    form = TournamentForm()
    if not form.validate_on_submit():
        raise ValidationError("Invalid tournament request.", errors=form.errors)

    submission = TournamentSubmission(
        name=form.name.data,
        game=form.game.data,
        max_participants=form.max_participants.data,
        registration_deadline=as_utc(form.registration_deadline.data),
        start_date=as_utc(form.start_date.data),
        format=form.format.data,
        description=form.description.data or "",
        entry_fee=form.entry_fee.data or 0.0,
        prize_pool=form.prize_pool.data or 0.0,
        rules=[rule for rule in form.rules.data or [] if rule.strip()],
    )
    tournament_id = backend.services.tournaments.create_tournament(
        g.user["uid"], submission
    )
    current_app.logger.info(f"Tournament {tournament_id} created")
    return jsonify({"tournamentId": tournament_id}), 201


@bp.route("/<string:tournament_id>", methods=["GET"])
@login_required
def view_tournament(tournament_id: str) -> Any:
    """Return a tournament with its participants and bracket."""
    tournament = backend.services.tournaments.get_tournament(tournament_id)
    return jsonify(to_json(tournament))


@bp.route("/<string:tournament_id>/join", methods=["POST"])
@login_required
def join_tournament(tournament_id: str) -> Any:
    """Register the caller for a tournament."""
    participant = backend.services.tournaments.join_tournament(
        tournament_id, g.user["uid"]
    )
    return jsonify({"success": True, "participant": to_json(participant)})


@bp.route("/<string:tournament_id>/bracket", methods=["POST"])
@login_required
def seed_bracket(tournament_id: str) -> Any:
    """Seed the bracket and start the tournament (organizer only)."""
    bracket = backend.services.tournaments.seed_bracket(tournament_id, g.user["uid"])
    return jsonify({"success": True, "bracket": to_json(bracket)})


@bp.route("/<string:tournament_id>/matches", methods=["GET"])
@login_required
def list_matches(tournament_id: str) -> Any:
    """List the tournament's matches."""
    matches = backend.services.tournaments.list_tournament_matches(tournament_id)
    return jsonify({"matches": to_json(matches)})


@bp.route("/<string:tournament_id>/matches/<string:match_id>/report", methods=["POST"])
@login_required
def report_match(tournament_id: str, match_id: str) -> Any:
    """Report the result of a match the caller played."""
    form = ReportMatchForm()
    if not form.validate_on_submit():
        raise ValidationError("Invalid match report.", errors=form.errors)

    report = MatchReport(
        winner_id=form.winner_id.data,
        score=form.score.data,
        proof=form.proof.data or None,
    )
    result = backend.services.tournaments.report_match(
        tournament_id, match_id, g.user["uid"], report
    )
    return jsonify({"success": True, "result": to_json(result)})


@bp.route("/<string:tournament_id>/matches/<string:match_id>/verify", methods=["POST"])
@login_required
def verify_match(tournament_id: str, match_id: str) -> Any:
    """Approve or dispute a reported result (organizer only)."""
    form = VerifyMatchForm()
    if not form.validate_on_submit():
        raise ValidationError("Invalid verification.", errors=form.errors)

    match = backend.services.tournaments.verify_match(
        tournament_id, match_id, g.user["uid"], form.approved.data
    )
    return jsonify({"success": True, "match": to_json(match)})
