"""Routes for the matchmaking blueprint."""

from __future__ import annotations

from typing import Any

from flask import current_app, g, jsonify

from squadgo.auth.decorators import login_required
from squadgo.errors import ValidationError
from squadgo.extensions import backend
from squadgo.utils import to_json

from . import bp
from .forms import TicketForm
from .models import TicketSubmission


@bp.route("/tickets", methods=["POST"])
@login_required
def submit_ticket() -> Any:
    """Open a matchmaking ticket and try to pair it immediately."""
    form = TicketForm()
    if not form.validate_on_submit():
        raise ValidationError("Invalid matchmaking request.", errors=form.errors)

    submission = TicketSubmission(
        game=form.game.data,
        region=form.region.data,
        game_mode=form.game_mode.data,
        skill_tier=form.skill_tier.data,
        preferred_roles=form.preferred_roles.data or [],
        language=form.language.data,
        mic_required=form.mic_required.data,
        max_wait_time=form.max_wait_time.data
        or current_app.config["DEFAULT_MAX_WAIT_SECONDS"],
    )
    ticket = backend.services.matchmaking.submit_ticket(g.user["uid"], submission)
    current_app.logger.info(f"Matchmaking ticket {ticket['id']} opened")
    return (
        jsonify(
            {
                "ticketId": ticket["id"],
                "status": ticket["status"],
                "matchId": ticket.get("matchId"),
            }
        ),
        201,
    )


@bp.route("/tickets/active", methods=["GET"])
@login_required
def active_ticket() -> Any:
    """Return the caller's active ticket, or null."""
    ticket = backend.services.matchmaking.get_active_ticket(g.user["uid"])
    return jsonify({"ticket": to_json(ticket)})


@bp.route("/tickets/<string:ticket_id>", methods=["GET"])
@login_required
def view_ticket(ticket_id: str) -> Any:
    """Return one of the caller's tickets."""
    ticket = backend.services.matchmaking.get_ticket(g.user["uid"], ticket_id)
    return jsonify(to_json(ticket))


@bp.route("/tickets/<string:ticket_id>/cancel", methods=["POST"])
@login_required
def cancel_ticket(ticket_id: str) -> Any:
    """Withdraw the caller's active ticket."""
    ticket = backend.services.matchmaking.cancel_ticket(g.user["uid"], ticket_id)
    return jsonify({"ticketId": ticket["id"], "status": ticket["status"]})


@bp.route("/matches/<string:match_id>", methods=["GET"])
@login_required
def view_match(match_id: str) -> Any:
    """Return a match the caller takes part in."""
    match = backend.services.matchmaking.get_match(g.user["uid"], match_id)
    return jsonify(to_json(match))
