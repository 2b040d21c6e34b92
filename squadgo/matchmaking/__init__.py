"""The matchmaking blueprint."""

from flask import Blueprint

bp = Blueprint("matchmaking", __name__, url_prefix="/matchmaking")

from . import routes  # noqa: E402
from .models import Match, MatchTicket, TicketSubmission  # noqa: E402
from .services import MatchmakingService  # noqa: E402

__all__ = ["Match", "MatchTicket", "MatchmakingService", "TicketSubmission", "routes"]
