"""Global constants for the squadgo application."""

# Collection names
USERS_COLLECTION = "users"
TICKETS_COLLECTION = "matchTickets"
MATCHES_COLLECTION = "matches"
TOURNAMENTS_COLLECTION = "tournaments"
TOURNAMENT_MATCHES_SUBCOLLECTION = "matches"
NOTIFICATIONS_COLLECTION = "notifications"

# Skill tiers, lowest to highest
SKILL_TIERS = {
    "bronze": 1,
    "silver": 2,
    "gold": 3,
    "platinum": 4,
    "diamond": 5,
    "crown": 6,
    "ace": 7,
    "conqueror": 8,
}
MAX_SKILL_TIER_DISTANCE = 1

# Sentinel accepted by both the language and role rules
ANY = "any"

# Ticket statuses
TICKET_ACTIVE = "active"
TICKET_MATCHED = "matched"
TICKET_EXPIRED = "expired"
TICKET_CANCELLED = "cancelled"
TERMINAL_TICKET_STATUSES = frozenset({TICKET_MATCHED, TICKET_EXPIRED, TICKET_CANCELLED})

MATCH_STATUS_MATCHED = "matched"

# Ticket lifetime, in seconds
DEFAULT_MAX_WAIT_SECONDS = 300
MIN_MAX_WAIT_SECONDS = 30
MAX_MAX_WAIT_SECONDS = 3600

# Job sizing
IMMEDIATE_CANDIDATE_LIMIT = 10
PAIRING_BATCH_LIMIT = 100
EXPIRATION_BATCH_LIMIT = 100
PAIRING_INTERVAL_SECONDS = 30
EXPIRATION_INTERVAL_SECONDS = 300

# Tournament statuses
TOURNAMENT_REGISTRATION = "registration"
TOURNAMENT_ACTIVE = "active"
TOURNAMENT_COMPLETED = "completed"
TOURNAMENT_DISPUTED = "disputed"

SINGLE_ELIMINATION = "single-elimination"
MIN_TOURNAMENT_PARTICIPANTS = 2
# Seeding writes every round-1 match in one transaction (500 writes max).
MAX_TOURNAMENT_PARTICIPANTS = 256

# Tournament match statuses
TMATCH_ACTIVE = "active"
TMATCH_REPORTED = "reported"
TMATCH_COMPLETED = "completed"
TMATCH_DISPUTED = "disputed"

# Result verification statuses
PENDING_VERIFICATION = "pending_verification"
VERIFIED = "verified"
DISPUTED = "disputed"

# Notification types
NOTIFY_MATCH_FOUND = "match_found"
NOTIFY_TOURNAMENT_JOINED = "tournament_joined"
NOTIFY_TOURNAMENT_STATUS_CHANGE = "tournament_status_change"
