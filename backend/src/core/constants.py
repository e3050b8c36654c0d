"""Application constants and configuration values."""

from core.config import FRONTEND_URL

# Database field lengths
MAX_STRING_LENGTH = 255
MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 1000

# Database connection settings
DB_POOL_RECYCLE_SECONDS = 300  # 5 minutes

_CORS_ORIGINS_RAW = [
    "http://localhost:3000",
    FRONTEND_URL,
]

CORS_ORIGINS = [origin for origin in _CORS_ORIGINS_RAW if origin and origin.strip()]

# Appointment statuses
STATUS_PENDING = "pending"
STATUS_CONFIRMED = "confirmed"
STATUS_REJECTED = "rejected"
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"

APPOINTMENT_STATUSES = frozenset({
    STATUS_PENDING,
    STATUS_CONFIRMED,
    STATUS_REJECTED,
    STATUS_COMPLETED,
    STATUS_CANCELLED,
})

# Statuses that make an identical booking a duplicate
DUPLICATE_BLOCKING_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED, STATUS_COMPLETED)

# Siblings removed when a slot is confirmed
DUPLICATE_CLEANUP_STATUSES = (STATUS_PENDING, STATUS_CANCELLED)

# Freed slots that a waitlisted client can take over
REASSIGNABLE_STATUSES = (STATUS_REJECTED, STATUS_CANCELLED)

# Staff-driven transitions. Completed appointments are locked.
STATUS_TRANSITIONS = {
    STATUS_PENDING: frozenset({STATUS_CONFIRMED, STATUS_REJECTED, STATUS_CANCELLED}),
    STATUS_CONFIRMED: frozenset({STATUS_COMPLETED, STATUS_CANCELLED, STATUS_PENDING}),
    STATUS_REJECTED: frozenset({STATUS_PENDING}),
    STATUS_CANCELLED: frozenset({STATUS_PENDING}),
    STATUS_COMPLETED: frozenset(),
}

# Employee roles
ROLE_BOSS = "boss"
ROLE_STAFF = "staff"
EMPLOYEE_ROLES = frozenset({ROLE_BOSS, ROLE_STAFF})

# Confirmation token types
TOKEN_TYPE_CONFIRM = "confirm"
TOKEN_TYPE_DELETE = "delete"
TOKEN_TYPE_CHANGE = "change"
TOKEN_TYPE_WAITLIST = "waitlist"

TOKEN_TYPES = frozenset({
    TOKEN_TYPE_CONFIRM,
    TOKEN_TYPE_DELETE,
    TOKEN_TYPE_CHANGE,
    TOKEN_TYPE_WAITLIST,
})

# Token actions
ACTION_CONFIRM = "confirm"
ACTION_REJECT = "reject"
TOKEN_ACTIONS = frozenset({ACTION_CONFIRM, ACTION_REJECT})

# Waitlist links fall back to this lifetime when the slot has no start
WAITLIST_TOKEN_FALLBACK_HOURS = 24

MINUTES_PER_DAY = 24 * 60

UPCOMING_APPOINTMENTS_LIMIT = 200

# Webhook events
EVENT_CANCELLATION_CONFIRMED = "appointment.cancellation_confirmed"
EVENT_CHANGE_CONFIRMED = "appointment.change_confirmed"
