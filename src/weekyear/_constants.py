"""Internal constants shared across the library."""

BASE_URL = "http://localhost:3000"
USER_AGENT = "weekyear-python/0"
TRPC_PATH = "/api/trpc"
SESSION_COOKIE_NAME = "app_session_id"

# ------------------------------------------------------------------
# Auto-save defaults
# ------------------------------------------------------------------

DEFAULT_DEBOUNCE_MS = 800
DEFAULT_UNDO_WINDOW_MS = 10_000
SAVED_DECAY_MS = 2_000
UNDO_TICK_MS = 1_000

OFFLINE_STORAGE_PREFIX = "12wy_offline_"
MAX_PENDING_CHANGES = 5

# ------------------------------------------------------------------
# 12 Week Year cycle shape
# ------------------------------------------------------------------

WEEKS_PER_CYCLE = 12
# Week 13 is the review week that closes a cycle.
MAX_WEEK_NUMBER = WEEKS_PER_CYCLE + 1
DAYS_PER_WEEK = 7

ON_TARGET_THRESHOLD = 85.0
BELOW_TARGET_THRESHOLD = 70.0
