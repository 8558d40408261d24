"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 15
DEFAULT_SESSION_COOKIE_NAME = "token"
SESSION_TOKEN_SALT = "dojo-portal-session"

MIN_PASSWORD_LENGTH = 6

# DECIMAL(10,2) upper bound for payment amounts.
MAX_AMOUNT_DIGITS = 8

UNKNOWN_OWNER_NAME = "Unknown"

# Column sizes from database/schema.sql; longer input is a field error, not a storage failure.
MAX_NAME_LENGTH = 150
MAX_USERNAME_LENGTH = 100
MAX_EMAIL_LENGTH = 255
MAX_PHONE_LENGTH = 50
MAX_URL_LENGTH = 500
MAX_TRANSACTION_ID_LENGTH = 100
