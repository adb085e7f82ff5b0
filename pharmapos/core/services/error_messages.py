"""Map raw driver and runtime error text to operator-friendly wording."""

GENERIC_MESSAGE = "An error occurred. Please try again or contact support."
UNEXPECTED_MESSAGE = "An unexpected error occurred. Please try again."

# First case-insensitive substring match wins
ERROR_MAPPINGS: dict[str, str] = {
    "UNIQUE constraint failed": "This record already exists.",
    "duplicate key value violates unique constraint": "This record already exists.",
    "FOREIGN KEY constraint failed": "Cannot complete this action due to related records.",
    "violates foreign key constraint": "Cannot complete this action due to related records.",
    "CHECK constraint failed": "One of the values is outside the allowed range.",
    "NOT NULL constraint failed": "Please fill in all required fields.",
    "Missing required fields": "Please fill in all required fields.",
    "database is locked": "The database is busy. Please try again in a moment.",
    "no such table": "Database setup incomplete. Please contact your system administrator.",
    "unable to open database file": (
        "Unable to open the database. Please check the data directory or contact support."
    ),
    "disk I/O error": "The database could not be written. Please contact support.",
    "Insufficient permissions": "You do not have permission to perform this action.",
    "permission denied": "You do not have permission to access this resource.",
    "connection refused": "Database connection failed. Please try again or contact support.",
    "Timeout": "The operation took too long. Please try again.",
}


def _format(message: str) -> str:
    lowered = message.lower()
    for key, friendly in ERROR_MAPPINGS.items():
        if key.lower() in lowered:
            return friendly

    if len(message) > 100:
        return GENERIC_MESSAGE
    return message


def get_error_message(error: object) -> str:
    """
    Friendly message for an exception or raw error string.

    Unmapped messages are returned unchanged unless longer than 100
    characters, which are replaced with a generic message.
    """
    if isinstance(error, str):
        return _format(error)
    if isinstance(error, BaseException):
        message = getattr(error, "message", None) or str(error)
        if message:
            return _format(message)
    return UNEXPECTED_MESSAGE
