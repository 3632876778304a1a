"""
Exception hierarchy for LexLingo.

Validation failures are raised before any store write. Store failures wrap
the underlying sqlite3 error. Absence (no profile, no progress row) is never
an exception; getters return None and callers apply defaults.
"""


class LexLingoError(Exception):
    """Base class for all LexLingo errors."""


class ValidationError(LexLingoError, ValueError):
    """Input rejected before any state change."""


class InvalidAmount(ValidationError):
    """Negative XP amount."""


class NoAnswerSelected(ValidationError):
    """Answer check requested without a selected option."""


class OperationPending(ValidationError):
    """A store write guarding this transition is still running."""


class Unauthenticated(LexLingoError):
    """Operation requires a signed-in user."""


class AuthError(LexLingoError):
    """Sign-in or sign-up rejected."""


class TopicLocked(LexLingoError):
    """Topic prerequisites are not complete."""

    def __init__(self, topic_id: int):
        super().__init__(f"Topic {topic_id} is locked")
        self.topic_id = topic_id


class StoreError(LexLingoError):
    """Read or write failure at the persistence boundary."""
