"""
Named database constraints and helpers to recognise their violations.

PostgreSQL reports the constraint name in the error message; SQLite reports
the constrained columns ("UNIQUE constraint failed: votes.poll_id, votes.voter_id").
Each constraint is matched on either form.
"""

from typing import NamedTuple

from sqlalchemy.exc import IntegrityError


class UniqueConstraintSpec(NamedTuple):
    name: str
    table: str
    columns: tuple

    @property
    def sqlite_signature(self) -> str:
        return ", ".join(f"{self.table}.{column}" for column in self.columns)


VOTE_PER_POLL = UniqueConstraintSpec("uq_votes_poll_voter", "votes", ("poll_id", "voter_id"))
OPTION_TEXT_PER_POLL = UniqueConstraintSpec(
    "uq_poll_options_poll_normalized", "poll_options", ("poll_id", "normalized_text")
)
OPTION_ID_POLL = UniqueConstraintSpec("uq_poll_options_id_poll", "poll_options", ("id", "poll_id"))
USER_EMAIL = UniqueConstraintSpec("uq_users_email", "users", ("email",))

VOTE_OPTION_FK = "fk_votes_option_poll"


def _message(exc: IntegrityError) -> str:
    return str(exc.orig) if exc.orig is not None else str(exc)


def is_unique_violation(exc: IntegrityError, constraint: UniqueConstraintSpec) -> bool:
    message = _message(exc)
    if constraint.name in message:
        return True
    return "UNIQUE constraint failed" in message and constraint.sqlite_signature in message


def is_foreign_key_violation(exc: IntegrityError) -> bool:
    message = _message(exc).lower()
    return "foreign key" in message
