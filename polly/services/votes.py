"""
Voting and tallies.

A voter gets one vote per poll. That rule is enforced by the unique
constraint on votes (poll_id, voter_id) alone: cast_vote never looks for an
existing vote first, it inserts and translates the constraint violation.
Tallies are always recomputed from the vote rows.
"""

from typing import Optional
import logging

from sqlalchemy import and_, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from polly.core.constants import ErrorMessages
from polly.core.errors import (
    AuthenticationError,
    DuplicateVoteError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from polly.core.revalidation import view_revalidator
from polly.db.constraints import VOTE_PER_POLL, is_foreign_key_violation, is_unique_violation
from polly.models.polls import Poll, PollOption, Vote
from polly.schemas.poll import OptionTally, PollResults

logger = logging.getLogger(__name__)


def _ensure_poll_exists(db: Session, poll_id: int) -> None:
    if db.query(Poll.id).filter(Poll.id == poll_id).first() is None:
        raise NotFoundError(ErrorMessages.POLL_NOT_FOUND)


def cast_vote(db: Session, poll_id: int, option_id: int, voter_id: Optional[int]) -> Vote:
    """Record one vote of ``voter_id`` for ``option_id`` on ``poll_id``.

    Raises:
        AuthenticationError: no voter.
        NotFoundError: unknown poll, or the option was deleted while voting.
        ValidationError: the option is not an option of this poll.
        DuplicateVoteError: the voter already voted on this poll.
        StorageError: any other store failure.
    """
    if voter_id is None:
        raise AuthenticationError()

    try:
        _ensure_poll_exists(db, poll_id)

        option_poll_id = db.query(PollOption.poll_id).filter(PollOption.id == option_id).scalar()
        if option_poll_id != poll_id:
            logger.warning(f"User {voter_id} tried to vote on poll {poll_id} with foreign option {option_id}")
            raise ValidationError(ErrorMessages.OPTION_NOT_IN_POLL)

        vote = Vote(poll_id=poll_id, option_id=option_id, voter_id=voter_id)
        db.add(vote)
        db.commit()
    except (NotFoundError, ValidationError):
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e, VOTE_PER_POLL):
            logger.info(f"User {voter_id} already voted on poll {poll_id}")
            raise DuplicateVoteError() from e
        if is_foreign_key_violation(e):
            logger.warning(f"Option {option_id} of poll {poll_id} disappeared before the vote was stored")
            raise NotFoundError(ErrorMessages.OPTION_GONE) from e
        logger.error(f"Unexpected integrity error recording vote on poll {poll_id}: {e}")
        raise StorageError() from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error recording vote on poll {poll_id}: {e}")
        raise StorageError() from e

    db.refresh(vote)
    logger.info(f"Vote {vote.id} recorded: user {voter_id} -> option {option_id} of poll {poll_id}")
    view_revalidator.revalidate_poll_votes(poll_id)
    return vote


def tally_votes(db: Session, poll_id: int) -> PollResults:
    """Count the votes of every option, including options nobody voted for."""
    _ensure_poll_exists(db, poll_id)

    rows = (
        db.query(PollOption.id, PollOption.text, func.count(Vote.id))
        .outerjoin(Vote, and_(Vote.option_id == PollOption.id, Vote.poll_id == PollOption.poll_id))
        .filter(PollOption.poll_id == poll_id)
        .group_by(PollOption.id, PollOption.text)
        .order_by(PollOption.id)
        .all()
    )

    options = [OptionTally(option_id=option_id, text=text, vote_count=count) for option_id, text, count in rows]
    return PollResults(
        poll_id=poll_id,
        options=options,
        total_votes=sum(option.vote_count for option in options),
    )


def get_user_vote(db: Session, poll_id: int, voter_id: int) -> Optional[Vote]:
    """The vote ``voter_id`` cast on ``poll_id``, if any."""
    _ensure_poll_exists(db, poll_id)
    return db.query(Vote).filter(Vote.poll_id == poll_id, Vote.voter_id == voter_id).first()
