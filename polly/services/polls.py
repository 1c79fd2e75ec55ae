"""
Poll lifecycle: creation, full-replacement editing, deletion and reads.

Every function takes the session and the acting user's id explicitly. Each
mutation is a single transaction: it either commits completely or is rolled
back, and view revalidation only happens after a successful commit.
"""

from typing import List, Optional, Sequence, Tuple
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from polly.api.v1.utils.pagination import PaginationParams, apply_pagination, apply_search
from polly.core.constants import ErrorMessages
from polly.core.errors import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from polly.core.revalidation import view_revalidator
from polly.db.constraints import OPTION_TEXT_PER_POLL, is_unique_violation
from polly.models.comment import Comment
from polly.models.polls import Poll, PollOption, Vote
from polly.models.user import User
from polly.schemas.poll import PollDetail, PollRead, PollSummary
from polly.services.validation import PollInput, validate_poll_input
from polly.services.votes import tally_votes

logger = logging.getLogger(__name__)


def _new_options(poll_id: int, data: PollInput) -> List[PollOption]:
    return [
        PollOption(poll_id=poll_id, text=text, normalized_text=normalized)
        for text, normalized in zip(data.options, data.normalized_options)
    ]


def _translate_write_error(db: Session, exc: SQLAlchemyError, action: str) -> Exception:
    """Roll back and map a failed poll write onto the service error taxonomy."""
    db.rollback()
    if isinstance(exc, IntegrityError) and is_unique_violation(exc, OPTION_TEXT_PER_POLL):
        logger.warning(f"Duplicate option rejected by the database while trying to {action}")
        return ValidationError(ErrorMessages.DUPLICATE_OPTION)
    logger.error(f"Database error while trying to {action}: {exc}")
    return StorageError()


def _require_active_user(db: Session, user_id: Optional[int]) -> User:
    if user_id is None:
        raise AuthenticationError()
    user = db.get(User, user_id)
    if user is None or not user.is_active:
        logger.warning(f"Rejected poll write for unknown or inactive user {user_id}")
        raise AuthenticationError()
    return user


def _get_owned_poll(db: Session, poll_id: int, actor_id: Optional[int], denied_message: str) -> Poll:
    if actor_id is None:
        raise AuthenticationError()

    # lock the poll row for the rest of the transaction
    poll = db.query(Poll).filter(Poll.id == poll_id).with_for_update().first()
    if poll is None:
        raise NotFoundError(ErrorMessages.POLL_NOT_FOUND)

    if poll.owner_id != actor_id:
        logger.warning(f"User {actor_id} attempted to modify poll {poll_id} owned by user {poll.owner_id}")
        raise AuthorizationError(denied_message)
    return poll


def create_poll(db: Session, owner_id: Optional[int], title: str, description: Optional[str] = None,
                options: Sequence[str] = ()) -> Poll:
    """Create a poll and all of its options in one transaction.

    Raises:
        AuthenticationError: no owner, or the owner is not an active user.
        ValidationError: invalid title, description or options.
        StorageError: the store failed; nothing was written.
    """
    if owner_id is None:
        raise AuthenticationError()

    data = validate_poll_input(title, description, options)

    try:
        _require_active_user(db, owner_id)
        logger.info(f"User {owner_id} creating poll '{data.title}' with {len(data.options)} options")

        poll = Poll(title=data.title, description=data.description, owner_id=owner_id)
        db.add(poll)
        db.flush()

        db.add_all(_new_options(poll.id, data))
        db.commit()
    except AuthenticationError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        raise _translate_write_error(db, e, "create a poll") from e

    db.refresh(poll)
    logger.info(f"Poll created successfully: ID {poll.id}, Title: '{poll.title}'")
    view_revalidator.revalidate_poll_paths()
    return poll


def update_poll(db: Session, poll_id: int, actor_id: Optional[int], title: str,
                description: Optional[str] = None, options: Sequence[str] = ()) -> Poll:
    """Replace a poll's title, description and complete option set.

    The old options and every vote cast on them are deleted, so editing a
    poll resets its results.
    """
    data = validate_poll_input(title, description, options)

    try:
        poll = _get_owned_poll(db, poll_id, actor_id, ErrorMessages.NOT_AUTHORIZED_UPDATE)
        logger.info(f"User {actor_id} replacing poll {poll_id} with {len(data.options)} options")

        db.query(Vote).filter(Vote.poll_id == poll_id).delete(synchronize_session="fetch")
        db.query(PollOption).filter(PollOption.poll_id == poll_id).delete(synchronize_session="fetch")
        db.expire(poll, ["options"])

        poll.title = data.title
        poll.description = data.description
        poll.updated_at = func.now()

        db.add_all(_new_options(poll_id, data))
        db.commit()
    except (AuthenticationError, AuthorizationError, NotFoundError):
        db.rollback()
        raise
    except SQLAlchemyError as e:
        raise _translate_write_error(db, e, f"update poll {poll_id}") from e

    db.refresh(poll)
    logger.info(f"Poll {poll_id} updated; previous votes were cleared")
    view_revalidator.revalidate_poll_paths(poll_id)
    return poll


def delete_poll(db: Session, poll_id: int, actor_id: Optional[int]) -> None:
    """Delete a poll with its options, votes and comments."""
    try:
        _get_owned_poll(db, poll_id, actor_id, ErrorMessages.NOT_AUTHORIZED_DELETE)
        logger.info(f"User {actor_id} deleting poll {poll_id}")

        db.query(Vote).filter(Vote.poll_id == poll_id).delete(synchronize_session="fetch")
        db.query(PollOption).filter(PollOption.poll_id == poll_id).delete(synchronize_session="fetch")
        db.query(Comment).filter(Comment.poll_id == poll_id).delete(synchronize_session="fetch")
        db.query(Poll).filter(Poll.id == poll_id).delete(synchronize_session="fetch")
        db.commit()
    except (AuthenticationError, AuthorizationError, NotFoundError):
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error deleting poll {poll_id}: {e}")
        raise StorageError() from e

    logger.info(f"Poll {poll_id} deleted")
    view_revalidator.revalidate_poll_paths(poll_id)


def get_poll(db: Session, poll_id: int) -> Poll:
    poll = db.get(Poll, poll_id)
    if poll is None:
        raise NotFoundError(ErrorMessages.POLL_NOT_FOUND)
    return poll


def get_poll_detail(db: Session, poll_id: int) -> PollDetail:
    """A poll with its options tallied from the stored votes."""
    poll = get_poll(db, poll_id)
    results = tally_votes(db, poll_id)
    return PollDetail(
        **PollRead.model_validate(poll).model_dump(),
        options=results.options,
        total_votes=results.total_votes,
    )


def list_polls(db: Session, pagination: PaginationParams, search: Optional[str] = None,
               owner_id: Optional[int] = None) -> Tuple[List[PollSummary], int]:
    """Newest polls first, each with its option and vote counts.

    Returns the requested page and the total number of matching polls.
    """
    options_count = (
        select(PollOption.poll_id, func.count(PollOption.id).label("options_count"))
        .group_by(PollOption.poll_id)
        .subquery()
    )
    votes_count = (
        select(Vote.poll_id, func.count(Vote.id).label("votes_count"))
        .group_by(Vote.poll_id)
        .subquery()
    )

    query = db.query(Poll)
    if owner_id is not None:
        query = query.filter(Poll.owner_id == owner_id)
    query = apply_search(query, search, [Poll.title])

    total = query.count()

    rows = apply_pagination(
        query.add_columns(
            func.coalesce(options_count.c.options_count, 0),
            func.coalesce(votes_count.c.votes_count, 0),
        )
        .outerjoin(options_count, options_count.c.poll_id == Poll.id)
        .outerjoin(votes_count, votes_count.c.poll_id == Poll.id)
        .order_by(Poll.created_at.desc(), Poll.id.desc()),
        pagination,
    ).all()

    summaries = [
        PollSummary(
            **PollRead.model_validate(poll).model_dump(),
            options_count=n_options,
            votes_count=n_votes,
        )
        for poll, n_options, n_votes in rows
    ]
    return summaries, total
