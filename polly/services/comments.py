"""Comments on polls. Only the author may edit a comment; the author or an admin may delete it."""

from typing import List, Optional
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from polly.core.constants import ErrorMessages
from polly.core.errors import AuthenticationError, AuthorizationError, NotFoundError, StorageError
from polly.core.revalidation import view_revalidator
from polly.models.comment import Comment
from polly.models.polls import Poll
from polly.services.validation import validate_comment_content

logger = logging.getLogger(__name__)


def _get_comment(db: Session, comment_id: int) -> Comment:
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise NotFoundError(ErrorMessages.COMMENT_NOT_FOUND)
    return comment


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error while trying to {action}: {e}")
        raise StorageError() from e


def create_comment(db: Session, poll_id: int, author_id: Optional[int], content: str) -> Comment:
    if author_id is None:
        raise AuthenticationError()
    text = validate_comment_content(content)

    if db.get(Poll, poll_id) is None:
        raise NotFoundError(ErrorMessages.POLL_NOT_FOUND)

    comment = Comment(poll_id=poll_id, author_id=author_id, content=text)
    db.add(comment)
    _commit(db, f"comment on poll {poll_id}")
    db.refresh(comment)

    logger.info(f"User {author_id} commented on poll {poll_id} (comment {comment.id})")
    view_revalidator.revalidate_poll_comments(poll_id)
    return comment


def update_comment(db: Session, comment_id: int, actor_id: Optional[int], content: str) -> Comment:
    if actor_id is None:
        raise AuthenticationError()
    text = validate_comment_content(content)

    comment = _get_comment(db, comment_id)
    if comment.author_id != actor_id:
        logger.warning(f"User {actor_id} attempted to edit comment {comment_id} of user {comment.author_id}")
        raise AuthorizationError(ErrorMessages.NOT_AUTHORIZED_COMMENT)

    comment.content = text
    _commit(db, f"update comment {comment_id}")
    db.refresh(comment)

    view_revalidator.revalidate_poll_comments(comment.poll_id)
    return comment


def delete_comment(db: Session, comment_id: int, actor_id: Optional[int], is_admin: bool = False) -> None:
    if actor_id is None:
        raise AuthenticationError()

    comment = _get_comment(db, comment_id)
    if comment.author_id != actor_id and not is_admin:
        logger.warning(f"User {actor_id} attempted to delete comment {comment_id} of user {comment.author_id}")
        raise AuthorizationError(ErrorMessages.NOT_AUTHORIZED_COMMENT)

    poll_id = comment.poll_id
    db.delete(comment)
    _commit(db, f"delete comment {comment_id}")

    logger.info(f"Comment {comment_id} on poll {poll_id} deleted by user {actor_id}")
    view_revalidator.revalidate_poll_comments(poll_id)


def list_comments(db: Session, poll_id: int) -> List[Comment]:
    """Comments of a poll, newest first, with their authors loaded."""
    if db.get(Poll, poll_id) is None:
        raise NotFoundError(ErrorMessages.POLL_NOT_FOUND)

    return (
        db.query(Comment)
        .options(joinedload(Comment.author))
        .filter(Comment.poll_id == poll_id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .all()
    )
