from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from polly.db.database import get_db
from polly.models.user import User
from polly.schemas.comment import CommentCreate, CommentRead, CommentUpdate
from polly.schemas.common import ActionResponse
from polly.services import comments as comment_service
from polly.api.v1.endpoints.dependencies import get_current_user
from polly.api.v1.responses import get_comment_responses, get_single_poll_responses

router = APIRouter(tags=["comments"])


@router.get(
    "/polls/{poll_id}/comments",
    response_model=List[CommentRead],
    summary="List the comments of a poll",
    responses=get_single_poll_responses()
)
def list_comments(poll_id: int, db: Session = Depends(get_db)):
    return comment_service.list_comments(db, poll_id)


@router.post(
    "/polls/{poll_id}/comments",
    response_model=CommentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a poll",
    responses=get_comment_responses()
)
def create_comment(
    poll_id: int,
    comment: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return comment_service.create_comment(db, poll_id, current_user.id, comment.content)


@router.put(
    "/comments/{comment_id}",
    response_model=CommentRead,
    summary="Edit a comment",
    description="Only the author of a comment can edit it.",
    responses=get_comment_responses()
)
def update_comment(
    comment_id: int,
    comment: CommentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return comment_service.update_comment(db, comment_id, current_user.id, comment.content)


@router.delete(
    "/comments/{comment_id}",
    response_model=ActionResponse,
    summary="Delete a comment",
    description="The author of a comment or an administrator can delete it.",
    responses=get_comment_responses()
)
def delete_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    comment_service.delete_comment(db, comment_id, current_user.id, is_admin=current_user.is_admin)
    return ActionResponse(message="Comment deleted successfully")
