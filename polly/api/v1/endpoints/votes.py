from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from polly.db.database import get_db
from polly.models.user import User
from polly.schemas.poll import MyVoteResponse, PollResults, VoteCreate, VoteRead, VoteResponse
from polly.services import votes as vote_service
from polly.api.v1.endpoints.dependencies import get_current_user
from polly.api.v1.responses import get_poll_vote_responses, get_single_poll_responses

router = APIRouter(prefix="/polls", tags=["votes"])


@router.post(
    "/{poll_id}/votes",
    response_model=VoteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Vote on a poll",
    description="Cast the current user's single vote on a poll. A second vote on the same poll is rejected with 409.",
    responses=get_poll_vote_responses()
)
def vote_on_poll(
    poll_id: int,
    vote: VoteCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    recorded = vote_service.cast_vote(db, poll_id, vote.option_id, current_user.id)
    return VoteResponse(
        message="Vote recorded successfully",
        vote=VoteRead.model_validate(recorded),
        results=vote_service.tally_votes(db, poll_id),
    )


@router.get(
    "/{poll_id}/results",
    response_model=PollResults,
    summary="Get poll results",
    responses=get_single_poll_responses()
)
def get_poll_results(poll_id: int, db: Session = Depends(get_db)):
    return vote_service.tally_votes(db, poll_id)


@router.get(
    "/{poll_id}/my-vote",
    response_model=MyVoteResponse,
    summary="Get the current user's vote on a poll",
    responses=get_single_poll_responses()
)
def get_my_vote(
    poll_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    vote = vote_service.get_user_vote(db, poll_id, current_user.id)
    if vote is None:
        return MyVoteResponse(has_voted=False)
    return MyVoteResponse(has_voted=True, vote=VoteRead.model_validate(vote))
