from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional, List

from polly.core.constants import BusinessLimits


# Schema for creating a new poll
class PollCreate(BaseModel):
    title: str = Field(
        ...,
        description=f'Poll title (1-{BusinessLimits.MAX_POLL_TITLE_LENGTH} characters)',
        json_schema_extra={"example": "Lang?"}
    )
    description: Optional[str] = Field(
        None,
        description=f'Optional poll description (max {BusinessLimits.MAX_POLL_DESCRIPTION_LENGTH} characters)',
        json_schema_extra={"example": "Which language should the next service be written in?"}
    )
    options: List[str] = Field(
        ...,
        description=(
            f"Poll options ({BusinessLimits.MIN_POLL_OPTIONS}-{BusinessLimits.MAX_POLL_OPTIONS}), "
            "unique ignoring case and surrounding whitespace"
        ),
        json_schema_extra={"example": ["Go", "Rust"]}
    )


# Editing a poll sends the complete new state; the option set is replaced
class PollUpdate(PollCreate):
    pass


# Schema for reading poll data
class PollRead(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    owner_id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OptionTally(BaseModel):
    """Vote count of one option"""
    option_id: int
    text: str
    vote_count: int = Field(default=0, description="Number of votes for this option")


class PollResults(BaseModel):
    """Tally of a poll, recomputed from the stored votes"""
    poll_id: int
    options: List[OptionTally]
    total_votes: int

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "poll_id": 1,
                "options": [
                    {"option_id": 1, "text": "Go", "vote_count": 1},
                    {"option_id": 2, "text": "Rust", "vote_count": 0}
                ],
                "total_votes": 1
            }
        }
    )


class PollDetail(PollRead):
    """A poll together with its tallied options"""
    options: List[OptionTally] = Field(default_factory=list)
    total_votes: int = 0


class PollSummary(PollRead):
    """Poll entry of the list views"""
    options_count: int = 0
    votes_count: int = 0


class PollMutationResponse(BaseModel):
    success: bool = True
    message: str
    poll: PollDetail


class PollDeleteResponse(BaseModel):
    success: bool = True
    message: str
    poll_id: int
    timestamp: str


# Vote Schemas
class VoteCreate(BaseModel):
    option_id: int = Field(..., gt=0, description="ID of the option to vote for")


class VoteRead(BaseModel):
    """Schema for reading vote data"""
    id: int
    poll_id: int = Field(..., description="ID of the poll being voted on")
    option_id: int = Field(..., description="ID of the option voted for")
    voter_id: int = Field(..., description="ID of the user who voted")
    created_at: datetime = Field(..., description="When the vote was cast")

    model_config = ConfigDict(from_attributes=True)


class VoteResponse(BaseModel):
    """Schema for vote creation response"""
    success: bool = True
    message: str = Field(..., description="Success message")
    vote: VoteRead = Field(..., description="The recorded vote")
    results: PollResults = Field(..., description="Tally after the vote")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "message": "Vote recorded successfully",
                "vote": {
                    "id": 456,
                    "poll_id": 1,
                    "option_id": 1,
                    "voter_id": 123,
                    "created_at": "2024-01-01T12:00:00Z"
                },
                "results": {
                    "poll_id": 1,
                    "options": [
                        {"option_id": 1, "text": "Go", "vote_count": 1},
                        {"option_id": 2, "text": "Rust", "vote_count": 0}
                    ],
                    "total_votes": 1
                }
            }
        }
    )


class MyVoteResponse(BaseModel):
    has_voted: bool
    vote: Optional[VoteRead] = None
