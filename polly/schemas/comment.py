from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from polly.core.constants import BusinessLimits


class CommentCreate(BaseModel):
    content: str = Field(
        ...,
        description=f"Comment text (1-{BusinessLimits.MAX_COMMENT_LENGTH} characters)",
        json_schema_extra={"example": "Rust, obviously."}
    )


class CommentUpdate(CommentCreate):
    pass


class CommentRead(BaseModel):
    id: int
    poll_id: int
    author_id: int
    author_name: str
    content: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
