from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    ForeignKeyConstraint,
    Index,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from polly.db.constraints import OPTION_ID_POLL, OPTION_TEXT_PER_POLL, VOTE_OPTION_FK, VOTE_PER_POLL
from polly.db.database import Base


# Define Poll model
class Poll(Base):
    __tablename__ = "polls"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False, index=True)
    description = Column(String, nullable=True)

    # Foreign key to user table
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationship to User model
    owner = relationship("User", back_populates="polls")
    # Options are replaced and deleted by explicit statements in the poll service
    options = relationship(
        "PollOption",
        back_populates="poll",
        order_by="PollOption.id",
        passive_deletes=True
    )


class PollOption(Base):
    __tablename__ = "poll_options"

    id = Column(Integer, primary_key=True, index=True)
    poll_id = Column(Integer, ForeignKey("polls.id", ondelete="CASCADE"), nullable=False, index=True)
    text = Column(String, nullable=False)
    # trimmed, case-folded text; unique per poll
    normalized_text = Column(String, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    # Relationship to Poll model
    poll = relationship("Poll", back_populates="options")

    __table_args__ = (
        UniqueConstraint(*OPTION_TEXT_PER_POLL.columns, name=OPTION_TEXT_PER_POLL.name),
        # target of the votes (option_id, poll_id) foreign key
        UniqueConstraint(*OPTION_ID_POLL.columns, name=OPTION_ID_POLL.name),
        # ids of replaced options are never handed out again
        {"sqlite_autoincrement": True},
    )


class Vote(Base):
    __tablename__ = "votes"

    id = Column(Integer, primary_key=True, index=True)
    poll_id = Column(Integer, ForeignKey("polls.id", ondelete="CASCADE"), nullable=False)
    option_id = Column(Integer, nullable=False)
    voter_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    __table_args__ = (
        # One vote per voter per poll
        UniqueConstraint(*VOTE_PER_POLL.columns, name=VOTE_PER_POLL.name),
        # The option must be an option of this very poll
        ForeignKeyConstraint(
            ["option_id", "poll_id"],
            ["poll_options.id", "poll_options.poll_id"],
            ondelete="CASCADE",
            name=VOTE_OPTION_FK,
        ),
        Index("ix_votes_option_id", "option_id"),
    )
