"""
Tests for voting and tallies: one vote per user per poll, option integrity,
and tallies that always match the stored votes.
"""

import threading

import pytest
from sqlalchemy import event, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from polly.core.constants import ErrorMessages
from polly.core.errors import (
    AuthenticationError,
    DuplicateVoteError,
    NotFoundError,
    ValidationError,
)
from polly.models.polls import Poll, PollOption, Vote
from polly.models.user import User
from polly.services import polls as poll_service
from polly.services.votes import cast_vote, get_user_vote, tally_votes
from polly.services.validation import normalize_option_text


class TestCastVote:

    def test_vote_is_recorded(self, db_session, test_user2, test_poll, revalidated_paths):
        go = test_poll.options[0]

        vote = cast_vote(db_session, test_poll.id, go.id, test_user2.id)

        assert vote.id is not None
        assert (vote.poll_id, vote.option_id, vote.voter_id) == (test_poll.id, go.id, test_user2.id)
        assert vote.created_at is not None
        assert revalidated_paths == [f"/polls/{test_poll.id}", "/polls"]

    def test_owner_can_vote_on_own_poll(self, db_session, test_user, test_poll):
        cast_vote(db_session, test_poll.id, test_poll.options[1].id, test_user.id)
        assert tally_votes(db_session, test_poll.id).total_votes == 1

    def test_second_vote_is_rejected(self, db_session, test_user2, test_poll):
        """A voter gets exactly one vote per poll, whichever option they pick the second time"""
        go, rust = test_poll.options
        cast_vote(db_session, test_poll.id, go.id, test_user2.id)

        with pytest.raises(DuplicateVoteError) as exc_info:
            cast_vote(db_session, test_poll.id, rust.id, test_user2.id)

        assert exc_info.value.message == ErrorMessages.ALREADY_VOTED
        assert db_session.query(Vote).count() == 1
        assert get_user_vote(db_session, test_poll.id, test_user2.id).option_id == go.id

    def test_same_user_can_vote_on_different_polls(self, db_session, test_user, test_user2, test_poll, make_poll):
        other = make_poll(test_user, title="Editor?", options=["Vim", "Emacs"])

        cast_vote(db_session, test_poll.id, test_poll.options[0].id, test_user2.id)
        cast_vote(db_session, other.id, other.options[0].id, test_user2.id)

        assert db_session.query(Vote).filter(Vote.voter_id == test_user2.id).count() == 2

    def test_option_of_another_poll_is_rejected(self, db_session, test_user, test_user2, test_poll, make_poll):
        """Voting on poll A with an option of poll B stores nothing"""
        other = make_poll(test_user, title="Editor?", options=["Vim", "Emacs"])

        with pytest.raises(ValidationError) as exc_info:
            cast_vote(db_session, test_poll.id, other.options[0].id, test_user2.id)

        assert exc_info.value.message == ErrorMessages.OPTION_NOT_IN_POLL
        assert db_session.query(Vote).count() == 0

    def test_unknown_option_is_rejected(self, db_session, test_user2, test_poll):
        with pytest.raises(ValidationError):
            cast_vote(db_session, test_poll.id, 9999, test_user2.id)

    def test_unknown_poll(self, db_session, test_user2):
        with pytest.raises(NotFoundError):
            cast_vote(db_session, 9999, 1, test_user2.id)

    def test_requires_voter(self, db_session, test_poll, revalidated_paths):
        with pytest.raises(AuthenticationError):
            cast_vote(db_session, test_poll.id, test_poll.options[0].id, None)
        assert db_session.query(Vote).count() == 0
        assert revalidated_paths == []

    def test_old_option_after_edit_is_rejected(self, db_session, test_user, test_user2, test_poll):
        """Option ids of a replaced option set are not accepted any more"""
        old_option_id = test_poll.options[0].id
        poll_service.update_poll(db_session, test_poll.id, test_user.id, "Lang?", None, ["Go", "Rust", "Zig"])

        with pytest.raises(ValidationError):
            cast_vote(db_session, test_poll.id, old_option_id, test_user2.id)

    def test_option_removed_between_check_and_insert(self, db_session, test_user2, test_poll,
                                                     revalidated_paths):
        """The option passes the membership check but is gone when the vote row is written"""
        poll_id, go_id = test_poll.id, test_poll.options[0].id

        def remove_option(session, flush_context, instances):
            session.connection().execute(text("DELETE FROM poll_options WHERE id = :id"), {"id": go_id})

        event.listen(db_session, "before_flush", remove_option)
        try:
            with pytest.raises(NotFoundError) as exc_info:
                cast_vote(db_session, poll_id, go_id, test_user2.id)
        finally:
            event.remove(db_session, "before_flush", remove_option)

        assert exc_info.value.message == ErrorMessages.OPTION_GONE
        assert revalidated_paths == []
        # rolled back as a whole: the option is back and no vote was stored
        assert db_session.query(PollOption).filter(PollOption.id == go_id).count() == 1
        assert db_session.query(Vote).count() == 0

    def test_user_can_vote_again_after_edit(self, db_session, test_user, test_user2, test_poll):
        cast_vote(db_session, test_poll.id, test_poll.options[0].id, test_user2.id)
        poll = poll_service.update_poll(db_session, test_poll.id, test_user.id, "Lang?", None, ["Go", "Rust", "Zig"])

        zig = poll.options[2]
        cast_vote(db_session, test_poll.id, zig.id, test_user2.id)

        results = tally_votes(db_session, test_poll.id)
        assert [(o.text, o.vote_count) for o in results.options] == [("Go", 0), ("Rust", 0), ("Zig", 1)]


class TestTally:

    def test_options_without_votes_count_zero(self, db_session, test_poll):
        results = tally_votes(db_session, test_poll.id)

        assert results.poll_id == test_poll.id
        assert [(o.text, o.vote_count) for o in results.options] == [("Go", 0), ("Rust", 0)]
        assert results.total_votes == 0

    def test_tally_matches_stored_votes(self, db_session, test_user, make_user, make_poll):
        """sum(counts) == total == number of vote rows, ordered by option id"""
        poll = make_poll(test_user, title="Editor?", options=["Vim", "Emacs", "Nano"])
        vim, emacs, nano = poll.options
        picks = [vim, vim, emacs, vim, emacs]
        for i, option in enumerate(picks):
            voter = make_user(name=f"Voter {i}", email=f"voter{i}@example.com")
            cast_vote(db_session, poll.id, option.id, voter.id)

        results = tally_votes(db_session, poll.id)

        assert [o.option_id for o in results.options] == sorted(o.id for o in (vim, emacs, nano))
        assert [o.vote_count for o in results.options] == [3, 2, 0]
        stored = db_session.query(Vote).filter(Vote.poll_id == poll.id).count()
        assert sum(o.vote_count for o in results.options) == results.total_votes == stored

    def test_tally_is_per_poll(self, db_session, test_user, test_user2, test_poll, make_poll):
        other = make_poll(test_user, title="Editor?", options=["Vim", "Emacs"])
        cast_vote(db_session, other.id, other.options[0].id, test_user2.id)

        assert tally_votes(db_session, test_poll.id).total_votes == 0
        assert tally_votes(db_session, other.id).total_votes == 1

    def test_tally_of_unknown_poll(self, db_session):
        with pytest.raises(NotFoundError):
            tally_votes(db_session, 9999)

    def test_get_user_vote(self, db_session, test_user2, test_poll):
        assert get_user_vote(db_session, test_poll.id, test_user2.id) is None
        cast_vote(db_session, test_poll.id, test_poll.options[1].id, test_user2.id)
        assert get_user_vote(db_session, test_poll.id, test_user2.id).option_id == test_poll.options[1].id


class TestStoreConstraints:
    """The database itself refuses invalid votes, independent of the service checks"""

    def test_vote_for_option_of_other_poll_violates_foreign_key(self, db_session, test_user, test_user2,
                                                                test_poll, make_poll):
        other = make_poll(test_user, title="Editor?", options=["Vim", "Emacs"])

        db_session.add(Vote(poll_id=test_poll.id, option_id=other.options[0].id, voter_id=test_user2.id))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_duplicate_vote_violates_unique_constraint(self, db_session, test_user2, test_poll):
        go, rust = test_poll.options
        db_session.add(Vote(poll_id=test_poll.id, option_id=go.id, voter_id=test_user2.id))
        db_session.commit()

        db_session.add(Vote(poll_id=test_poll.id, option_id=rust.id, voter_id=test_user2.id))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_deleting_option_removes_its_votes(self, db_session, test_user2, test_poll):
        go = test_poll.options[0]
        cast_vote(db_session, test_poll.id, go.id, test_user2.id)

        db_session.query(PollOption).filter(PollOption.id == go.id).delete(synchronize_session="fetch")
        db_session.commit()

        assert db_session.query(Vote).count() == 0


class TestConcurrentVotes:

    def _seed(self, engine):
        with Session(engine) as session:
            owner = User(name="Owner", email="owner@example.com", hashed_password="x")
            voter = User(name="Voter", email="voter@example.com", hashed_password="x")
            session.add_all([owner, voter])
            session.flush()
            poll = Poll(title="Lang?", owner_id=owner.id)
            session.add(poll)
            session.flush()
            options = [
                PollOption(poll_id=poll.id, text=text, normalized_text=normalize_option_text(text))
                for text in ("Go", "Rust")
            ]
            session.add_all(options)
            session.commit()
            return poll.id, [option.id for option in options], voter.id

    def test_simultaneous_votes_by_same_user(self, file_engine):
        """Two racing votes of one user: exactly one is stored, the other is a duplicate"""
        poll_id, option_ids, voter_id = self._seed(file_engine)
        barrier = threading.Barrier(2)
        outcomes = []
        lock = threading.Lock()

        def vote(option_id):
            with Session(file_engine) as session:
                barrier.wait()
                try:
                    cast_vote(session, poll_id, option_id, voter_id)
                    result = "ok"
                except DuplicateVoteError:
                    result = "duplicate"
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=vote, args=(option_id,)) for option_id in option_ids]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert sorted(outcomes) == ["duplicate", "ok"]
        with Session(file_engine) as session:
            assert session.query(Vote).filter(Vote.poll_id == poll_id).count() == 1
            results = tally_votes(session, poll_id)
            assert results.total_votes == 1

    def test_simultaneous_votes_by_different_users(self, file_engine):
        poll_id, option_ids, _ = self._seed(file_engine)
        with Session(file_engine) as session:
            voters = [User(name=f"V{i}", email=f"v{i}@example.com", hashed_password="x") for i in range(4)]
            session.add_all(voters)
            session.commit()
            voter_ids = [voter.id for voter in voters]

        barrier = threading.Barrier(len(voter_ids))
        errors = []

        def vote(voter_id, option_id):
            with Session(file_engine) as session:
                barrier.wait()
                try:
                    cast_vote(session, poll_id, option_id, voter_id)
                except Exception as e:
                    errors.append(e)

        threads = [
            threading.Thread(target=vote, args=(voter_id, option_ids[i % 2]))
            for i, voter_id in enumerate(voter_ids)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert errors == []
        with Session(file_engine) as session:
            results = tally_votes(session, poll_id)
            assert [o.vote_count for o in results.options] == [2, 2]
            assert results.total_votes == 4

    def _seed_voters(self, engine, count):
        with Session(engine) as session:
            voters = [User(name=f"R{i}", email=f"r{i}@example.com", hashed_password="x") for i in range(count)]
            session.add_all(voters)
            session.commit()
            return [voter.id for voter in voters]

    def _race(self, engine, poll_id, option_ids, voter_ids, change):
        """Start every voter and ``change`` together; returns the voters' outcomes and the change's errors"""
        barrier = threading.Barrier(len(voter_ids) + 1)
        outcomes = {}
        change_errors = []
        lock = threading.Lock()

        def vote(voter_id, option_id):
            with Session(engine) as session:
                barrier.wait()
                try:
                    cast_vote(session, poll_id, option_id, voter_id)
                    result = "ok"
                except (ValidationError, NotFoundError) as e:
                    result = type(e).__name__
                except Exception as e:
                    result = repr(e)
            with lock:
                outcomes[voter_id] = result

        def run_change():
            with Session(engine) as session:
                barrier.wait()
                try:
                    change(session)
                except Exception as e:
                    change_errors.append(e)

        threads = [
            threading.Thread(target=vote, args=(voter_id, option_ids[i % len(option_ids)]))
            for i, voter_id in enumerate(voter_ids)
        ]
        threads.append(threading.Thread(target=run_change))
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)
        return outcomes, change_errors

    def test_votes_racing_an_edit(self, file_engine):
        """Votes either land before the edit (and are cleared by it) or are refused; none survive on old options"""
        poll_id, old_option_ids, _ = self._seed(file_engine)
        with Session(file_engine) as session:
            owner_id = session.get(Poll, poll_id).owner_id
        voter_ids = self._seed_voters(file_engine, 8)

        outcomes, edit_errors = self._race(
            file_engine, poll_id, old_option_ids, voter_ids,
            lambda session: poll_service.update_poll(session, poll_id, owner_id, "Lang?", None, ["Go", "Rust", "Zig"]),
        )

        assert edit_errors == []
        assert set(outcomes) == set(voter_ids)
        assert set(outcomes.values()) <= {"ok", "ValidationError", "NotFoundError"}
        with Session(file_engine) as session:
            live_ids = {option_id for (option_id,) in session.query(PollOption.id).filter(PollOption.poll_id == poll_id)}
            assert len(live_ids) == 3
            assert live_ids.isdisjoint(old_option_ids)

            votes = session.query(Vote).filter(Vote.poll_id == poll_id).all()
            assert {vote.option_id for vote in votes} <= live_ids
            assert votes == []
            assert tally_votes(session, poll_id).total_votes == 0

    def test_votes_racing_a_delete(self, file_engine):
        poll_id, option_ids, _ = self._seed(file_engine)
        with Session(file_engine) as session:
            owner_id = session.get(Poll, poll_id).owner_id
        voter_ids = self._seed_voters(file_engine, 8)

        outcomes, delete_errors = self._race(
            file_engine, poll_id, option_ids, voter_ids,
            lambda session: poll_service.delete_poll(session, poll_id, owner_id),
        )

        assert delete_errors == []
        assert set(outcomes) == set(voter_ids)
        assert set(outcomes.values()) <= {"ok", "ValidationError", "NotFoundError"}
        with Session(file_engine) as session:
            assert session.get(Poll, poll_id) is None
            assert session.query(PollOption).filter(PollOption.poll_id == poll_id).count() == 0
            assert session.query(Vote).filter(Vote.poll_id == poll_id).count() == 0
            assert session.query(Vote).count() == 0
