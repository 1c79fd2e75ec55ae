import logging

import pytest
from sqlalchemy.exc import IntegrityError

from polly.core.config import Settings, check_environment
from polly.core.errors import (
    AuthenticationError,
    AuthorizationError,
    DuplicateVoteError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from polly.core.revalidation import ViewRevalidator
from polly.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from polly.db.constraints import (
    OPTION_TEXT_PER_POLL,
    VOTE_PER_POLL,
    is_foreign_key_violation,
    is_unique_violation,
)


class TestViewRevalidator:

    def test_listeners_receive_paths(self):
        revalidator = ViewRevalidator()
        seen = []
        revalidator.subscribe(seen.append)

        revalidator.revalidate_poll_paths(7)
        revalidator.revalidate_poll_votes(7)
        revalidator.revalidate_poll_comments(7)

        assert seen == [
            "/", "/polls", "/polls/7", "/polls/7/edit",
            "/polls/7", "/polls",
            "/polls/7",
        ]

    def test_unsubscribe(self):
        revalidator = ViewRevalidator()
        seen = []
        revalidator.subscribe(seen.append)
        revalidator.subscribe(seen.append)
        revalidator.unsubscribe(seen.append)

        revalidator.revalidate_poll_paths()

        assert seen == []

    def test_failing_listener_does_not_stop_others(self, caplog):
        revalidator = ViewRevalidator()
        seen = []

        def broken(path):
            raise RuntimeError("cache down")

        revalidator.subscribe(broken)
        revalidator.subscribe(seen.append)

        with caplog.at_level(logging.ERROR, logger="polly.core.revalidation"):
            revalidator.revalidate(["/polls/1"])

        assert seen == ["/polls/1"]
        assert "View listener failed for /polls/1" in caplog.text


class TestSettings:

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://db/polly")
        monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15")
        monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings()

        assert settings.DATABASE_URL == "postgresql://db/polly"
        assert settings.ACCESS_TOKEN_EXPIRE_MINUTES == 15
        assert settings.CORS_ORIGINS == ["https://a.example", "https://b.example"]
        assert settings.LOG_LEVEL == "DEBUG"

    def test_production_refuses_default_secret(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.delenv("SECRET_KEY", raising=False)

        with pytest.raises(ValueError, match="SECRET_KEY"):
            Settings().validate_production_config()

    def test_production_with_secret(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("SECRET_KEY", "a-real-secret")
        monkeypatch.setenv("DATABASE_URL", "postgresql://db/polly")

        settings = Settings()
        settings.validate_production_config()
        assert settings.ENVIRONMENT == "production"

    def test_check_environment(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite://")
        monkeypatch.delenv("SECRET_KEY", raising=False)

        report = check_environment()

        assert report == {"DATABASE_URL": "Set", "SECRET_KEY": "Missing", "all_set": False}


class TestSecurity:

    def test_password_hashing(self):
        hashed = get_password_hash("testpass123")

        assert hashed != "testpass123"
        assert verify_password("testpass123", hashed)
        assert not verify_password("wrong", hashed)

    def test_long_passwords_are_truncated_consistently(self):
        hashed = get_password_hash("p" * 100)
        assert verify_password("p" * 100, hashed)

    def test_invalid_hash_does_not_verify(self):
        assert verify_password("testpass123", "not-a-bcrypt-hash") is False

    def test_tokens_are_unique_and_decodable(self):
        first = create_access_token({"sub": "1"})
        second = create_access_token({"sub": "1"})

        claims = decode_access_token(first)
        assert claims["sub"] == "1"
        assert claims["jti"] != decode_access_token(second)["jti"]
        assert decode_access_token("garbage") is None


class _Orig(Exception):
    pass


def _integrity_error(message):
    return IntegrityError("INSERT ...", {}, _Orig(message))


class TestConstraintClassification:

    def test_sqlite_unique_message(self):
        exc = _integrity_error("UNIQUE constraint failed: votes.poll_id, votes.voter_id")

        assert is_unique_violation(exc, VOTE_PER_POLL)
        assert not is_unique_violation(exc, OPTION_TEXT_PER_POLL)

    def test_postgres_unique_message(self):
        exc = _integrity_error(
            'duplicate key value violates unique constraint "uq_votes_poll_voter"\n'
            "DETAIL:  Key (poll_id, voter_id)=(1, 2) already exists."
        )
        assert is_unique_violation(exc, VOTE_PER_POLL)

    def test_foreign_key_messages(self):
        assert is_foreign_key_violation(_integrity_error("FOREIGN KEY constraint failed"))
        assert is_foreign_key_violation(_integrity_error(
            'insert or update on table "votes" violates foreign key constraint "fk_votes_option_poll"'
        ))
        assert not is_foreign_key_violation(_integrity_error("NOT NULL constraint failed: votes.voter_id"))


@pytest.mark.parametrize("error, status_code, error_code", [
    (ValidationError(), 422, "VALIDATION_ERROR"),
    (AuthenticationError(), 401, "AUTH_ERROR"),
    (AuthorizationError(), 403, "INSUFFICIENT_PERMISSIONS"),
    (DuplicateVoteError(), 409, "DUPLICATE_VOTE"),
    (NotFoundError(), 404, "RESOURCE_NOT_FOUND"),
    (StorageError(), 500, "DATABASE_ERROR"),
])
def test_error_taxonomy(error, status_code, error_code):
    assert error.status_code == status_code
    assert error.to_dict()["error_code"] == error_code
    assert error.to_dict()["success"] is False


def test_validation_error_carries_field_errors():
    error = ValidationError("Invalid poll data provided", errors=[{"loc": ["title"], "msg": "required", "type": "x"}])
    assert error.to_dict()["errors"][0]["loc"] == ["title"]
