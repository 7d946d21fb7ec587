"""
Tests for the user directory and demo seeding.
"""
import pytest

from shopkeep.core.db.engine import create_db_engine
from shopkeep.core.users import DEMO_USERS, Role, UserDirectory, seed_users


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    yield engine
    engine.dispose()


@pytest.fixture
def directory(engine):
    seed_users(engine, DEMO_USERS, rounds=4)
    return UserDirectory.load(engine)


class TestSeeding:
    """Tests for demo user seeding."""

    def test_seed_empty_table(self, engine):
        assert seed_users(engine, DEMO_USERS, rounds=4) == 2
        assert len(UserDirectory.load(engine)) == 2

    def test_seed_is_skipped_when_users_exist(self, engine):
        seed_users(engine, DEMO_USERS, rounds=4)

        assert seed_users(engine, DEMO_USERS, rounds=4) == 0
        assert len(UserDirectory.load(engine)) == 2

    def test_passwords_are_hashed(self, directory):
        alice = directory.get("alice")

        assert alice.password_hash != "alice123"
        assert alice.password_hash.startswith("$2")
        assert "password_hash" not in repr(alice)


class TestAuthenticate:
    """Tests for credential checks."""

    def test_valid_credentials(self, directory):
        user = directory.authenticate("alice", "alice123")

        assert user is not None
        assert user.role == Role.ADMIN.value

    def test_wrong_password(self, directory):
        assert directory.authenticate("bob", "alice123") is None

    def test_unknown_user(self, directory):
        assert directory.authenticate("mallory", "whatever") is None
