"""
Read-only user directory.

Users live in the user database and are loaded once at startup; there are
no user-management endpoints. Demo users are seeded into an empty table.
"""
import uuid
from dataclasses import dataclass
from enum import Enum

from sqlalchemy import Engine, func, select

from shopkeep.core.db.engine import session_factory
from shopkeep.core.db.tables.user import UserAccount
from shopkeep.core.logger import get_logger
from shopkeep.core.security import hash_password, verify_password

logger = get_logger(__name__)


class Role(str, Enum):
    """Roles the authorization rules know about"""

    VIEWER = "viewer"
    EDITOR = "editor"
    ADMIN = "admin"


DEMO_USERS = [
    {"username": "alice", "password": "alice123", "role": Role.ADMIN.value},
    {"username": "bob", "password": "bob123", "role": Role.EDITOR.value},
]


@dataclass(frozen=True)
class User:
    id: str
    username: str
    password_hash: str
    role: str

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, username={self.username!r}, role={self.role!r})"


class UserDirectory:
    """In-memory view of the user table"""

    def __init__(self, users: list[User]):
        self._by_username = {u.username: u for u in users}
        self._dummy_hash: str | None = None

    def __len__(self) -> int:
        return len(self._by_username)

    def get(self, username: str) -> User | None:
        return self._by_username.get(username)

    def authenticate(self, username: str, password: str) -> User | None:
        """
        Check a username/password pair.

        Unknown usernames still pay for a bcrypt check so response timing
        does not reveal which usernames exist.
        """
        user = self._by_username.get(username)

        if user is None:
            verify_password(password, self._timing_hash())
            return None

        if not verify_password(password, user.password_hash):
            return None
        return user

    def _timing_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = hash_password("dummy_password_for_timing", rounds=4)
        return self._dummy_hash

    @classmethod
    def load(cls, engine: Engine) -> "UserDirectory":
        Session = session_factory(engine)
        with Session() as session:
            rows = session.execute(select(UserAccount)).scalars().all()
            users = [
                User(id=row.id, username=row.username, password_hash=row.password_hash, role=row.role)
                for row in rows
            ]
        logger.info(f"Loaded {len(users)} users")
        return cls(users)


def seed_users(engine: Engine, users: list[dict[str, str]], rounds: int = 12) -> int:
    """
    Insert users into an empty user table.

    Returns:
        Number of users inserted (0 when the table already had rows)
    """
    Session = session_factory(engine)
    with Session() as session:
        existing = session.execute(select(func.count()).select_from(UserAccount)).scalar_one()
        if existing:
            return 0

        for entry in users:
            session.add(
                UserAccount(
                    id=str(uuid.uuid4()),
                    username=entry["username"],
                    password_hash=hash_password(entry["password"], rounds=rounds),
                    role=entry["role"],
                )
            )
        session.commit()

    logger.info(f"Seeded {len(users)} demo users")
    return len(users)
