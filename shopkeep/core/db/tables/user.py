from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from shopkeep.core.db.tables.base import Base
from datetime import datetime, timezone


class UserAccount(Base):
    """
    Users allowed to log in.

    - id: opaque identifier, becomes the token subject
    - username: login name
    - password_hash: bcrypt hash, plaintext passwords are never stored
    - role: free-form role tag; editor and admin grant write access
    """
    __tablename__ = "user_account"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    username: Mapped[str] = mapped_column(String(256), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(256))
    role: Mapped[str] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )
