"""
Runtime settings for the shopkeep service.

Everything is read from environment variables (optionally seeded from a
.env file by the CLI entry point). Values are parsed once at startup so
that a bad setting fails fast instead of on the first request.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path

from shopkeep.core.tokens import DEFAULT_ISSUER, parse_duration


DEFAULT_DATA_DIR = Path(".data")
TRUE_VALUES = {"1", "true", "yes", "on"}


def _env(*names: str, default: str | None = None) -> str | None:
    """Return the first environment variable that is set, or the default."""
    for name in names:
        value = os.getenv(name)
        if value is not None:
            return value
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in TRUE_VALUES


def _parse_port(raw: str) -> int:
    try:
        port = int(raw)
    except ValueError:
        raise ValueError(f"Invalid port: {raw!r}") from None
    if not 0 < port < 65536:
        raise ValueError(f"Port out of range: {port}")
    return port


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration"""

    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False
    token_expires_in: str = "2h"
    token_issuer: str = DEFAULT_ISSUER
    database_url: str = f"sqlite:///{DEFAULT_DATA_DIR}/shopkeep.db"
    products_file: Path | None = DEFAULT_DATA_DIR / "products.json"
    seed_demo_data: bool = True
    bcrypt_rounds: int = 12
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    log_to_file: bool = True

    def __post_init__(self):
        # Validate eagerly; TokenService parses it again on construction
        parse_duration(self.token_expires_in)
        if not 4 <= self.bcrypt_rounds <= 31:
            raise ValueError(f"bcrypt rounds must be between 4 and 31, got {self.bcrypt_rounds}")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from SHOPKEEP_* environment variables."""
        products_file = _env("SHOPKEEP_PRODUCTS_FILE", default=str(DEFAULT_DATA_DIR / "products.json"))
        origins = _env("SHOPKEEP_CORS_ORIGINS", default="*")

        return cls(
            host=_env("SHOPKEEP_HOST", default="0.0.0.0"),
            port=_parse_port(_env("SHOPKEEP_PORT", "PORT", default="3000")),
            debug=_env_bool("SHOPKEEP_DEBUG", False),
            token_expires_in=_env("SHOPKEEP_JWT_EXPIRES", "JWT_EXPIRES", default="2h"),
            token_issuer=_env("SHOPKEEP_JWT_ISSUER", default=DEFAULT_ISSUER),
            database_url=_env("SHOPKEEP_DB_URL", default=f"sqlite:///{DEFAULT_DATA_DIR}/shopkeep.db"),
            # An empty value keeps products in memory only
            products_file=Path(products_file) if products_file.strip() else None,
            seed_demo_data=_env_bool("SHOPKEEP_SEED_DEMO", True),
            bcrypt_rounds=int(_env("SHOPKEEP_BCRYPT_ROUNDS", default="12")),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=_env("SHOPKEEP_LOG_LEVEL", default="INFO"),
            log_to_file=_env_bool("SHOPKEEP_LOG_TO_FILE", True),
        )
