from dataclasses import dataclass

from fastapi import Request

from shopkeep.core.config import Settings
from shopkeep.core.products.store import DEMO_PRODUCTS, ProductStore
from shopkeep.core.security import Secrets
from shopkeep.core.storage import JsonFileStore
from shopkeep.core.tokens import TokenService
from shopkeep.core.users import DEMO_USERS, UserDirectory, seed_users
from shopkeep.core.db.engine import create_db_engine
from shopkeep.core.logger import get_logger

logger = get_logger(__name__)


@dataclass
class Services:
    """Everything the handlers need, built once per application"""

    settings: Settings
    secrets: Secrets
    tokens: TokenService
    users: UserDirectory
    products: ProductStore

    @classmethod
    def build(cls, settings: Settings) -> "Services":
        secrets = Secrets.generate()
        tokens = TokenService(
            secrets.signing_secret,
            default_expires_in=settings.token_expires_in,
            issuer=settings.token_issuer,
        )

        # Users are reference data: read them once, then release the engine
        engine = create_db_engine(settings.database_url)
        try:
            if settings.seed_demo_data:
                seed_users(engine, DEMO_USERS, rounds=settings.bcrypt_rounds)
            users = UserDirectory.load(engine)
        finally:
            engine.dispose()

        backend = JsonFileStore(settings.products_file) if settings.products_file else None
        if backend is None:
            logger.info("Product persistence disabled, keeping products in memory")
        products = ProductStore.open(backend, seed=DEMO_PRODUCTS if settings.seed_demo_data else ())

        return cls(settings=settings, secrets=secrets, tokens=tokens, users=users, products=products)


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_token_service(request: Request) -> TokenService:
    return get_services(request).tokens


def get_product_store(request: Request) -> ProductStore:
    return get_services(request).products


def get_user_directory(request: Request) -> UserDirectory:
    return get_services(request).users
