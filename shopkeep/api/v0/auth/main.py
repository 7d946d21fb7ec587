from fastapi import APIRouter, Depends, Request

from shopkeep.core.envelope import ok
from shopkeep.core.errors import BadRequest, Unauthorized
from shopkeep.core.guards import require_api_key
from shopkeep.core.logger import get_logger
from shopkeep.core.rate_limit import LOGIN_RATE_LIMIT, limiter
from shopkeep.core.services import get_token_service, get_user_directory
from shopkeep.core.tokens import TokenService
from shopkeep.core.users import UserDirectory
from shopkeep.api.v0.auth.models import LoginRequest, LoginResponse

# Initialize logger
logger = get_logger(__name__)

router = APIRouter(prefix="/auth")


@router.post("/login", dependencies=[Depends(require_api_key)])
@limiter.limit(LOGIN_RATE_LIMIT)
def login(
    request: Request,
    credentials: LoginRequest | None = None,
    users: UserDirectory = Depends(get_user_directory),
    tokens: TokenService = Depends(get_token_service),
):
    """
    Exchange a username and password for a session token.

    Requires the x-api-key header. Rate limited per client IP.
    """
    if credentials is None or not credentials.username or not credentials.password:
        raise BadRequest("username and password required")

    user = users.authenticate(credentials.username, credentials.password)
    if user is None:
        logger.warning(f"Login failed for username: {credentials.username}")
        raise Unauthorized("Invalid credentials")

    token = tokens.issue({"sub": user.id, "role": user.role, "username": user.username})
    logger.info(f"User logged in: {user.username} ({user.role})")

    return ok(request, LoginResponse(token=token))
