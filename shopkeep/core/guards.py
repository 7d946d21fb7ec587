"""Access control gates.

Three independent gates, composed per route:

    API key  -> x-api-key header must equal the process API key (403)
    Bearer   -> Authorization: Bearer <token> must verify (401)
    Role     -> verified claims must carry an allowed role (403)

The check_* functions are pure: they return either the successful result or
the ApiError describing the failure, and never raise. The require_* FastAPI
dependencies run them and raise the failure, which short-circuits the route
before any handler code executes.

Usage:
    @router.get("/products", dependencies=[Depends(require_api_key)])
    def list_products(...): ...

    @router.delete("/products/{product_id}")
    def delete_product(claims: Claims = Depends(require_roles(Role.ADMIN))): ...
"""

from collections.abc import Callable, Collection

from fastapi import Depends, Header, Request

from shopkeep.core.errors import ApiError, Forbidden, Unauthorized
from shopkeep.core.logger import get_logger
from shopkeep.core.security import constant_time_compare
from shopkeep.core.services import get_services, get_token_service
from shopkeep.core.tokens import Claims, InvalidToken, TokenService
from shopkeep.core.users import Role

logger = get_logger(__name__)

API_KEY_HEADER = "x-api-key"
BEARER_PREFIX = "Bearer "


def check_api_key(provided: str | None, expected: str) -> Forbidden | None:
    """API-key gate: None when the key matches, Forbidden otherwise"""
    if not provided or not constant_time_compare(provided, expected):
        return Forbidden("Invalid API key")
    return None


def check_bearer(authorization: str | None, tokens: TokenService) -> Claims | Unauthorized:
    """Bearer gate: verified claims, or Unauthorized"""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return Unauthorized("Missing token")

    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        return Unauthorized("Missing token")

    try:
        return tokens.verify(token)
    except InvalidToken as e:
        # Unverified payload, for the log line only
        claimed = tokens.decode(token) or {}
        logger.warning(f"Rejected token for subject {claimed.get('sub', 'unknown')}: {e}")
        return Unauthorized("Invalid or expired token")


def check_role(claims: Claims | None, allowed: Collection[Role]) -> Forbidden | None:
    """Role gate: None when the claims carry an allowed role, Forbidden otherwise"""
    if claims is None or claims.role not in {role.value for role in allowed}:
        return Forbidden("Insufficient permissions")
    return None


def require_api_key(
    request: Request,
    x_api_key: str | None = Header(None, alias=API_KEY_HEADER),
) -> None:
    """Dependency enforcing the API-key gate"""
    failure = check_api_key(x_api_key, get_services(request).secrets.api_key)
    if failure is not None:
        logger.warning(f"API key rejected for {request.method} {request.url.path}")
        raise failure


def require_bearer(
    request: Request,
    authorization: str | None = Header(None),
    tokens: TokenService = Depends(get_token_service),
) -> Claims:
    """Dependency enforcing the bearer gate; attaches claims to request.state"""
    outcome = check_bearer(authorization, tokens)
    if isinstance(outcome, ApiError):
        raise outcome

    request.state.claims = outcome
    return outcome


def require_roles(*roles: Role) -> Callable[..., Claims]:
    """
    Create a dependency that runs the bearer gate and then the role gate.

    Args:
        roles: Roles allowed through

    Returns:
        Dependency returning the verified claims
    """
    allowed = frozenset(roles)

    def role_checker(request: Request, claims: Claims = Depends(require_bearer)) -> Claims:
        failure = check_role(getattr(request.state, "claims", claims), allowed)
        if failure is not None:
            logger.warning(
                f"User {claims.username} with role {claims.role} denied {request.method} {request.url.path}"
            )
            raise failure
        return claims

    return role_checker
