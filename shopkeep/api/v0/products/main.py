import re
from typing import Any

from fastapi import APIRouter, Body, Depends, Request, Response, status

from shopkeep.core.envelope import ok
from shopkeep.core.guards import require_api_key, require_roles
from shopkeep.core.logger import get_logger
from shopkeep.core.products.store import ProductStore
from shopkeep.core.services import get_product_store
from shopkeep.core.tokens import Claims
from shopkeep.core.users import Role

router = APIRouter(prefix="/products")
logger = get_logger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_int_param(raw: str | None, default: int) -> int:
    """
    Lenient integer query parsing: "3", " 3", "3abc" -> 3.
    Anything without a leading integer falls back to the default.
    """
    if raw is None:
        return default
    match = _LEADING_INT.match(raw)
    return int(match.group(1)) if match else default


@router.get("", dependencies=[Depends(require_api_key)])
def list_products(
    request: Request,
    page: str | None = None,
    limit: str | None = None,
    store: ProductStore = Depends(get_product_store),
):
    """
    List products in insertion order.

    Args:
        page: 1-based page number, clamped to at least 1 (default 1)
        limit: page size, clamped to at least 1 (default 10)
    """
    result = store.list(
        page=parse_int_param(page, DEFAULT_PAGE),
        limit=parse_int_param(limit, DEFAULT_LIMIT),
    )
    return ok(
        request,
        [p.model_dump() for p in result.items],
        {"page": result.page, "limit": result.limit, "total": result.total},
    )


@router.get("/{product_id}", dependencies=[Depends(require_api_key)])
def get_product(
    request: Request,
    product_id: str,
    store: ProductStore = Depends(get_product_store),
):
    return ok(request, store.get(product_id).model_dump())


@router.post("", status_code=status.HTTP_201_CREATED)
def create_product(
    request: Request,
    payload: dict[str, Any] | None = Body(None),
    claims: Claims = Depends(require_roles(Role.EDITOR, Role.ADMIN)),
    store: ProductStore = Depends(get_product_store),
):
    """Create a product. Requires an editor or admin token."""
    product = store.create(payload or {})
    logger.info(f"{claims.username} created product {product.sku}")
    return ok(request, product.model_dump())


@router.put("/{product_id}")
def update_product(
    request: Request,
    product_id: str,
    payload: dict[str, Any] | None = Body(None),
    claims: Claims = Depends(require_roles(Role.EDITOR, Role.ADMIN)),
    store: ProductStore = Depends(get_product_store),
):
    """
    Partially update a product.

    Only the fields present in the body change; the merged record must
    still satisfy every product rule.
    """
    product = store.update(product_id, payload or {})
    logger.info(f"{claims.username} updated product {product.id}")
    return ok(request, product.model_dump())


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: str,
    claims: Claims = Depends(require_roles(Role.ADMIN)),
    store: ProductStore = Depends(get_product_store),
):
    """Delete a product. Admin only."""
    store.delete(product_id)
    logger.info(f"{claims.username} deleted product {product_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
