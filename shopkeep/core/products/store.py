"""
In-memory product collection with optional snapshot persistence.

Products are kept in insertion order. Create and update enforce the field
rules and sku uniqueness; storage itself does not, so records loaded from a
snapshot are trusted as they are.
"""
from __future__ import annotations

import threading
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

import pydantic

from shopkeep.core.errors import Conflict, NotFound, PersistenceError
from shopkeep.core.logger import get_logger
from shopkeep.core.products.models import Product, validate_product
from shopkeep.core.storage import JsonFileStore, StorageError

logger = get_logger(__name__)


DEMO_PRODUCTS = [
    {"name": "Laptop X", "sku": "SKU-0001", "price": 999.99, "stock": 5, "category": "computers"},
]


@dataclass(frozen=True)
class Page:
    items: list[Product]
    page: int
    limit: int
    total: int


class ProductStore:
    """
    Ordered product collection.

    Every successful mutation rewrites the whole snapshot when a backend is
    configured. If that write fails the in-memory change is kept and a
    PersistenceError is raised, so memory and storage can disagree until the
    next successful write.

    Sync FastAPI handlers run on a thread pool, so every read and every
    read-modify-write sequence holds the store lock.
    """

    def __init__(self, backend: JsonFileStore | None = None, products: Iterable[Product] = ()):
        self._backend = backend
        self._products: list[Product] = list(products)
        self._lock = threading.RLock()

    @classmethod
    def open(cls, backend: JsonFileStore | None, seed: Iterable[Mapping[str, Any]] = ()) -> "ProductStore":
        """
        Build a store from the backend snapshot.

        When there is no snapshot yet the seed records are validated, given
        fresh ids and written out as the initial snapshot.

        Raises:
            StorageError: If the existing snapshot cannot be read
        """
        if backend is not None and backend.exists():
            try:
                products = [Product.model_validate(record) for record in backend.load()]
            except pydantic.ValidationError as e:
                raise StorageError(f"{backend.path} holds malformed product records: {e}") from e
            return cls(backend, products)

        products = [
            Product(id=new_product_id(), **validate_product(record).model_dump())
            for record in seed
        ]
        store = cls(backend, products)
        if backend is not None:
            backend.save(store._snapshot())
            logger.info(f"Initialized product snapshot at {backend.path} with {len(products)} records")
        return store

    def __len__(self) -> int:
        with self._lock:
            return len(self._products)

    def list(self, page: int = 1, limit: int = 10) -> Page:
        """Positional slice over insertion order; out-of-range pages are empty"""
        page = max(1, page)
        limit = max(1, limit)
        offset = (page - 1) * limit

        with self._lock:
            return Page(
                items=self._products[offset:offset + limit],
                page=page,
                limit=limit,
                total=len(self._products),
            )

    def get(self, product_id: str) -> Product:
        with self._lock:
            return self._products[self._index_of(product_id)]

    def create(self, payload: Any) -> Product:
        """
        Validate and append a new product.

        Raises:
            ValidationError: If any field is invalid (all violations are listed)
            Conflict: If the sku is already taken
            PersistenceError: If the snapshot could not be written
        """
        draft = validate_product(payload)

        with self._lock:
            if self._sku_taken(draft.sku):
                logger.warning(f"Product creation rejected - duplicate sku: {draft.sku}")
                raise Conflict("SKU already exists")

            product = Product(id=new_product_id(), **draft.model_dump())
            self._products.append(product)
            logger.info(f"Product created: {product.id} ({product.sku})")
            self._flush()

        return product

    def update(self, product_id: str, changes: Any) -> Product:
        """
        Merge partial changes onto an existing product.

        The merged record is validated as a whole. The id never changes.

        Raises:
            NotFound: If the product does not exist
            ValidationError: If the merged record is invalid
            Conflict: If the sku changes to one used by another product
            PersistenceError: If the snapshot could not be written
        """
        with self._lock:
            idx = self._index_of(product_id)
            current = self._products[idx]

            merged = current.model_dump(exclude={"id"})
            if isinstance(changes, Mapping):
                merged.update({k: v for k, v in changes.items() if k != "id"})
                draft = validate_product(merged)
            else:
                draft = validate_product(changes)

            if draft.sku != current.sku and self._sku_taken(draft.sku, ignore_id=current.id):
                logger.warning(f"Product update rejected - duplicate sku: {draft.sku}")
                raise Conflict("SKU already exists")

            product = Product(id=current.id, **draft.model_dump())
            self._products[idx] = product
            logger.info(f"Product updated: {product.id}")
            self._flush()

        return product

    def delete(self, product_id: str) -> None:
        """
        Raises:
            NotFound: If the product does not exist
            PersistenceError: If the snapshot could not be written
        """
        with self._lock:
            idx = self._index_of(product_id)
            removed = self._products.pop(idx)
            logger.info(f"Product deleted: {removed.id}")
            self._flush()

    def _index_of(self, product_id: str) -> int:
        for idx, product in enumerate(self._products):
            if product.id == product_id:
                return idx
        raise NotFound("Product not found")

    def _sku_taken(self, sku: str, ignore_id: str | None = None) -> bool:
        return any(p.sku == sku and p.id != ignore_id for p in self._products)

    def _snapshot(self) -> list[dict[str, Any]]:
        return [p.model_dump() for p in self._products]

    def _flush(self) -> None:
        if self._backend is None:
            return
        try:
            self._backend.save(self._snapshot())
        except StorageError as e:
            # No rollback: the in-memory change stands
            logger.error(f"Failed to persist products: {e}")
            raise PersistenceError() from e


def new_product_id() -> str:
    return str(uuid.uuid4())
