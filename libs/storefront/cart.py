"""Client-side shopping cart.

The cart holds product snapshots (the price the customer saw) and is
persisted locally through a ``CartStorage``. A ``CartStore`` is created
per session and must be ``load()``-ed before use; ``close()`` flushes it.
"""

import json
import os
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional, Protocol, Union

from libs.common.currency import to_money
from libs.common.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CartProduct:
    """Snapshot of a menu product at the time it was added."""

    id: str
    name: str
    price: Decimal
    cost: Decimal
    category: Optional[str] = None
    image_url: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> "CartProduct":
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            price=to_money(data["price"]),
            cost=to_money(data["cost"]),
            category=data.get("category"),
            image_url=data.get("image_url"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": str(self.price),
            "cost": str(self.cost),
            "category": self.category,
            "image_url": self.image_url,
        }


@dataclass
class CartItem:
    product: CartProduct
    quantity: int = 1

    @property
    def line_total(self) -> Decimal:
        return self.product.price * self.quantity


class CartStorage(Protocol):
    def read(self) -> Optional[list[dict]]: ...

    def write(self, items: list[dict]) -> None: ...


@dataclass
class InMemoryCartStorage:
    items: Optional[list[dict]] = None
    writes: int = field(default=0, compare=False)

    def read(self) -> Optional[list[dict]]:
        return None if self.items is None else [dict(item) for item in self.items]

    def write(self, items: list[dict]) -> None:
        self.items = [dict(item) for item in items]
        self.writes += 1


class JsonFileCartStorage:
    """Cart persisted as ``{"items": [...]}`` in a local JSON file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def read(self) -> Optional[list[dict]]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            # Corrupt or unreadable cart file: start with an empty cart
            logger.warning("Ignoring unreadable cart file %s: %s", self.path, exc)
            return None
        return data.get("items") if isinstance(data, dict) else None

    def write(self, items: list[dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps({"items": items}), encoding="utf-8")
        os.replace(tmp, self.path)


ProductLike = Union[CartProduct, dict]


class CartStore:
    def __init__(self, storage: CartStorage):
        self.storage = storage
        self._items: list[CartItem] = []
        self._loaded = False

    # -- session -----------------------------------------------------------

    def load(self) -> "CartStore":
        """Restore persisted lines; unreadable entries are dropped."""
        self._items = []
        for raw in self.storage.read() or []:
            try:
                product = CartProduct.from_api(raw["product"])
                quantity = int(raw["quantity"])
            except (KeyError, TypeError, ValueError, ArithmeticError) as exc:
                logger.warning("Dropping malformed cart line %r: %s", raw, exc)
                continue
            if quantity > 0:
                self._items.append(CartItem(product, quantity))
        self._loaded = True
        return self

    def close(self) -> None:
        if self._loaded:
            self._persist()
        self._loaded = False

    def __enter__(self) -> "CartStore":
        return self.load()

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _require_loaded(self) -> None:
        if not self._loaded:
            raise RuntimeError("CartStore.load() must be called before use")

    def _persist(self) -> None:
        self.storage.write(
            [
                {"product": item.product.to_dict(), "quantity": item.quantity}
                for item in self._items
            ]
        )

    # -- mutations ---------------------------------------------------------

    def add_item(self, product: ProductLike, quantity: int = 1) -> None:
        """Add to an existing line for the same product or append a new one."""
        self._require_loaded()
        if quantity <= 0:
            raise ValueError("Quantity must be at least 1")
        if isinstance(product, dict):
            product = CartProduct.from_api(product)
        for item in self._items:
            if item.product.id == product.id:
                item.quantity += quantity
                break
        else:
            self._items.append(CartItem(product, quantity))
        self._persist()

    def update_quantity(self, product_id: str, quantity: int) -> None:
        self._require_loaded()
        if quantity <= 0:
            self.remove_item(product_id)
            return
        for item in self._items:
            if item.product.id == str(product_id):
                item.quantity = quantity
        self._persist()

    def remove_item(self, product_id: str) -> None:
        self._require_loaded()
        self._items = [item for item in self._items if item.product.id != str(product_id)]
        self._persist()

    def clear(self) -> None:
        self._require_loaded()
        self._items = []
        self._persist()

    # -- reads -------------------------------------------------------------

    @property
    def items(self) -> tuple[CartItem, ...]:
        return tuple(self._items)

    def total_items(self) -> int:
        return sum(item.quantity for item in self._items)

    def total_price(self) -> Decimal:
        return to_money(sum((item.line_total for item in self._items), Decimal("0")))

    def total_cost(self) -> Decimal:
        return to_money(
            sum((item.product.cost * item.quantity for item in self._items), Decimal("0"))
        )

    def order_items(self) -> list[dict]:
        """Cart lines in the shape the order endpoint expects."""
        return [
            {
                "product": {
                    "id": item.product.id,
                    "name": item.product.name,
                    "price": float(item.product.price),
                    "cost": float(item.product.cost),
                },
                "quantity": item.quantity,
            }
            for item in self._items
        ]
