# backend/utils/cart_store.py
"""
Client-side style shopping cart.

The cart is a JSON array of ``{productId, qty, name, price}`` lines kept under
the ``"cart"`` key of a key/value storage, the same layout the web client
keeps in the browser's local storage. Adding a product that is already in the
cart bumps its quantity instead of appending a second line.
"""
import json
import logging
import math
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from models.cart import ClientState

logger = logging.getLogger(__name__)

CART_KEY = "cart"


class MemoryStorage:
    """Dict-backed storage, one instance per client."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class ClientStateStorage:
    """Storage persisted in the ``client_state`` table for one user."""

    def __init__(self, db: Session, user_id: int):
        self.db = db
        self.user_id = user_id

    def _row(self, key: str) -> Optional[ClientState]:
        return (
            self.db.query(ClientState)
            .filter(ClientState.user_id == self.user_id, ClientState.key == key)
            .first()
        )

    def get_item(self, key: str) -> Optional[str]:
        row = self._row(key)
        return row.value if row else None

    def set_item(self, key: str, value: str) -> None:
        row = self._row(key)
        if row:
            row.value = value
        else:
            self.db.add(ClientState(user_id=self.user_id, key=key, value=value))
        self.db.commit()

    def remove_item(self, key: str) -> None:
        row = self._row(key)
        if row:
            self.db.delete(row)
            self.db.commit()


def line_qty(line: Dict[str, Any]) -> int:
    # Lines written by older clients may carry junk quantities
    value = line.get("qty")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if not math.isfinite(value):
        return 0
    return int(value)


def clean_line(item: Any) -> Optional[Dict[str, Any]]:
    """Normalise one stored line, or None when it should not be kept."""
    if not isinstance(item, dict):
        return None
    product_id = item.get("productId")
    if isinstance(product_id, bool) or not isinstance(product_id, (int, str)):
        return None
    qty = line_qty(item)
    if qty <= 0:
        return None
    price = item.get("price")
    if isinstance(price, bool) or not isinstance(price, (int, float)) or not math.isfinite(price):
        price = None
    name = item.get("name")
    return {
        "productId": product_id,
        "qty": qty,
        "name": name if isinstance(name, str) else None,
        "price": price,
    }


class CartStore:
    def __init__(self, storage):
        self.storage = storage
        self._lines: List[Dict[str, Any]] = []
        self.load()

    def load(self) -> List[Dict[str, Any]]:
        """Read the stored cart; anything unreadable is an empty cart."""
        try:
            raw = self.storage.get_item(CART_KEY)
            items = json.loads(raw) if raw else []
        except (TypeError, ValueError) as e:
            logger.warning("Discarding unreadable cart: %s", e)
            items = []
        if not isinstance(items, list):
            items = []
        lines = (clean_line(it) for it in items)
        self._lines = [line for line in lines if line is not None]
        return self._lines

    def _save(self) -> None:
        self.storage.set_item(CART_KEY, json.dumps(self._lines))

    def add_to_cart(self, product_id, snapshot: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        snapshot = snapshot or {}
        existing = next(
            (it for it in self._lines if str(it.get("productId")) == str(product_id)), None
        )
        if existing:
            existing["qty"] = line_qty(existing) + 1
            line = existing
        else:
            line = {
                "productId": product_id,
                "qty": 1,
                "name": snapshot.get("name"),
                "price": snapshot.get("price"),
            }
            self._lines.append(line)
        self._save()
        return line

    def get_count(self) -> int:
        return sum(line_qty(it) for it in self._lines)

    def lines(self) -> List[Dict[str, Any]]:
        return [dict(it) for it in self._lines]

    def total(self) -> float:
        total = 0.0
        for it in self._lines:
            price = it.get("price")
            if isinstance(price, (int, float)) and not isinstance(price, bool):
                total += price * line_qty(it)
        return round(total, 2)

    def clear(self) -> None:
        self._lines = []
        self.storage.remove_item(CART_KEY)


def cart_for_user(db: Session, user_id: int) -> CartStore:
    return CartStore(ClientStateStorage(db, user_id))
