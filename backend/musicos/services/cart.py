"""
In-memory cart aggregator.

A Cart belongs to one checkout session and is not synchronized. Lines are
identified by item id: adding an id that is already present sums the
quantities instead of appending a second line.
"""
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Mapping, Optional, Union

from musicos.errors import InvalidItem
from musicos.utils.validators import parse_amount

CENT = Decimal("0.01")


@dataclass
class CartItem:
    id: str
    price: Decimal
    quantity: int
    name: Optional[str] = None

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _coerce_item(item: Union[CartItem, Mapping[str, Any]]) -> CartItem:
    if isinstance(item, CartItem):
        item = item.to_dict()
    item_id, price, quantity = item.get("id"), item.get("price"), item.get("quantity")
    if not item_id or not price or not quantity:
        raise InvalidItem()
    price = parse_amount(price)
    if price is None or price < 0:
        raise InvalidItem("Item inválido - preço inválido")
    # orders store cents; line prices and the total must round the same way
    price = price.quantize(CENT, rounding=ROUND_HALF_UP)
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidItem("Item inválido - quantidade inválida")
    return CartItem(id=str(item_id), price=price, quantity=quantity, name=item.get("name"))


class Cart:
    def __init__(self, items=None):
        self._items: List[CartItem] = []
        for it in items or ():
            self.add_item(it)

    @property
    def items(self) -> List[CartItem]:
        return list(self._items)

    def __len__(self):
        return len(self._items)

    def add_item(self, item) -> Decimal:
        new = _coerce_item(item)
        existing = next((it for it in self._items if it.id == new.id), None)
        if existing:
            existing.quantity += new.quantity
        else:
            self._items.append(new)
        return self.total()

    def remove_item(self, item_id: str) -> Decimal:
        self._items = [it for it in self._items if it.id != item_id]
        return self.total()

    def total(self) -> Decimal:
        return sum((it.subtotal for it in self._items), Decimal("0"))

    def snapshot(self) -> Dict[str, Any]:
        return {
            "items": [it.to_dict() for it in self._items],
            "total": self.total(),
            "itemCount": len(self._items),
        }

    def clear(self):
        self._items = []
