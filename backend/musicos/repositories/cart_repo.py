from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from musicos.models.cart import SessionCart
from musicos.models.cart_item import SessionCartItem


class CartRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_uuid(self, cart_uuid: str) -> Optional[SessionCart]:
        return self.db.query(SessionCart).filter(SessionCart.cart_uuid == cart_uuid).first()

    def create(self, cart_uuid: str) -> SessionCart:
        c = SessionCart(cart_uuid=cart_uuid)
        self.db.add(c)
        self.db.flush()
        return c

    def add_or_increment(self, cart: SessionCart, offer_id: str, qty: int, price: Decimal) -> SessionCartItem:
        item = next((it for it in cart.items if it.offer_id == offer_id), None)
        if item:
            item.quantity += qty
            item.price_snapshot = price
        else:
            item = SessionCartItem(offer_id=offer_id, quantity=qty, price_snapshot=price)
            cart.items.append(item)
        self.db.flush()
        return item

    def remove_offer(self, cart: SessionCart, offer_id: str):
        for it in [it for it in cart.items if it.offer_id == offer_id]:
            cart.items.remove(it)
        self.db.flush()

    def clear(self, cart: SessionCart):
        cart.items.clear()
        self.db.flush()
