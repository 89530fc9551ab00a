import uuid
from typing import List, Optional

from sqlalchemy.orm import Session

from musicos.errors import InvalidItem, NotFoundError, ValidationError
from musicos.models.cart import SessionCart
from musicos.repositories.cart_repo import CartRepository
from musicos.repositories.offer_repo import OfferRepository
from musicos.services.cart import Cart, CartItem
from musicos.utils.transactions import atomic


class CartService:
    """
    Server-side cart tied to a cart_uuid cookie. Unit prices always come from
    the offer catalogue, never from the client.
    """

    def __init__(self, db: Session):
        self.db = db
        self.cart_repo = CartRepository(db)
        self.offer_repo = OfferRepository(db)

    def find(self, cart_uuid: Optional[str]) -> Optional[SessionCart]:
        return self.cart_repo.get_by_uuid(cart_uuid) if cart_uuid else None

    def get_or_create(self, cart_uuid: Optional[str] = None) -> SessionCart:
        c = self.find(cart_uuid)
        if c:
            return c
        with atomic(self.db, "Erro ao criar carrinho"):
            c = self.cart_repo.create(uuid.uuid4().hex)
        return c

    def add_item(self, cart: SessionCart, offer_id: str, qty: int):
        if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
            raise InvalidItem("Item inválido - quantidade inválida")
        offer = self.offer_repo.get_active(offer_id)
        if not offer:
            raise NotFoundError("Oferta não encontrada")
        with atomic(self.db, "Erro ao atualizar carrinho"):
            item = self.cart_repo.add_or_increment(cart, offer.id, qty, offer.price)
        return item

    def remove_item(self, cart: SessionCart, offer_id: str):
        with atomic(self.db, "Erro ao atualizar carrinho"):
            self.cart_repo.remove_offer(cart, offer_id)

    def clear(self, cart: SessionCart):
        with atomic(self.db, "Erro ao limpar carrinho"):
            self.cart_repo.clear(cart)

    def price_changes(self, cart: SessionCart) -> List[str]:
        """Offer ids whose catalogue price differs from the price seen when added."""
        changed = []
        for it in cart.items:
            offer = self.offer_repo.get_active(it.offer_id)
            if offer and offer.price != it.price_snapshot:
                changed.append(it.offer_id)
        return changed

    def price_items(self, items) -> Cart:
        """Domain cart from (offer id, quantity) pairs, priced from the current catalogue."""
        domain = Cart()
        for offer_id, quantity in items:
            offer = self.offer_repo.get_active(offer_id)
            if not offer:
                raise ValidationError(f"Oferta indisponível: {offer_id}")
            domain.add_item(CartItem(id=offer.id, price=offer.price, quantity=quantity, name=offer.title))
        return domain

    def to_cart(self, cart: SessionCart) -> Cart:
        return self.price_items((it.offer_id, it.quantity) for it in cart.items)
