from datetime import datetime
from typing import Dict, List, Optional
from uuid import uuid4

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from musicos.errors import ConflictError, NotFoundError
from musicos.models.order import Order, OrderLine, OrderStatus
from musicos.utils.transactions import atomic


class DuplicateReference(ConflictError):
    default_message = "Referência de pagamento duplicada"


class OrderRepository:
    """Create/read/update order documents keyed by a generated id."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, data: Dict, lines: List[Dict]) -> Order:
        order = Order(id=uuid4().hex, **data)
        for position, line in enumerate(lines):
            order.lines.append(
                OrderLine(
                    position=position,
                    item_id=line["id"],
                    name=line.get("name"),
                    quantity=line["quantity"],
                    price=line["price"],
                )
            )
        try:
            with atomic(self.db, "Erro ao criar pedido"):
                self.db.add(order)
        except IntegrityError as exc:
            raise DuplicateReference() from exc
        return order

    def get(self, order_id: str) -> Optional[Order]:
        return self.db.query(Order).filter(Order.id == order_id).first()

    def get_by_reference(self, reference: str) -> Optional[Order]:
        return self.db.query(Order).filter(Order.payment_reference == reference).first()

    def get_or_raise(self, order_id: str) -> Order:
        order = self.get(order_id)
        if not order:
            raise NotFoundError("Pedido não encontrado")
        return order

    def update(self, order_id: str, **fields) -> Order:
        with atomic(self.db, "Erro ao atualizar pedido"):
            order = self.get_or_raise(order_id)
            for name, value in fields.items():
                setattr(order, name, value)
        return order

    def list_for_owner(self, uid: str) -> List[Order]:
        return (
            self.db.query(Order)
            .filter(Order.uid == uid)
            .order_by(Order.created_at.desc(), Order.id)
            .all()
        )

    def expire_overdue(self, now: datetime) -> List[str]:
        """Mark pending orders past expires_at as expired; returns their ids."""
        with atomic(self.db, "Erro ao expirar pedidos"):
            overdue = (
                self.db.query(Order)
                .filter(
                    Order.status == OrderStatus.PENDING.value,
                    Order.expires_at <= now,
                )
                .all()
            )
            for order in overdue:
                order.status = OrderStatus.EXPIRED.value
            return [o.id for o in overdue]
