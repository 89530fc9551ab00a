import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, List, Mapping, Optional

from sqlalchemy.orm import Session
from werkzeug.utils import secure_filename

from musicos.adapters.blob_store import BlobStoreError
from musicos.adapters.identity import CurrentUser
from musicos.adapters.mailer import MailerError
from musicos.config import settings as default_settings
from musicos.errors import (
    ConflictError,
    EmptyCart,
    ExternalServiceError,
    FileTooLarge,
    MissingCustomerData,
    MissingFile,
    NotAuthenticated,
    NotFoundError,
    UnsupportedType,
    ValidationError,
)
from musicos.models.order import Order, OrderStatus, PaymentMethod
from musicos.repositories.order_repo import DuplicateReference, OrderRepository
from musicos.services import email_templates
from musicos.services.cart import Cart
from musicos.services.payment_instructions import format_amount
from musicos.services.payment_service import PaymentService, parse_method
from musicos.utils.clock import epoch_millis, utcnow
from musicos.utils.references import generate_payment_reference, is_payment_reference
from musicos.utils.sanitize import sanitize
from musicos.utils.validators import normalize_phone, validate_email, validate_phone

log = logging.getLogger("checkout")

ALLOWED_PROOF_TYPES = ("image/jpeg", "image/png", "application/pdf")


@dataclass
class ProofFile:
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def serialize_order(order: Order) -> Dict:
    return {
        "id": order.id,
        "uid": order.uid,
        "paymentReference": order.payment_reference,
        "customerEmail": order.customer_email,
        "customerName": order.customer_name,
        "customerPhone": order.customer_phone,
        "items": [
            {"id": ln.item_id, "name": ln.name, "price": ln.price, "quantity": ln.quantity}
            for ln in order.lines
        ],
        "totalAmount": order.total_amount,
        "status": order.status,
        "paymentMethod": order.payment_method,
        "bankDetails": dict(order.bank_details),
        "createdAt": order.created_at,
        "expiresAt": order.expires_at,
        "proofOfPaymentUrl": order.proof_of_payment_url,
        "proofUploadedAt": order.proof_uploaded_at,
        "paidAt": order.paid_at,
        "confirmedAt": order.confirmed_at,
        "notes": order.notes,
    }


class CheckoutService:
    """
    Order workflow: checkout, proof of payment, confirmation and queries.

    blob_store and mailer are optional collaborators; without a blob store
    uploads fail with ExternalServiceError, without a mailer no notification
    is sent.
    """

    def __init__(
        self,
        db: Session,
        blob_store=None,
        mailer=None,
        settings=default_settings,
        clock=utcnow,
    ):
        self.db = db
        self.orders = OrderRepository(db)
        self.blob_store = blob_store
        self.mailer = mailer
        self.settings = settings
        self.clock = clock
        self.payments = PaymentService(settings)

    # -- checkout ---------------------------------------------------------

    def _customer_fields(self, customer_data: Mapping, method: PaymentMethod) -> Dict:
        email = (customer_data.get("email") or "").strip()
        nome = sanitize(customer_data.get("nome") or customer_data.get("name") or "")
        if not email or not nome:
            raise MissingCustomerData()
        result = validate_email(email)
        if not result.valid:
            raise ValidationError(result.error)

        phone = (customer_data.get("telefone") or customer_data.get("phone") or "").strip()
        if phone:
            result = validate_phone(phone)
            if not result.valid:
                raise ValidationError(result.error)
            phone = normalize_phone(phone)
        elif method is PaymentMethod.MBWAY:
            raise ValidationError("Telemóvel obrigatório para MB WAY")

        notes = sanitize(customer_data.get("notas") or customer_data.get("notes") or "")
        return {
            "customer_email": email.lower(),
            "customer_name": nome,
            "customer_phone": phone,
            "notes": notes,
        }

    def create_order(
        self,
        cart: Cart,
        customer_data: Mapping,
        user: Optional[CurrentUser],
        payment_method: str = PaymentMethod.BANK_TRANSFER.value,
    ) -> Dict:
        if user is None:
            raise NotAuthenticated()
        method = parse_method(payment_method)
        fields = self._customer_fields(customer_data or {}, method)
        if len(cart) == 0:
            raise EmptyCart()

        lines = [it.to_dict() for it in cart.items]
        total = cart.total()
        now = self.clock()
        data = dict(
            fields,
            uid=user.uid,
            total_amount=total,
            status=OrderStatus.PENDING.value,
            payment_method=method.value,
            bank_details=self.settings.bank_details(),
            created_at=now,
            expires_at=now + timedelta(days=self.settings.ORDER_TTL_DAYS),
        )

        attempts = max(1, self.settings.REFERENCE_MAX_ATTEMPTS)
        for attempt in range(1, attempts + 1):
            reference = generate_payment_reference(self.settings.PAYMENT_REFERENCE_STYLE, now)
            try:
                order = self.orders.create(dict(data, payment_reference=reference), lines)
                break
            except DuplicateReference:
                log.warning("payment reference collision %s (attempt %d/%d)", reference, attempt, attempts)
                if attempt == attempts:
                    raise ExternalServiceError("Erro ao criar pedido")

        log.info("order created %s ref=%s total=%s uid=%s", order.id, order.payment_reference, total, user.uid)
        self._notify_order_created(order)
        return {
            "success": True,
            "orderId": order.id,
            "paymentReference": order.payment_reference,
            "totalAmount": order.total_amount,
            "order": serialize_order(order),
        }

    # -- proof of payment ---------------------------------------------------

    def _check_proof(self, file: Optional[ProofFile]):
        if file is None or not file.data:
            raise MissingFile()
        if file.content_type not in ALLOWED_PROOF_TYPES:
            raise UnsupportedType()
        if file.size > self.settings.MAX_PROOF_BYTES:
            raise FileTooLarge()

    def upload_proof_of_payment(self, order_id: str, file: Optional[ProofFile]) -> Dict:
        self._check_proof(file)
        order = self.orders.get_or_raise(order_id)
        if order.proof_of_payment_url:
            raise ConflictError("Comprovativo já enviado para este pedido")
        if self.blob_store is None:
            raise ExternalServiceError("Erro ao fazer upload do comprovativo")

        now = self.clock()
        safe_name = secure_filename(file.filename or "") or "comprovativo"
        path = f"proofs/{order_id}/{epoch_millis(now)}_{safe_name}"
        try:
            ref = self.blob_store.put(path, file.data, file.content_type)
            download_url = self.blob_store.get_download_url(ref)
        except BlobStoreError:
            log.exception("proof upload failed for order %s", order_id)
            raise ExternalServiceError("Erro ao fazer upload do comprovativo")

        self.orders.update(order_id, proof_of_payment_url=download_url, proof_uploaded_at=now)
        log.info("proof of payment stored for order %s at %s", order_id, path)
        return {"success": True, "downloadUrl": download_url}

    # -- administrative transitions ------------------------------------------

    def confirm_payment(self, order_id: str) -> Dict:
        """Trusted admin action: no bank receipt is verified here."""
        order = self.orders.get_or_raise(order_id)
        if order.status == OrderStatus.PAID.value:
            return {"success": True, "message": "Pagamento já confirmado"}
        if order.status != OrderStatus.PENDING.value:
            raise ConflictError(f"Pedido não pode ser pago no estado {order.status}")
        order = self.orders.update(order_id, status=OrderStatus.PAID.value, paid_at=self.clock())
        log.info("payment confirmed for order %s", order_id)
        self._notify_payment_received(order)
        return {"success": True, "message": "Pagamento confirmado com sucesso"}

    def confirm_booking(self, order_id: str) -> Dict:
        order = self.orders.get_or_raise(order_id)
        if order.status == OrderStatus.CONFIRMED.value:
            return {"success": True, "message": "Reserva já confirmada"}
        if order.status != OrderStatus.PAID.value:
            raise ConflictError("Só pedidos pagos podem ser confirmados")
        self.orders.update(order_id, status=OrderStatus.CONFIRMED.value, confirmed_at=self.clock())
        log.info("booking confirmed for order %s", order_id)
        return {"success": True, "message": "Reserva confirmada com sucesso"}

    def expire_overdue(self) -> List[str]:
        if not self.settings.ORDER_EXPIRY_ENFORCED:
            return []
        ids = self.orders.expire_overdue(self.clock())
        if ids:
            log.info("expired %d overdue pending orders", len(ids))
        return ids

    # -- queries ------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        return self.orders.get_or_raise(order_id)

    def get_order_status(self, order_id: str) -> Dict:
        return serialize_order(self.orders.get_or_raise(order_id))

    def find_by_reference(self, reference: str) -> Dict:
        """Reconcile a bank transfer: the reference printed on it leads to the order."""
        reference = (reference or "").strip().upper()
        if not is_payment_reference(reference):
            raise ValidationError("Referência de pagamento inválida")
        order = self.orders.get_by_reference(reference)
        if not order:
            raise NotFoundError("Pedido não encontrado")
        return serialize_order(order)

    def get_user_orders(self, user: Optional[CurrentUser]) -> List[Dict]:
        if user is None:
            raise NotAuthenticated()
        return [serialize_order(o) for o in self.orders.list_for_owner(user.uid)]

    def get_payment_instructions(self, order_id: str) -> Dict:
        return self.payments.instructions_for(self.orders.get_or_raise(order_id))

    # -- notifications (best effort, never undo a committed order) ---------------

    def _send(self, to: str, subject: str, html: str):
        if self.mailer is None:
            return
        try:
            self.mailer.send(to, subject, html)
        except MailerError:
            log.exception("notification to %s failed", to)

    def _notify_order_created(self, order: Order):
        if self.mailer is None:
            return
        instructions = self.payments.instructions_for(order)
        text = instructions.get("text") or instructions.get("instructions", "")
        subject, html = email_templates.order_created(
            order.customer_name, order.payment_reference, format_amount(order.total_amount), text
        )
        self._send(order.customer_email, subject, html)

    def _notify_payment_received(self, order: Order):
        subject, html = email_templates.payment_received(
            order.customer_name, order.payment_reference, format_amount(order.total_amount), order.payment_method
        )
        self._send(order.customer_email, subject, html)
