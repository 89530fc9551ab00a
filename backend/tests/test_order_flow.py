import re

REFERENCE_RE = re.compile(r"^MUS-\d+-[A-Z0-9]{5}$")
PDF = ("recibo.pdf", b"%PDF-1.4 comprovativo", "application/pdf")


def checkout(client, headers, items=None, **customer):
    payload = {"email": "ana@example.pt", "nome": "Ana Silva"}
    payload.update(customer)
    if items is not None:
        payload["items"] = items
    return client.post("/api/orders", json=payload, headers=headers)


def test_checkout_single_gig(client, offers, register, mailer):
    uid, headers = register()
    r = checkout(client, headers, items=[{"id": "gig1", "quantity": 1}])
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["totalAmount"] == 150
    assert REFERENCE_RE.match(body["paymentReference"])
    assert body["order"]["status"] == "pending"
    assert body["order"]["uid"] == uid
    assert body["order"]["bankDetails"]["iban"] == "LT98 3250 0007 9827 7556"
    assert mailer.outbox[-1]["to"] == "ana@example.pt"


def test_checkout_prices_come_from_catalogue(client, offers, register):
    uid, headers = register()
    r = checkout(client, headers, items=[{"id": "gig1", "quantity": 2, "price": 1}, {"id": "gig2", "quantity": 1}])
    assert r.status_code == 201
    assert r.json()["totalAmount"] == 1500


def test_checkout_requires_login(client, offers):
    r = checkout(client, {}, items=[{"id": "gig1", "quantity": 1}])
    assert r.status_code == 401
    assert r.json()["error"] == "Token de autenticação obrigatório"


def test_checkout_errors(client, offers, register):
    uid, headers = register()

    r = checkout(client, headers, items=[])
    assert r.status_code == 400
    assert r.json()["error"] == "Carrinho vazio"

    r = client.post("/api/orders", json={"items": [{"id": "gig1", "quantity": 1}]}, headers=headers)
    assert r.status_code == 400
    assert r.json()["error"] == "Email e nome são obrigatórios"

    r = checkout(client, headers, items=[{"id": "old", "quantity": 1}])
    assert r.status_code == 400
    assert r.json()["error"] == "Oferta indisponível: old"

    r = checkout(client, headers, items=[{"id": "gig1", "quantity": 0}])
    assert r.status_code == 400


def test_session_cart_checkout(client, offers, register):
    uid, headers = register()
    client.post("/api/cart/items", json={"id": "gig1", "quantity": 1})
    r = client.post("/api/cart/items", json={"id": "gig1", "quantity": 1})
    assert r.json()["items"][0]["quantity"] == 2

    r = checkout(client, headers)
    assert r.status_code == 201
    assert r.json()["totalAmount"] == 300

    assert client.get("/api/cart").json()["items"] == []


def test_list_and_get_orders(client, offers, register):
    uid, headers = register()
    first = checkout(client, headers, items=[{"id": "gig1", "quantity": 1}]).json()["orderId"]
    second = checkout(client, headers, items=[{"id": "gig2", "quantity": 1}]).json()["orderId"]

    r = client.get("/api/orders", headers=headers)
    assert r.status_code == 200
    assert {o["id"] for o in r.json()["orders"]} == {first, second}

    r = client.get(f"/api/orders/{first}", headers=headers)
    assert r.status_code == 200
    assert r.json()["order"]["totalAmount"] == 150


def test_orders_are_private(client, offers, register, admin_headers):
    uid, headers = register()
    order_id = checkout(client, headers, items=[{"id": "gig1", "quantity": 1}]).json()["orderId"]
    other_uid, other = register(nome="Rui Costa")

    assert client.get(f"/api/orders/{order_id}", headers=other).status_code == 403
    assert client.get(f"/api/orders/{order_id}/instructions", headers=other).status_code == 403
    assert client.get("/api/orders", headers=other).json()["orders"] == []
    assert client.get(f"/api/orders/{order_id}", headers=admin_headers).status_code == 200
    assert client.get("/api/orders/nao-existe", headers=headers).status_code == 404


def test_payment_instructions(client, offers, register):
    uid, headers = register()
    body = checkout(client, headers, items=[{"id": "gig1", "quantity": 1}]).json()
    r = client.get(f"/api/orders/{body['orderId']}/instructions", headers=headers)
    assert r.status_code == 200
    instructions = r.json()["instructions"]
    assert instructions["nextStep"] == "upload_proof"
    assert f"REFERÊNCIA: {body['paymentReference']}" in instructions["text"]


def test_paypal_checkout(client, offers, register):
    uid, headers = register()
    body = checkout(client, headers, items=[{"id": "gig1", "quantity": 1}], payment_method="paypal").json()
    assert body["totalAmount"] == 150
    instructions = client.get(f"/api/orders/{body['orderId']}/instructions", headers=headers).json()["instructions"]
    assert instructions["paypalLink"].endswith("/155.45EUR")


def test_upload_proof(client, offers, register):
    uid, headers = register()
    order_id = checkout(client, headers, items=[{"id": "gig1", "quantity": 1}]).json()["orderId"]

    r = client.post(f"/api/orders/{order_id}/proof", files={"file": PDF}, headers=headers)
    assert r.status_code == 200
    url = r.json()["downloadUrl"]
    assert f"/uploads/proofs/{order_id}/" in url

    order = client.get(f"/api/orders/{order_id}", headers=headers).json()["order"]
    assert order["proofOfPaymentUrl"] == url

    r = client.post(f"/api/orders/{order_id}/proof", files={"file": PDF}, headers=headers)
    assert r.status_code == 409


def test_upload_proof_rejections(client, offers, register):
    uid, headers = register()
    order_id = checkout(client, headers, items=[{"id": "gig1", "quantity": 1}]).json()["orderId"]
    url = f"/api/orders/{order_id}/proof"

    r = client.post(url, files={"file": ("nota.txt", b"pago", "text/plain")}, headers=headers)
    assert r.status_code == 400
    assert r.json()["error"] == "Tipo de ficheiro não suportado (JPEG, PNG, PDF)"

    big = ("recibo.pdf", b"0" * (6 * 1024 * 1024), "application/pdf")
    r = client.post(url, files={"file": big}, headers=headers)
    assert r.status_code == 400
    assert r.json()["error"] == "Ficheiro muito grande (máximo 5MB)"

    r = client.post(url, headers=headers)
    assert r.status_code == 400
    assert r.json()["error"] == "Ficheiro obrigatório"

    other_uid, other = register(nome="Rui Costa")
    assert client.post(url, files={"file": PDF}, headers=other).status_code == 403


def test_admin_confirms_payment_and_booking(client, offers, register, admin_headers, mailer):
    uid, headers = register()
    order_id = checkout(client, headers, items=[{"id": "gig1", "quantity": 1}]).json()["orderId"]

    r = client.post(f"/api/admin/orders/{order_id}/confirm-payment", headers=headers)
    assert r.status_code == 403

    r = client.post(f"/api/admin/orders/{order_id}/confirm-payment", headers=admin_headers)
    assert r.status_code == 200
    assert mailer.outbox[-1]["subject"] == "Pagamento Confirmado"
    order = client.get(f"/api/orders/{order_id}", headers=headers).json()["order"]
    assert order["status"] == "paid"
    assert order["paidAt"]

    r = client.post(f"/api/admin/orders/{order_id}/confirm", headers=admin_headers)
    assert r.status_code == 200
    assert client.get(f"/api/orders/{order_id}", headers=headers).json()["order"]["status"] == "confirmed"

    r = client.post(f"/api/admin/orders/{order_id}/confirm-payment", headers=admin_headers)
    assert r.status_code == 409


def test_admin_confirm_unknown_order(client, admin_headers):
    r = client.post("/api/admin/orders/nao-existe/confirm-payment", headers=admin_headers)
    assert r.status_code == 404
    assert r.json()["error"] == "Pedido não encontrado"


def test_admin_finds_order_by_reference(client, offers, register, admin_headers):
    uid, headers = register()
    body = checkout(client, headers, items=[{"id": "gig1", "quantity": 1}]).json()
    url = f"/api/admin/orders/by-reference/{body['paymentReference']}"

    assert client.get(url, headers=headers).status_code == 403
    r = client.get(url, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["order"]["id"] == body["orderId"]

    r = client.get("/api/admin/orders/by-reference/nao-e-referencia", headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["error"] == "Referência de pagamento inválida"
    r = client.get("/api/admin/orders/by-reference/MB2024030512345", headers=admin_headers)
    assert r.status_code == 404
