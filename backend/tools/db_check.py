import json
import sqlite3
import sys

DB = sys.argv[1] if len(sys.argv) > 1 else "dev.db"
ORDER_ID = sys.argv[2] if len(sys.argv) > 2 else None

conn = sqlite3.connect(DB)
cur = conn.cursor()

print("=== Recent Orders ===")
if ORDER_ID:
    cur.execute(
        "SELECT id, uid, payment_reference, status, payment_method, total_amount, bank_details, created_at, expires_at, proof_of_payment_url, paid_at FROM orders WHERE id=?",
        (ORDER_ID,),
    )
else:
    cur.execute(
        "SELECT id, uid, payment_reference, status, payment_method, total_amount, bank_details, created_at, expires_at, proof_of_payment_url, paid_at FROM orders ORDER BY created_at DESC LIMIT 20"
    )
for r in cur.fetchall():
    bank = r[6]
    try:
        bank = json.loads(bank) if isinstance(bank, str) else bank
    except ValueError:
        pass
    print(
        {
            "id": r[0],
            "uid": r[1],
            "payment_reference": r[2],
            "status": r[3],
            "payment_method": r[4],
            "total_amount": r[5],
            "iban": bank.get("iban") if isinstance(bank, dict) else bank,
            "created_at": r[7],
            "expires_at": r[8],
            "proof": r[9],
            "paid_at": r[10],
        }
    )

if ORDER_ID:
    print(f"\n=== Lines for order {ORDER_ID} ===")
    cur.execute(
        "SELECT position, item_id, name, quantity, price FROM order_lines WHERE order_id=? ORDER BY position",
        (ORDER_ID,),
    )
    for r in cur.fetchall():
        print(r)

print("\n=== Orders by status ===")
cur.execute("SELECT status, COUNT(*), SUM(total_amount) FROM orders GROUP BY status")
for r in cur.fetchall():
    print(r)

print("\n=== Duplicate payment references (should be empty) ===")
cur.execute("SELECT payment_reference, COUNT(*) FROM orders GROUP BY payment_reference HAVING COUNT(*) > 1")
for r in cur.fetchall():
    print(r)

conn.close()
