import os
import sys
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import argparse
import concurrent.futures
import json

import requests

BASE = os.environ.get("MUSICOS_BASE", "http://127.0.0.1:8000")


def login(email, password):
    r = requests.post(f"{BASE}/api/auth/login", json={"email": email, "password": password}, timeout=10)
    r.raise_for_status()
    return r.json()["token"]


def checkout_task(i, token, payload):
    headers = {"Authorization": f"Bearer {token}"}
    try:
        r = requests.post(f"{BASE}/api/orders", json=payload, headers=headers, timeout=20)
        return (i, r.status_code, r.text)
    except requests.RequestException as e:
        return (i, "ERR", str(e))


def run_checkout_concurrent(workers, token, payload):
    print(f"Running checkout test: workers={workers}, items={payload['items']}")
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as ex:
        futures = [ex.submit(checkout_task, i, token, payload) for i in range(workers)]
        results = [f.result() for f in futures]
    for r in results:
        print(r[0], r[1], r[2][:200])
    refs = [json.loads(r[2]).get("paymentReference") for r in results if r[1] == 201]
    print(f"Created {len(refs)} orders, unique payment references: {len(set(refs))}")
    if len(refs) != len(set(refs)):
        sys.exit(1)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Fire concurrent checkouts and check payment reference uniqueness.")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--offer", default="gig1")
    parser.add_argument("--qty", type=int, default=1)
    parser.add_argument("--workers", type=int, default=8)
    parser.add_argument("--method", default="bank_transfer")
    args = parser.parse_args()

    payload = {
        "email": args.email,
        "nome": "Teste Concorrencia",
        "payment_method": args.method,
        "items": [{"id": args.offer, "quantity": args.qty}],
    }
    run_checkout_concurrent(args.workers, login(args.email, args.password), payload)
