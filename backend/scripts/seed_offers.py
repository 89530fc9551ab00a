#!/usr/bin/env python3
"""
Seed gig offers (and optionally an admin account) for local development.

Usage:
    python scripts/seed_offers.py
    python scripts/seed_offers.py --file offers.json --admin-email admin@musicosbooking.pt --admin-password s3gredo1
"""
import argparse
import json
import os
import sys
import uuid
from decimal import Decimal

# allow running from repo/scripts
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from werkzeug.security import generate_password_hash

from musicos.db import SessionLocal, init_db
from musicos.models.user import User
from musicos.repositories.offer_repo import OfferRepository
from musicos.repositories.user_repo import UserRepository

DEFAULT_OFFERS = [
    {"id": "gig1", "title": "Concerto acústico (1h)", "price": "150.00"},
    {"id": "gig2", "title": "Banda para casamento (4h)", "price": "1200.00"},
    {"id": "dj-set", "title": "DJ set (3h)", "price": "450.00"},
    {"id": "fado", "title": "Noite de fado (2h)", "price": "600.00"},
]


def seed_offers(entries):
    db = SessionLocal()
    try:
        repo = OfferRepository(db)
        for entry in entries:
            repo.create_or_update(
                offer_id=entry["id"],
                title=entry.get("title") or entry["id"],
                price=Decimal(str(entry.get("price", "0"))),
                musician_uid=entry.get("musician_uid"),
                description=entry.get("description"),
            )
        db.commit()
        print("Seeded offers:", len(entries))
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def seed_admin(email, password):
    db = SessionLocal()
    try:
        users = UserRepository(db)
        if users.get_by_email(email):
            print("Admin already exists:", email)
            return
        users.add(
            User(
                uid=uuid.uuid4().hex,
                email=email.strip().lower(),
                nome="Administrador",
                tipo="admin",
                password_hash=generate_password_hash(password),
            )
        )
        db.commit()
        print("Created admin:", email)
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--file", "-f", help="JSON list of offers ({id, title, price, ...})")
    parser.add_argument("--admin-email")
    parser.add_argument("--admin-password")
    args = parser.parse_args()

    init_db()
    entries = DEFAULT_OFFERS
    if args.file:
        if not os.path.exists(args.file):
            print("File not found:", args.file)
            sys.exit(1)
        with open(args.file, encoding="utf-8") as fh:
            entries = json.load(fh)
    seed_offers(entries)
    if args.admin_email and args.admin_password:
        seed_admin(args.admin_email, args.admin_password)
