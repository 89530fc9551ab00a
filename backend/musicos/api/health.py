from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text

from musicos.api.deps import get_blob_store, get_mailer
from musicos.db import engine

router = APIRouter()


@router.get("/health", tags=["health"])
def health(mailer=Depends(get_mailer), blob_store=Depends(get_blob_store)):
    db_ok = False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            db_ok = True
    except Exception:
        db_ok = False
    mail_ok = mailer.health_check()
    storage_ok = blob_store.health_check()

    return {
        "status": "ok" if db_ok and mail_ok and storage_ok else "degraded",
        "db": db_ok,
        "mail": mail_ok,
        "storage": storage_ok,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
