from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from musicos.db import get_db
from musicos.repositories.offer_repo import OfferRepository
from musicos.schemas.offer_schema import OfferOut

router = APIRouter(tags=["offers"])


@router.get("", summary="List active offers")
def list_offers(musician_uid: Optional[str] = None, db: Session = Depends(get_db)):
    repo = OfferRepository(db)
    items = [OfferOut.model_validate(o) for o in repo.list_active(musician_uid)]
    return {"items": items, "total": len(items)}
