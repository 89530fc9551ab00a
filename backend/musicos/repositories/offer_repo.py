from typing import List, Optional

from musicos.models.offer import Offer
from sqlalchemy.orm import Session


class OfferRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_active(self, offer_id: str) -> Optional[Offer]:
        return (
            self.db.query(Offer)
            .filter(Offer.id == offer_id, Offer.active == True)  # noqa: E712
            .first()
        )

    def list_active(self, musician_uid: Optional[str] = None) -> List[Offer]:
        query = self.db.query(Offer).filter(Offer.active == True)  # noqa: E712
        if musician_uid:
            query = query.filter(Offer.musician_uid == musician_uid)
        return query.order_by(Offer.title).all()

    def create_or_update(
        self,
        offer_id: str,
        title: str,
        price,
        musician_uid: Optional[str] = None,
        description: Optional[str] = None,
        active: bool = True,
    ) -> Offer:
        o = self.db.query(Offer).filter(Offer.id == offer_id).first()
        if o:
            o.title = title
            o.price = price
            o.musician_uid = musician_uid
            o.description = description
            o.active = active
        else:
            o = Offer(
                id=offer_id,
                title=title,
                price=price,
                musician_uid=musician_uid,
                description=description,
                active=active,
            )
            self.db.add(o)
        self.db.flush()
        return o
