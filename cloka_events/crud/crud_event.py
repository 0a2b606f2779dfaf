# cloka_events/crud/crud_event.py
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from sqlalchemy.orm import Session

from cloka_events.crud.base import CRUDBase
from cloka_events.models.event import Event
from cloka_events.schemas.event import EventCreate, EventUpdate
from cloka_events.utils.timeutils import ensure_utc, utcnow


class CRUDEvent(CRUDBase[Event, EventCreate, EventUpdate]):
    def create_with_owner(
        self, db: Session, *, obj_in: EventCreate, owner_id: str
    ) -> Event:
        data = obj_in.model_dump()
        data["start_date"] = ensure_utc(data["start_date"])
        db_obj = self.model(**data, created_by=owner_id)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update(
        self,
        db: Session,
        *,
        db_obj: Event,
        obj_in: Union[EventUpdate, Dict[str, Any]],
    ) -> Event:
        if not isinstance(obj_in, dict):
            obj_in = obj_in.model_dump(exclude_unset=True)
        if obj_in.get("start_date") is not None:
            obj_in["start_date"] = ensure_utc(obj_in["start_date"])
        return super().update(db, db_obj=db_obj, obj_in=obj_in)

    def get_upcoming(
        self, db: Session, *, now: Optional[datetime] = None
    ) -> List[Event]:
        """Events that have not started yet, soonest first."""
        now = now or utcnow()
        return (
            db.query(self.model)
            .filter(self.model.start_date >= now)
            .order_by(self.model.start_date.asc())
            .all()
        )

    def get_all_newest_first(self, db: Session) -> List[Event]:
        return db.query(self.model).order_by(self.model.start_date.desc()).all()


event = CRUDEvent(Event)
