"""The shared session that all connected devices read and overwrite."""
import logging
import threading
import time
from typing import Callable, Optional

from pydantic import TypeAdapter
from sqlalchemy.orm import Session

from splitter.models import SharedSession
from splitter.schemas import Bill, Person, SyncState

logger = logging.getLogger(__name__)

SESSION_ROW_ID = 1

_people_adapter = TypeAdapter(list[Person])
_bills_adapter = TypeAdapter(list[Bill])


def _now_ms() -> int:
    return int(time.time() * 1000)


class SessionStore:
    """
    Serializes sync requests: reading the stored state and replacing it
    happen under one lock, so concurrent writers cannot interleave.
    """

    def __init__(self, clock_ms: Callable[[], int] = _now_ms):
        self._lock = threading.Lock()
        self.clock_ms = clock_ms

    def _load_row(self, db: Session) -> SharedSession:
        row = db.query(SharedSession).filter(SharedSession.id == SESSION_ROW_ID).first()
        if row is None:
            row = SharedSession(
                id=SESSION_ROW_ID,
                base_currency=SyncState().base_currency,
                people_json="[]",
                bills_json="[]",
                last_updated=self.clock_ms(),
            )
            db.add(row)
            db.commit()
            db.refresh(row)
        return row

    @staticmethod
    def _to_state(row: SharedSession) -> SyncState:
        return SyncState(
            people=_people_adapter.validate_json(row.people_json),
            bills=_bills_adapter.validate_json(row.bills_json),
            base_currency=row.base_currency,
            last_updated=row.last_updated,
        )

    def sync(self, db: Session, new_state: Optional[SyncState] = None) -> SyncState:
        """Optionally replace the stored state, then return what is stored."""
        with self._lock:
            row = self._load_row(db)
            if new_state is not None:
                row.people_json = _people_adapter.dump_json(new_state.people, by_alias=True).decode()
                row.bills_json = _bills_adapter.dump_json(new_state.bills, by_alias=True).decode()
                row.base_currency = new_state.base_currency
                row.last_updated = self.clock_ms()
                db.commit()
                db.refresh(row)
                logger.info("shared session replaced: %d people, %d bills",
                            len(new_state.people), len(new_state.bills))
            return self._to_state(row)
