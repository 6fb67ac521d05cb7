"""Sync: one shared people/bills session for every connected device."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from splitter.database import get_db
from splitter.dependencies import get_session_store
from splitter.schemas import SyncState
from splitter.services.session_store import SessionStore

router = APIRouter(prefix="/sync", tags=["sync"])


@router.get("", response_model=SyncState, response_model_by_alias=True)
def get_state(
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    return store.sync(db)


@router.post("", response_model=SyncState, response_model_by_alias=True)
def replace_state(
    data: SyncState,
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    return store.sync(db, data)
