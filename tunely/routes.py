import logging

from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse

from tunely import onboarding, sessions, tips
from tunely.auth import verify_token
from tunely.database import SessionLocal
from tunely.errors import SessionNotFound, TunelyError, error_response
from tunely.schemas import (
    ArtistAccountOut,
    ConnectAccountRequest,
    ConnectAccountResponse,
    PaymentIntentRequest,
    PaymentIntentResponse,
    PaymentOut,
    QueueEntryOut,
    QueueEntryUpdate,
    SessionCreateRequest,
    SessionOut,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
def create_payment_intent(
    request: PaymentIntentRequest,
    user_id: str = Depends(verify_token),
):
    db = SessionLocal()
    try:
        return tips.issue_tip_payment(db, user_id, request)
    except TunelyError:
        raise
    except Exception as exc:
        logger.exception("Error creating payment intent")
        return JSONResponse(status_code=500, content=error_response(str(exc) or "Internal server error"))
    finally:
        db.close()


@router.post("/create-connect-account", response_model=ConnectAccountResponse)
def create_connect_account(
    request: ConnectAccountRequest | None = None,
    origin: str | None = Header(None),
    user_id: str = Depends(verify_token),
):
    db = SessionLocal()
    try:
        return onboarding.start_onboarding(db, user_id, request or ConnectAccountRequest(), origin)
    except TunelyError:
        raise
    except Exception as exc:
        logger.exception("Error creating connect account")
        return JSONResponse(status_code=500, content=error_response(str(exc) or "Internal server error"))
    finally:
        db.close()


@router.get("/artist-account", response_model=ArtistAccountOut | None)
def artist_account(user_id: str = Depends(verify_token)):
    db = SessionLocal()
    try:
        return onboarding.get_artist_account(db, user_id)
    finally:
        db.close()


@router.post("/sessions", response_model=SessionOut)
def start_session(request: SessionCreateRequest | None = None, user_id: str = Depends(verify_token)):
    db = SessionLocal()
    try:
        location = request.location if request else None
        return sessions.create_session(db, user_id, location)
    finally:
        db.close()


@router.get("/sessions/active", response_model=SessionOut)
def active_session(user_id: str = Depends(verify_token)):
    db = SessionLocal()
    try:
        session = sessions.get_active_session(db, user_id)
        if session is None:
            raise SessionNotFound("No active session")
        return session
    finally:
        db.close()


@router.post("/sessions/{session_id}/end", response_model=SessionOut)
def end_session(session_id: str, user_id: str = Depends(verify_token)):
    db = SessionLocal()
    try:
        return sessions.end_session(db, session_id, user_id)
    finally:
        db.close()


@router.get("/sessions/{session_id}/queue", response_model=list[QueueEntryOut])
def song_queue(session_id: str, user_id: str = Depends(verify_token)):
    db = SessionLocal()
    try:
        sessions.get_owned_session(db, session_id, user_id)
        return sessions.get_song_queue(db, session_id)
    finally:
        db.close()


@router.patch("/queue/{entry_id}", response_model=QueueEntryOut)
def update_queue_entry(entry_id: str, update: QueueEntryUpdate, user_id: str = Depends(verify_token)):
    db = SessionLocal()
    try:
        return sessions.update_queue_entry_status(db, entry_id, user_id, update.status)
    finally:
        db.close()


@router.get("/payments", response_model=list[PaymentOut])
def artist_payments(limit: int = 50, user_id: str = Depends(verify_token)):
    db = SessionLocal()
    try:
        return sessions.list_artist_payments(db, user_id, limit)
    finally:
        db.close()
