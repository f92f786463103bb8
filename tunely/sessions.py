"""Live performance sessions and their song-request queues."""
import logging
import secrets
import string

from sqlalchemy import func
from sqlalchemy.orm import Session

from tunely.errors import QueueEntryNotFound, SessionNotFound
from tunely.models import ArtistSession, Payment, QueueStatus, SongQueueEntry, utcnow

logger = logging.getLogger(__name__)

SESSION_CODE_LENGTH = 8
SESSION_CODE_ALPHABET = string.ascii_uppercase + string.digits
DEFAULT_CUSTOMER_NAME = "Anonymous"


def generate_session_code() -> str:
    return "".join(secrets.choice(SESSION_CODE_ALPHABET) for _ in range(SESSION_CODE_LENGTH))


def create_session(db: Session, artist_id: str, location: str | None = None) -> ArtistSession:
    code = generate_session_code()
    # Codes only need to be unique among active sessions.
    while db.query(ArtistSession).filter_by(session_code=code, is_active=True).first():
        code = generate_session_code()

    session = ArtistSession(artist_id=artist_id, session_code=code, location=location, is_active=True)
    db.add(session)
    db.commit()
    db.refresh(session)
    logger.info("Artist %s started session %s", artist_id, session.id)
    return session


def get_active_session(db: Session, artist_id: str) -> ArtistSession | None:
    return (
        db.query(ArtistSession)
        .filter_by(artist_id=artist_id, is_active=True)
        .order_by(ArtistSession.started_at.desc())
        .first()
    )


def get_owned_session(db: Session, session_id: str, artist_id: str) -> ArtistSession:
    session = db.query(ArtistSession).filter_by(id=session_id, artist_id=artist_id).one_or_none()
    if session is None:
        raise SessionNotFound()
    return session


def end_session(db: Session, session_id: str, artist_id: str) -> ArtistSession:
    session = get_owned_session(db, session_id, artist_id)
    session.is_active = False
    session.ended_at = utcnow()
    db.commit()
    db.refresh(session)
    logger.info("Artist %s ended session %s", artist_id, session_id)
    return session


def get_song_queue(db: Session, session_id: str) -> list[SongQueueEntry]:
    return (
        db.query(SongQueueEntry)
        .filter_by(artist_session_id=session_id)
        .order_by(SongQueueEntry.queue_position.asc())
        .all()
    )


def next_queue_position(db: Session, session_id: str) -> int:
    current = (
        db.query(func.max(SongQueueEntry.queue_position))
        .filter(SongQueueEntry.artist_session_id == session_id)
        .scalar()
    )
    return (current or 0) + 1


def append_song_request(
    db: Session,
    payment: Payment,
    session_id: str,
    song_request: str,
    customer_name: str | None,
    tip_amount: int,
) -> SongQueueEntry | None:
    """Queue a paid song request. Returns None when the payment is already queued.

    Does not commit; a concurrent append for the same session surfaces as an
    IntegrityError on the session/position unique constraint at flush time.
    """
    if db.query(SongQueueEntry).filter_by(payment_id=payment.id).first():
        logger.info("Payment %s already queued", payment.id)
        return None

    entry = SongQueueEntry(
        payment_id=payment.id,
        artist_session_id=session_id,
        song_request=song_request,
        customer_name=customer_name or DEFAULT_CUSTOMER_NAME,
        tip_amount=tip_amount,
        queue_position=next_queue_position(db, session_id),
        status=QueueStatus.PENDING.value,
    )
    db.add(entry)
    db.flush()
    return entry


def update_queue_entry_status(db: Session, entry_id: str, artist_id: str, status: QueueStatus) -> SongQueueEntry:
    entry = (
        db.query(SongQueueEntry)
        .join(ArtistSession, SongQueueEntry.artist_session_id == ArtistSession.id)
        .filter(SongQueueEntry.id == entry_id, ArtistSession.artist_id == artist_id)
        .one_or_none()
    )
    if entry is None:
        raise QueueEntryNotFound()

    entry.status = status.value
    if status == QueueStatus.COMPLETED:
        entry.played_at = utcnow()
    db.commit()
    db.refresh(entry)
    return entry


def list_artist_payments(db: Session, artist_id: str, limit: int = 50) -> list[Payment]:
    return (
        db.query(Payment)
        .filter_by(artist_id=artist_id)
        .order_by(Payment.created_at.desc())
        .limit(limit)
        .all()
    )
