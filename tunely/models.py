import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from tunely.database import Base


def _uuid():
    return str(uuid.uuid4())


def utcnow():
    return datetime.now(timezone.utc)


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    REFUNDED = "refunded"


class QueueStatus(str, enum.Enum):
    PENDING = "pending"
    PLAYING = "playing"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class PayoutStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String, primary_key=True, default=_uuid)  # auth user id
    email = Column(String)
    display_name = Column(String)
    role = Column(String, default="fan")                   # fan | artist


class ArtistAccount(Base):
    __tablename__ = "artist_accounts"

    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, ForeignKey("profiles.id"), unique=True, index=True)
    stripe_account_id = Column(String, unique=True, index=True)
    stripe_account_status = Column(String, default="pending")  # pending | active
    onboarding_completed = Column(Boolean, default=False)
    charges_enabled = Column(Boolean, default=False)
    payouts_enabled = Column(Boolean, default=False)
    details_submitted = Column(Boolean, default=False)


class ArtistSession(Base):
    __tablename__ = "artist_sessions"

    id = Column(String, primary_key=True, default=_uuid)
    artist_id = Column(String, ForeignKey("profiles.id"), index=True)
    session_code = Column(String, index=True)
    location = Column(String, nullable=True)
    is_active = Column(Boolean, default=True)
    started_at = Column(DateTime(timezone=True), default=utcnow)
    ended_at = Column(DateTime(timezone=True), nullable=True)


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String, primary_key=True, default=_uuid)
    artist_id = Column(String, ForeignKey("profiles.id"), index=True)
    customer_id = Column(String)
    artist_session_id = Column(String, ForeignKey("artist_sessions.id"), nullable=True)
    stripe_payment_intent_id = Column(String, unique=True, index=True)
    stripe_charge_id = Column(String, nullable=True, index=True)
    amount_total = Column(Integer)
    amount_platform_fee = Column(Integer)
    amount_stripe_fee = Column(Integer)
    amount_artist = Column(Integer)
    currency = Column(String)
    status = Column(String, default=PaymentStatus.PENDING.value)
    song_request = Column(String(100), nullable=True)
    customer_name = Column(String(50), nullable=True)
    customer_message = Column(String(200), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class SongQueueEntry(Base):
    __tablename__ = "song_queue"
    __table_args__ = (
        UniqueConstraint("artist_session_id", "queue_position", name="uq_song_queue_session_position"),
    )

    id = Column(String, primary_key=True, default=_uuid)
    payment_id = Column(String, ForeignKey("payments.id"), unique=True)
    artist_session_id = Column(String, ForeignKey("artist_sessions.id"), index=True)
    song_request = Column(String(100))
    customer_name = Column(String(50))
    tip_amount = Column(Integer)
    queue_position = Column(Integer)                      # 1-based, per session
    status = Column(String, default=QueueStatus.PENDING.value)
    played_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class Payout(Base):
    __tablename__ = "payouts"

    id = Column(String, primary_key=True, default=_uuid)
    artist_id = Column(String, ForeignKey("profiles.id"), index=True)
    stripe_payout_id = Column(String, unique=True, index=True)
    amount = Column(Integer)
    currency = Column(String)
    status = Column(String, default=PayoutStatus.PENDING.value)
    arrival_date = Column(DateTime(timezone=True), nullable=True)
