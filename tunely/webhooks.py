"""Apply Stripe webhook events to payments, artist accounts, payouts and the song queue.

Each handler returns a TransitionResult. A target row that cannot be found is
NOT_FOUND, which is logged and acknowledged like any other outcome: Stripe
sends events for objects this service never stored, and may deliver them out
of order. Only exceptions count as failures.
"""
import enum
import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tunely import sessions
from tunely.models import ArtistAccount, Payment, PaymentStatus, Payout, PayoutStatus

logger = logging.getLogger(__name__)

MAX_QUEUE_ATTEMPTS = 5


class TransitionResult(str, enum.Enum):
    APPLIED = "applied"
    NOT_FOUND = "not_found"
    IGNORED = "ignored"


def _get(obj, key, default=None):
    # Works for plain dicts and stripe.StripeObject alike.
    try:
        value = obj[key]
    except KeyError:
        return default
    return default if value is None else value


def _payment_by_intent(db: Session, intent_id: str) -> Payment | None:
    return db.query(Payment).filter_by(stripe_payment_intent_id=intent_id).one_or_none()


# Statuses a payment may still move to once it has left pending/processing.
# Stripe redelivers and reorders events, so stale ones must not rewind a payment.
ALLOWED_FROM = {
    PaymentStatus.SUCCEEDED.value: {PaymentStatus.SUCCEEDED.value, PaymentStatus.REFUNDED.value},
    PaymentStatus.REFUNDED.value: {PaymentStatus.REFUNDED.value},
}


def can_transition(current: str | None, new: PaymentStatus) -> bool:
    allowed = ALLOWED_FROM.get(current)
    return allowed is None or new.value in allowed


def _set_payment_status(payment: Payment | None, status: PaymentStatus) -> TransitionResult:
    if payment is None:
        return TransitionResult.NOT_FOUND
    if not can_transition(payment.status, status):
        logger.info("Payment %s is %s; not moving it to %s", payment.id, payment.status, status.value)
        return TransitionResult.IGNORED
    payment.status = status.value
    return TransitionResult.APPLIED


def _apply_payment_succeeded(db: Session, intent) -> TransitionResult:
    payment = _payment_by_intent(db, intent["id"])
    if payment is None:
        return TransitionResult.NOT_FOUND
    if not can_transition(payment.status, PaymentStatus.SUCCEEDED):
        logger.info("Payment %s is %s; ignoring success event", payment.id, payment.status)
        return TransitionResult.IGNORED

    payment.status = PaymentStatus.SUCCEEDED.value
    payment.stripe_charge_id = _get(intent, "latest_charge")

    metadata = _get(intent, "metadata", {})
    song_request = _get(metadata, "song_request", "")
    session_id = _get(metadata, "artist_session_id", "")
    if song_request and session_id:
        entry = sessions.append_song_request(
            db,
            payment,
            session_id=session_id,
            song_request=song_request,
            customer_name=_get(metadata, "customer_name", ""),
            tip_amount=_get(intent, "amount", payment.amount_total),
        )
        if entry is not None:
            logger.info(
                "Queued song request for payment %s at position %s",
                payment.id,
                entry.queue_position,
            )
    return TransitionResult.APPLIED


def handle_payment_succeeded(db: Session, intent) -> TransitionResult:
    # Queue positions are read-then-written; a concurrent success for the same
    # session loses on the unique constraint and the whole transition retries.
    for attempt in range(1, MAX_QUEUE_ATTEMPTS + 1):
        try:
            result = _apply_payment_succeeded(db, intent)
            db.commit()
            return result
        except IntegrityError:
            db.rollback()
            if attempt == MAX_QUEUE_ATTEMPTS:
                raise
            logger.warning(
                "Queue position conflict for payment intent %s, retrying (attempt %s)",
                intent["id"],
                attempt,
            )


def handle_payment_failed(db: Session, intent) -> TransitionResult:
    return _set_payment_status(_payment_by_intent(db, intent["id"]), PaymentStatus.FAILED)


def handle_payment_processing(db: Session, intent) -> TransitionResult:
    return _set_payment_status(_payment_by_intent(db, intent["id"]), PaymentStatus.PROCESSING)


def handle_charge_refunded(db: Session, charge) -> TransitionResult:
    payment = db.query(Payment).filter_by(stripe_charge_id=charge["id"]).one_or_none()
    return _set_payment_status(payment, PaymentStatus.REFUNDED)


def handle_account_updated(db: Session, account) -> TransitionResult:
    artist_account = db.query(ArtistAccount).filter_by(stripe_account_id=account["id"]).one_or_none()
    if artist_account is None:
        return TransitionResult.NOT_FOUND

    charges_enabled = bool(_get(account, "charges_enabled", False))
    details_submitted = bool(_get(account, "details_submitted", False))
    artist_account.charges_enabled = charges_enabled
    artist_account.payouts_enabled = bool(_get(account, "payouts_enabled", False))
    artist_account.details_submitted = details_submitted
    artist_account.onboarding_completed = details_submitted
    artist_account.stripe_account_status = "active" if charges_enabled else "pending"
    return TransitionResult.APPLIED


def handle_payout_paid(db: Session, payout) -> TransitionResult:
    destination = _get(payout, "destination")
    if not destination:
        return TransitionResult.IGNORED

    artist_account = db.query(ArtistAccount).filter_by(stripe_account_id=destination).one_or_none()
    if artist_account is None:
        return TransitionResult.NOT_FOUND

    arrival = _get(payout, "arrival_date")
    arrival_date = datetime.fromtimestamp(arrival, tz=timezone.utc) if arrival is not None else None

    record = db.query(Payout).filter_by(stripe_payout_id=payout["id"]).one_or_none()
    if record is None:
        record = Payout(artist_id=artist_account.user_id, stripe_payout_id=payout["id"])
        db.add(record)
    record.amount = _get(payout, "amount")
    record.currency = _get(payout, "currency")
    record.status = PayoutStatus.PAID.value
    record.arrival_date = arrival_date
    return TransitionResult.APPLIED


def handle_payout_failed(db: Session, payout) -> TransitionResult:
    record = db.query(Payout).filter_by(stripe_payout_id=payout["id"]).one_or_none()
    if record is None:
        return TransitionResult.NOT_FOUND
    record.status = PayoutStatus.FAILED.value
    return TransitionResult.APPLIED


EVENT_HANDLERS = {
    "payment_intent.succeeded": handle_payment_succeeded,
    "payment_intent.payment_failed": handle_payment_failed,
    "payment_intent.processing": handle_payment_processing,
    "charge.refunded": handle_charge_refunded,
    "account.updated": handle_account_updated,
    "payout.paid": handle_payout_paid,
    "payout.failed": handle_payout_failed,
}


def process_event(db: Session, event) -> TransitionResult:
    event_type = event["type"]
    handler = EVENT_HANDLERS.get(event_type)
    if handler is None:
        logger.info("Unhandled event type: %s", event_type)
        return TransitionResult.IGNORED

    obj = event["data"]["object"]
    result = handler(db, obj)
    db.commit()
    logger.info("Processed %s for %s: %s", event_type, obj["id"], result.value)
    return result
