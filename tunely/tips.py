"""Issuing tip payments: validation, fee split and the Stripe destination charge."""
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tunely import fees, stripe_service
from tunely.errors import ArtistNotChargeable, ArtistNotFound, ArtistNotOnboarded, PersistenceFailure
from tunely.models import ArtistAccount, ArtistSession, Payment, PaymentStatus, Profile
from tunely.schemas import Breakdown, PaymentIntentRequest, PaymentIntentResponse

logger = logging.getLogger(__name__)


def get_chargeable_account(db: Session, artist_id: str) -> ArtistAccount:
    artist = db.query(Profile).filter_by(id=artist_id, role="artist").one_or_none()
    if artist is None:
        raise ArtistNotFound()

    account = db.query(ArtistAccount).filter_by(user_id=artist_id).one_or_none()
    if account is None:
        raise ArtistNotOnboarded()
    if not account.charges_enabled:
        raise ArtistNotChargeable()
    return account


def resolve_session_id(db: Session, session_code: str | None) -> str | None:
    """Unknown or inactive codes are ignored; the tip goes through without a session."""
    if not session_code:
        return None
    session = (
        db.query(ArtistSession)
        .filter_by(session_code=session_code, is_active=True)
        .order_by(ArtistSession.started_at.desc())
        .first()
    )
    if session is None:
        logger.info("No active session for code %s; tipping without session", session_code)
        return None
    return session.id


def _store_payment(db: Session, payment: Payment) -> str:
    try:
        db.add(payment)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceFailure(str(exc)) from exc
    return payment.id


def issue_tip_payment(db: Session, customer_id: str, request: PaymentIntentRequest) -> PaymentIntentResponse:
    fees.validate_amount(request.amount)

    account = get_chargeable_account(db, request.artist_id)
    artist_session_id = resolve_session_id(db, request.session_code)
    breakdown = fees.fee_breakdown(request.amount)

    intent = stripe_service.create_tip_payment_intent(
        amount=request.amount,
        currency=request.currency,
        application_fee_amount=breakdown.platform_fee,
        destination_account_id=account.stripe_account_id,
        metadata={
            "artist_id": request.artist_id,
            "customer_id": customer_id,
            "song_request": request.song_request or "",
            "customer_name": request.customer_name or "",
            "customer_message": request.customer_message or "",
            "artist_session_id": artist_session_id or "",
        },
    )
    logger.info("Created payment intent %s for artist %s", intent.id, request.artist_id)

    payment = Payment(
        artist_id=request.artist_id,
        customer_id=customer_id,
        artist_session_id=artist_session_id,
        stripe_payment_intent_id=intent.id,
        amount_total=breakdown.total,
        amount_platform_fee=breakdown.platform_fee,
        amount_stripe_fee=breakdown.stripe_fee,
        amount_artist=breakdown.artist_receives,
        currency=request.currency,
        status=PaymentStatus.PENDING.value,
        song_request=request.song_request,
        customer_name=request.customer_name,
        customer_message=request.customer_message,
    )
    try:
        payment_id = _store_payment(db, payment)
    except PersistenceFailure as exc:
        # The PaymentIntent already exists on Stripe; it needs manual reconciliation.
        logger.error(
            "%s for payment intent %s: %s",
            exc.default_message,
            intent.id,
            exc.message,
        )
        payment_id = None

    return PaymentIntentResponse(
        client_secret=intent.client_secret,
        payment_intent_id=intent.id,
        payment_id=payment_id,
        breakdown=Breakdown(**breakdown._asdict()),
    )
