import logging

from sqlalchemy.orm import Session

from tunely import stripe_service
from tunely.models import ArtistAccount, Profile
from tunely.schemas import ConnectAccountRequest, ConnectAccountResponse

logger = logging.getLogger(__name__)


def _refresh_flags(artist_account: ArtistAccount, account) -> None:
    charges_enabled = bool(account.charges_enabled)
    details_submitted = bool(account.details_submitted)
    artist_account.onboarding_completed = details_submitted
    artist_account.charges_enabled = charges_enabled
    artist_account.payouts_enabled = bool(account.payouts_enabled)
    artist_account.details_submitted = details_submitted
    artist_account.stripe_account_status = "active" if charges_enabled else "pending"


def get_artist_account(db: Session, user_id: str) -> ArtistAccount | None:
    """The caller's Connect account, or None before onboarding has started."""
    return db.query(ArtistAccount).filter_by(user_id=user_id).one_or_none()


def start_onboarding(
    db: Session,
    user_id: str,
    request: ConnectAccountRequest,
    origin: str | None,
) -> ConnectAccountResponse:
    """Create (or resume) the caller's Stripe Express account and return an onboarding link."""
    artist_account = get_artist_account(db, user_id)
    is_new_account = artist_account is None

    if artist_account is not None:
        account = stripe_service.retrieve_account(artist_account.stripe_account_id)
        _refresh_flags(artist_account, account)
        db.commit()
        account_id = artist_account.stripe_account_id
    else:
        profile = db.get(Profile, user_id)
        account = stripe_service.create_connected_account(profile.email if profile else None)
        account_id = account.id
        db.add(ArtistAccount(
            user_id=user_id,
            stripe_account_id=account_id,
            stripe_account_status="pending",
            onboarding_completed=False,
            charges_enabled=False,
            payouts_enabled=False,
            details_submitted=False,
        ))
        if profile is not None:
            profile.role = "artist"
        db.commit()
        logger.info("Created Stripe account %s for user %s", account_id, user_id)

    base_url = origin or ""
    link = stripe_service.create_account_link(
        account_id,
        refresh_url=request.refresh_url or f"{base_url}/dashboard/artist/onboarding",
        return_url=request.return_url or f"{base_url}/dashboard/artist/onboarding/complete",
    )
    return ConnectAccountResponse(url=link.url, account_id=account_id, is_new_account=is_new_account)
