from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tunely.config import DEFAULT_CURRENCY
from tunely.models import QueueStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class PaymentIntentRequest(CamelModel):
    artist_id: str
    amount: int  # cents
    currency: str = DEFAULT_CURRENCY
    song_request: str | None = Field(None, max_length=100)
    customer_name: str | None = Field(None, max_length=50)
    customer_message: str | None = Field(None, max_length=200)
    session_code: str | None = None


class Breakdown(CamelModel):
    total: int
    platform_fee: int
    stripe_fee: int
    artist_receives: int


class PaymentIntentResponse(CamelModel):
    client_secret: str
    payment_intent_id: str
    payment_id: str | None = None
    breakdown: Breakdown


class ConnectAccountRequest(CamelModel):
    return_url: str | None = None
    refresh_url: str | None = None


class ConnectAccountResponse(CamelModel):
    url: str
    account_id: str
    is_new_account: bool


class ArtistAccountOut(CamelModel):
    user_id: str
    stripe_account_id: str
    stripe_account_status: str
    onboarding_completed: bool
    charges_enabled: bool
    payouts_enabled: bool
    details_submitted: bool


class SessionCreateRequest(CamelModel):
    location: str | None = None


class SessionOut(CamelModel):
    id: str
    artist_id: str
    session_code: str
    location: str | None = None
    is_active: bool
    started_at: datetime | None = None
    ended_at: datetime | None = None


class QueueEntryOut(CamelModel):
    id: str
    payment_id: str
    artist_session_id: str
    song_request: str
    customer_name: str
    tip_amount: int
    queue_position: int
    status: str
    played_at: datetime | None = None


class QueueEntryUpdate(CamelModel):
    status: QueueStatus


class PaymentOut(CamelModel):
    id: str
    artist_id: str
    artist_session_id: str | None = None
    stripe_payment_intent_id: str
    amount_total: int
    amount_platform_fee: int
    amount_stripe_fee: int
    amount_artist: int
    currency: str
    status: str
    song_request: str | None = None
    customer_name: str | None = None
    customer_message: str | None = None
    created_at: datetime | None = None
