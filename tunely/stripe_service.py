import stripe

from tunely.config import STRIPE_CONNECT_COUNTRY, stripe_secret_key

stripe.api_key = stripe_secret_key()


def create_tip_payment_intent(
    amount: int,
    currency: str,
    application_fee_amount: int,
    destination_account_id: str,
    metadata: dict,
):
    """Destination charge: the customer pays ``amount``, the platform keeps
    ``application_fee_amount`` and Stripe transfers the rest to the artist."""
    return stripe.PaymentIntent.create(
        amount=amount,
        currency=currency,
        application_fee_amount=application_fee_amount,
        transfer_data={"destination": destination_account_id},
        metadata=metadata,
        automatic_payment_methods={"enabled": True, "allow_redirects": "never"},
    )


def construct_event(payload: bytes, signature: str, secret: str):
    return stripe.Webhook.construct_event(payload, signature, secret)


def create_connected_account(email: str | None):
    return stripe.Account.create(
        type="express",
        country=STRIPE_CONNECT_COUNTRY,
        email=email,
        capabilities={
            "card_payments": {"requested": True},
            "transfers": {"requested": True},
        },
        business_type="individual",
        settings={
            "payouts": {
                "schedule": {"interval": "daily", "delay_days": "minimum"},
            },
        },
    )


def retrieve_account(account_id: str):
    return stripe.Account.retrieve(account_id)


def create_account_link(account_id: str, refresh_url: str, return_url: str):
    return stripe.AccountLink.create(
        account=account_id,
        refresh_url=refresh_url,
        return_url=return_url,
        type="account_onboarding",
    )
