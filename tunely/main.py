import logging

import stripe
from fastapi import FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tunely import stripe_service, webhooks
from tunely.config import stripe_webhook_secret
from tunely.database import Base, engine, SessionLocal
from tunely.errors import SignatureInvalid, TunelyError, error_response
from tunely.logging_conf import configure_logging
from tunely.routes import router

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Tunely Payment Service")

app.include_router(router)

Base.metadata.create_all(bind=engine)


@app.exception_handler(TunelyError)
async def tunely_error_handler(request: Request, exc: TunelyError):
    return JSONResponse(status_code=exc.status_code, content=error_response(exc.message))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    return JSONResponse(status_code=400, content=error_response(message))


@app.post("/webhook")
async def stripe_webhook(request: Request, stripe_signature: str = Header(None)):
    webhook_secret = stripe_webhook_secret()
    if not stripe_signature or not webhook_secret:
        return JSONResponse(status_code=400, content=error_response("Webhook signature or secret missing"))

    payload = await request.body()

    try:
        event = stripe_service.construct_event(payload, stripe_signature, webhook_secret)
    except ValueError:
        raise SignatureInvalid("Invalid payload")
    except stripe.SignatureVerificationError:
        logger.warning("Stripe signature verification failed")
        raise SignatureInvalid()

    logger.info("Received event: %s", event["type"])

    db = SessionLocal()
    try:
        webhooks.process_event(db, event)
    except Exception as exc:
        db.rollback()
        logger.exception("Webhook error")
        return JSONResponse(status_code=400, content=error_response(str(exc)))
    finally:
        db.close()

    return {"received": True}
