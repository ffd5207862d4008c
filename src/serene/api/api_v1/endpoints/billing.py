from typing import Optional

from fastapi import APIRouter, Header, Request

from serene.api.auth_deps import StorageDep
from serene.schemas import WebhookAck
from serene.services.billing import BillingBridge, parse_webhook

router = APIRouter()


@router.post("/webhook", response_model=WebhookAck)
async def handle_webhook(
    request: Request,
    storage: StorageDep,
    stripe_signature: Optional[str] = Header(None),
):
    """
    Handle payment processor webhook events.

    The signature is verified against STRIPE_WEBHOOK_SECRET when it is set.
    Events that match no user are acknowledged and ignored.

    Errors:
        400: Invalid signature or payload
    """
    # raw body, signature verification needs the exact bytes
    body = await request.body()
    event = parse_webhook(body, stripe_signature)
    await BillingBridge(storage).handle_event(event)
    return WebhookAck(received=True)
