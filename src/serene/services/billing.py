"""
Billing bridge.

Turns premium activation requests and Stripe subscription lifecycle events
into changes of ``User.is_premium``. Stripe is optional: without
STRIPE_SECRET_KEY the bridge still serves self-service activation, and the
webhook accepts unsigned JSON only while billing is unconfigured. With
STRIPE_SECRET_KEY set, events must be signed with STRIPE_WEBHOOK_SECRET.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import stripe

from serene.core.config import settings
from serene.core.errors import ValidationFailed
from serene.crud.storage import Storage
from serene.models import User

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = frozenset({"active", "trialing"})
INACTIVE_STATUSES = frozenset({"canceled", "unpaid", "incomplete_expired"})


def billing_enabled() -> bool:
    """Check if billing is enabled (Stripe configured)."""
    return bool(settings.STRIPE_SECRET_KEY)


def configure_billing() -> bool:
    """Hand the secret key to the Stripe SDK. Returns whether billing is enabled."""
    if not billing_enabled():
        return False
    stripe.api_key = settings.STRIPE_SECRET_KEY
    return True


def _optional_str(obj: Dict[str, Any], key: str) -> Optional[str]:
    value = obj.get(key)
    if value is not None and not isinstance(value, str):
        raise ValidationFailed("Invalid request payload")
    return value


@dataclass
class BillingEvent:
    """Normalized view of a provider webhook event."""
    event_type: str
    event_id: Optional[str] = None
    subscription_id: Optional[str] = None
    customer_id: Optional[str] = None
    status: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, event: Dict[str, Any]) -> "BillingEvent":
        if not isinstance(event, dict) or not isinstance(event.get("type"), str):
            raise ValidationFailed("Invalid request payload")
        data = event.get("data") or {}
        obj = (data.get("object") if isinstance(data, dict) else None) or {}
        if not isinstance(data, dict) or not isinstance(obj, dict):
            raise ValidationFailed("Invalid request payload")

        billing_event = cls(event_type=event["type"], event_id=_optional_str(event, "id"))
        if billing_event.event_type.startswith("customer.subscription."):
            billing_event.subscription_id = _optional_str(obj, "id")
            billing_event.customer_id = _optional_str(obj, "customer")
            billing_event.status = _optional_str(obj, "status")
            metadata = obj.get("metadata") or {}
            if not isinstance(metadata, dict):
                raise ValidationFailed("Invalid request payload")
            billing_event.metadata = metadata
        else:
            billing_event.metadata = {"object_id": obj.get("id")}
        return billing_event

    @property
    def user_id(self) -> Optional[int]:
        raw = self.metadata.get("user_id")
        if raw is None or not str(raw).isdigit():
            return None
        return int(raw)


def parse_webhook(payload: bytes, signature: Optional[str]) -> BillingEvent:
    """
    Verify (when configured) and parse a webhook body.

    Args:
        payload: Raw request body, exactly as received
        signature: Value of the Stripe-Signature header

    Returns:
        BillingEvent

    Raises:
        ValidationFailed: Missing or bad signature, signing not configured
            while billing is enabled, or a malformed payload
    """
    try:
        body = payload.decode("utf-8")
    except UnicodeDecodeError:
        raise ValidationFailed("Invalid request payload")

    if settings.STRIPE_WEBHOOK_SECRET:
        if not signature:
            raise ValidationFailed("Missing stripe-signature header")
        try:
            stripe.WebhookSignature.verify_header(body, signature, settings.STRIPE_WEBHOOK_SECRET)
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Webhook signature verification failed: {e}")
            raise ValidationFailed("Invalid signature")
    elif billing_enabled():
        # Stripe keys set but no signing secret
        logger.error("Rejected unsigned webhook: STRIPE_WEBHOOK_SECRET is not set")
        raise ValidationFailed("Webhook signature verification is not configured")

    try:
        event = json.loads(body)
    except ValueError as e:
        logger.error(f"Failed to parse webhook body: {e}")
        raise ValidationFailed("Invalid request payload")
    return BillingEvent.from_payload(event)


class BillingBridge:
    """Applies entitlement changes to the credential store."""

    def __init__(self, storage: Storage):
        self.storage = storage

    async def activate_premium(self, user_id: int) -> User:
        """Grant premium. Calling it on a premium user is a no-op, not an error."""
        user = await self.storage.set_user_premium(user_id, True)
        logger.info(f"User {user.id} ({user.username}) is now a premium user")
        return user

    async def deactivate_premium(self, user_id: int) -> User:
        user = await self.storage.set_user_premium(user_id, False)
        logger.info(f"User {user.id} ({user.username}) is no longer a premium user")
        return user

    async def link_subscription(
        self, user_id: int, customer_id: Optional[str], subscription_id: Optional[str]
    ) -> User:
        user = await self.storage.set_user_billing(
            user_id, customer_id=customer_id, subscription_id=subscription_id
        )
        logger.info(f"Linked subscription {subscription_id} to user {user_id}")
        return user

    async def _resolve(self, event: BillingEvent) -> Optional[User]:
        if not event.subscription_id:
            logger.warning(f"{event.event_type} without subscription id - ignoring")
            return None
        user = await self.storage.get_user_by_subscription_id(event.subscription_id)
        if user is None:
            logger.info(f"No user found with subscription ID: {event.subscription_id}")
        return user

    async def handle_event(self, event: BillingEvent) -> Optional[User]:
        """
        Apply one webhook event. Returns the affected user, or None when the
        event changes nothing. Unmatched events are logged, never retried.
        """
        logger.info(f"Received webhook event: {event.event_type} ({event.event_id})")

        if event.event_type == "customer.subscription.created":
            return await self._on_subscription_created(event)

        if event.event_type == "customer.subscription.updated":
            user = await self._resolve(event)
            if user is None:
                return None
            logger.info(f"Subscription updated: {event.subscription_id} Status: {event.status}")
            if event.status in ACTIVE_STATUSES:
                return await self.activate_premium(user.id)
            if event.status in INACTIVE_STATUSES:
                return await self.deactivate_premium(user.id)
            return None

        if event.event_type == "customer.subscription.deleted":
            user = await self._resolve(event)
            if user is None:
                return None
            await self.link_subscription(user.id, user.billing_customer_id, None)
            return await self.deactivate_premium(user.id)

        if event.event_type == "payment_intent.succeeded":
            logger.info(f"PaymentIntent succeeded: {event.metadata.get('object_id')}")
        elif event.event_type == "payment_intent.payment_failed":
            logger.info(f"PaymentIntent failed: {event.metadata.get('object_id')}")
        else:
            logger.debug(f"Unhandled webhook event type {event.event_type}")
        return None

    async def _on_subscription_created(self, event: BillingEvent) -> Optional[User]:
        user_id = event.user_id
        if user_id is None or not event.subscription_id:
            logger.info(f"Subscription created: {event.subscription_id} (no user metadata)")
            return None
        user = await self.storage.get_user(user_id)
        if user is None:
            logger.info(f"Subscription {event.subscription_id} names unknown user {user_id}")
            return None
        user = await self.link_subscription(user.id, event.customer_id, event.subscription_id)
        if event.status in ACTIVE_STATUSES:
            return await self.activate_premium(user.id)
        return user
