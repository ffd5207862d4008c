import hashlib
import hmac
import json
import time

import pytest

from serene.core.config import settings

WEBHOOK_SECRET = "whsec_test_secret"


def subscription_event(event_type, subscription_id="sub_123", status="active", customer="cus_1", **metadata):
    return {
        "id": f"evt_{event_type}",
        "type": event_type,
        "data": {
            "object": {
                "id": subscription_id,
                "customer": customer,
                "status": status,
                "metadata": metadata,
            }
        },
    }


def sign(payload: str, secret: str = WEBHOOK_SECRET) -> str:
    timestamp = int(time.time())
    signature = hmac.new(secret.encode(), f"{timestamp}.{payload}".encode(), hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def post_event(client, event, headers=None):
    return client.post("/api/webhook", content=json.dumps(event), headers=headers or {})


@pytest.fixture
def alice_id(alice):
    return alice.get("/api/user").json()["id"]


@pytest.fixture
def signed(monkeypatch):
    monkeypatch.setattr(settings, "STRIPE_WEBHOOK_SECRET", WEBHOOK_SECRET)


def test_subscription_lifecycle(client, alice, alice_id, storage):
    created = subscription_event("customer.subscription.created", user_id=str(alice_id))
    response = post_event(client, created)
    assert response.status_code == 200
    assert response.json() == {"received": True}

    me = alice.get("/api/user").json()
    assert me["isPremium"] is True
    assert me["billingSubscriptionId"] == "sub_123"
    assert me["billingCustomerId"] == "cus_1"
    assert storage.subscription_index == {"sub_123": alice_id}

    post_event(client, subscription_event("customer.subscription.updated", status="unpaid"))
    assert alice.get("/api/user").json()["isPremium"] is False

    post_event(client, subscription_event("customer.subscription.updated", status="trialing"))
    assert alice.get("/api/user").json()["isPremium"] is True

    assert post_event(client, subscription_event("customer.subscription.deleted")).status_code == 200
    me = alice.get("/api/user").json()
    assert me["isPremium"] is False
    assert me["billingSubscriptionId"] is None
    assert me["billingCustomerId"] == "cus_1"
    assert storage.subscription_index == {}


def test_created_without_active_status_only_links(client, alice, alice_id):
    post_event(client, subscription_event("customer.subscription.created", status="incomplete", user_id=alice_id))
    me = alice.get("/api/user").json()
    assert me["billingSubscriptionId"] == "sub_123"
    assert me["isPremium"] is False


def test_unknown_subscription_is_acknowledged(client, alice):
    alice.post("/api/premium/activate")
    response = post_event(client, subscription_event("customer.subscription.deleted", subscription_id="sub_nobody"))
    assert response.status_code == 200
    assert alice.get("/api/user").json()["isPremium"] is True


def test_stale_subscription_id_does_not_touch_user(client, alice, alice_id):
    post_event(client, subscription_event("customer.subscription.created", subscription_id="sub_old", user_id=alice_id))
    post_event(client, subscription_event("customer.subscription.created", subscription_id="sub_new", user_id=alice_id))

    response = post_event(client, subscription_event("customer.subscription.deleted", subscription_id="sub_old"))
    assert response.status_code == 200
    me = alice.get("/api/user").json()
    assert me["isPremium"] is True
    assert me["billingSubscriptionId"] == "sub_new"


@pytest.mark.parametrize(
    "event",
    [
        {"id": "evt_1", "type": "payment_intent.succeeded", "data": {"object": {"id": "pi_1"}}},
        {"id": "evt_2", "type": "invoice.paid", "data": {"object": {"id": "in_1"}}},
    ],
)
def test_other_events_are_acknowledged(client, event):
    response = post_event(client, event)
    assert response.status_code == 200
    assert response.json() == {"received": True}


@pytest.mark.parametrize(
    "body",
    [
        "not json",
        "[]",
        '{"data": {}}',
        '{"type": 5}',
        '{"type": "customer.subscription.created", "data": "x"}',
        '{"type": "customer.subscription.created", "data": {"object": {"id": "sub_1", "metadata": "x"}}}',
        '{"type": "customer.subscription.updated", "data": {"object": {"id": 42, "status": "active"}}}',
        '{"type": "customer.subscription.updated", "data": {"object": {"id": "sub_1", "status": ["active"]}}}',
        '{"type": "customer.subscription.created", "data": {"object": {"id": "sub_1", "customer": {"id": "cus_1"}}}}',
    ],
)
def test_malformed_payload_is_rejected(client, body):
    response = client.post("/api/webhook", content=body)
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid request payload"


def test_signed_event_is_accepted(client, alice, alice_id, signed):
    payload = json.dumps(subscription_event("customer.subscription.created", user_id=alice_id))
    response = client.post("/api/webhook", content=payload, headers={"Stripe-Signature": sign(payload)})
    assert response.status_code == 200
    assert alice.get("/api/user").json()["isPremium"] is True


def test_bad_signature_is_rejected(client, alice, alice_id, signed):
    payload = json.dumps(subscription_event("customer.subscription.created", user_id=alice_id))
    response = client.post(
        "/api/webhook", content=payload, headers={"Stripe-Signature": sign(payload, secret="whsec_wrong")}
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid signature"
    assert alice.get("/api/user").json()["isPremium"] is False


def test_missing_signature_is_rejected(client, signed):
    response = post_event(client, subscription_event("customer.subscription.updated"))
    assert response.status_code == 400
    assert response.json()["message"] == "Missing stripe-signature header"


@pytest.fixture
def billing_without_signing(monkeypatch):
    monkeypatch.setattr(settings, "STRIPE_SECRET_KEY", "sk_test_123")
    monkeypatch.setattr(settings, "STRIPE_WEBHOOK_SECRET", None)


def test_unsigned_events_are_rejected_when_billing_is_enabled(client, alice, alice_id, billing_without_signing):
    alice.post("/api/premium/activate")

    created = subscription_event("customer.subscription.created", subscription_id="sub_evil", user_id=alice_id)
    deleted = subscription_event("customer.subscription.deleted", subscription_id="sub_evil")
    for event in (created, deleted):
        response = post_event(client, event)
        assert response.status_code == 400
        assert response.json()["message"] == "Webhook signature verification is not configured"

    me = alice.get("/api/user").json()
    assert me["isPremium"] is True
    assert me["billingSubscriptionId"] is None


def test_signed_events_work_when_billing_is_enabled(client, alice, alice_id, monkeypatch):
    monkeypatch.setattr(settings, "STRIPE_SECRET_KEY", "sk_test_123")
    monkeypatch.setattr(settings, "STRIPE_WEBHOOK_SECRET", WEBHOOK_SECRET)

    payload = json.dumps(subscription_event("customer.subscription.created", user_id=alice_id))
    response = client.post("/api/webhook", content=payload, headers={"Stripe-Signature": sign(payload)})
    assert response.status_code == 200
    assert alice.get("/api/user").json()["isPremium"] is True
