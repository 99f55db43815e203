"""
Name: Driver Offers HTTP Endpoint Tests

Responsibilities:
  - Moderation endpoints (list/detail/statistics/approve/reject/publish/archive)
  - Driver endpoints (create/submit) and public listing
  - RFC7807 error mapping (422 / 404 / 409 / 401 / 403)
  - Audit listing reflects moderation actions in order

Notes:
  - APP_ENV=test => in-memory repositories from the container
  - Without API_KEYS_CONFIG mutating calls take the actor from X-Actor-Id
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from app.api.main import app
from app.container import get_offer_repository
from app.domain.entities import DriverOffer, OfferStatus

pytestmark = pytest.mark.unit

MOD = {"X-Actor-Id": "moderator:1"}
BASE = "/v1/admin/driver-offers"


@pytest.fixture
def client(monkeypatch) -> TestClient:
    monkeypatch.delenv("API_KEYS_CONFIG", raising=False)
    monkeypatch.delenv("METRICS_REQUIRE_AUTH", raising=False)
    return TestClient(app)


@pytest.fixture
def seed():
    def _seed(**overrides) -> DriverOffer:
        data = dict(
            id=uuid4(),
            driver_id="driver-1",
            from_text="Tashkent",
            to_text="Samarkand",
            start_at=datetime.now(timezone.utc) + timedelta(days=1),
            seats_total=4,
            seats_free=3,
            price_per_seat=Decimal("120000"),
            status=OfferStatus.PENDING_REVIEW,
        )
        data.update(overrides)
        return get_offer_repository().create_offer(DriverOffer(**data))

    return _seed


def _use_api_keys(monkeypatch, config: dict) -> None:
    from app.crosscutting.config import get_settings
    from app.identity.auth import clear_keys_cache

    monkeypatch.setenv("API_KEYS_CONFIG", json.dumps(config))
    get_settings.cache_clear()
    clear_keys_cache()


# =============================================================================
# Lecturas
# =============================================================================


def test_list_offers_with_status_filter(client, seed):
    pending = seed()
    seed(status=OfferStatus.DRAFT)

    res = client.get(BASE, params={"status": "pending_review"})

    assert res.status_code == 200
    body = res.json()
    assert body["total"] == 1
    assert body["offers"][0]["id"] == str(pending.id)
    assert body["offers"][0]["status"] == "pending_review"


def test_list_offers_unknown_status_is_422(client):
    res = client.get(BASE, params={"status": "pending_review,bogus"})

    assert res.status_code == 422
    assert res.json()["code"] == "VALIDATION_ERROR"


def test_list_offers_limit_out_of_range(client):
    res = client.get(BASE, params={"limit": 500})

    assert res.status_code == 422
    assert res.headers["content-type"].startswith("application/problem+json")


def test_statistics(client, seed):
    seed()
    seed(status=OfferStatus.PUBLISHED)

    res = client.get(f"{BASE}/statistics")

    assert res.status_code == 200
    stats = res.json()["statistics"]
    assert stats["total"] == 2
    assert stats["pending_review"] == 1
    assert stats["published"] == 1
    assert stats["draft"] == 0


def test_get_offer_detail(client, seed):
    offer = seed()

    res = client.get(f"{BASE}/{offer.id}")

    assert res.status_code == 200
    assert res.json()["offer"]["seats_free"] == 3


def test_get_unknown_offer_is_404(client):
    res = client.get(f"{BASE}/{uuid4()}")

    assert res.status_code == 404
    assert res.json()["code"] == "NOT_FOUND"


def test_invalid_offer_id_is_422(client):
    res = client.get(f"{BASE}/not-a-uuid")

    assert res.status_code == 422


# =============================================================================
# Acciones de moderación
# =============================================================================


def test_approve_requires_actor(client, seed):
    offer = seed()

    res = client.patch(f"{BASE}/{offer.id}/approve")

    assert res.status_code == 401
    assert res.json()["code"] == "UNAUTHORIZED"


def test_approve_sets_reviewer(client, seed):
    offer = seed()

    res = client.patch(f"{BASE}/{offer.id}/approve", headers=MOD)

    assert res.status_code == 200
    data = res.json()["offer"]
    assert data["status"] == "approved"
    assert data["reviewed_by"] == "moderator:1"
    assert data["seats_free"] == 3


def test_approve_twice_is_illegal_transition(client, seed):
    offer = seed()
    client.patch(f"{BASE}/{offer.id}/approve", headers=MOD)

    res = client.patch(f"{BASE}/{offer.id}/approve", headers=MOD)

    assert res.status_code == 409
    body = res.json()
    assert body["code"] == "ILLEGAL_TRANSITION"
    assert body["errors"][0]["current_status"] == "approved"


def test_auto_publish_is_audited_in_order(client, seed):
    offer = seed()

    res = client.patch(
        f"{BASE}/{offer.id}/approve", json={"auto_publish": True}, headers=MOD
    )
    assert res.status_code == 200
    assert res.json()["offer"]["status"] == "published"

    audit = client.get("/v1/admin/audit", params={"target_id": str(offer.id)})
    assert audit.status_code == 200
    events = audit.json()["events"]
    assert [e["action"] for e in events] == ["offer.approve", "offer.publish"]
    assert all(e["actor"] == "moderator:1" for e in events)


@pytest.mark.parametrize("body", [None, {}, {"reason": ""}, {"reason": "   "}])
def test_reject_without_reason_is_422(client, seed, body):
    offer = seed()

    res = client.patch(f"{BASE}/{offer.id}/reject", json=body, headers=MOD)

    assert res.status_code == 422
    payload = res.json()
    assert payload["code"] == "VALIDATION_ERROR"
    assert payload["errors"][0]["field"] == "reason"
    assert get_offer_repository().get_offer(offer.id).status == OfferStatus.PENDING_REVIEW


def test_reject_with_reason(client, seed):
    offer = seed()

    res = client.patch(
        f"{BASE}/{offer.id}/reject", json={"reason": "Photos missing"}, headers=MOD
    )

    assert res.status_code == 200
    assert res.json()["offer"]["rejection_reason"] == "Photos missing"


def test_publish_then_archive(client, seed):
    offer = seed(status=OfferStatus.APPROVED)

    assert client.patch(f"{BASE}/{offer.id}/publish", headers=MOD).status_code == 200
    res = client.patch(f"{BASE}/{offer.id}/archive", headers=MOD)

    assert res.status_code == 200
    assert res.json()["offer"]["status"] == "archived"


def test_archive_pending_offer_is_409(client, seed):
    offer = seed()

    res = client.patch(f"{BASE}/{offer.id}/archive", headers=MOD)

    assert res.status_code == 409
    assert res.json()["code"] == "ILLEGAL_TRANSITION"


def test_action_on_unknown_offer_is_404(client):
    res = client.patch(f"{BASE}/{uuid4()}/publish", headers=MOD)

    assert res.status_code == 404


# =============================================================================
# Conductor + público
# =============================================================================


def _create_body(**overrides) -> dict:
    body = {
        "from_text": "Tashkent",
        "to_text": "Andijan",
        "start_at": (datetime.now(timezone.utc) + timedelta(days=3)).isoformat(),
        "seats_total": 3,
        "price_per_seat": "95000",
        "stops": [{"order_no": 1, "label_text": "Kokand"}],
    }
    body.update(overrides)
    return body


def test_driver_creates_and_submits_offer(client):
    driver = {"X-Actor-Id": "driver-42"}

    created = client.post("/v1/driver/offers", json=_create_body(), headers=driver)
    assert created.status_code == 201
    offer = created.json()["offer"]
    assert offer["status"] == "draft"
    assert offer["driver_id"] == "driver-42"
    assert offer["currency"] == "UZS"

    submitted = client.patch(f"/v1/driver/offers/{offer['id']}/submit", headers=driver)
    assert submitted.status_code == 200
    assert submitted.json()["offer"]["status"] == "pending_review"


def test_driver_create_validation_error(client):
    res = client.post(
        "/v1/driver/offers",
        json=_create_body(seats_total=0),
        headers={"X-Actor-Id": "driver-42"},
    )

    assert res.status_code == 422
    assert res.json()["errors"][0]["field"] == "seats_total"


def test_submit_by_other_driver_is_403(client, seed):
    offer = seed(status=OfferStatus.DRAFT, driver_id="driver-1")

    res = client.patch(
        f"/v1/driver/offers/{offer.id}/submit", headers={"X-Actor-Id": "driver-2"}
    )

    assert res.status_code == 403
    assert res.json()["code"] == "FORBIDDEN"


def test_public_listing_only_shows_published(client, seed):
    published = seed(status=OfferStatus.PUBLISHED)
    seed(status=OfferStatus.APPROVED)

    res = client.get("/v1/public/offers", params={"from_text": "tash"})

    assert res.status_code == 200
    body = res.json()
    assert body["total"] == 1
    assert body["offers"][0]["id"] == str(published.id)


# =============================================================================
# API keys
# =============================================================================


def test_reader_key_cannot_moderate(client, monkeypatch, seed):
    _use_api_keys(monkeypatch, {"reader": ["offers:read"]})
    offer = seed()

    assert client.get(BASE, headers={"X-API-Key": "reader"}).status_code == 200
    res = client.patch(f"{BASE}/{offer.id}/approve", headers={"X-API-Key": "reader"})

    assert res.status_code == 403


def test_moderator_key_actor_is_recorded(client, monkeypatch, seed):
    _use_api_keys(
        monkeypatch,
        {"mod": {"actor_id": "moderator:9", "scopes": ["offers:read", "offers:moderate"]}},
    )
    offer = seed()

    res = client.patch(
        f"{BASE}/{offer.id}/approve",
        headers={"X-API-Key": "mod", "X-Actor-Id": "spoofed"},
    )

    assert res.status_code == 200
    assert res.json()["offer"]["reviewed_by"] == "moderator:9"


def test_missing_key_is_401_when_keys_configured(client, monkeypatch):
    _use_api_keys(monkeypatch, {"reader": ["offers:read"]})

    assert client.get(BASE).status_code == 401


def test_audit_requires_scope(client, monkeypatch):
    _use_api_keys(monkeypatch, {"reader": ["offers:read"]})

    res = client.get("/v1/admin/audit", headers={"X-API-Key": "reader"})

    assert res.status_code == 403


# =============================================================================
# Rangos de fechas (offset opcional)
# =============================================================================


@pytest.mark.parametrize(
    "params",
    [
        {"from": "2020-01-01T00:00:00"},
        {"from": "2020-01-01T00:00:00", "to": "2099-01-01T00:00:00Z"},
        {"from": "2020-01-01T00:00:00+05:00", "to": "2099-01-01T00:00:00"},
    ],
)
def test_list_offers_accepts_naive_and_mixed_dates(client, seed, params):
    offer = seed()

    res = client.get(BASE, params=params)

    assert res.status_code == 200
    assert [o["id"] for o in res.json()["offers"]] == [str(offer.id)]


@pytest.mark.parametrize(
    "params",
    [
        {"start_at": "2020-01-01T00:00:00"},
        {"start_at": "2020-01-01T00:00:00Z", "end_at": "2099-01-01T00:00:00"},
    ],
)
def test_audit_accepts_naive_and_mixed_dates(client, seed, params):
    offer = seed()
    client.patch(f"{BASE}/{offer.id}/approve", headers=MOD)

    res = client.get("/v1/admin/audit", params={"target_id": str(offer.id), **params})

    assert res.status_code == 200
    assert [e["action"] for e in res.json()["events"]] == ["offer.approve"]


def test_naive_date_is_read_as_utc(client):
    # R: 10:00 sin offset == 10:00Z, que es posterior a 12:00+05:00 (07:00Z).
    res = client.get(
        BASE, params={"from": "2026-05-01T10:00:00", "to": "2026-05-01T12:00:00+05:00"}
    )

    assert res.status_code == 422
    assert res.json()["code"] == "VALIDATION_ERROR"


def test_audit_inverted_mixed_range_is_422(client):
    res = client.get(
        "/v1/admin/audit",
        params={"start_at": "2030-01-01T00:00:00Z", "end_at": "2020-01-01T00:00:00"},
    )

    assert res.status_code == 422
