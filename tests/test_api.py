"""
API endpoint tests.

Runs the FastAPI app over ASGI with get_db bound to the test session.
"""

from datetime import timedelta
from decimal import Decimal

from sqlalchemy import select

from src.config import settings
from src.models import LinkClick, ReferrerRole
from src.services.cookie_reader import issue_attribution_token


# ── Health ─────────────────────────────────────────────────


class TestHealth:

    async def test_health(self, client):
        response = await client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_ready(self, client):
        response = await client.get("/api/health/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ready"
        assert body["attribution_window_days"] == 14

    async def test_live(self, client):
        response = await client.get("/api/health/live")

        assert response.json() == {"status": "alive"}


# ── Resolve ────────────────────────────────────────────────


class TestResolveEndpoint:

    async def test_cookie_in_body(self, client, factory):
        await factory.profile("janesmith")

        response = await client.post(
            "/api/attribution/resolve",
            json={"cookie_token": issue_attribution_token("janesmith")},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["referrer_username"] == "janesmith"
        assert body["referrer_type"] == "affiliate"
        assert body["method"] == "cookie"
        assert body["confidence"] == 100
        assert Decimal(str(body["commission_rate"])) == Decimal("50.00")
        assert body["status"] == "resolved"

    async def test_cookie_from_request(self, client, factory):
        await factory.profile("preparer1", role=ReferrerRole.TAX_PREPARER)
        token = issue_attribution_token("preparer1")

        response = await client.post(
            "/api/attribution/resolve",
            json={},
            headers={"Cookie": f"{settings.attribution_cookie_name}={token}"},
        )

        body = response.json()
        assert body["referrer_username"] == "preparer1"
        assert Decimal(str(body["commission_rate"])) == Decimal("0")

    async def test_email_match(self, client, factory, now):
        jane = await factory.profile("janesmith")
        link = await factory.link(jane)
        await factory.click(link, now - timedelta(days=1), email="lead@example.com")

        response = await client.post(
            "/api/attribution/resolve",
            json={"email": "lead@example.com"},
        )

        body = response.json()
        assert body["method"] == "email_match"
        assert body["confidence"] == 90

    async def test_direct(self, client):
        response = await client.post(
            "/api/attribution/resolve",
            json={"email": "nobody@example.com", "phone": "5550000000"},
        )

        body = response.json()
        assert body["referrer_username"] is None
        assert body["method"] == "direct"
        assert body["confidence"] == 100


# ── Clicks ─────────────────────────────────────────────────


class TestClickEndpoint:

    async def test_click_recorded(self, client, factory, db_session):
        link = await factory.link(await factory.profile("janesmith"))

        response = await client.post(
            "/api/clicks",
            json={"link_id": link.id, "email": "Lead@Example.com"},
            headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1", "User-Agent": "pytest"},
        )

        assert response.status_code == 202
        assert response.json() == {"status": "accepted"}

        click = await db_session.scalar(select(LinkClick).where(LinkClick.link_id == link.id))
        assert click.ip_address == "203.0.113.7"
        assert click.user_agent == "pytest"
        assert click.user_email == "lead@example.com"

    async def test_unknown_link_still_accepted(self, client):
        response = await client.post("/api/clicks", json={"link_id": 999})

        assert response.status_code == 202

    async def test_invalid_link_id(self, client):
        response = await client.post("/api/clicks", json={"link_id": 0})

        assert response.status_code == 422


# ── Leads ──────────────────────────────────────────────────


class TestLeadEndpoints:

    async def test_create_lead(self, client, factory, now):
        jane = await factory.profile("janesmith")
        link = await factory.link(jane)
        await factory.click(link, now - timedelta(days=2), phone="15551234567")

        response = await client.post(
            "/api/leads",
            json={"first_name": "Ann", "phone": "(555) 123-4567"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["referrer_username"] == "janesmith"
        assert body["attribution_method"] == "phone_match"
        assert body["attribution_confidence"] == 85
        assert body["attribution_status"] == "resolved"
        assert body["persist_outcome"] == "locked"
        assert body["commission_rate_locked_at"] is not None

    async def test_lock_existing_lead(self, client, factory):
        lead = await factory.lead(email="lead@example.com")
        payload = {
            "referrer_username": "janesmith",
            "referrer_type": "affiliate",
            "method": "cookie",
            "confidence": 100,
            "commission_rate": "75.00",
        }

        first = await client.post(f"/api/leads/{lead.id}/attribution", json=payload)
        assert first.status_code == 200
        assert first.json() == {"id": lead.id, "outcome": "locked"}

        payload["commission_rate"] = "10.00"
        second = await client.post(f"/api/leads/{lead.id}/attribution", json=payload)
        assert second.status_code == 409

    async def test_lock_unknown_lead(self, client):
        response = await client.post(
            "/api/leads/999/attribution",
            json={"method": "direct", "confidence": 100, "commission_rate": "0"},
        )

        assert response.status_code == 404

    async def test_lock_rejects_bad_confidence(self, client, factory):
        lead = await factory.lead()

        response = await client.post(
            f"/api/leads/{lead.id}/attribution",
            json={"method": "cookie", "confidence": 150},
        )

        assert response.status_code == 422

    async def test_tax_intake_attribution(self, client, factory):
        intake = await factory.intake(email="lead@example.com")

        response = await client.post(
            f"/api/tax-intakes/{intake.id}/attribution",
            json={"referrer_username": "janesmith", "method": "email_match", "confidence": 90},
        )

        assert response.status_code == 200
        assert response.json() == {"id": intake.id, "outcome": "saved"}

    async def test_tax_intake_not_found(self, client):
        response = await client.post(
            "/api/tax-intakes/999/attribution",
            json={"method": "direct", "confidence": 100},
        )

        assert response.status_code == 404

    async def test_tax_intake_store_failure(self, broken_client):
        response = await broken_client.post(
            "/api/tax-intakes/1/attribution",
            json={"method": "direct", "confidence": 100},
        )

        assert response.status_code == 503


# ── Stats ──────────────────────────────────────────────────


class TestStatsEndpoint:

    async def test_stats(self, client, factory):
        await factory.lead(referrer_username="janesmith", attribution_method="cookie")
        await factory.lead(referrer_username="janesmith", attribution_method="phone_match")

        response = await client.get("/api/attribution/referrers/janesmith/stats")

        assert response.status_code == 200
        body = response.json()
        assert body["total_leads"] == 2
        assert body["by_method"]["cookie"] == 1
        assert body["by_method"]["phone_match"] == 1
        assert body["cross_device_rate"] == 50.0
