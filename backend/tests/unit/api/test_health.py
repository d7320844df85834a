import pytest
from unittest.mock import AsyncMock, patch


@pytest.mark.asyncio
class TestHealth:
    async def test_healthz(self, anonymous_client):
        response = await anonymous_client.get("/healthz")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    async def test_health(self, anonymous_client):
        response = await anonymous_client.get("/api/v1/health/")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_db_health(self, anonymous_client):
        response = await anonymous_client.get("/api/v1/health/db")
        assert response.status_code == 200
        assert response.json()["database"] == "connected"

    async def test_stripe_health(self, anonymous_client):
        with patch(
            "stripe.Account.retrieve_async", AsyncMock(return_value={"id": "acct_1"})
        ):
            response = await anonymous_client.get("/api/v1/health/stripe")

        assert response.status_code == 200
        assert response.json()["stripe"] == "reachable"
