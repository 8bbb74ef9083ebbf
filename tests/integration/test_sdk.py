"""
Integration tests for the bunq client: run against the real bunq sandbox.

Requires environment variables:
  BUNQ_INTEGRATION : any value enables these tests
  BUNQ_API_KEY     : (optional) sandbox API key; a fresh sandbox user is
                      created when absent

Run: BUNQ_INTEGRATION=1 pytest tests/integration/ -v
"""

import os

import pytest

from bunq_client import AsyncBunq, BunqConfig, Environment, NotFoundError, create_sandbox_api_key

SKIP = not os.environ.get("BUNQ_INTEGRATION")

pytestmark = pytest.mark.skipif(SKIP, reason="BUNQ_INTEGRATION not set")


async def make_client() -> AsyncBunq:
    api_key = os.environ.get("BUNQ_API_KEY") or await create_sandbox_api_key()
    return await AsyncBunq.create(BunqConfig(
        api_key=api_key, environment=Environment.SANDBOX, description="bunq-client-integration-test",
    ))


class TestBootstrap:
    @pytest.mark.asyncio
    async def test_connects_and_resolves_primary_account(self):
        client = await make_client()
        assert client.user_id > 0
        assert client.primary_monetary_account_id > 0
        await client.close()

    @pytest.mark.asyncio
    async def test_rejects_invalid_api_key(self):
        with pytest.raises(Exception):
            await AsyncBunq.create(BunqConfig(api_key="invalid", environment=Environment.SANDBOX))


class TestResources:
    @pytest.mark.asyncio
    async def test_list_monetary_accounts(self):
        client = await make_client()
        accounts = [a async for a in client.monetary_accounts.list()]
        assert len(accounts) > 0
        assert any(a["id"] == client.primary_monetary_account_id for a in accounts)
        await client.close()

    @pytest.mark.asyncio
    async def test_request_money_from_sugar_daddy(self):
        client = await make_client()
        request_id = await client.request_inquiries.create({
            "amount_inquired": {"value": "100.00", "currency": "EUR"},
            "counterparty_alias": {"type": "EMAIL", "value": "sugardaddy@bunq.com"},
            "description": "fund test account",
            "allow_bunqme": False,
        })
        assert request_id > 0
        inquiry = await client.request_inquiries.get(request_id)
        assert inquiry["id"] == request_id
        await client.close()

    @pytest.mark.asyncio
    async def test_list_payments(self):
        client = await make_client()
        payments = [p async for p in client.payments.list()]
        assert isinstance(payments, list)
        await client.close()


class TestErrorHandling:
    @pytest.mark.asyncio
    async def test_unknown_payment_is_not_found(self):
        client = await make_client()
        with pytest.raises(NotFoundError) as exc:
            await client.payments.get(1)
        assert exc.value.response_id
        await client.close()
