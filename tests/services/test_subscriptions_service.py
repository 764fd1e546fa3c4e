# tests/services/test_subscriptions_service.py
"""
Tests for subscription tiers, checkout and the subscription webhook.
"""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest

from eato.services.subscriptions.service import SubscriptionService, map_provider_status
from eato.shared.errors import IntegrationError, ValidationFailed
from eato.shared.models.enums import SubscriptionStatus, SubscriptionTier
from eato.shared.models.subscription_dto import SubscriptionDTO


@pytest.fixture
def repo():
    repo = AsyncMock()
    repo.get_by_user.return_value = None
    return repo


@pytest.fixture
def service(repo, mock_billing, mock_redis):
    return SubscriptionService(repo, mock_billing, mock_redis)


def _sub(**overrides) -> SubscriptionDTO:
    data = {"id": "sub-row-1", "user_id": "user-owner", "tier": "free", "status": "active"}
    data.update(overrides)
    return SubscriptionDTO(**data)


class TestStatusMapping:
    @pytest.mark.parametrize("raw, expected", [
        ("active", SubscriptionStatus.ACTIVE),
        ("trialing", SubscriptionStatus.TRIALING),
        ("past_due", SubscriptionStatus.PAST_DUE),
        ("unpaid", SubscriptionStatus.PAST_DUE),
        ("incomplete_expired", SubscriptionStatus.CANCELED),
        ("something_new", SubscriptionStatus.NONE),
        (None, SubscriptionStatus.NONE),
    ])
    def test_map_provider_status(self, raw, expected) -> None:
        assert map_provider_status(raw) == expected


class TestStatus:
    @pytest.mark.asyncio
    async def test_no_row_reports_free(self, service) -> None:
        status = await service.get_status("user-owner")
        assert status.tier == SubscriptionTier.FREE
        assert status.status == SubscriptionStatus.NONE

    @pytest.mark.asyncio
    async def test_canceled_paid_plan_is_effectively_free(self, service, repo) -> None:
        repo.get_by_user.return_value = _sub(tier="pro", status="canceled")
        assert await service.effective_tier("user-owner") == SubscriptionTier.FREE

    @pytest.mark.asyncio
    async def test_active_paid_plan(self, service, repo) -> None:
        repo.get_by_user.return_value = _sub(tier="basic", status="active")
        assert await service.effective_tier("user-owner") == SubscriptionTier.BASIC


class TestActivateFree:
    @pytest.mark.asyncio
    async def test_creates_free_plan(self, service, repo) -> None:
        repo.upsert_free.return_value = _sub()

        result = await service.activate_free("user-owner")

        assert result.tier == SubscriptionTier.FREE
        repo.upsert_free.assert_awaited_once_with("user-owner")

    @pytest.mark.asyncio
    async def test_idempotent(self, service, repo) -> None:
        current = _sub()
        repo.get_by_user.return_value = current

        assert await service.activate_free("user-owner") is current
        repo.upsert_free.assert_not_called()

    @pytest.mark.asyncio
    async def test_refuses_to_replace_active_paid_plan(self, service, repo) -> None:
        repo.get_by_user.return_value = _sub(tier="pro")

        with pytest.raises(ValidationFailed):
            await service.activate_free("user-owner")

    @pytest.mark.asyncio
    async def test_canceled_paid_plan_may_drop_to_free(self, service, repo) -> None:
        repo.get_by_user.return_value = _sub(tier="pro", status="canceled")
        repo.upsert_free.return_value = _sub()

        await service.activate_free("user-owner")

        repo.upsert_free.assert_awaited_once()


class TestCheckout:
    @pytest.mark.asyncio
    async def test_free_tier_needs_no_checkout(self, service, owner) -> None:
        with pytest.raises(ValidationFailed):
            await service.create_checkout_session(owner, SubscriptionTier.FREE)

    @pytest.mark.asyncio
    async def test_missing_price_is_descriptive(self, service, owner, mock_billing) -> None:
        with patch("eato.services.subscriptions.service.settings") as settings:
            settings.stripe.price_id_for.return_value = None
            with pytest.raises(IntegrationError) as exc:
                await service.create_checkout_session(owner, SubscriptionTier.PRO)

        assert "truck_owner" in exc.value.message
        assert "pro" in exc.value.message
        mock_billing.create_subscription_checkout.assert_not_called()

    @pytest.mark.asyncio
    async def test_session_for_role_price(self, service, owner, mock_billing) -> None:
        with patch("eato.services.subscriptions.service.settings") as settings:
            settings.stripe.price_id_for.return_value = "price_owner_basic"
            settings.domain.PUBLIC_BASE_URL = "https://eato.app/"
            response = await service.create_checkout_session(owner, SubscriptionTier.BASIC)

        settings.stripe.price_id_for.assert_called_once_with("truck_owner", "basic")
        assert response.url == "https://checkout.stripe.com/c/cs_test"
        assert response.session_id == "cs_test"
        kwargs = mock_billing.create_subscription_checkout.call_args[1]
        assert kwargs["price_id"] == "price_owner_basic"
        assert kwargs["metadata"] == {"user_id": owner.id, "tier": "basic", "role": "truck_owner"}
        assert kwargs["success_url"].startswith("https://eato.app/subscription?status=success")

    @pytest.mark.asyncio
    async def test_user_without_role_uses_neutral_prices(self, service, make_user) -> None:
        user = make_user(user_role=None)
        with patch("eato.services.subscriptions.service.settings") as settings:
            settings.stripe.price_id_for.return_value = "price_user_pro"
            settings.domain.PUBLIC_BASE_URL = "https://eato.app"
            await service.create_checkout_session(user, SubscriptionTier.PRO)

        settings.stripe.price_id_for.assert_called_once_with("user", "pro")


class TestSubscriptionWebhook:
    @pytest.mark.asyncio
    async def test_checkout_completed_activates_tier(self, service, repo, mock_billing) -> None:
        mock_billing.parse_webhook.return_value = {
            "id": "evt_1",
            "type": "checkout.session.completed",
            "data": {"object": {
                "id": "cs_1",
                "customer": "cus_1",
                "subscription": "sub_1",
                "metadata": {"user_id": "user-owner", "tier": "pro"},
            }},
        }
        repo.activate_paid.return_value = _sub(tier="pro")

        await service.handle_webhook(b"{}", "sig")

        repo.activate_paid.assert_awaited_once_with(
            "user-owner", "pro", stripe_customer_id="cus_1", stripe_subscription_id="sub_1"
        )

    @pytest.mark.asyncio
    async def test_checkout_without_metadata_ignored(self, service, repo, mock_billing) -> None:
        mock_billing.parse_webhook.return_value = {
            "id": "evt_2", "type": "checkout.session.completed", "data": {"object": {"id": "cs_2"}},
        }

        ack = await service.handle_webhook(b"{}", "sig")

        assert ack.received is True
        repo.activate_paid.assert_not_called()

    @pytest.mark.asyncio
    async def test_cancel_keeps_tier(self, service, repo, mock_billing, mock_redis) -> None:
        mock_billing.parse_webhook.return_value = {
            "id": "evt_3",
            "type": "customer.subscription.deleted",
            "data": {"object": {"id": "sub_1", "status": "canceled", "current_period_end": 1790000000}},
        }
        repo.sync_provider_state.return_value = _sub(tier="pro", status="canceled")

        await service.handle_webhook(b"{}", "sig")

        sub_id, status, period_end = repo.sync_provider_state.call_args[0]
        assert sub_id == "sub_1"
        assert status == "canceled"
        assert period_end == datetime.fromtimestamp(1790000000, tz=timezone.utc)
        assert mock_redis.mark_event_processed.call_args[0][0] == "subscriptions"

    @pytest.mark.asyncio
    async def test_update_reads_period_from_items(self, service, repo, mock_billing) -> None:
        mock_billing.parse_webhook.return_value = {
            "id": "evt_4",
            "type": "customer.subscription.updated",
            "data": {"object": {
                "id": "sub_1",
                "status": "past_due",
                "items": {"data": [{"current_period_end": 1790000000}]},
            }},
        }
        repo.sync_provider_state.return_value = _sub(tier="basic", status="past_due")

        await service.handle_webhook(b"{}", "sig")

        _, status, period_end = repo.sync_provider_state.call_args[0]
        assert status == "past_due"
        assert period_end is not None

    @pytest.mark.asyncio
    async def test_duplicate_event(self, service, repo, mock_billing, mock_redis) -> None:
        mock_billing.parse_webhook.return_value = {"id": "evt_1", "type": "customer.subscription.deleted"}
        mock_redis.is_event_processed.return_value = True

        ack = await service.handle_webhook(b"{}", "sig")

        assert ack.duplicate is True
        repo.sync_provider_state.assert_not_called()
