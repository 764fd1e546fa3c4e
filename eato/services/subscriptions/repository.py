from datetime import datetime
from typing import Optional

from eato.infra.database import DatabaseManager
from eato.shared.models.subscription_dto import SubscriptionDTO

SUBSCRIPTION_COLUMNS = """
    id, user_id, tier, status, stripe_customer_id, stripe_subscription_id,
    current_period_end, created_at, updated_at
"""


class SubscriptionRepository:
    def __init__(self, db: DatabaseManager):
        self.db = db

    async def get_by_user(self, user_id: str) -> Optional[SubscriptionDTO]:
        query = f"SELECT {SUBSCRIPTION_COLUMNS} FROM subscriptions WHERE user_id = $1"
        record = await self.db.fetchrow(query, user_id)
        if record:
            return SubscriptionDTO(**dict(record))
        return None

    async def upsert_free(self, user_id: str) -> SubscriptionDTO:
        """
        Single row per user: insert or reset to an active free plan.
        The provider subscription id is cleared so late webhooks for the
        superseded paid plan no longer match this row.
        """
        query = f"""
            INSERT INTO subscriptions (user_id, tier, status)
            VALUES ($1, 'free', 'active')
            ON CONFLICT (user_id) DO UPDATE SET
                tier = 'free',
                status = 'active',
                stripe_subscription_id = NULL,
                current_period_end = NULL,
                updated_at = NOW()
            RETURNING {SUBSCRIPTION_COLUMNS}
        """
        record = await self.db.fetchrow(query, user_id)
        return SubscriptionDTO(**dict(record))

    async def activate_paid(
        self,
        user_id: str,
        tier: str,
        stripe_customer_id: Optional[str],
        stripe_subscription_id: Optional[str],
        current_period_end: Optional[datetime] = None,
    ) -> SubscriptionDTO:
        query = f"""
            INSERT INTO subscriptions (
                user_id, tier, status, stripe_customer_id, stripe_subscription_id, current_period_end
            )
            VALUES ($1, $2, 'active', $3, $4, $5)
            ON CONFLICT (user_id) DO UPDATE SET
                tier = EXCLUDED.tier,
                status = 'active',
                stripe_customer_id = COALESCE(EXCLUDED.stripe_customer_id, subscriptions.stripe_customer_id),
                stripe_subscription_id = COALESCE(EXCLUDED.stripe_subscription_id, subscriptions.stripe_subscription_id),
                current_period_end = COALESCE(EXCLUDED.current_period_end, subscriptions.current_period_end),
                updated_at = NOW()
            RETURNING {SUBSCRIPTION_COLUMNS}
        """
        record = await self.db.fetchrow(
            query, user_id, tier, stripe_customer_id, stripe_subscription_id, current_period_end
        )
        return SubscriptionDTO(**dict(record))

    async def sync_provider_state(
        self,
        stripe_subscription_id: str,
        status: str,
        current_period_end: Optional[datetime],
    ) -> Optional[SubscriptionDTO]:
        query = f"""
            UPDATE subscriptions
            SET status = $2,
                current_period_end = COALESCE($3, current_period_end),
                updated_at = NOW()
            WHERE stripe_subscription_id = $1
            RETURNING {SUBSCRIPTION_COLUMNS}
        """
        record = await self.db.fetchrow(query, stripe_subscription_id, status, current_period_end)
        if record:
            return SubscriptionDTO(**dict(record))
        return None
