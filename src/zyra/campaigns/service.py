"""Email/SMS campaign service."""

from typing import Any

from zyra.common.exceptions import NotFoundError
from zyra.store.base import RecordStore
from zyra.store.records import Campaign
from zyra.usage.service import UsageService

_SENT_COUNTERS = {"email": "emails_sent", "sms": "sms_sent"}


class CampaignService:
    """Campaign CRUD. Growth in ``sent_count`` feeds the matching usage counter."""

    def __init__(self, store: RecordStore, usage: UsageService | None = None):
        self.store = store
        self.usage = usage

    async def list_campaigns(self, user_id: str) -> list[Campaign]:
        return await self.store.list_campaigns(user_id)

    async def create_campaign(self, user_id: str, **fields: Any) -> Campaign:
        campaign = await self.store.create_campaign(Campaign(user_id=user_id, **fields))
        if self.usage:
            await self.usage.record_activity(
                user_id, "campaign_created",
                f"Created {campaign.type} campaign {campaign.name}",
                tool_used="automation",
                metadata={"campaignId": campaign.id},
            )
        return campaign

    async def update_campaign(self, user_id: str, campaign_id: str, **changes: Any) -> Campaign:
        current = await self.store.get_campaign(user_id, campaign_id)
        if current is None:
            raise NotFoundError("Campaign not found")

        changes = {k: v for k, v in changes.items() if v is not None}
        updated = await self.store.update_campaign(user_id, campaign_id, **changes)
        if updated is None:
            raise NotFoundError("Campaign not found")

        newly_sent = updated.sent_count - current.sent_count
        if self.usage and newly_sent > 0 and updated.type in _SENT_COUNTERS:
            await self.usage.increment_stat(user_id, _SENT_COUNTERS[updated.type], newly_sent)
        return updated
