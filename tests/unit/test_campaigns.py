"""Tests for campaign and notification services."""

import random

import pytest

from zyra.campaigns.service import CampaignService
from zyra.common.config import ZyraSettings
from zyra.common.exceptions import NotFoundError
from zyra.notifications.service import NotificationService
from zyra.store.memory import MemoryStore
from zyra.usage.service import UsageService


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def campaigns(store):
    usage = UsageService(ZyraSettings(storage_backend="memory"), store, rng=random.Random(0))
    return CampaignService(store, usage=usage)


class TestCampaigns:
    async def test_create_logs_activity(self, campaigns, store):
        campaign = await campaigns.create_campaign("u1", type="email", name="Spring", content="Hi")
        entries = await store.list_activity("u1")
        assert entries[0].action == "campaign_created"
        assert entries[0].metadata == {"campaignId": campaign.id}

    async def test_sent_growth_counts_emails(self, campaigns, store):
        campaign = await campaigns.create_campaign("u1", type="email", name="Spring", content="Hi")
        await campaigns.update_campaign("u1", campaign.id, sent_count=40, status="sent")
        await campaigns.update_campaign("u1", campaign.id, sent_count=55)
        stats = await store.get_usage_stats("u1")
        assert stats.emails_sent == 55
        assert stats.sms_sent == 0

    async def test_sms_campaign_counts_sms(self, campaigns, store):
        campaign = await campaigns.create_campaign("u1", type="sms", name="Flash", content="Sale")
        await campaigns.update_campaign("u1", campaign.id, sent_count=12)
        assert (await store.get_usage_stats("u1")).sms_sent == 12

    async def test_other_users_campaign(self, campaigns):
        campaign = await campaigns.create_campaign("u1", type="email", name="Spring", content="Hi")
        with pytest.raises(NotFoundError):
            await campaigns.update_campaign("u2", campaign.id, name="Stolen")


class TestNotifications:
    async def test_unread_flow(self, store):
        svc = NotificationService(store)
        first = await svc.create_notification("u1", title="A", message="m")
        await svc.create_notification("u1", title="B", message="m")
        assert await svc.unread_count("u1") == 2

        read = await svc.mark_read("u1", first.id)
        assert read.is_read is True
        assert read.read_at is not None
        assert await svc.unread_count("u1") == 1

        assert await svc.mark_all_read("u1") == 1
        assert await svc.unread_count("u1") == 0
        assert await svc.list_notifications("u1", unread_only=True) == []

    async def test_mark_read_other_user(self, store):
        svc = NotificationService(store)
        note = await svc.create_notification("u1", title="A", message="m")
        with pytest.raises(NotFoundError):
            await svc.mark_read("u2", note.id)

    async def test_clear_all(self, store):
        svc = NotificationService(store)
        for title in ("A", "B"):
            await svc.create_notification("u1", title=title, message="m")
        assert await svc.clear_all("u1") == 2
        with pytest.raises(NotFoundError):
            await svc.delete_notification("u1", "gone")
