"""Tests for DashboardSyncClient against a scripted HTTP transport."""

import asyncio
import copy
import json

import httpx
import pytest

from zyra.sync.client import DASHBOARD_KEY, DashboardSyncClient
from zyra.sync.state import DebounceGuard, MutationState, PendingMutation, QueryCache


def _dashboard(access_count=1, optimized=0):
    return {
        "user": {"id": "u1", "email": "m@example.com", "fullName": "Mia"},
        "profile": {"userId": "u1", "name": "Mia", "email": "m@example.com", "plan": "trial"},
        "usageStats": {
            "totalRevenue": 2500000,
            "totalOrders": 300,
            "conversionRate": 320,
            "cartRecoveryRate": 7000,
            "productsOptimized": optimized,
            "lastUpdated": "2026-01-01T00:00:00+00:00",
        },
        "activityLogs": [],
        "toolsAccess": [{
            "id": "t1", "userId": "u1", "toolName": "ai-generator", "accessCount": access_count,
            "firstAccessed": "2026-01-01T00:00:00+00:00", "lastAccessed": "2026-01-01T00:00:00+00:00",
        }],
        "realtimeMetrics": [],
    }


class FakeServer:
    """Routes requests to canned responses and records what was sent."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.dashboard = _dashboard()
        self.fail: dict[str, int] = {}
        self.fail_once: dict[str, list[int]] = {}
        self.html: set[str] = set()
        self.offline = False
        self.on_request = None
        self.optimize_result = {"success": True, "optimizedCount": 3, "duplicatesRemoved": 1, "details": []}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.on_request is not None:
            self.on_request(request)
        if self.offline:
            raise httpx.ConnectError("connection refused", request=request)
        path = request.url.path
        if self.fail_once.get(path):
            return httpx.Response(self.fail_once[path].pop(0), json={"message": "Try later", "code": "BUSY"})
        if path in self.html:
            return httpx.Response(200, text="<html>Bad gateway</html>", headers={"content-type": "text/html"})
        if path in self.fail:
            return httpx.Response(self.fail[path], json={"message": "Server exploded", "code": "INTERNAL"})
        if path == "/api/dashboard":
            return httpx.Response(200, json=self.dashboard)
        if path == "/api/products/optimize-all":
            return httpx.Response(200, json=self.optimize_result)
        if path == "/api/dashboard/refresh-metrics":
            data = copy.deepcopy(self.dashboard)
            data["realtimeMetrics"] = [{"metricName": "revenue_change", "value": "$1200"}]
            return httpx.Response(200, json={
                "success": True, "metrics": data["realtimeMetrics"], "dashboardData": data,
            })
        return httpx.Response(200, json={"success": True})

    def posted(self, path: str) -> list[dict]:
        return [
            json.loads(r.content) if r.content else {}
            for r in self.requests if r.url.path == path and r.method == "POST"
        ]


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
async def client(server, clock):
    http = httpx.AsyncClient(transport=httpx.MockTransport(server), base_url="http://test")
    sync = DashboardSyncClient("http://test", clock=clock, max_retries=1, http=http)
    yield sync
    await sync.close()


class TestQueryCache:
    def test_snapshots_do_not_alias(self):
        cache = QueryCache()
        original = {"usageStats": {"emailsSent": 1}}
        cache.set("k", original)
        original["usageStats"]["emailsSent"] = 99
        view = cache.get("k")
        view["usageStats"]["emailsSent"] = 50
        assert cache.get("k") == {"usageStats": {"emailsSent": 1}}

    def test_rollback_without_snapshot_clears(self):
        cache = QueryCache()
        mutation = PendingMutation.begin(cache, "k", lambda v: v)
        cache.set("k", {"x": 1})
        mutation.rollback(cache)
        assert "k" not in cache


class TestDebounceGuard:
    def test_window(self, clock):
        guard = DebounceGuard(2.0, clock)
        assert guard.try_acquire() is True
        clock.now += 1.9
        assert guard.try_acquire() is False
        clock.now += 0.1
        assert guard.try_acquire() is True


class TestPolling:
    async def test_poll_fills_cache(self, client, server):
        assert await client.poll_once() is True
        assert client.dashboard == server.dashboard
        assert client.last_update is not None

    async def test_poll_failure_is_silent(self, client, server):
        server.fail["/api/dashboard"] = 500
        assert await client.poll_once() is False
        assert client.notices == []
        assert client.connection.is_online is True

    async def test_offline_poll_marks_connection(self, client, server):
        server.offline = True
        assert await client.poll_once() is False
        assert client.connection.is_online is False
        assert client.notices == []

        server.offline = False
        assert await client.poll_once() is True
        assert client.connection.is_online is True

    async def test_background_polling(self, server, clock):
        http = httpx.AsyncClient(transport=httpx.MockTransport(server), base_url="http://test")
        sync = DashboardSyncClient("http://test", poll_interval=0.01, max_retries=1, http=http)
        sync.start_polling()
        await asyncio.sleep(0.05)
        await sync.close()
        gets = [r for r in server.requests if r.url.path == "/api/dashboard"]
        assert len(gets) >= 2

    async def test_polling_survives_malformed_body(self, server):
        http = httpx.AsyncClient(transport=httpx.MockTransport(server), base_url="http://test")
        sync = DashboardSyncClient("http://test", poll_interval=0.01, max_retries=1, http=http)
        server.html.add("/api/dashboard")
        sync.start_polling()
        await asyncio.sleep(0.05)
        assert not sync._poll_task.done()
        assert sync.dashboard is None

        server.html.clear()
        await asyncio.sleep(0.05)
        await sync.close()
        assert sync.dashboard == server.dashboard
        assert sync.notices == []

    async def test_manual_refresh_failure_is_reported(self, client, server):
        server.fail["/api/dashboard"] = 503
        assert await client.refresh() is False
        assert client.notices[-1].level == "error"
        assert client.notices[-1].source == "action"


class TestOptimisticMutations:
    async def test_failed_update_restores_exact_snapshot(self, client, server):
        await client.poll_once()
        before = client.dashboard
        server.fail["/api/dashboard/update-usage"] = 500

        assert await client.update_usage("productsOptimized", 5) is None
        assert client.dashboard == before
        assert client.states["update_usage"] is MutationState.IDLE
        assert client.notices[-1].level == "error"
        assert "Server exploded" in client.notices[-1].message

    async def test_malformed_body_rolls_back(self, client, server):
        await client.poll_once()
        before = client.dashboard
        server.html.add("/api/dashboard/update-usage")

        assert await client.update_usage("emailsSent", 3) is None
        assert client.dashboard == before
        assert client.states["update_usage"] is MutationState.IDLE
        assert client.notices[-1].level == "error"
        assert client.notices[-1].message == "Malformed response"

    async def test_optimistic_value_visible_while_pending(self, client, server):
        await client.poll_once()
        seen = {}

        def spy(request):
            if request.url.path == "/api/dashboard/update-usage":
                seen["stats"] = client.cache.get(DASHBOARD_KEY)["usageStats"]

        server.on_request = spy
        await client.update_usage("productsOptimized", 4)
        assert seen["stats"]["productsOptimized"] == 4

    async def test_server_truth_wins(self, client, server):
        await client.poll_once()
        server.dashboard = _dashboard(access_count=7)
        await client.track_tool_access("ai-generator")
        tool = client.dashboard["toolsAccess"][0]
        assert tool["accessCount"] == 7
        assert server.posted("/api/dashboard/track-tool-access") == [{"toolName": "ai-generator"}]

    async def test_refresh_metrics_replaces_view(self, client, server):
        await client.poll_once()
        metrics = await client.refresh_metrics()
        assert metrics[0]["metricName"] == "revenue_change"
        assert client.dashboard["realtimeMetrics"] == metrics

    async def test_formatted_stats(self, client):
        assert client.formatted_stats() == {}
        await client.poll_once()
        assert client.formatted_stats()["revenue"] == "$25,000"


class TestOptimizeAll:
    async def test_second_trigger_inside_window_sends_nothing(self, client, server, clock):
        await client.optimize_all()
        clock.now += 1.0
        assert await client.optimize_all() is None

        assert len(server.posted("/api/products/optimize-all")) == 1
        assert client.notices[-1].title == "Please Wait"
        assert client.notices[-1].source == "guard"

        clock.now += 1.0
        await client.optimize_all()
        assert len(server.posted("/api/products/optimize-all")) == 2

    async def test_success_flow(self, client, server):
        result = await client.optimize_all()
        assert result["optimizedCount"] == 3
        actions = [body["action"] for body in server.posted("/api/dashboard/log-activity")]
        assert actions == ["optimize_all_clicked", "optimize_all_completed"]
        assert server.posted("/api/dashboard/update-usage") == [
            {"statField": "productsOptimized", "increment": 3},
        ]

    async def test_failure_flow(self, client, server):
        server.fail["/api/products/optimize-all"] = 500
        assert await client.optimize_all() is None
        actions = [body["action"] for body in server.posted("/api/dashboard/log-activity")]
        assert actions == ["optimize_all_clicked", "optimize_all_failed"]
        assert server.posted("/api/dashboard/update-usage") == []
        assert client.notices[-1].title == "Optimization Failed"


class TestRetries:
    @pytest.fixture
    async def retrying(self, server, clock):
        http = httpx.AsyncClient(transport=httpx.MockTransport(server), base_url="http://test")
        sync = DashboardSyncClient(
            "http://test", clock=clock, max_retries=3, retry_backoff_base=0, http=http,
        )
        yield sync
        await sync.close()

    def _gets(self, server):
        return [r for r in server.requests if r.url.path == "/api/dashboard"]

    @pytest.mark.parametrize("status", [503, 429])
    async def test_read_retried_after_transient_status(self, retrying, server, status):
        server.fail_once["/api/dashboard"] = [status]
        assert await retrying.poll_once() is True
        assert len(self._gets(server)) == 2
        assert retrying.dashboard == server.dashboard

    async def test_read_retried_after_transport_error(self, retrying, server):
        dropped = []

        def drop_first(request):
            if not dropped:
                dropped.append(request)
                raise httpx.ConnectError("connection reset", request=request)

        server.on_request = drop_first
        assert await retrying.poll_once() is True
        assert len(self._gets(server)) == 2
        assert retrying.connection.is_online is True

    async def test_read_gives_up_after_max_retries(self, retrying, server):
        server.fail["/api/dashboard"] = 502
        assert await retrying.poll_once() is False
        assert len(self._gets(server)) == 3

    async def test_mutation_sent_once(self, retrying, server):
        await retrying.poll_once()
        server.fail_once["/api/dashboard/update-usage"] = [503]
        assert await retrying.update_usage("emailsSent", 1) is None
        assert len(server.posted("/api/dashboard/update-usage")) == 1
