"""
DashboardSyncClient: async client that keeps a local dashboard view in
step with the Zyra server.

Reads are polled into a :class:`QueryCache`. User actions go through an
optimistic mutation path that snapshots the cached view, applies the
expected change, and either reconciles with server truth or restores the
snapshot exactly.
"""

import asyncio
import contextlib
from typing import Any, Callable, Optional

import httpx

from zyra.common.exceptions import ZyraError
from zyra.common.logging import get_logger
from zyra.common.models import utcnow
from zyra.sync.state import (
    ConnectionMonitor,
    DebounceGuard,
    MutationState,
    Notice,
    PendingMutation,
    QueryCache,
)
from zyra.usage.metrics import format_stats

logger = get_logger("sync")

DASHBOARD_KEY = "dashboard"


class SyncRequestError(ZyraError):
    """A request the server answered with an error status or an unreadable body."""

    def __init__(self, status_code: int, message: str, code: str = "REQUEST_FAILED"):
        super().__init__(message, code)
        self.status_code = status_code


class DashboardSyncClient:
    """
    Async HTTP client for the Zyra dashboard API.

    Session cookies set by :meth:`login` are kept on the underlying
    ``httpx.AsyncClient`` and sent with every later request.
    """

    def __init__(
        self,
        server_url: str = "http://localhost:8080",
        api_prefix: str = "/api",
        poll_interval: float = 5.0,
        debounce_interval: float = 2.0,
        timeout: int = 30,
        max_retries: int = 3,
        retry_backoff_base: float = 0.5,
        clock: Optional[Callable[[], float]] = None,
        on_notice: Optional[Callable[[Notice], None]] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        self.server_url = server_url.rstrip("/")
        self.api_prefix = api_prefix.rstrip("/")
        self.poll_interval = poll_interval
        self.max_retries = max_retries
        self.retry_backoff_base = retry_backoff_base
        self.cache = QueryCache()
        self.connection = ConnectionMonitor()
        self.optimize_guard = (
            DebounceGuard(debounce_interval, clock) if clock else DebounceGuard(debounce_interval)
        )
        self.states: dict[str, MutationState] = {}
        self.notices: list[Notice] = []
        self.initialized = False
        self.last_update = None
        self._on_notice = on_notice
        self._poll_task: Optional[asyncio.Task] = None
        self._http = http or httpx.AsyncClient(base_url=self.server_url, timeout=timeout)

    async def __aenter__(self) -> "DashboardSyncClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self.stop_polling()
        await self._http.aclose()

    # ── Transport ──

    def _url(self, path: str) -> str:
        return f"{self.api_prefix}{path}"

    @staticmethod
    def _error_message(resp: httpx.Response) -> tuple[str, str]:
        try:
            body = resp.json()
        except ValueError:
            return f"HTTP {resp.status_code}", "REQUEST_FAILED"
        if isinstance(body, dict):
            return body.get("message") or f"HTTP {resp.status_code}", body.get("code", "REQUEST_FAILED")
        return f"HTTP {resp.status_code}", "REQUEST_FAILED"

    async def _request(self, method: str, path: str, retry: bool = False, **kwargs: Any) -> Any:
        """Send one request and return the decoded JSON body.

        Only reads pass ``retry=True``; they are retried on timeouts,
        transport errors, 5xx and 429. Mutations are sent once. A success
        status whose body is not JSON raises :class:`SyncRequestError` with
        code ``BAD_RESPONSE``.
        """
        attempts = self.max_retries if retry else 1
        for attempt in range(attempts):
            last = attempt == attempts - 1
            try:
                resp = await self._http.request(method, self._url(path), **kwargs)
            except httpx.TransportError:
                self.connection.mark_offline()
                if last:
                    raise
                await asyncio.sleep(self.retry_backoff_base * (2 ** attempt))
                continue

            self.connection.mark_online()
            if (resp.status_code >= 500 or resp.status_code == 429) and not last:
                await asyncio.sleep(self.retry_backoff_base * (2 ** attempt))
                continue
            if resp.status_code >= 400:
                message, code = self._error_message(resp)
                raise SyncRequestError(resp.status_code, message, code)
            try:
                return resp.json()
            except ValueError:
                raise SyncRequestError(resp.status_code, "Malformed response", "BAD_RESPONSE") from None

    def _notify(self, level: str, title: str, message: str, source: str = "action") -> Notice:
        notice = Notice(level=level, title=title, message=message, source=source)
        self.notices.append(notice)
        if self._on_notice is not None:
            self._on_notice(notice)
        return notice

    # ── Reads ──

    @property
    def dashboard(self) -> Optional[dict[str, Any]]:
        """A private copy of the cached dashboard view."""
        return self.cache.get(DASHBOARD_KEY)

    async def fetch_dashboard(self) -> dict[str, Any]:
        data = await self._request("GET", "/dashboard", retry=True)
        self.cache.set(DASHBOARD_KEY, data)
        self.last_update = utcnow()
        return data

    async def poll_once(self) -> bool:
        """Refetch the dashboard. Failures are logged and never surfaced."""
        try:
            await self.fetch_dashboard()
        except (SyncRequestError, httpx.HTTPError) as e:
            logger.debug("Dashboard poll failed: %s", e)
            return False
        return True

    async def _poll_loop(self) -> None:
        while True:
            await self.poll_once()
            await asyncio.sleep(self.poll_interval)

    def start_polling(self) -> None:
        if self._poll_task is None or self._poll_task.done():
            self._poll_task = asyncio.create_task(self._poll_loop())

    async def stop_polling(self) -> None:
        task, self._poll_task = self._poll_task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def refresh(self) -> bool:
        """User-triggered refetch; unlike polling, a failure is reported."""
        try:
            await self.fetch_dashboard()
        except (SyncRequestError, httpx.HTTPError) as e:
            logger.warning("Manual refresh failed: %s", e)
            self._notify("error", "Refresh Failed", "Refresh failed, try again.")
            return False
        self._notify("info", "Refreshed", "Data refreshed successfully!", source="info")
        return True

    def formatted_stats(self) -> dict[str, str]:
        view = self.dashboard or {}
        stats = view.get("usageStats")
        return format_stats(stats) if stats else {}

    # ── Session ──

    async def login(self, email: str, password: str) -> dict[str, Any]:
        data = await self._request("POST", "/login", json={"email": email, "password": password})
        return data["user"]

    async def register(self, email: str, password: str, full_name: str = "") -> dict[str, Any]:
        data = await self._request(
            "POST", "/register",
            json={"email": email, "password": password, "fullName": full_name},
        )
        return data["user"]

    async def initialize(self) -> bool:
        """Ensure the server has dashboard state for this user, then fetch it."""
        try:
            await self._request("POST", "/dashboard/initialize")
        except (SyncRequestError, httpx.HTTPError) as e:
            logger.warning("Dashboard initialization failed: %s", e)
            self._notify("error", "Initialization Failed", str(e))
            return False
        self.initialized = True
        await self.poll_once()
        return True

    # ── Mutations ──

    async def _mutate(
        self,
        name: str,
        send: Callable[[], Any],
        apply_fn: Optional[Callable[[Any], Any]] = None,
        failure_title: str = "Action Failed",
    ) -> Any:
        """Run one mutation through optimistic apply, send, and reconcile or roll back."""
        mutation = None
        if apply_fn is not None:
            mutation = PendingMutation.begin(self.cache, DASHBOARD_KEY, apply_fn)
            self.states[name] = MutationState.OPTIMISTIC_APPLIED
        self.states[name] = MutationState.PENDING

        try:
            result = await send()
        except (SyncRequestError, httpx.HTTPError) as e:
            if mutation is not None:
                mutation.rollback(self.cache)
            self.states[name] = MutationState.ROLLED_BACK
            logger.warning("%s failed: %s", name, e, extra={"operation": name})
            self._notify("error", failure_title, str(e) or "Request failed")
            self.states[name] = MutationState.IDLE
            return None

        self.cache.invalidate(DASHBOARD_KEY)
        await self.poll_once()
        self.states[name] = MutationState.RECONCILED
        self.states[name] = MutationState.IDLE
        return result

    async def track_tool_access(self, tool_name: str) -> Optional[dict[str, Any]]:
        def apply(view: dict[str, Any]) -> dict[str, Any]:
            for entry in view.get("toolsAccess") or []:
                if entry.get("toolName") == tool_name:
                    entry["accessCount"] = entry.get("accessCount", 0) + 1
                    entry["lastAccessed"] = utcnow().isoformat()
            return view

        return await self._mutate(
            "track_tool_access",
            lambda: self._request("POST", "/dashboard/track-tool-access", json={"toolName": tool_name}),
            apply_fn=apply,
        )

    async def update_usage(self, stat_field: str, increment: int = 1) -> Optional[dict[str, Any]]:
        def apply(view: dict[str, Any]) -> dict[str, Any]:
            stats = view.get("usageStats")
            if stats is not None:
                stats[stat_field] = (stats.get(stat_field) or 0) + increment
                stats["lastUpdated"] = utcnow().isoformat()
            return view

        return await self._mutate(
            "update_usage",
            lambda: self._request(
                "POST", "/dashboard/update-usage",
                json={"statField": stat_field, "increment": increment},
            ),
            apply_fn=apply,
        )

    async def log_activity(
        self,
        action: str,
        description: str,
        tool_used: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Optional[dict[str, Any]]:
        body = {"action": action, "description": description, "toolUsed": tool_used, "metadata": metadata or {}}
        return await self._mutate(
            "log_activity",
            lambda: self._request("POST", "/dashboard/log-activity", json=body),
        )

    async def refresh_metrics(self) -> Optional[list[dict[str, Any]]]:
        try:
            data = await self._request("POST", "/dashboard/refresh-metrics")
        except (SyncRequestError, httpx.HTTPError) as e:
            logger.warning("Metrics refresh failed: %s", e)
            self._notify("error", "Refresh Failed", str(e))
            return None
        self.cache.set(DASHBOARD_KEY, data["dashboardData"])
        self.last_update = utcnow()
        self._notify("info", "Metrics Refreshed", "Real-time metrics have been updated", source="info")
        return data["metrics"]

    async def optimize_all(self) -> Optional[dict[str, Any]]:
        """Normalise and de-duplicate the product catalog.

        A second trigger inside the debounce window is rejected locally
        and sends nothing.
        """
        if not self.optimize_guard.try_acquire():
            self._notify(
                "warning", "Please Wait",
                "Optimization is in progress. Please wait a moment.",
                source="guard",
            )
            return None

        await self.log_activity(
            "optimize_all_clicked", "User clicked Optimize All Products", tool_used="products",
        )
        try:
            result = await self._request("POST", "/products/optimize-all")
        except (SyncRequestError, httpx.HTTPError) as e:
            logger.warning("Optimize all failed: %s", e, extra={"operation": "optimize_all"})
            await self.log_activity(
                "optimize_all_failed", "Product optimization failed",
                tool_used="products", metadata={"error": str(e)},
            )
            self._notify("error", "Optimization Failed", str(e) or "Failed to optimize products")
            return None

        optimized = result.get("optimizedCount", 0)
        removed = result.get("duplicatesRemoved", 0)
        if optimized:
            await self.update_usage("productsOptimized", optimized)
        await self.log_activity(
            "optimize_all_completed",
            f"Optimized {optimized} products and removed {removed} duplicates",
            tool_used="products",
            metadata={"optimizedCount": optimized, "duplicatesRemoved": removed},
        )
        self._notify(
            "info", "Products Optimized",
            f"Optimized {optimized} products, removed {removed} duplicates",
            source="info",
        )
        return result
