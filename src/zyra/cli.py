"""Typer CLI for Zyra."""

import asyncio

import typer
from rich.console import Console
from rich.live import Live
from rich.table import Table

app = typer.Typer(name="zyra", help="Zyra: merchant dashboard API and tools")
console = Console()


@app.command()
def serve(
    host: str = typer.Option(None, help="Bind host (defaults to ZYRA_HOST)"),
    port: int = typer.Option(None, help="Bind port (defaults to ZYRA_PORT)"),
):
    """Start the Zyra API server."""
    import uvicorn
    from zyra.app import create_app
    from zyra.common.config import get_settings

    settings = get_settings()
    host = host or settings.host
    port = port or settings.port
    console.print(f"[bold green]Starting Zyra on {host}:{port}[/bold green]")
    uvicorn.run(create_app(), host=host, port=port)


@app.command("seed-plans")
def seed_plans():
    """Insert the default subscription plans into the configured store."""
    from zyra.common.config import get_settings
    from zyra.common.logging import setup_logging
    from zyra.deps import get_billing_service, get_store

    setup_logging(get_settings().log_level)

    async def _run() -> list[str]:
        store = get_store()
        await store.open()
        try:
            return await get_billing_service().seed_plans()
        finally:
            await store.close()

    created = asyncio.run(_run())
    if created:
        for name in created:
            console.print(f"[green]created[/green] {name}")
    else:
        console.print("All plans already present")


@app.command()
def health(
    url: str = typer.Option("http://localhost:8080", help="Server URL"),
):
    """Check Zyra server health."""
    import httpx

    try:
        resp = httpx.get(f"{url}/health", timeout=5)
        data = resp.json()
        console.print(f"[bold green]{data['status']}[/bold green] v{data['version']} ({data['storage']})")
    except (httpx.HTTPError, ValueError, KeyError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _render(client) -> Table:
    table = Table(title="Zyra dashboard")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    for label, value in client.formatted_stats().items():
        table.add_row(label.replace("_", " ").title(), value)

    view = client.dashboard or {}
    for metric in view.get("realtimeMetrics", [])[-3:]:
        style = "green" if metric.get("isPositive") else "red"
        table.add_row(
            metric.get("metricName", ""),
            f"{metric.get('value', '')} [{style}]{metric.get('changePercent', '')}[/{style}]",
        )
    status = "online" if client.connection.is_online else "offline"
    table.caption = f"{status}, last update {client.last_update or 'never'}"
    return table


@app.command()
def watch(
    email: str = typer.Option(..., help="Account email"),
    password: str = typer.Option(..., prompt=True, hide_input=True),
    url: str = typer.Option("http://localhost:8080", help="Server URL"),
    interval: float = typer.Option(5.0, help="Poll interval in seconds"),
):
    """Log in and follow the dashboard numbers live."""
    from zyra.sync.client import DashboardSyncClient, SyncRequestError

    async def _run() -> None:
        async with DashboardSyncClient(url, poll_interval=interval) as client:
            try:
                await client.login(email, password)
            except SyncRequestError as e:
                console.print(f"[bold red]Login failed:[/bold red] {e.message}")
                raise typer.Exit(1)
            await client.initialize()
            with Live(_render(client), console=console, refresh_per_second=1) as live:
                while True:
                    await client.poll_once()
                    live.update(_render(client))
                    await asyncio.sleep(client.poll_interval)

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    app()
