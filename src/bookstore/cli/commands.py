"""Service and database CLI commands."""

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from src.bookstore.runtime.context import get_config

# Initialize Rich console for colored output
console = Console()


def serve(
    host: str | None = typer.Option(None, help="Host to bind (defaults to app.host)"),
    port: int | None = typer.Option(None, help="Port to bind (defaults to app.port)"),
    reload: bool = typer.Option(False, help="Enable auto-reload on code changes"),
) -> None:
    """
    🚀 Start the book API server.
    """
    import uvicorn

    config = get_config()
    host = host or config.app.host
    port = port or config.app.port

    console.print(
        Panel.fit("[bold green]Starting Bookstore API[/bold green]", border_style="green")
    )
    console.print(f"[blue]Server will be available at:[/blue] http://{host}:{port}")
    uvicorn.run(
        "src.bookstore.api.http.app:app",
        host=host,
        port=port,
        reload=reload,
        access_log=False,  # We handle access logging in middleware
    )


def gateway(
    host: str | None = typer.Option(None, help="Host to bind (defaults to gateway.host)"),
    port: int | None = typer.Option(None, help="Port to bind (defaults to gateway.port)"),
) -> None:
    """
    🔀 Start the reverse-proxy gateway.
    """
    import uvicorn

    config = get_config()
    host = host or config.gateway.host
    port = port or config.gateway.port

    console.print(
        Panel.fit("[bold green]Starting Bookstore Gateway[/bold green]", border_style="green")
    )
    console.print(f"[blue]Route table:[/blue] {config.gateway.routes_file}")
    console.print(f"[blue]Gateway will be available at:[/blue] http://{host}:{port}")
    uvicorn.run(
        "src.bookstore.gateway.app:create_gateway_app",
        factory=True,
        host=host,
        port=port,
        access_log=False,
    )


def init_db(
    drop: bool = typer.Option(False, "--drop", help="Drop existing tables first"),
) -> None:
    """
    🗄️  Create the database tables.
    """
    from src.bookstore.runtime.init_db import init_db as create_tables

    if drop:
        typer.confirm("Drop all tables and their data?", abort=True)
    create_tables(drop=drop)
    console.print("[green]✅ Database initialized[/green]")


def routes(
    file: Path | None = typer.Option(None, help="Route table file (defaults to gateway.routes_file)"),
) -> None:
    """
    📋 Show the gateway route table.
    """
    from src.bookstore.gateway.routes import RouteTableError, load_route_table

    path = file or Path(get_config().gateway.routes_file)
    try:
        route_table = load_route_table(path)
    except RouteTableError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(1) from e

    table = Table(show_header=True, header_style="bold blue")
    table.add_column("Upstream", style="cyan", no_wrap=True)
    table.add_column("Methods", style="green")
    table.add_column("Downstream", style="yellow")

    for route in route_table.routes:
        target = route.downstream_host_and_port
        table.add_row(
            route.upstream_path_template,
            ", ".join(route.upstream_http_method) or "any",
            f"{route.downstream_scheme}://{target.host}:{target.port}"
            f"{route.downstream_path_template}",
        )

    console.print(table)
    console.print(f"\n[dim]Total: {len(route_table)} routes[/dim]")


def register_commands(app: typer.Typer) -> None:
    app.command()(serve)
    app.command()(gateway)
    app.command(name="init-db")(init_db)
    app.command()(routes)
