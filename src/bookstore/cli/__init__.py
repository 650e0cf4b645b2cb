"""Main CLI application module."""

import typer

from .commands import register_commands

# Create the main CLI application
app = typer.Typer(
    help="📚 Bookstore CLI - run the API, the gateway and manage the database",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

register_commands(app)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
