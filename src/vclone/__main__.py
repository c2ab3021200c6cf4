"""Entry point for running vclone as a module."""

from .cli import app


def main() -> None:
    """Main entry point for the vclone CLI application."""
    app()


if __name__ == "__main__":
    main()
