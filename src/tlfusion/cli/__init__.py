"""tlfusion CLI layer."""

__all__ = ["cli"]


def cli() -> None:
    """Lazy import and run the CLI."""
    from tlfusion.cli.main import main

    main()
