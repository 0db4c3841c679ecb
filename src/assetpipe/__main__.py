"""Entry point for `python -m assetpipe`."""

from assetpipe.cli.app import app


def main() -> None:
    """Invoke the CLI application."""

    app(prog_name="assetpipe")


if __name__ == "__main__":
    main()
