"""Entry point for running the forwarder directly: python -m sentry_forwarder [--port N]."""

import sys

from .cli import app


def main():
    """Run the forwarder server."""
    app(args=["serve", *sys.argv[1:]], prog_name="sentry_forwarder")


if __name__ == "__main__":
    main()
