"""sentry-forwarder command line.

    sentry-forwarder serve
    sentry-forwarder check --config config.yaml
    gzip -c envelope.txt | sentry-forwarder rewrite --key OLDKEY | gunzip
    sentry-forwarder rewrite --key OLDKEY --plain < envelope.txt
"""

import logging
import sys
from pathlib import Path

import typer

from . import config
from .errors import ConfigLoadError, PayloadDecodeError
from .mapping import get_mapping, parse_dsn, dsn_user
from .payload import convert_payload, rewrite as rewrite_payload

app = typer.Typer(help="Forward Sentry envelopes from old DSNs to new ones.")


def _load(config_path: Path | None):
    try:
        return config.load_config(config_path)
    except ConfigLoadError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def serve(
    host: str = typer.Option(config.HOST, "--host", help="Interface to bind"),
    port: int = typer.Option(config.PORT, "--port", "-p", help="Port to listen on"),
):
    """Run the forwarding server."""
    import uvicorn
    import logfire

    from .app import app as fastapi_app

    logging.basicConfig(level=config.LOG_LEVEL, handlers=[logfire.LogfireLoggingHandler()])

    # Fail here rather than inside the lifespan so the error is readable
    _load(None)

    logfire.info(f"Listening on {host}:{port}")
    uvicorn.run(fastapi_app, host=host, port=port, log_level=config.LOG_LEVEL.lower())


@app.command()
def check(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Mapping file (default: $CONFIG_PATH or config.yaml)"),
):
    """Validate the mapping file and show which entries are routable."""
    mappings = _load(config_path)

    if not mappings:
        typer.echo("No DSN mappings configured.")
        return

    for idx, entry in enumerate(mappings):
        problems = []
        try:
            if dsn_user(parse_dsn(entry.old)) is None:
                problems.append("old DSN has no key")
        except ValueError as e:
            problems.append(f"old: {e}")
        try:
            parse_dsn(entry.new)
        except ValueError as e:
            problems.append(f"new: {e}")

        status = "ok" if not problems else "UNROUTABLE (" + "; ".join(problems) + ")"
        typer.echo(f"[{idx}] {entry.old} -> {entry.new}: {status}")


@app.command()
def rewrite(
    key: str = typer.Option(..., "--key", "-k", help="Old sentry_key to route on"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Mapping file (default: $CONFIG_PATH or config.yaml)"),
    plain: bool = typer.Option(False, "--plain", help="Read and write uncompressed text instead of gzip"),
):
    """Rewrite an envelope from stdin for its new DSN and write it to stdout.

    No network. Handy for checking what would be sent upstream.
    """
    mapping = get_mapping(key, _load(config_path))
    if mapping is None:
        typer.echo(f"Error: no mapping for key {key!r}", err=True)
        raise typer.Exit(1)

    data = sys.stdin.buffer.read()
    if plain:
        out = rewrite_payload(data, mapping)
    else:
        try:
            out = convert_payload(data, mapping)
        except PayloadDecodeError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)

    sys.stdout.buffer.write(out)
    sys.stdout.buffer.flush()


def main():
    app()


if __name__ == "__main__":
    main()
