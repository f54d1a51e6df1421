"""DSN mapping resolution.

A DSN looks like https://<public key>@<host>/<project id>. The public key
(the URL user-info) is what the SDK puts in X-Sentry-Auth as sentry_key,
so that's what we match on.
"""

import logging
from dataclasses import dataclass
from typing import Iterable
from urllib.parse import SplitResult, unquote, urlsplit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DSNMapping:
    """One configured old → new DSN pair."""

    old: str
    new: str


@dataclass(frozen=True)
class Mapping:
    """A DSNMapping with both sides parsed.

    The raw strings are kept because the payload rewrite works on the
    text exactly as configured, not on a re-serialized URL.
    """

    old_uri: SplitResult
    new_uri: SplitResult
    old_dsn: str
    new_dsn: str

    @property
    def old_user(self) -> str | None:
        return dsn_user(self.old_uri)

    @property
    def new_user(self) -> str | None:
        return dsn_user(self.new_uri)

    @property
    def new_scheme(self) -> str:
        return self.new_uri.scheme

    @property
    def new_host(self) -> str:
        """Host of the new DSN, port included, user-info stripped."""
        return self.new_uri.netloc.rpartition("@")[2]

    @property
    def new_path(self) -> str:
        return unquote(self.new_uri.path)


def parse_dsn(dsn: str) -> SplitResult:
    """Parse a DSN string, raising ValueError if it isn't a usable address."""
    uri = urlsplit(dsn)
    # .port validates the port lazily, so touch it here
    uri.port
    if not uri.scheme or not uri.netloc:
        raise ValueError(f"Not a DSN: {dsn!r}")
    return uri


def dsn_user(uri: SplitResult) -> str | None:
    """The user-info of a parsed DSN, or None if it has none."""
    if uri.username is None:
        return None
    return unquote(uri.username)


def get_mapping(key: str, mappings: Iterable[DSNMapping]) -> Mapping | None:
    """Find the first mapping whose old DSN user matches key.

    Entries that don't parse are skipped, so a bad line in the config makes
    that key unroutable instead of taking the whole forwarder down.
    """
    if not key:
        return None

    for entry in mappings:
        try:
            old_uri = parse_dsn(entry.old)
        except ValueError as e:
            logger.debug(f"Skipping unparseable old DSN: {e}")
            continue

        if dsn_user(old_uri) != key:
            continue

        try:
            new_uri = parse_dsn(entry.new)
        except ValueError as e:
            logger.warning(f"Mapping for key {key} has an unparseable new DSN: {e}")
            continue

        return Mapping(
            old_uri=old_uri,
            new_uri=new_uri,
            old_dsn=entry.old,
            new_dsn=entry.new,
        )

    return None
