"""Envelope payload rewriting.

Sentry SDKs gzip the envelope. Inside, the DSN shows up JSON-escaped
(https:\\/\\/key@host\\/1) in the envelope header, and the bare key can show
up anywhere else. We don't parse any of it - plain substring replacement on
the decompressed bytes, then gzip it back up.
"""

import gzip
import logging
import zlib

from .errors import PayloadDecodeError
from .mapping import Mapping

logger = logging.getLogger(__name__)


def escape_dsn(dsn: str) -> str:
    """JSON-style slash escaping, the way the SDKs serialize the DSN."""
    return dsn.replace("/", "\\/")


def decompress(payload: bytes) -> bytes:
    """Gunzip the whole body. Raises PayloadDecodeError on anything but gzip."""
    if not payload:
        raise PayloadDecodeError("empty request body, expected gzip data")
    try:
        return gzip.decompress(payload)
    except (OSError, EOFError, zlib.error) as e:
        raise PayloadDecodeError(f"invalid gzip payload: {e}") from e


def rewrite(data: bytes, mapping: Mapping) -> bytes:
    """Swap the old DSN and key for the new ones in decompressed data.

    The full DSN goes first, then the bare key. Both replacements run over
    the whole buffer.
    """
    old_dsn = escape_dsn(mapping.old_dsn).encode()
    new_dsn = escape_dsn(mapping.new_dsn).encode()
    data = data.replace(old_dsn, new_dsn)

    old_user = mapping.old_user
    new_user = mapping.new_user
    if old_user is not None and new_user is not None:
        data = data.replace(old_user.encode(), new_user.encode())

    return data


def convert_payload(payload: bytes, mapping: Mapping) -> bytes:
    """Decompress, rewrite and recompress a gzip envelope body."""
    data = decompress(payload)
    rewritten = rewrite(data, mapping)
    logger.debug(f"Rewrote payload: {len(data)} bytes in, {len(rewritten)} bytes out")
    return gzip.compress(rewritten)
