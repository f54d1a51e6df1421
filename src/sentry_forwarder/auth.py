"""X-Sentry-Auth header handling.

The SDKs send something like:

    X-Sentry-Auth: Sentry sentry_version=7, sentry_client=sentry.python/2.0, sentry_key=abc123

We only care about sentry_key. It doubles as the project key we route on.
"""

SENTRY_AUTH_HEADER = "X-Sentry-Auth"
SENTRY_KEY_FIELD = "sentry_key"


def get_sentry_key(header_value: str | None) -> str:
    """Extract the sentry_key from an X-Sentry-Auth header value.

    Returns an empty string if the header is missing or has no sentry_key.
    Segments without an "=" are skipped.
    """
    if not header_value:
        return ""

    for part in header_value.split(","):
        key, sep, value = part.strip().partition("=")
        if not sep:
            continue
        if key.strip() == SENTRY_KEY_FIELD:
            value = value.strip()
            # One matched pair only: sentry_key=""abc"" keeps the inner pair
            if len(value) >= 2 and value[0] == value[-1] == '"':
                value = value[1:-1]
            return value

    return ""


def replace_key(header_value: str, old_key: str, new_key: str) -> str:
    """Swap every occurrence of the old key for the new one."""
    return header_value.replace(old_key, new_key)
