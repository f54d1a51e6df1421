"""Shared fixtures for the forwarder tests."""

import pytest
from fastapi.testclient import TestClient

from sentry_forwarder.mapping import DSNMapping

OLD_DSN = "https://OLDKEY@host1/123"
NEW_DSN = "https://NEWKEY@host2/456"

CONFIG_YAML = f"""\
dsn_mapping:
  - old: {OLD_DSN}
    new: {NEW_DSN}
  - old: https://OTHERKEY@host3/7
    new: http://OTHERNEW@host4:9000/sub/8
"""


@pytest.fixture
def mappings() -> tuple[DSNMapping, ...]:
    return (
        DSNMapping(old=OLD_DSN, new=NEW_DSN),
        DSNMapping(old="https://OTHERKEY@host3/7", new="http://OTHERNEW@host4:9000/sub/8"),
    )


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    """Write a mapping file and point CONFIG_PATH at it."""
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG_YAML)
    monkeypatch.setenv("CONFIG_PATH", str(path))
    return path


@pytest.fixture
def client(config_file):
    from sentry_forwarder.app import app

    with TestClient(app) as test_client:
        yield test_client
